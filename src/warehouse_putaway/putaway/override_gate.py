"""
Override Decision Gate

One gate session per proposed move:

    EVALUATING -> AUTO_ACCEPTED                      (no blocking reasons)
    EVALUATING -> AWAITING_CONFIRMATION -> CONFIRMED (operator: Move Anyway)
                                        -> CANCELLED (operator: Cancel)

Blocking reasons: OVER_UTILIZATION, FLAG_MISMATCH, OVERFLOW.
MIXED_SOURCE_BATCH is disclosed as a note and never blocks on its own.
"""

from __future__ import annotations

import math
from typing import List, Optional

from warehouse_putaway.putaway.alerts import Alerting, NullAlerting
from warehouse_putaway.putaway.putaway_models import (
    GateState,
    Location,
    MoveDecision,
    MoveEvaluation,
    MoveOutcome,
    OverrideReason,
    SuggestionRequest,
)
from warehouse_putaway.putaway.scoring import exceeds_available, projected_utilization
from warehouse_putaway.putaway.suggestion_usecase import is_mixed_source, validate_request
from warehouse_putaway.utils.config import UTILIZATION_THRESHOLD
from warehouse_putaway.utils.logger import get_logger

logger = get_logger(__name__)


def evaluate_move(request: SuggestionRequest, destination: Location) -> MoveEvaluation:
    """Collect every applicable reason, not just the first."""
    validate_request(request)

    required = request.required_volume
    projected = projected_utilization(destination, required)

    reasons: List[OverrideReason] = []
    if projected >= UTILIZATION_THRESHOLD:
        reasons.append(OverrideReason.OVER_UTILIZATION)
    if not destination.flag_compliant:
        reasons.append(OverrideReason.FLAG_MISMATCH)
    if exceeds_available(destination, required):
        reasons.append(OverrideReason.OVERFLOW)
    if is_mixed_source(request):
        reasons.append(OverrideReason.MIXED_SOURCE_BATCH)

    return MoveEvaluation(
        destination_location_id=destination.location_id,
        projected_utilization_pct=round(projected * 100, 1) if math.isfinite(projected) else math.inf,
        reasons=tuple(reasons),
    )


class GateSession:
    def __init__(
        self,
        request: SuggestionRequest,
        destination: Location,
        evaluation: MoveEvaluation,
        alerting: Alerting,
    ):
        self.request = request
        self.destination = destination
        self.evaluation = evaluation
        self.state = GateState.EVALUATING
        self.decision: Optional[MoveDecision] = None
        self._alerting = alerting

        if evaluation.is_blocked:
            self._await_confirmation()
        else:
            self.state = GateState.AUTO_ACCEPTED
            self.decision = self._decide(MoveOutcome.ACCEPTED, override_confirmed=False)
            logger.info(
                "Move auto-accepted | destination=%s items=%d notes=%s",
                destination.code,
                len(request.items),
                ",".join(r.value for r in evaluation.notes) or "-",
            )

    @property
    def requires_confirmation(self) -> bool:
        return self.state is GateState.AWAITING_CONFIRMATION

    @property
    def blocking_reasons(self):
        return self.evaluation.blocking_reasons

    @property
    def notes(self):
        return self.evaluation.notes

    def confirm(self) -> MoveDecision:
        """Operator chose Move Anyway. No-op once a decision exists."""
        if self.state is GateState.AWAITING_CONFIRMATION:
            self.state = GateState.CONFIRMED
            self.decision = self._decide(MoveOutcome.ACCEPTED, override_confirmed=True)
            logger.warning(
                "Override confirmed | destination=%s reasons=%s",
                self.destination.code,
                ",".join(r.value for r in self.blocking_reasons),
            )
        return self.decision

    def cancel(self) -> MoveDecision:
        if self.state is GateState.AWAITING_CONFIRMATION:
            self.state = GateState.CANCELLED
            self.decision = self._decide(MoveOutcome.REJECTED, override_confirmed=False)
            logger.info("Override cancelled | destination=%s", self.destination.code)
        return self.decision

    def _await_confirmation(self) -> None:
        self.state = GateState.AWAITING_CONFIRMATION
        logger.warning(
            "Move requires override | destination=%s reasons=%s",
            self.destination.code,
            ",".join(r.value for r in self.blocking_reasons),
        )
        try:
            self._alerting.notify_blocking()
        except Exception as e:
            # Alert tone / vibration is best effort
            logger.debug("Blocking alert failed: %s", e)

    def _decide(self, outcome: MoveOutcome, override_confirmed: bool) -> MoveDecision:
        return MoveDecision(
            outcome=outcome,
            item_ids=self.request.item_ids,
            destination_location_id=self.destination.location_id,
            override_confirmed=override_confirmed,
            override_reasons=self.evaluation.blocking_reasons,
            notes=self.evaluation.notes,
        )


class OverrideGate:
    def __init__(self, alerting: Optional[Alerting] = None):
        self.alerting = alerting or NullAlerting()

    def open(self, request: SuggestionRequest, destination: Location) -> GateSession:
        evaluation = evaluate_move(request, destination)
        return GateSession(request, destination, evaluation, self.alerting)
