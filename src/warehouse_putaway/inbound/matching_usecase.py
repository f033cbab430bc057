"""
Dock Intake Matching Use Case

Pulls open expected shipments from the injected source, drops the ones
already linked to the dock intake, and returns the ranked candidates.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Protocol, Set

from warehouse_putaway.inbound.candidate_matching import confidence_band, find_inbound_candidates
from warehouse_putaway.inbound.inbound_models import ExpectedShipment, InboundCandidate, InboundQuery
from warehouse_putaway.putaway.errors import DataUnavailable, InvalidRequest
from warehouse_putaway.utils.config import PutawaySettings
from warehouse_putaway.utils.logger import get_logger

logger = get_logger(__name__)


class InboundSource(Protocol):
    def fetch_open_shipments(self, now: datetime) -> List[ExpectedShipment]:
        ...

    def fetch_linked_ids(self, dock_intake_id: str) -> Set[str]:
        ...


def match_dock_intake(
    dock_intake_id: str,
    query: InboundQuery,
    source: InboundSource,
    settings: Optional[PutawaySettings] = None,
    now: Optional[datetime] = None,
) -> List[InboundCandidate]:
    if not dock_intake_id:
        raise InvalidRequest("Dock intake id is required")
    if query.pieces is not None and query.pieces < 0:
        raise InvalidRequest(f"Piece count cannot be negative: {query.pieces}")

    settings = settings or PutawaySettings()
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)

    try:
        shipments = source.fetch_open_shipments(now)
        linked = source.fetch_linked_ids(dock_intake_id)
    except DataUnavailable:
        logger.error("Inbound data unavailable | dock_intake=%s", dock_intake_id)
        raise

    candidates = find_inbound_candidates(
        query,
        shipments,
        now=now,
        lookback_days=settings.inbound_lookback_days,
        limit=settings.inbound_max_candidates,
        exclude_ids=linked,
    )

    logger.info(
        "Inbound candidates | dock_intake=%s shipments=%d linked=%d returned=%d top=%s",
        dock_intake_id,
        len(shipments),
        len(linked),
        len(candidates),
        confidence_band(candidates[0].confidence_score).value if candidates else "-",
    )
    return candidates
