from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from warehouse_putaway.putaway.errors import CommitRefused
from warehouse_putaway.putaway.putaway_models import MoveDecision, OverrideReason
from warehouse_putaway.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MoveCommand:
    item_ids: Tuple[str, ...]
    destination_location_id: str
    override_confirmed: bool
    override_reasons: Tuple[OverrideReason, ...]


def movement_note(command: MoveCommand) -> Optional[str]:
    """Text stored on each movement row; None for a clean move."""
    if not command.override_reasons:
        return None
    return "Override: " + ", ".join(r.value for r in command.override_reasons)


class MoveCommitter(Protocol):
    def commit(self, command: MoveCommand) -> int:
        """Persist the move; returns the number of items moved."""
        ...


def build_move_command(decision: MoveDecision) -> MoveCommand:
    if not decision.accepted:
        raise CommitRefused(
            f"Move to {decision.destination_location_id} was rejected by the operator"
        )
    if decision.override_reasons and not decision.override_confirmed:
        raise CommitRefused(
            "Blocking reasons outstanding without override confirmation: "
            + ", ".join(r.value for r in decision.override_reasons)
        )
    return MoveCommand(
        item_ids=decision.item_ids,
        destination_location_id=decision.destination_location_id,
        override_confirmed=decision.override_confirmed,
        override_reasons=decision.override_reasons,
    )


def commit_move(decision: MoveDecision, committer: MoveCommitter) -> Optional[int]:
    """
    Hand an accepted move to the persistence layer.

    Rejected moves are dropped (None). Capacity re-validation at write time
    belongs to the committer.
    """
    if not decision.accepted:
        logger.info("Move rejected, nothing committed | destination=%s", decision.destination_location_id)
        return None

    command = build_move_command(decision)
    moved = committer.commit(command)
    logger.info(
        "Move committed | destination=%s items=%d override=%s",
        command.destination_location_id,
        moved,
        command.override_confirmed,
    )
    return moved
