"""
Location Suggestion Use Case

Purpose:
- Validate a put-away request (single item or batch)
- Pull a fresh location snapshot from the injected provider
- Rank locations and flag overflow / mixed-source batches

Important:
- Invalid requests fail BEFORE the provider is called
- Nothing is cached between requests
- The snapshot is never mutated here
"""

from __future__ import annotations

import math
from decimal import Decimal
from numbers import Real
from typing import List, Optional, Protocol, Sequence, Tuple

from warehouse_putaway.putaway.errors import DataUnavailable, InvalidRequest
from warehouse_putaway.putaway.putaway_models import (
    Candidate,
    Location,
    RequestMode,
    SuggestionRequest,
    SuggestionResult,
)
from warehouse_putaway.putaway.scoring import (
    build_candidates,
    fits_normally,
    overflow_rank_key,
    rank_key,
)
from warehouse_putaway.utils.config import PutawaySettings
from warehouse_putaway.utils.logger import get_logger

logger = get_logger(__name__)


class LocationProvider(Protocol):
    def fetch_locations(self, request: SuggestionRequest) -> List[Location]:
        ...


# ------------------------------------------------------------
# Validation
# ------------------------------------------------------------

def validate_request(request: SuggestionRequest) -> None:
    if not isinstance(request.mode, RequestMode):
        raise InvalidRequest(f"Unknown request mode: {request.mode!r}")

    if not request.items:
        raise InvalidRequest("Request contains no items")

    if request.mode is RequestMode.SINGLE and len(request.items) != 1:
        raise InvalidRequest(
            f"Single mode takes exactly one item, got {len(request.items)}"
        )

    for item in request.items:
        if not item.item_id:
            raise InvalidRequest("Item id is required")

        volume = item.volume_cuft
        if volume is None:
            raise InvalidRequest(f"Item {item.item_id} has no volume")
        if isinstance(volume, bool) or not isinstance(volume, (Real, Decimal)):
            raise InvalidRequest(f"Item {item.item_id} volume is not numeric: {volume!r}")
        if not math.isfinite(volume):
            raise InvalidRequest(f"Item {item.item_id} volume is not finite: {volume!r}")
        if volume < 0:
            raise InvalidRequest(f"Item {item.item_id} has negative volume: {volume}")


def is_mixed_source(request: SuggestionRequest) -> bool:
    return request.mode is RequestMode.BATCH and len(request.source_location_ids) > 1


# ------------------------------------------------------------
# Ranking (pure)
# ------------------------------------------------------------

def rank_locations(
    locations: Sequence[Location],
    required_cuft: float,
    settings: PutawaySettings,
) -> Tuple[List[Candidate], bool]:
    """
    Returns (top-N candidates, overflow).

    Normal path: only locations under the utilization threshold, best first.
    Overflow path: nothing fits, so every measured location competes on
    least projected utilization and all are marked overflow.
    """
    measured = [loc for loc in locations if loc.capacity_cuft > 0]
    if not measured:
        return [], False

    fitting = [loc for loc in measured if fits_normally(loc, required_cuft)]

    if fitting:
        ranked = sorted(fitting, key=lambda loc: rank_key(loc, required_cuft, settings))
        overflow = False
    else:
        ranked = sorted(measured, key=lambda loc: overflow_rank_key(loc, required_cuft))
        overflow = True

    top = ranked[: settings.top_n]
    return build_candidates(top, required_cuft, settings, overflow=overflow), overflow


# ------------------------------------------------------------
# Use case
# ------------------------------------------------------------

def suggest_locations(
    request: SuggestionRequest,
    provider: LocationProvider,
    settings: Optional[PutawaySettings] = None,
) -> SuggestionResult:
    """
    Rank storage locations for one item or a batch.
    """
    settings = settings or PutawaySettings()

    validate_request(request)

    required = request.required_volume
    logger.info(
        "Location suggestions requested | mode=%s items=%d volume=%.2f cuft",
        request.mode.value,
        len(request.items),
        required,
    )

    try:
        locations = provider.fetch_locations(request)
    except DataUnavailable:
        logger.error("Location snapshot unavailable | items=%s", ",".join(request.item_ids))
        raise

    logger.info("Location snapshot loaded | locations=%d", len(locations))

    candidates, overflow = rank_locations(locations, required, settings)

    if overflow:
        logger.warning(
            "No location under utilization threshold | volume=%.2f cuft, returning %d overflow candidates",
            required,
            len(candidates),
        )
    elif not candidates:
        logger.warning("No measured locations available for suggestion")

    mixed = is_mixed_source(request)
    if mixed:
        logger.info(
            "Mixed-source batch | sources=%s",
            ",".join(sorted(request.source_location_ids)),
        )

    return SuggestionResult(
        request=request,
        candidates=tuple(candidates),
        overflow=overflow,
        mixed_source_batch=mixed,
        required_volume=round(required, 2),
        locations_considered=len(locations),
        snapshot=tuple(locations),
    )
