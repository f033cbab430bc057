"""
Put-away Scoring Logic

Rules:
- Pure functions only
- No database access
- No printing
- Settings are passed in, never read here
"""

from __future__ import annotations

import math
from typing import Iterable, List, Tuple

from warehouse_putaway.putaway.putaway_models import Candidate, Location
from warehouse_putaway.utils.config import UTILIZATION_THRESHOLD, PutawaySettings


# ----------------------------
# Capacity / Utilization
# ----------------------------

def projected_utilization(location: Location, requested_cuft: float) -> float:
    """
    Utilization after placing requested_cuft at the location.

    Unmeasured (zero capacity) locations project to infinity so they can
    never look like a fit.
    """
    if location.capacity_cuft <= 0:
        return math.inf
    return (location.used_cuft + requested_cuft) / location.capacity_cuft


def fits_normally(location: Location, requested_cuft: float) -> bool:
    return projected_utilization(location, requested_cuft) < UTILIZATION_THRESHOLD


def exceeds_available(location: Location, requested_cuft: float) -> bool:
    """Capacity is exhausted outright, not merely high."""
    return requested_cuft > location.available_cuft


def leftover_cuft(location: Location, requested_cuft: float) -> float:
    return location.available_cuft - requested_cuft


# ----------------------------
# Affinity / Score
# ----------------------------

def affinity_score(location: Location, settings: PutawaySettings) -> float:
    score = 0.0
    if location.account_cluster:
        score += settings.account_cluster_weight
    if location.sku_or_vendor_match:
        score += settings.sku_vendor_weight
    if location.group_match:
        score += settings.group_weight
    return score


def score_location(location: Location, requested_cuft: float, settings: PutawaySettings) -> float:
    """
    Display score. Ranking uses rank_key(); the score is kept monotone with
    it inside one band (fits / overflow) so a table sorted by score reads
    the same way.
    """
    projected = projected_utilization(location, requested_cuft)
    headroom = 1.0 - projected if math.isfinite(projected) else -1.0

    score = settings.headroom_weight * headroom
    if fits_normally(location, requested_cuft):
        score += affinity_score(location, settings)
        if location.flag_compliant:
            score += settings.compliance_weight
    return round(score, 4)


def rank_key(location: Location, requested_cuft: float, settings: PutawaySettings) -> Tuple:
    """
    Ordering contract, most significant first:
    1. under the utilization threshold
    2. flag compliant
    3. affinity (cluster / sku-vendor / group)
    4. headroom (or tightest fit when prefer_tight_fit)
    5. location id
    """
    leftover = leftover_cuft(location, requested_cuft)
    fit_key = leftover if settings.prefer_tight_fit else -leftover

    return (
        0 if fits_normally(location, requested_cuft) else 1,
        0 if location.flag_compliant else 1,
        -affinity_score(location, settings),
        fit_key,
        location.location_id,
    )


def overflow_rank_key(location: Location, requested_cuft: float) -> Tuple:
    """Least overflow first: smallest projected utilization."""
    return (
        projected_utilization(location, requested_cuft),
        -location.available_cuft,
        location.location_id,
    )


# ----------------------------
# Candidate builder
# ----------------------------

def build_candidates(
    ranked: Iterable[Location],
    requested_cuft: float,
    settings: PutawaySettings,
    overflow: bool,
) -> List[Candidate]:
    candidates = []

    for rank, loc in enumerate(ranked):
        projected = projected_utilization(loc, requested_cuft)

        candidates.append(
            Candidate(
                rank=rank,
                location_id=loc.location_id,
                location_code=loc.code,
                capacity_cuft=round(loc.capacity_cuft, 2),
                used_cuft=round(loc.used_cuft, 2),
                available_cuft=round(loc.available_cuft, 2),
                utilization_pct=round(loc.utilization * 100, 1),
                projected_utilization_pct=round(projected * 100, 1) if math.isfinite(projected) else math.inf,
                leftover_cuft=round(leftover_cuft(loc, requested_cuft), 2),
                flag_compliant=loc.flag_compliant,
                account_cluster=loc.account_cluster,
                sku_or_vendor_match=loc.sku_or_vendor_match,
                group_match=loc.group_match,
                overflow=overflow,
                best_fit=(rank == 0 and not overflow),
                score=score_location(loc, requested_cuft, settings),
            )
        )

    return candidates
