"""
Put-away Domain Models

Rules:
- No DB
- No formatting
- Pure data containers (derived ratios only)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple


# -------------------------------------------------
# Inputs
# -------------------------------------------------

class RequestMode(str, Enum):
    SINGLE = "single"
    BATCH = "batch"


@dataclass(frozen=True)
class ItemSpec:
    item_id: str
    volume_cuft: Optional[float]
    account_id: Optional[str] = None
    sku: Optional[str] = None
    vendor: Optional[str] = None
    required_flags: FrozenSet[str] = frozenset()
    source_location_id: Optional[str] = None


@dataclass(frozen=True)
class SuggestionRequest:
    mode: RequestMode
    items: Tuple[ItemSpec, ...]
    warehouse_id: Optional[str] = None

    @classmethod
    def single(cls, item: ItemSpec, warehouse_id: Optional[str] = None) -> "SuggestionRequest":
        return cls(mode=RequestMode.SINGLE, items=(item,), warehouse_id=warehouse_id)

    @classmethod
    def batch(cls, items, warehouse_id: Optional[str] = None) -> "SuggestionRequest":
        return cls(mode=RequestMode.BATCH, items=tuple(items), warehouse_id=warehouse_id)

    @property
    def reference_item(self) -> Optional[ItemSpec]:
        """First item; drives account/sku/vendor/group affinity."""
        return self.items[0] if self.items else None

    @property
    def item_ids(self) -> Tuple[str, ...]:
        return tuple(i.item_id for i in self.items)

    @property
    def required_volume(self) -> float:
        # Only meaningful after validation
        return sum(float(i.volume_cuft or 0.0) for i in self.items)

    @property
    def required_flags(self) -> FrozenSet[str]:
        flags: FrozenSet[str] = frozenset()
        for item in self.items:
            flags = flags | item.required_flags
        return flags

    @property
    def source_location_ids(self) -> FrozenSet[str]:
        return frozenset(i.source_location_id for i in self.items if i.source_location_id)


# -------------------------------------------------
# Location snapshot (read-only, per request)
# -------------------------------------------------

@dataclass(frozen=True)
class Location:
    location_id: str
    code: str
    capacity_cuft: float
    used_cuft: float
    flag_compliant: bool = True
    account_cluster: bool = False
    sku_or_vendor_match: bool = False
    group_match: bool = False
    group_code: Optional[str] = None

    @property
    def available_cuft(self) -> float:
        return max(self.capacity_cuft - self.used_cuft, 0.0)

    @property
    def utilization(self) -> float:
        return self.used_cuft / self.capacity_cuft if self.capacity_cuft else 0.0


# -------------------------------------------------
# Ranked output
# -------------------------------------------------

@dataclass(frozen=True)
class Candidate:
    rank: int
    location_id: str
    location_code: str
    capacity_cuft: float
    used_cuft: float
    available_cuft: float
    utilization_pct: float
    projected_utilization_pct: float
    leftover_cuft: float
    flag_compliant: bool
    account_cluster: bool
    sku_or_vendor_match: bool
    group_match: bool
    overflow: bool
    best_fit: bool
    score: float


@dataclass(frozen=True)
class SuggestionResult:
    request: SuggestionRequest
    candidates: Tuple[Candidate, ...]
    overflow: bool
    mixed_source_batch: bool
    required_volume: float
    locations_considered: int
    snapshot: Tuple[Location, ...] = ()   # locations the ranking saw

    @property
    def is_empty(self) -> bool:
        return not self.candidates

    @property
    def best(self) -> Optional[Candidate]:
        return next((c for c in self.candidates if c.best_fit), None)


# -------------------------------------------------
# Override gate
# -------------------------------------------------

class OverrideReason(str, Enum):
    OVER_UTILIZATION = "OVER_UTILIZATION"
    FLAG_MISMATCH = "FLAG_MISMATCH"
    OVERFLOW = "OVERFLOW"
    MIXED_SOURCE_BATCH = "MIXED_SOURCE_BATCH"


BLOCKING_REASONS: FrozenSet[OverrideReason] = frozenset({
    OverrideReason.OVER_UTILIZATION,
    OverrideReason.FLAG_MISMATCH,
    OverrideReason.OVERFLOW,
})


class GateState(str, Enum):
    EVALUATING = "EVALUATING"
    AUTO_ACCEPTED = "AUTO_ACCEPTED"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class MoveOutcome(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class MoveEvaluation:
    destination_location_id: str
    projected_utilization_pct: float
    reasons: Tuple[OverrideReason, ...]

    @property
    def blocking_reasons(self) -> Tuple[OverrideReason, ...]:
        return tuple(r for r in self.reasons if r in BLOCKING_REASONS)

    @property
    def notes(self) -> Tuple[OverrideReason, ...]:
        return tuple(r for r in self.reasons if r not in BLOCKING_REASONS)

    @property
    def is_blocked(self) -> bool:
        return bool(self.blocking_reasons)


@dataclass(frozen=True)
class MoveDecision:
    outcome: MoveOutcome
    item_ids: Tuple[str, ...]
    destination_location_id: str
    override_confirmed: bool
    override_reasons: Tuple[OverrideReason, ...] = field(default_factory=tuple)
    notes: Tuple[OverrideReason, ...] = field(default_factory=tuple)

    @property
    def accepted(self) -> bool:
        return self.outcome is MoveOutcome.ACCEPTED
