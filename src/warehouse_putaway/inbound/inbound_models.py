from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional


class ConfidenceBand(Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True)
class InboundQuery:
    account_id: Optional[str] = None
    vendor_name: Optional[str] = None
    ref_value: Optional[str] = None
    pieces: Optional[int] = None


@dataclass(frozen=True)
class ExpectedShipment:
    shipment_id: str
    shipment_number: str
    inbound_kind: str               # "manifest" or "expected"
    created_at: datetime
    account_id: Optional[str] = None
    account_name: Optional[str] = None
    vendor_name: Optional[str] = None
    expected_pieces: Optional[int] = None
    eta_start: Optional[datetime] = None
    eta_end: Optional[datetime] = None
    inbound_status: Optional[str] = None
    external_refs: FrozenSet[str] = field(default_factory=frozenset)  # normalized


@dataclass(frozen=True)
class InboundCandidate:
    shipment: ExpectedShipment
    confidence_score: int
    confidence_label: str
    match_tier: str = "no_match"

    @property
    def shipment_id(self) -> str:
        return self.shipment.shipment_id

    @property
    def link_type(self) -> str:
        return self.shipment.inbound_kind
