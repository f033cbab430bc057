"""
Dock Intake Candidate Matching

Scores open manifest/expected shipments against what the dock captured
(account, vendor, reference number, piece count).

Confidence tiers, first match wins:
    Exact ref match            95 (100 with same account)
    Account + vendor           80 (+10 pieces within 2)
    Account only               30 (+20 pieces within 2)
    Vendor only, no account    30 (+10 pieces within 2)
    Anything else              10

Each candidate also carries a match tier naming which rule fired. Lookups
without an account fall into "unknown_account" unless a ref hit them.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from warehouse_putaway.inbound.inbound_models import (
    ConfidenceBand,
    ExpectedShipment,
    InboundCandidate,
    InboundQuery,
)

MATCHABLE_KINDS = frozenset({"manifest", "expected"})
CLOSED_STATUSES = frozenset({"completed", "cancelled"})
PIECES_TOLERANCE = 2

LABEL_EXACT_REF = "Exact Ref Match"
LABEL_ACCOUNT_VENDOR = "Account + Vendor Match"
LABEL_ACCOUNT = "Account Match"
LABEL_VENDOR_CROSS_ACCOUNT = "Vendor Match (Cross-Account)"
LABEL_POSSIBLE = "Possible Match"

TIER_EXACT_REF = "tier_1"
TIER_ACCOUNT_VENDOR = "tier_2"
TIER_ACCOUNT = "tier_3"
TIER_UNKNOWN_ACCOUNT = "unknown_account"
TIER_NO_MATCH = "no_match"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def normalize_ref_value(value: Optional[str]) -> Optional[str]:
    """'bol-123 45' -> 'BOL12345'; blank -> None."""
    if value is None:
        return None
    normalized = _NON_ALNUM.sub("", str(value)).upper()
    return normalized or None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _vendor_matches(query_vendor: Optional[str], shipment_vendor: Optional[str]) -> bool:
    if query_vendor is None or shipment_vendor is None:
        return False
    return query_vendor.lower() in shipment_vendor.lower()


def _pieces_close(query_pieces: Optional[int], expected_pieces: Optional[int]) -> bool:
    if query_pieces is None or expected_pieces is None:
        return False
    return abs(expected_pieces - query_pieces) <= PIECES_TOLERANCE


def is_open_candidate(shipment: ExpectedShipment, now: datetime, lookback_days: int) -> bool:
    if shipment.inbound_kind not in MATCHABLE_KINDS:
        return False
    if shipment.inbound_status is not None and shipment.inbound_status.lower() in CLOSED_STATUSES:
        return False
    return shipment.created_at >= now - timedelta(days=lookback_days)


def score_shipment(query: InboundQuery, shipment: ExpectedShipment) -> Tuple[int, str]:
    account = _blank_to_none(query.account_id)
    vendor = _blank_to_none(query.vendor_name)
    ref = normalize_ref_value(query.ref_value)

    same_account = account is not None and shipment.account_id == account

    if ref is not None and ref in shipment.external_refs:
        return (100 if same_account else 95), LABEL_EXACT_REF

    if same_account and _vendor_matches(vendor, shipment.vendor_name):
        bonus = 10 if _pieces_close(query.pieces, shipment.expected_pieces) else 0
        return 80 + bonus, LABEL_ACCOUNT_VENDOR

    if same_account:
        bonus = 20 if _pieces_close(query.pieces, shipment.expected_pieces) else 0
        return 30 + bonus, LABEL_ACCOUNT

    if account is None and _vendor_matches(vendor, shipment.vendor_name):
        bonus = 10 if _pieces_close(query.pieces, shipment.expected_pieces) else 0
        return 30 + bonus, LABEL_VENDOR_CROSS_ACCOUNT

    return 10, LABEL_POSSIBLE


def match_tier(query: InboundQuery, shipment: ExpectedShipment) -> str:
    account = _blank_to_none(query.account_id)
    ref = normalize_ref_value(query.ref_value)

    if ref is not None and ref in shipment.external_refs:
        return TIER_EXACT_REF
    if account is None:
        return TIER_UNKNOWN_ACCOUNT
    if shipment.account_id != account:
        return TIER_NO_MATCH
    if _vendor_matches(_blank_to_none(query.vendor_name), shipment.vendor_name):
        return TIER_ACCOUNT_VENDOR
    return TIER_ACCOUNT


def confidence_band(score: int) -> ConfidenceBand:
    if score >= 80:
        return ConfidenceBand.HIGH
    if score >= 50:
        return ConfidenceBand.MEDIUM
    return ConfidenceBand.LOW


def find_inbound_candidates(
    query: InboundQuery,
    shipments: Iterable[ExpectedShipment],
    now: datetime,
    lookback_days: int = 90,
    limit: int = 5,
    exclude_ids: Iterable[str] = (),
) -> List[InboundCandidate]:
    excluded = set(exclude_ids)
    candidates: List[InboundCandidate] = []

    for shipment in shipments:
        if shipment.shipment_id in excluded:
            continue
        if not is_open_candidate(shipment, now, lookback_days):
            continue
        score, label = score_shipment(query, shipment)
        candidates.append(
            InboundCandidate(
                shipment=shipment,
                confidence_score=score,
                confidence_label=label,
                match_tier=match_tier(query, shipment),
            )
        )

    candidates.sort(
        key=lambda c: (
            -c.confidence_score,
            -c.shipment.created_at.timestamp(),
            c.shipment.shipment_number,
        )
    )
    return candidates[:limit]
