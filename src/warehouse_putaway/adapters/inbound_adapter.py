# src/warehouse_putaway/adapters/inbound_adapter.py
"""
Raw inbound tables -> ExpectedShipment.

  shipments:              id, shipment_number, inbound_kind, account_id, account_name,
                          vendor_name, expected_pieces, eta_start, eta_end,
                          created_at, inbound_status, deleted_at
  shipment_external_refs: shipment_id, normalized_value
  inbound_links:          dock_intake_id, linked_shipment_id
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set

import pandas as pd

from warehouse_putaway.adapters.location_adapter import _clean, _frame, _key, _live
from warehouse_putaway.inbound.candidate_matching import normalize_ref_value
from warehouse_putaway.inbound.inbound_models import ExpectedShipment

SHIPMENT_COLUMNS = [
    "id", "shipment_number", "inbound_kind", "account_id", "account_name",
    "vendor_name", "expected_pieces", "eta_start", "eta_end",
    "created_at", "inbound_status", "deleted_at",
]
EXTERNAL_REF_COLUMNS = ["shipment_id", "normalized_value"]
INBOUND_LINK_COLUMNS = ["dock_intake_id", "linked_shipment_id"]


def _timestamp(value):
    value = _clean(value)
    if value is None:
        return None
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.to_pydatetime()


def _pieces(value) -> Optional[int]:
    value = _clean(value)
    if value is None:
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def build_expected_shipments(
    shipments_df: pd.DataFrame,
    refs_df: Optional[pd.DataFrame] = None,
) -> List[ExpectedShipment]:
    shipments = _live(_frame(shipments_df, SHIPMENT_COLUMNS))
    refs = _frame(refs_df, EXTERNAL_REF_COLUMNS)

    refs_by_shipment: Dict[str, Set[str]] = {}
    for _, row in refs.iterrows():
        shipment_id = _key(row["shipment_id"])
        # Re-normalize: CSV exports may carry raw values
        ref = normalize_ref_value(_key(row["normalized_value"]))
        if shipment_id is None or ref is None:
            continue
        refs_by_shipment.setdefault(shipment_id, set()).add(ref)

    result: List[ExpectedShipment] = []
    for _, row in shipments.iterrows():
        shipment_id = _key(row["id"])
        created_at = _timestamp(row["created_at"])
        if shipment_id is None or created_at is None:
            continue

        kind = _key(row["inbound_kind"])
        status = _key(row["inbound_status"])

        result.append(
            ExpectedShipment(
                shipment_id=shipment_id,
                shipment_number=_key(row["shipment_number"]) or shipment_id,
                inbound_kind=kind.lower() if kind else "",
                created_at=created_at,
                account_id=_key(row["account_id"]),
                account_name=_key(row["account_name"]),
                vendor_name=_key(row["vendor_name"]),
                expected_pieces=_pieces(row["expected_pieces"]),
                eta_start=_timestamp(row["eta_start"]),
                eta_end=_timestamp(row["eta_end"]),
                inbound_status=status.lower() if status else None,
                external_refs=frozenset(refs_by_shipment.get(shipment_id, set())),
            )
        )
    return result


def linked_shipment_ids(links_df: Optional[pd.DataFrame], dock_intake_id: str) -> Set[str]:
    links = _frame(links_df, INBOUND_LINK_COLUMNS)
    mask = links["dock_intake_id"].map(_key) == str(dock_intake_id)
    return {k for k in links.loc[mask, "linked_shipment_id"].map(_key) if k is not None}
