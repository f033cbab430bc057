# src/warehouse_putaway/adapters/location_adapter.py
"""
Raw warehouse tables -> put-away domain objects.

Expected frames (SQL or CSV, same column names):
  locations:           id, code, warehouse_id, length_in, width_in, usable_height_in,
                       capacity_cuft, group_code, deleted_at
  items:               id, account_id, item_code, vendor, size, location_id, deleted_at
  item_flags:          item_id, service_code
  location_flag_links: location_id, service_code

items.size is cubic feet; items.item_code is the SKU.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Set

import pandas as pd

from warehouse_putaway.putaway.errors import InvalidRequest
from warehouse_putaway.putaway.putaway_models import ItemSpec, Location, SuggestionRequest
from warehouse_putaway.utils.logger import get_logger

logger = get_logger(__name__)

LOCATION_COLUMNS = [
    "id", "code", "warehouse_id", "length_in", "width_in", "usable_height_in",
    "capacity_cuft", "group_code", "deleted_at",
]
ITEM_COLUMNS = ["id", "account_id", "item_code", "vendor", "size", "location_id", "deleted_at"]
ITEM_FLAG_COLUMNS = ["item_id", "service_code"]
LOCATION_FLAG_COLUMNS = ["location_id", "service_code"]

CUBIC_INCHES_PER_CUFT = 1728.0


def _clean(value):
    """NaN/NaT/None -> None."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _key(value) -> Optional[str]:
    value = _clean(value)
    return None if value is None else str(value)


def _frame(df: Optional[pd.DataFrame], columns: Sequence[str]) -> pd.DataFrame:
    if df is None:
        df = pd.DataFrame(columns=list(columns))
    missing = [c for c in columns if c not in df.columns]
    if missing:
        df = df.assign(**{c: None for c in missing})
    return df


def _number(value) -> Optional[float]:
    """Numeric cell -> float. Blank and unparseable cells both give None."""
    value = _clean(value)
    if value is None:
        return None
    number = pd.to_numeric(value, errors="coerce")
    return None if pd.isna(number) else float(number)


def _live(df: pd.DataFrame) -> pd.DataFrame:
    return df[df["deleted_at"].isna()]


def location_capacity_cuft(length_in, width_in, usable_height_in) -> Optional[float]:
    """L x W x H in inches to cubic feet. No rounding, no buffer."""
    length, width, height = (_number(v) for v in (length_in, width_in, usable_height_in))
    if length is None or width is None or height is None:
        return None
    if length <= 0 or width <= 0 or height <= 0:
        return None
    return (length * width * height) / CUBIC_INCHES_PER_CUFT


def _flags_by_key(df: pd.DataFrame, key_column: str) -> Dict[str, Set[str]]:
    flags: Dict[str, Set[str]] = {}
    for _, row in df.iterrows():
        key = _key(row[key_column])
        code = _key(row["service_code"])
        if key is None or code is None:
            continue
        flags.setdefault(key, set()).add(code)
    return flags


# ------------------------------------------------------------
# Items -> request specs
# ------------------------------------------------------------

def build_item_specs(
    items_df: pd.DataFrame,
    item_flags_df: Optional[pd.DataFrame],
    item_ids: Iterable[str],
) -> List[ItemSpec]:
    """
    ItemSpecs in the caller's order. A missing size stays None so request
    validation rejects it instead of treating it as zero.
    """
    items = _live(_frame(items_df, ITEM_COLUMNS))
    flags = _flags_by_key(_frame(item_flags_df, ITEM_FLAG_COLUMNS), "item_id")

    by_id = {_key(row["id"]): row for _, row in items.iterrows()}

    specs: List[ItemSpec] = []
    for item_id in item_ids:
        row = by_id.get(str(item_id))
        if row is None:
            raise InvalidRequest(f"Item not found: {item_id}")

        raw_size = _clean(row["size"])
        size = _number(raw_size)
        if raw_size is not None and size is None:
            raise InvalidRequest(f"Item {item_id} has a non-numeric size: {raw_size!r}")

        specs.append(
            ItemSpec(
                item_id=str(item_id),
                volume_cuft=size,
                account_id=_key(row["account_id"]),
                sku=_key(row["item_code"]),
                vendor=_key(row["vendor"]),
                required_flags=frozenset(flags.get(str(item_id), set())),
                source_location_id=_key(row["location_id"]),
            )
        )
    return specs


# ------------------------------------------------------------
# Locations -> per-request snapshot
# ------------------------------------------------------------

def build_location_snapshot(
    locations_df: pd.DataFrame,
    items_df: pd.DataFrame,
    location_flags_df: Optional[pd.DataFrame],
    request: SuggestionRequest,
    account_cluster_min_cuft: float = 35.0,
) -> List[Location]:
    all_locations = _frame(locations_df, LOCATION_COLUMNS)
    locations = _live(all_locations)

    items = _live(_frame(items_df, ITEM_COLUMNS))
    items = items[items["location_id"].notna()]
    items = items.assign(
        size_cuft=pd.to_numeric(items["size"], errors="coerce").fillna(0.0),
        location_key=items["location_id"].map(_key),
    )

    used = items.groupby("location_key")["size_cuft"].sum().to_dict()

    ref = request.reference_item
    ref_account = ref.account_id if ref else None
    ref_sku = ref.sku if ref else None
    ref_vendor = ref.vendor if ref else None

    # Reference account volume per location
    account_volume: Dict[str, float] = {}
    if ref_account is not None:
        same_account = items[items["account_id"].map(_key) == ref_account]
        account_volume = same_account.groupby("location_key")["size_cuft"].sum().to_dict()

    # Locations already holding the reference SKU or vendor
    match_mask = pd.Series(False, index=items.index)
    if ref_sku is not None:
        match_mask |= items["item_code"].map(_key) == ref_sku
    if ref_vendor is not None:
        match_mask |= items["vendor"].map(_key) == ref_vendor
    sku_vendor_locations = set(items.loc[match_mask, "location_key"])

    # Group of the reference item's current location
    ref_group = None
    if ref is not None and ref.source_location_id is not None:
        source = all_locations[all_locations["id"].map(_key) == ref.source_location_id]
        if not source.empty:
            ref_group = _key(source.iloc[0]["group_code"])

    capability_flags = _flags_by_key(_frame(location_flags_df, LOCATION_FLAG_COLUMNS), "location_id")
    required_flags = request.required_flags

    snapshot: List[Location] = []
    for _, row in locations.iterrows():
        loc_id = _key(row["id"])
        if loc_id is None:
            continue

        raw_capacity = _clean(row["capacity_cuft"])
        capacity = _number(raw_capacity)
        if raw_capacity is not None and capacity is None:
            logger.warning("Non-numeric capacity ignored | location=%s capacity=%r", loc_id, raw_capacity)
        if capacity is None:
            capacity = location_capacity_cuft(row["length_in"], row["width_in"], row["usable_height_in"])
        if capacity is None or capacity <= 0:
            # Unmeasured locations never take part in suggestions
            continue

        group_code = _key(row["group_code"])

        snapshot.append(
            Location(
                location_id=loc_id,
                code=_key(row["code"]) or loc_id,
                capacity_cuft=capacity,
                used_cuft=float(used.get(loc_id, 0.0)),
                flag_compliant=required_flags <= capability_flags.get(loc_id, set()),
                account_cluster=account_volume.get(loc_id, 0.0) >= account_cluster_min_cuft,
                sku_or_vendor_match=loc_id in sku_vendor_locations,
                group_match=ref_group is not None and group_code == ref_group,
                group_code=group_code,
            )
        )

    return snapshot
