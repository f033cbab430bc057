"""
CSV snapshot sources.

A directory exported from the warehouse database:
  locations.csv, items.csv                      (required for put-away)
  item_flags.csv, location_flag_links.csv       (optional)
  shipments.csv                                 (required for inbound matching)
  shipment_external_refs.csv, inbound_links.csv (optional)

Files are re-read on every request.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Set

import pandas as pd

from warehouse_putaway.adapters.inbound_adapter import (
    EXTERNAL_REF_COLUMNS,
    INBOUND_LINK_COLUMNS,
    build_expected_shipments,
    linked_shipment_ids,
)
from warehouse_putaway.adapters.location_adapter import (
    ITEM_FLAG_COLUMNS,
    LOCATION_FLAG_COLUMNS,
    build_item_specs,
    build_location_snapshot,
)
from warehouse_putaway.inbound.inbound_models import ExpectedShipment
from warehouse_putaway.putaway.errors import DataUnavailable, InvalidRequest
from warehouse_putaway.putaway.putaway_models import ItemSpec, Location, SuggestionRequest
from warehouse_putaway.utils.config import PutawaySettings
from warehouse_putaway.utils.logger import get_logger

logger = get_logger(__name__)


def read_snapshot_file(
    data_dir: Path,
    name: str,
    required: bool = True,
    columns: Sequence[str] = (),
) -> pd.DataFrame:
    path = data_dir / name
    if not path.exists():
        if required:
            raise DataUnavailable(f"Missing data file: {path}")
        return pd.DataFrame(columns=list(columns))
    try:
        # Ids stay strings; numeric columns are parsed by the adapters
        return pd.read_csv(path, dtype=str)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataUnavailable(f"Cannot read {path}: {e}") from e


class CsvLocationSource:
    def __init__(
        self,
        data_dir: str | Path,
        warehouse_id: Optional[str] = None,
        settings: PutawaySettings | None = None,
    ):
        self.data_dir = Path(data_dir)
        self.warehouse_id = warehouse_id
        self.settings = settings or PutawaySettings()

    def load_items(self, item_ids: Sequence[str]) -> List[ItemSpec]:
        if not item_ids:
            raise InvalidRequest("No item ids given")
        items = read_snapshot_file(self.data_dir, "items.csv")
        flags = read_snapshot_file(self.data_dir, "item_flags.csv", required=False, columns=ITEM_FLAG_COLUMNS)
        return build_item_specs(items, flags, item_ids)

    def fetch_locations(self, request: SuggestionRequest) -> List[Location]:
        locations = read_snapshot_file(self.data_dir, "locations.csv")
        items = read_snapshot_file(self.data_dir, "items.csv")
        flags = read_snapshot_file(
            self.data_dir, "location_flag_links.csv", required=False, columns=LOCATION_FLAG_COLUMNS
        )

        warehouse_id = request.warehouse_id or self.warehouse_id
        if warehouse_id is not None and "warehouse_id" in locations.columns:
            locations = locations[locations["warehouse_id"] == str(warehouse_id)]

        logger.debug("CSV snapshot read | dir=%s locations=%d items=%d", self.data_dir, len(locations), len(items))

        return build_location_snapshot(
            locations,
            items,
            flags,
            request,
            account_cluster_min_cuft=self.settings.account_cluster_min_cuft,
        )


class CsvInboundSource:
    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)

    def fetch_open_shipments(self, now: datetime) -> List[ExpectedShipment]:
        # Eligibility (kind, status, lookback) is applied by the matcher
        shipments = read_snapshot_file(self.data_dir, "shipments.csv")
        refs = read_snapshot_file(
            self.data_dir, "shipment_external_refs.csv", required=False, columns=EXTERNAL_REF_COLUMNS
        )
        return build_expected_shipments(shipments, refs)

    def fetch_linked_ids(self, dock_intake_id: str) -> Set[str]:
        links = read_snapshot_file(self.data_dir, "inbound_links.csv", required=False, columns=INBOUND_LINK_COLUMNS)
        return linked_shipment_ids(links, dock_intake_id)
