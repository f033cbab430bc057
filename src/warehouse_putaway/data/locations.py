"""
Location / capacity data access layer.

Source tables:
- dbo.locations, dbo.location_flag_links (capabilities)
- dbo.items, dbo.item_flags (requirements)

Every call reads fresh rows; nothing is cached between requests.
"""

from __future__ import annotations

from typing import List, Sequence

import pandas as pd
import pyodbc

from warehouse_putaway.adapters.location_adapter import build_item_specs, build_location_snapshot
from warehouse_putaway.data.connection import get_connection
from warehouse_putaway.putaway.errors import DataUnavailable, InvalidRequest
from warehouse_putaway.putaway.putaway_models import ItemSpec, Location, SuggestionRequest
from warehouse_putaway.utils.config import PutawaySettings
from warehouse_putaway.utils.logger import get_logger

logger = get_logger(__name__)


def _placeholders(n: int) -> str:
    return ", ".join("?" for _ in range(n))


def get_warehouse_locations(warehouse_id: str) -> pd.DataFrame:
    sql = """
        SELECT id, code, warehouse_id, length_in, width_in, usable_height_in,
               capacity_cuft, group_code, deleted_at
        FROM dbo.locations
        WHERE warehouse_id = ?
    """
    with get_connection() as conn:
        return pd.read_sql(sql, conn, params=[warehouse_id])


def get_warehouse_items(warehouse_id: str) -> pd.DataFrame:
    """Live items stored in the warehouse (drives used volume and affinity)."""
    sql = """
        SELECT i.id, i.account_id, i.item_code, i.vendor, i.size, i.location_id, i.deleted_at
        FROM dbo.items i
        INNER JOIN dbo.locations l ON i.location_id = l.id
        WHERE l.warehouse_id = ?
          AND i.deleted_at IS NULL
    """
    with get_connection() as conn:
        return pd.read_sql(sql, conn, params=[warehouse_id])


def get_location_flags(warehouse_id: str) -> pd.DataFrame:
    sql = """
        SELECT f.location_id, f.service_code
        FROM dbo.location_flag_links f
        INNER JOIN dbo.locations l ON f.location_id = l.id
        WHERE l.warehouse_id = ?
    """
    with get_connection() as conn:
        return pd.read_sql(sql, conn, params=[warehouse_id])


def get_items_by_id(item_ids: Sequence[str]) -> pd.DataFrame:
    sql = f"""
        SELECT id, account_id, item_code, vendor, size, location_id, deleted_at
        FROM dbo.items
        WHERE id IN ({_placeholders(len(item_ids))})
    """
    with get_connection() as conn:
        return pd.read_sql(sql, conn, params=list(item_ids))


def get_item_flags(item_ids: Sequence[str]) -> pd.DataFrame:
    sql = f"""
        SELECT item_id, service_code
        FROM dbo.item_flags
        WHERE item_id IN ({_placeholders(len(item_ids))})
    """
    with get_connection() as conn:
        return pd.read_sql(sql, conn, params=list(item_ids))


class SqlLocationSource:
    """Pull-based location provider backed by the warehouse database."""

    def __init__(self, warehouse_id: str, settings: PutawaySettings | None = None):
        self.warehouse_id = warehouse_id
        self.settings = settings or PutawaySettings()

    def load_items(self, item_ids: Sequence[str]) -> List[ItemSpec]:
        if not item_ids:
            raise InvalidRequest("No item ids given")
        try:
            items = get_items_by_id(item_ids)
            flags = get_item_flags(item_ids)
        except (pyodbc.Error, pd.errors.DatabaseError) as e:
            raise DataUnavailable(f"Failed to load items: {e}") from e
        return build_item_specs(items, flags, item_ids)

    def fetch_locations(self, request: SuggestionRequest) -> List[Location]:
        warehouse_id = request.warehouse_id or self.warehouse_id
        try:
            locations = get_warehouse_locations(warehouse_id)
            items = get_warehouse_items(warehouse_id)
            flags = get_location_flags(warehouse_id)
        except (pyodbc.Error, pd.errors.DatabaseError) as e:
            logger.error("Location snapshot query failed | warehouse=%s", warehouse_id, exc_info=True)
            raise DataUnavailable(f"Failed to load locations for warehouse {warehouse_id}: {e}") from e

        return build_location_snapshot(
            locations,
            items,
            flags,
            request,
            account_cluster_min_cuft=self.settings.account_cluster_min_cuft,
        )
