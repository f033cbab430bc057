"""
Inbound planning data access.

Reads open manifests / expected shipments for dock intake matching and
records the links an operator accepts.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional, Set

import pandas as pd
import pyodbc
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from warehouse_putaway.adapters.inbound_adapter import build_expected_shipments, linked_shipment_ids
from warehouse_putaway.data.connection import build_engine, get_connection
from warehouse_putaway.inbound.inbound_models import ExpectedShipment, InboundCandidate
from warehouse_putaway.putaway.errors import DataUnavailable
from warehouse_putaway.utils.logger import get_logger

logger = get_logger(__name__)


def get_open_shipments(since: datetime) -> pd.DataFrame:
    sql = """
        SELECT s.id, s.shipment_number, s.inbound_kind, s.account_id,
               a.account_name, s.vendor_name, s.expected_pieces,
               s.eta_start, s.eta_end, s.created_at, s.inbound_status, s.deleted_at
        FROM dbo.shipments s
        LEFT JOIN dbo.accounts a ON s.account_id = a.id
        WHERE s.inbound_kind IN ('manifest', 'expected')
          AND s.deleted_at IS NULL
          AND (s.inbound_status IS NULL OR s.inbound_status NOT IN ('completed', 'cancelled'))
          AND s.created_at >= ?
    """
    with get_connection() as conn:
        return pd.read_sql(sql, conn, params=[since])


def get_external_refs(since: datetime) -> pd.DataFrame:
    sql = """
        SELECT r.shipment_id, r.normalized_value
        FROM dbo.shipment_external_refs r
        INNER JOIN dbo.shipments s ON r.shipment_id = s.id
        WHERE s.inbound_kind IN ('manifest', 'expected')
          AND s.created_at >= ?
    """
    with get_connection() as conn:
        return pd.read_sql(sql, conn, params=[since])


def get_inbound_links(dock_intake_id: str) -> pd.DataFrame:
    sql = """
        SELECT dock_intake_id, linked_shipment_id
        FROM dbo.inbound_links
        WHERE dock_intake_id = ?
    """
    with get_connection() as conn:
        return pd.read_sql(sql, conn, params=[dock_intake_id])


class SqlInboundSource:
    def __init__(self, lookback_days: int = 90):
        self.lookback_days = lookback_days

    def fetch_open_shipments(self, now: datetime) -> List[ExpectedShipment]:
        since = now - timedelta(days=self.lookback_days)
        try:
            shipments = get_open_shipments(since)
            refs = get_external_refs(since)
        except (pyodbc.Error, pd.errors.DatabaseError) as e:
            logger.error("Inbound shipment query failed", exc_info=True)
            raise DataUnavailable(f"Failed to load expected shipments: {e}") from e
        return build_expected_shipments(shipments, refs)

    def fetch_linked_ids(self, dock_intake_id: str) -> Set[str]:
        try:
            links = get_inbound_links(dock_intake_id)
        except (pyodbc.Error, pd.errors.DatabaseError) as e:
            raise DataUnavailable(f"Failed to load inbound links: {e}") from e
        return linked_shipment_ids(links, dock_intake_id)


class InboundLinkWriter:
    """Upsert into dbo.inbound_links; unique on (dock_intake_id, linked_shipment_id)."""

    MERGE_SQL = text(
        """
        MERGE dbo.inbound_links WITH (HOLDLOCK) AS target
        USING (SELECT :dock_intake_id AS dock_intake_id,
                      :linked_shipment_id AS linked_shipment_id) AS source
        ON target.dock_intake_id = source.dock_intake_id
           AND target.linked_shipment_id = source.linked_shipment_id
        WHEN MATCHED THEN
            UPDATE SET confidence_score = :confidence_score,
                       linked_at = SYSUTCDATETIME(),
                       linked_by = :linked_by
        WHEN NOT MATCHED THEN
            INSERT (dock_intake_id, linked_shipment_id, link_type,
                    confidence_score, linked_at, linked_by)
            VALUES (:dock_intake_id, :linked_shipment_id, :link_type,
                    :confidence_score, SYSUTCDATETIME(), :linked_by);
        """
    )

    def __init__(self, engine: Engine | None = None, linked_by: Optional[str] = None):
        self.engine = engine or build_engine()
        self.linked_by = linked_by

    def link(self, dock_intake_id: str, candidate: InboundCandidate) -> None:
        params = {
            "dock_intake_id": dock_intake_id,
            "linked_shipment_id": candidate.shipment_id,
            "link_type": candidate.link_type,
            "confidence_score": candidate.confidence_score,
            "linked_by": self.linked_by,
        }
        try:
            with self.engine.begin() as conn:
                conn.execute(self.MERGE_SQL, params)
        except SQLAlchemyError as e:
            logger.error("Inbound link failed | dock_intake=%s shipment=%s",
                         dock_intake_id, candidate.shipment_id, exc_info=True)
            raise DataUnavailable(f"Inbound link could not be saved: {e}") from e

        logger.info(
            "Inbound linked | dock_intake=%s shipment=%s score=%d",
            dock_intake_id,
            candidate.shipment.shipment_number,
            candidate.confidence_score,
        )
