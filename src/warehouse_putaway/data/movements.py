"""
Move execution (write side).

One transaction per move: relocate every item and write a movement row
per item. An item that is gone by commit time rolls the whole move back.
Capacity is re-checked by the database, not by this module.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from warehouse_putaway.putaway.commit import MoveCommand, movement_note
from warehouse_putaway.putaway.errors import DataUnavailable
from warehouse_putaway.utils.logger import get_logger

logger = get_logger(__name__)


class SqlMoveCommitter:
    def __init__(self, engine: Engine | None = None, actor_id: Optional[str] = None):
        if engine is None:
            from warehouse_putaway.data.connection import build_engine
            engine = build_engine()
        self.engine = engine
        self.actor_id = actor_id

    def commit(self, command: MoveCommand) -> int:
        select_sql = text("SELECT location_id FROM dbo.items WHERE id = :item_id")
        update_sql = text(
            """
            UPDATE dbo.items
            SET location_id = :to_location_id, updated_at = SYSUTCDATETIME()
            WHERE id = :item_id
            """
        )
        movement_sql = text(
            """
            INSERT INTO dbo.movements
                (item_id, from_location_id, to_location_id, actor_type, actor_id,
                 action_type, note, moved_at)
            VALUES
                (:item_id, :from_location_id, :to_location_id, 'user', :actor_id,
                 'move', :note, SYSUTCDATETIME())
            """
        )

        note = movement_note(command)
        moved = 0
        try:
            with self.engine.begin() as conn:
                for item_id in command.item_ids:
                    from_location_id = conn.execute(select_sql, {"item_id": item_id}).scalar()
                    updated = conn.execute(
                        update_sql,
                        {"to_location_id": command.destination_location_id, "item_id": item_id},
                    )
                    if updated.rowcount == 0:
                        # Raising inside begin() rolls back the items already moved
                        logger.warning("Move aborted, item missing | item=%s", item_id)
                        raise DataUnavailable(f"Item {item_id} no longer exists; move rolled back")
                    conn.execute(
                        movement_sql,
                        {
                            "item_id": item_id,
                            "from_location_id": from_location_id,
                            "to_location_id": command.destination_location_id,
                            "actor_id": self.actor_id,
                            "note": note,
                        },
                    )
                    moved += 1
        except SQLAlchemyError as e:
            logger.error("Move commit failed | destination=%s", command.destination_location_id, exc_info=True)
            raise DataUnavailable(f"Move could not be committed: {e}") from e

        return moved
