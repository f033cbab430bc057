import pytest
from sqlalchemy.exc import OperationalError

from warehouse_putaway.data.movements import SqlMoveCommitter
from warehouse_putaway.putaway.commit import MoveCommand
from warehouse_putaway.putaway.errors import DataUnavailable
from warehouse_putaway.putaway.putaway_models import OverrideReason


class FakeResult:
    def __init__(self, rowcount=1, value=None):
        self.rowcount = rowcount
        self._value = value

    def scalar(self):
        return self._value


class FakeConnection:
    def __init__(self, items):
        self.items = items
        self.movements = []

    def execute(self, statement, params):
        sql = str(statement)
        item_id = params["item_id"]
        if sql.lstrip().startswith("SELECT"):
            return FakeResult(value=self.items.get(item_id))
        if "UPDATE" in sql:
            if item_id not in self.items:
                return FakeResult(rowcount=0)
            self.items[item_id] = params["to_location_id"]
            return FakeResult()
        self.movements.append(params)
        return FakeResult()


class FakeEngine:
    """begin() hands out a working copy and only keeps it when the block exits cleanly."""

    def __init__(self, items, fail_with=None):
        self.items = dict(items)
        self.movements = []
        self.fail_with = fail_with
        self.rolled_back = False

    def begin(self):
        engine = self

        class _Transaction:
            def __enter__(self):
                if engine.fail_with is not None:
                    raise engine.fail_with
                self.conn = FakeConnection(dict(engine.items))
                return self.conn

            def __exit__(self, exc_type, exc, tb):
                if exc_type is None:
                    engine.items = self.conn.items
                    engine.movements.extend(self.conn.movements)
                else:
                    engine.rolled_back = True
                return False

        return _Transaction()


def _command(*item_ids, reasons=()):
    return MoveCommand(
        item_ids=tuple(item_ids),
        destination_location_id="L9",
        override_confirmed=bool(reasons),
        override_reasons=tuple(reasons),
    )


class TestSqlMoveCommitter:
    def test_moves_every_item_and_writes_movements(self):
        engine = FakeEngine({"I1": "L1", "I2": "L2"})
        moved = SqlMoveCommitter(engine=engine, actor_id="u1").commit(
            _command("I1", "I2", reasons=(OverrideReason.OVER_UTILIZATION,))
        )

        assert moved == 2
        assert engine.items == {"I1": "L9", "I2": "L9"}
        assert [m["from_location_id"] for m in engine.movements] == ["L1", "L2"]
        assert all(m["note"] == "Override: OVER_UTILIZATION" for m in engine.movements)
        assert all(m["actor_id"] == "u1" for m in engine.movements)

    def test_missing_item_rolls_back_whole_move(self):
        engine = FakeEngine({"I1": "L1"})

        with pytest.raises(DataUnavailable, match="GONE no longer exists"):
            SqlMoveCommitter(engine=engine).commit(_command("I1", "GONE"))

        assert engine.rolled_back
        assert engine.items == {"I1": "L1"}
        assert engine.movements == []

    def test_database_error_is_data_unavailable(self):
        engine = FakeEngine({"I1": "L1"}, fail_with=OperationalError("BEGIN", {}, Exception("down")))

        with pytest.raises(DataUnavailable, match="could not be committed"):
            SqlMoveCommitter(engine=engine).commit(_command("I1"))
