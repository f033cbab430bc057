# src/warehouse_putaway/data/connection.py
import warnings
warnings.filterwarnings("ignore", category=UserWarning)  # pandas warns on raw DBAPI connections

from contextlib import contextmanager

import pyodbc
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from warehouse_putaway.putaway.errors import DataUnavailable
from warehouse_putaway.utils.config import config


@contextmanager
def get_connection():
    try:
        conn = pyodbc.connect(config.ODBC_CONNECTION_STRING, timeout=10)
    except pyodbc.Error as e:
        raise DataUnavailable(f"Cannot connect to {config.DB_SERVER}/{config.DB_DATABASE}: {e}") from e
    try:
        yield conn
    finally:
        conn.close()


def build_engine() -> Engine:
    """Engine for transactional writes (moves, inbound links)."""
    return create_engine(config.SQLALCHEMY_DATABASE_URL, fast_executemany=True, pool_pre_ping=True)
