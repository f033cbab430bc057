# src/warehouse_putaway/utils/config.py
"""
Connection settings from .env plus the tunable put-away engine knobs.
"""

import os
from pathlib import Path
from urllib.parse import quote_plus

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env from project root
BASE_DIR = Path(__file__).resolve().parents[3]
load_dotenv(BASE_DIR / ".env")

# Hard limit, not a tuning knob
UTILIZATION_THRESHOLD = 0.90


class Config:
    DB_DRIVER = os.getenv("DB_DRIVER", "{ODBC Driver 17 for SQL Server}")
    DB_SERVER = os.getenv("DB_SERVER", "localhost").strip()
    DB_DATABASE = os.getenv("DB_DATABASE", "Warehouse")
    DB_TRUSTED_CONNECTION = os.getenv("DB_TRUSTED_CONNECTION", "yes")

    # Only used when trusted connection is off
    DB_USER = os.getenv("DB_USER", "").strip()
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")

    @property
    def ODBC_CONNECTION_STRING(self) -> str:
        conn = (
            f"DRIVER={self.DB_DRIVER};"
            f"SERVER={self.DB_SERVER};"
            f"DATABASE={self.DB_DATABASE};"
        )
        if self.DB_TRUSTED_CONNECTION.lower() in ("yes", "true", "1"):
            return conn + f"Trusted_Connection={self.DB_TRUSTED_CONNECTION};"
        return conn + f"UID={self.DB_USER};PWD={self.DB_PASSWORD};"

    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        return "mssql+pyodbc:///?odbc_connect=" + quote_plus(self.ODBC_CONNECTION_STRING)

    def __repr__(self):
        return f"<Config server={self.DB_SERVER} db={self.DB_DATABASE}>"


class PutawaySettings(BaseSettings):
    """
    Engine knobs, loaded from PUTAWAY_* environment variables.

    Weights only shape the displayed score and the affinity tie-break;
    the threshold/compliance ordering is fixed.
    """
    model_config = SettingsConfigDict(
        env_prefix="PUTAWAY_", env_file=".env", env_ignore_empty=True, extra="ignore"
    )

    top_n: int = Field(default=3, ge=1)
    account_cluster_min_cuft: float = Field(default=35.0, ge=0)

    account_cluster_weight: float = Field(default=4.0, ge=0)
    sku_vendor_weight: float = Field(default=2.0, ge=0)
    group_weight: float = Field(default=1.0, ge=0)
    headroom_weight: float = Field(default=1.0, ge=0)
    compliance_weight: float = Field(default=100.0, ge=0)

    prefer_tight_fit: bool = False
    debounce_ms: int = Field(default=200, ge=0)

    inbound_max_candidates: int = Field(default=5, ge=1)
    inbound_lookback_days: int = Field(default=90, ge=1)


# Singleton
config = Config()
