"""Configuration primitives for the balances service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum

from ..ledger.store import STORAGE_KEY

_TRUE_VALUES = {"1", "true", "yes", "on"}


class SlotBackend(str, Enum):
    """Supported storage slot backends."""

    SQLITE = "sqlite"
    MEMORY = "memory"


@dataclass(slots=True)
class BalancesConfig:
    """Runtime configuration for the balances service.

    Configuration Sources (priority order):
    1. Direct constructor arguments
    2. Environment variables (BALANCES_*)
    3. Default values

    Attributes:
        port: Service port (default: 4950)
        db_path: SQLite database holding the storage slot (default: data/balances.db)
        export_dir: Directory exported JSON files are written to (default: data/exports)
        storage_key: Slot key snapshots are saved under (default: dailyBalancesData)
        slot_backend: Storage slot backend (default: sqlite)
        autoload: Load the saved snapshot when the service starts (default: True)
    """

    port: int = 4950
    db_path: str = "data/balances.db"
    export_dir: str = "data/exports"
    storage_key: str = STORAGE_KEY
    slot_backend: SlotBackend = SlotBackend.SQLITE
    autoload: bool = True
    cors_origins: list[str] = field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
            "http://127.0.0.1:8080",
        ]
    )

    @classmethod
    def from_env(cls) -> BalancesConfig:
        """Create configuration from environment variables.

        Optional:
            BALANCES_PORT: Service port (default: 4950)
            BALANCES_DB_PATH: SQLite database path
            BALANCES_EXPORT_DIR: Export directory
            BALANCES_STORAGE_KEY: Storage slot key
            BALANCES_SLOT_BACKEND: 'sqlite' or 'memory'
            BALANCES_AUTOLOAD: '1'/'true' to load saved data at startup
            BALANCES_CORS_ORIGINS: Comma-separated list of allowed origins
        """
        config = cls(
            port=int(os.environ.get("BALANCES_PORT", "4950")),
            db_path=os.environ.get("BALANCES_DB_PATH", "data/balances.db"),
            export_dir=os.environ.get("BALANCES_EXPORT_DIR", "data/exports"),
            storage_key=os.environ.get("BALANCES_STORAGE_KEY", STORAGE_KEY),
            slot_backend=SlotBackend(
                os.environ.get("BALANCES_SLOT_BACKEND", "sqlite").lower()
            ),
            autoload=os.environ.get("BALANCES_AUTOLOAD", "1").lower() in _TRUE_VALUES,
        )

        origins = os.environ.get("BALANCES_CORS_ORIGINS", "")
        if origins:
            config.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]

        return config
