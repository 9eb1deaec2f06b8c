"""Balances service layer - FastAPI application and HTTP interfaces."""

from .app import create_balances_app
from .config import BalancesConfig, SlotBackend
from .dependencies import get_store, require_store

__all__ = [
    "create_balances_app",
    "BalancesConfig",
    "SlotBackend",
    "get_store",
    "require_store",
]
