"""Ledger layer - balance records and the in-memory store."""

from .models import (
    Employee,
    EmployeeTransaction,
    OpeningBalance,
    RemainingBalance,
    SalesByType,
    SalesEntry,
    SalesField,
    TransactionType,
)
from .store import STORAGE_KEY, BalanceLedgerStore, StoreEvent

__all__ = [
    "BalanceLedgerStore",
    "StoreEvent",
    "STORAGE_KEY",
    "Employee",
    "EmployeeTransaction",
    "OpeningBalance",
    "RemainingBalance",
    "SalesByType",
    "SalesEntry",
    "SalesField",
    "TransactionType",
]
