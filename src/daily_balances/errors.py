"""Exceptions raised by the daily balances package."""

from __future__ import annotations


class BalancesError(Exception):
    """Base exception for daily balances errors."""


class StoreNotFoundError(BalancesError, RuntimeError):
    """No balance ledger store is active where one was looked up."""

    def __init__(self, message: str = "No BalanceLedgerStore is active in this application"):
        super().__init__(message)


class InvalidPayloadError(BalancesError, ValueError):
    """A snapshot payload is missing required fields."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Snapshot payload is missing required fields: {', '.join(missing)}")


__all__ = ["BalancesError", "StoreNotFoundError", "InvalidPayloadError"]
