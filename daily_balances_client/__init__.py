"""Client SDK for the daily balances service.

Provides async and sync interfaces for reading balances, recording sales and
driving save/load/export/import on a running service.

Example:
    >>> from daily_balances_client import BalancesClient
    >>> async with BalancesClient("http://localhost:4950") as client:
    ...     await client.update_sales_entry("2", "mtn", 3000)
    ...     state = await client.get_balances()
"""

from .client import (
    BalancesClient,
    BalancesClientConfig,
    BalancesClientError,
    BalancesClientSync,
    BalancesConnectionError,
    BalancesNotFoundError,
    BalancesState,
    BalancesUnavailableError,
    BalancesValidationError,
    CreditAmounts,
    Employee,
    SalesEntry,
    Transaction,
)

__all__ = [
    "BalancesClient",
    "BalancesClientConfig",
    "BalancesClientError",
    "BalancesClientSync",
    "BalancesConnectionError",
    "BalancesNotFoundError",
    "BalancesState",
    "BalancesUnavailableError",
    "BalancesValidationError",
    "CreditAmounts",
    "Employee",
    "SalesEntry",
    "Transaction",
]
__version__ = "0.1.0"
