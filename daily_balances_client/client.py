"""Daily balances client implementation with async/sync interfaces."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class BalancesClientConfig:
    """Configuration for the balances clients."""

    base_url: str = "http://localhost:4950"
    timeout: float = 30.0
    max_retries: int = 3
    retry_backoff: float = 0.5
    connection_pool_size: int = 10

    @classmethod
    def from_env(cls) -> "BalancesClientConfig":
        """Load configuration from environment variables."""
        return cls(
            base_url=os.environ.get("BALANCES_URL", "http://localhost:4950"),
            timeout=float(os.environ.get("BALANCES_TIMEOUT", "30.0")),
            max_retries=int(os.environ.get("BALANCES_MAX_RETRIES", "3")),
            retry_backoff=float(os.environ.get("BALANCES_RETRY_BACKOFF", "0.5")),
        )


# ---------------------------------------------------------------------------
# Response Models (mirrors server models for type safety)
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Employee:
    id: str
    name: str


@dataclass(slots=True)
class SalesEntry:
    employee_id: str
    syria_tel: float = 0
    mtn: float = 0
    cash: float = 0


@dataclass(slots=True)
class Transaction:
    id: str
    employee_id: str
    type: str
    amount: float
    date: str
    description: str = ""


@dataclass(slots=True)
class CreditAmounts:
    """Per-credit-type amounts; cash is None where it does not apply."""

    syria_tel: float
    mtn: float
    cash: float | None = None


@dataclass(slots=True)
class BalancesState:
    """Full balances state as returned by GET /balances."""

    opening_balance: CreditAmounts
    remaining_balances: CreditAmounts
    sales_by_type: CreditAmounts
    sales_entries: list[SalesEntry] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    employees: list[Employee] = field(default_factory=list)

    def entry_for(self, employee_id: str) -> SalesEntry | None:
        for entry in self.sales_entries:
            if entry.employee_id == employee_id:
                return entry
        return None


def _amounts(data: dict[str, Any]) -> CreditAmounts:
    return CreditAmounts(
        syria_tel=data["syriaTel"],
        mtn=data["mtn"],
        cash=data.get("cash"),
    )


def _employee(data: dict[str, Any]) -> Employee:
    return Employee(id=data["id"], name=data["name"])


def _transaction(data: dict[str, Any]) -> Transaction:
    return Transaction(
        id=data["id"],
        employee_id=data["employeeId"],
        type=data["type"],
        amount=data["amount"],
        date=data["date"],
        description=data.get("description", ""),
    )


def _transactions_payload(transactions: list[Transaction]) -> list[dict[str, Any]]:
    return [
        {
            "id": t.id,
            "employeeId": t.employee_id,
            "type": t.type,
            "amount": t.amount,
            "date": t.date,
            "description": t.description,
        }
        for t in transactions
    ]


def _state(data: dict[str, Any]) -> BalancesState:
    return BalancesState(
        opening_balance=_amounts(data["openingBalance"]),
        remaining_balances=_amounts(data["remainingBalances"]),
        sales_by_type=_amounts(data["salesByType"]),
        sales_entries=[
            SalesEntry(
                employee_id=e["employeeId"],
                syria_tel=e.get("syriaTel") or 0,
                mtn=e.get("mtn") or 0,
                cash=e.get("cash") or 0,
            )
            for e in data.get("salesEntries", [])
        ],
        transactions=[_transaction(t) for t in data.get("transactions", [])],
        employees=[_employee(e) for e in data.get("employees", [])],
    )


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class BalancesClientError(Exception):
    """Base exception for balances client errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BalancesConnectionError(BalancesClientError):
    """Connection to the service failed."""


class BalancesNotFoundError(BalancesClientError):
    """Endpoint or resource not found."""


class BalancesValidationError(BalancesClientError):
    """The service rejected the request body."""


class BalancesUnavailableError(BalancesClientError):
    """The service has no active store."""


def _raise_for_status(response: httpx.Response) -> None:
    if response.status_code == 404:
        raise BalancesNotFoundError("Resource not found", 404)
    if response.status_code == 422:
        raise BalancesValidationError(f"Invalid request: {response.text}", 422)
    if response.status_code == 503:
        raise BalancesUnavailableError(f"Service unavailable: {response.text}", 503)
    if response.is_error:
        raise BalancesClientError(
            f"HTTP {response.status_code}: {response.text}",
            response.status_code,
        )


def _retry_delay(config: BalancesClientConfig, attempt: int) -> float:
    return config.retry_backoff * (2 ** attempt)


# ---------------------------------------------------------------------------
# Async Client
# ---------------------------------------------------------------------------


class BalancesClient:
    """Async client for the daily balances service.

    Example:
        >>> async with BalancesClient("http://localhost:4950") as client:
        ...     await client.update_sales_entry("1", "syriaTel", 5000)
        ...     state = await client.get_balances()
        ...     print(state.remaining_balances.syria_tel)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:4950",
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_backoff: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = BalancesClientConfig(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            max_retries=max_retries,
            retry_backoff=retry_backoff,
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_env(cls, *, transport: httpx.AsyncBaseTransport | None = None) -> "BalancesClient":
        """Create a client configured from BALANCES_* environment variables."""
        config = BalancesClientConfig.from_env()
        return cls(
            config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
            retry_backoff=config.retry_backoff,
            transport=transport,
        )

    async def __aenter__(self) -> "BalancesClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                transport=self._transport,
                limits=httpx.Limits(
                    max_connections=self._config.connection_pool_size,
                    max_keepalive_connections=5,
                ),
            )
        return self._client

    async def close(self) -> None:
        """Close the client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make request, retrying connection failures with backoff."""
        client = await self._ensure_client()

        last_error: Exception | None = None
        for attempt in range(self._config.max_retries):
            try:
                response = await client.request(method, path, json=json, params=params)
                _raise_for_status(response)
                return response.json()
            except httpx.ConnectError as e:
                last_error = BalancesConnectionError(f"Connection failed: {e}")
            except httpx.TimeoutException as e:
                last_error = BalancesConnectionError(f"Request timed out: {e}")

            if attempt < self._config.max_retries - 1:
                delay = _retry_delay(self._config, attempt)
                logger.debug(f"Retry {attempt + 1}/{self._config.max_retries} after {delay}s")
                await asyncio.sleep(delay)

        if last_error:
            raise last_error
        raise BalancesConnectionError("Request failed after retries")

    # -----------------------------------------------------------------------
    # Balances API
    # -----------------------------------------------------------------------

    async def get_balances(self) -> BalancesState:
        """Current state with derived totals."""
        return _state(await self._request("GET", "/balances"))

    async def set_opening_balance(self, syria_tel: float, mtn: float) -> BalancesState:
        """Replace the opening balance."""
        data = await self._request(
            "PUT",
            "/balances/opening",
            json={"syriaTel": syria_tel, "mtn": mtn},
        )
        return _state(data)

    async def update_sales_entry(self, employee_id: str, field: str, value: float) -> bool:
        """Replace one field of an employee's sales entry.

        Returns:
            False if the service has no entry for this employee
        """
        data = await self._request(
            "PATCH",
            f"/balances/sales/{employee_id}",
            json={"field": field, "value": value},
        )
        return bool(data["updated"])

    async def calculate_totals(self) -> tuple[CreditAmounts, CreditAmounts]:
        """Recalculate totals; returns (sales_by_type, remaining_balances)."""
        data = await self._request("POST", "/balances/recalculate")
        return _amounts(data["salesByType"]), _amounts(data["remainingBalances"])

    # -----------------------------------------------------------------------
    # Employees & Transactions API
    # -----------------------------------------------------------------------

    async def list_employees(self) -> list[Employee]:
        return [_employee(e) for e in await self._request("GET", "/employees")]

    async def set_employees(self, employees: list[Employee]) -> list[Employee]:
        payload = [{"id": e.id, "name": e.name} for e in employees]
        return [_employee(e) for e in await self._request("PUT", "/employees", json=payload)]

    async def list_transactions(self, employee_id: str | None = None) -> list[Transaction]:
        params = {"employee_id": employee_id} if employee_id is not None else None
        data = await self._request("GET", "/transactions", params=params)
        return [_transaction(t) for t in data]

    async def set_transactions(self, transactions: list[Transaction]) -> list[Transaction]:
        data = await self._request("PUT", "/transactions", json=_transactions_payload(transactions))
        return [_transaction(t) for t in data]

    # -----------------------------------------------------------------------
    # Persistence API
    # -----------------------------------------------------------------------

    async def save(self) -> bool:
        """Save the service state to its storage slot."""
        return bool((await self._request("POST", "/storage/save"))["ok"])

    async def load(self) -> bool:
        """Reload the service state from its storage slot."""
        return bool((await self._request("POST", "/storage/load"))["ok"])

    async def export(self, filename: str | None = None) -> str | None:
        """Export to a JSON file on the service host; returns its path."""
        data = await self._request("POST", "/files/export", json={"filename": filename})
        return data.get("path")

    async def import_file(self, path: str) -> bool:
        """Import a JSON file readable by the service."""
        data = await self._request("POST", "/files/import", json={"path": path})
        return bool(data["imported"])

    # -----------------------------------------------------------------------
    # Health API
    # -----------------------------------------------------------------------

    async def health(self) -> dict[str, Any]:
        """Get service health status."""
        return await self._request("GET", "/healthz")


# ---------------------------------------------------------------------------
# Sync Client
# ---------------------------------------------------------------------------


class BalancesClientSync:
    """Synchronous client for the daily balances service.

    Example:
        >>> with BalancesClientSync("http://localhost:4950") as client:
        ...     client.set_opening_balance(150000, 120000)
        ...     client.save()
    """

    def __init__(
        self,
        base_url: str = "http://localhost:4950",
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_backoff: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ):
        self._config = BalancesClientConfig(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            max_retries=max_retries,
            retry_backoff=retry_backoff,
        )
        self._client = httpx.Client(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            transport=transport,
        )

    @classmethod
    def from_env(cls, *, transport: httpx.BaseTransport | None = None) -> "BalancesClientSync":
        """Create a client configured from BALANCES_* environment variables."""
        config = BalancesClientConfig.from_env()
        return cls(
            config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
            retry_backoff=config.retry_backoff,
            transport=transport,
        )

    def __enter__(self) -> "BalancesClientSync":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        last_error: Exception | None = None
        for attempt in range(self._config.max_retries):
            try:
                response = self._client.request(method, path, json=json, params=params)
                _raise_for_status(response)
                return response.json()
            except httpx.ConnectError as e:
                last_error = BalancesConnectionError(f"Connection failed: {e}")
            except httpx.TimeoutException as e:
                last_error = BalancesConnectionError(f"Request timed out: {e}")

            if attempt < self._config.max_retries - 1:
                time.sleep(_retry_delay(self._config, attempt))

        if last_error:
            raise last_error
        raise BalancesConnectionError("Request failed after retries")

    def get_balances(self) -> BalancesState:
        return _state(self._request("GET", "/balances"))

    def set_opening_balance(self, syria_tel: float, mtn: float) -> BalancesState:
        return _state(
            self._request("PUT", "/balances/opening", json={"syriaTel": syria_tel, "mtn": mtn})
        )

    def update_sales_entry(self, employee_id: str, field: str, value: float) -> bool:
        data = self._request(
            "PATCH",
            f"/balances/sales/{employee_id}",
            json={"field": field, "value": value},
        )
        return bool(data["updated"])

    def calculate_totals(self) -> tuple[CreditAmounts, CreditAmounts]:
        data = self._request("POST", "/balances/recalculate")
        return _amounts(data["salesByType"]), _amounts(data["remainingBalances"])

    def list_employees(self) -> list[Employee]:
        return [_employee(e) for e in self._request("GET", "/employees")]

    def set_employees(self, employees: list[Employee]) -> list[Employee]:
        payload = [{"id": e.id, "name": e.name} for e in employees]
        return [_employee(e) for e in self._request("PUT", "/employees", json=payload)]

    def list_transactions(self, employee_id: str | None = None) -> list[Transaction]:
        params = {"employee_id": employee_id} if employee_id is not None else None
        return [_transaction(t) for t in self._request("GET", "/transactions", params=params)]

    def set_transactions(self, transactions: list[Transaction]) -> list[Transaction]:
        data = self._request("PUT", "/transactions", json=_transactions_payload(transactions))
        return [_transaction(t) for t in data]

    def save(self) -> bool:
        return bool(self._request("POST", "/storage/save")["ok"])

    def load(self) -> bool:
        return bool(self._request("POST", "/storage/load")["ok"])

    def export(self, filename: str | None = None) -> str | None:
        return self._request("POST", "/files/export", json={"filename": filename}).get("path")

    def import_file(self, path: str) -> bool:
        return bool(self._request("POST", "/files/import", json={"path": path})["imported"])

    def health(self) -> dict[str, Any]:
        return self._request("GET", "/healthz")
