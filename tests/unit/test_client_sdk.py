"""Tests for the daily balances client SDK."""

from __future__ import annotations

import json

import httpx
import pytest

from daily_balances.ledger.store import BalanceLedgerStore
from daily_balances.service.app import create_balances_app
from daily_balances.service.config import BalancesConfig, SlotBackend
from daily_balances.service.dependencies import attach_store
from daily_balances_client.client import (
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

SNAPSHOT = {
    "openingBalance": {"syriaTel": 100000, "mtn": 100000},
    "salesEntries": [
        {"employeeId": "1", "syriaTel": 5000, "mtn": 0, "cash": 0},
        {"employeeId": "2", "syriaTel": 0, "mtn": None, "cash": 1000},
    ],
    "remainingBalances": {"syriaTel": 95000, "mtn": 100000},
    "salesByType": {"syriaTel": 5000, "mtn": 0, "cash": 1000},
    "transactions": [
        {
            "id": "1",
            "employeeId": "1",
            "type": "syriaTel",
            "amount": 5000,
            "date": "2023-05-01",
            "description": "",
        }
    ],
    "employees": [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}],
}


# ---------------------------------------------------------------------------
# Model Tests (no mocking needed)
# ---------------------------------------------------------------------------


class TestModels:
    """Tests for client data models."""

    def test_credit_amounts_cash_optional(self):
        """Remaining balances carry no cash amount."""
        amounts = CreditAmounts(syria_tel=1, mtn=2)
        assert amounts.cash is None

    def test_entry_for(self):
        """BalancesState finds entries by employee id."""
        state = BalancesState(
            opening_balance=CreditAmounts(1, 1),
            remaining_balances=CreditAmounts(1, 1),
            sales_by_type=CreditAmounts(0, 0, 0),
            sales_entries=[SalesEntry(employee_id="7", cash=3)],
        )
        assert state.entry_for("7").cash == 3
        assert state.entry_for("8") is None

    def test_transaction_description_default(self):
        """Transaction description defaults to empty."""
        txn = Transaction(id="1", employee_id="1", type="mtn", amount=1, date="2024-01-01")
        assert txn.description == ""


class TestExceptions:
    """Tests for exception classes."""

    def test_client_error_has_status_code(self):
        """BalancesClientError stores the status code."""
        error = BalancesClientError("Test error", status_code=500)
        assert error.status_code == 500
        assert str(error) == "Test error"

    @pytest.mark.parametrize(
        "cls",
        [
            BalancesConnectionError,
            BalancesNotFoundError,
            BalancesValidationError,
            BalancesUnavailableError,
        ],
    )
    def test_exception_hierarchy(self, cls):
        """All client exceptions share a base class."""
        assert issubclass(cls, BalancesClientError)


class TestConfig:
    """Tests for client configuration."""

    def test_defaults(self):
        """Defaults point at the local service."""
        config = BalancesClientConfig()
        assert config.base_url == "http://localhost:4950"
        assert config.timeout == 30.0
        assert config.max_retries == 3

    def test_from_env(self, monkeypatch):
        """Environment variables override defaults."""
        monkeypatch.setenv("BALANCES_URL", "http://balances:9000")
        monkeypatch.setenv("BALANCES_TIMEOUT", "5")
        monkeypatch.setenv("BALANCES_MAX_RETRIES", "1")

        config = BalancesClientConfig.from_env()
        assert config.base_url == "http://balances:9000"
        assert config.timeout == 5.0
        assert config.max_retries == 1

    @pytest.mark.asyncio
    async def test_async_client_from_env(self, monkeypatch):
        """The async client targets the configured URL."""
        monkeypatch.setenv("BALANCES_URL", "http://balances:9000/")
        seen: list[httpx.Request] = []
        transport = _json_transport({("GET", "/healthz"): (200, {"status": "ok"})}, seen)

        async with BalancesClient.from_env(transport=transport) as client:
            assert (await client.health())["status"] == "ok"

        assert str(seen[0].url) == "http://balances:9000/healthz"

    def test_sync_client_from_env_retries(self, monkeypatch):
        """The sync client honours the configured retry settings."""
        monkeypatch.setenv("BALANCES_URL", "http://balances:9000")
        monkeypatch.setenv("BALANCES_MAX_RETRIES", "2")
        monkeypatch.setenv("BALANCES_RETRY_BACKOFF", "0")
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            raise httpx.ConnectError("refused", request=request)

        with BalancesClientSync.from_env(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(BalancesConnectionError):
                client.health()

        assert [r.url.host for r in attempts] == ["balances", "balances"]


# ---------------------------------------------------------------------------
# Mocked Transport Tests
# ---------------------------------------------------------------------------


def _json_transport(routes: dict[tuple[str, str], tuple[int, object]], seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        status, body = routes.get((request.method, request.url.path), (404, {"detail": "Not Found"}))
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler)


class TestAsyncClientMocked:
    """Async client against canned responses."""

    @pytest.mark.asyncio
    async def test_get_balances_parses_state(self):
        """Snapshots become typed results; null amounts read as zero."""
        transport = _json_transport({("GET", "/balances"): (200, SNAPSHOT)})

        async with BalancesClient("http://test", transport=transport) as client:
            state = await client.get_balances()

        assert state.remaining_balances == CreditAmounts(syria_tel=95000, mtn=100000)
        assert state.sales_by_type.cash == 1000
        assert state.entry_for("2").mtn == 0
        assert state.employees == [Employee("1", "A"), Employee("2", "B")]
        assert state.transactions[0].employee_id == "1"

    @pytest.mark.asyncio
    async def test_update_sales_entry_sends_patch(self):
        """Updates are PATCHed with field and value."""
        seen: list[httpx.Request] = []
        transport = _json_transport(
            {("PATCH", "/balances/sales/3"): (200, {"updated": False})},
            seen,
        )

        async with BalancesClient("http://test", transport=transport) as client:
            assert await client.update_sales_entry("3", "cash", 12.5) is False

        assert json.loads(seen[0].content) == {"field": "cash", "value": 12.5}

    @pytest.mark.asyncio
    async def test_list_transactions_filter_param(self):
        """The employee filter is passed as a query parameter."""
        seen: list[httpx.Request] = []
        transport = _json_transport({("GET", "/transactions"): (200, [])}, seen)

        async with BalancesClient("http://test", transport=transport) as client:
            await client.list_transactions("2")

        assert seen[0].url.params["employee_id"] == "2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, error",
        [
            (404, BalancesNotFoundError),
            (422, BalancesValidationError),
            (503, BalancesUnavailableError),
            (500, BalancesClientError),
        ],
    )
    async def test_status_mapping(self, status, error):
        """HTTP errors map to typed exceptions."""
        transport = _json_transport({("GET", "/balances"): (status, {"detail": "x"})})

        async with BalancesClient("http://test", transport=transport) as client:
            with pytest.raises(error) as info:
                await client.get_balances()

        assert info.value.status_code == status

    @pytest.mark.asyncio
    async def test_connection_errors_are_retried(self):
        """Connection failures are retried before giving up."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            raise httpx.ConnectError("refused", request=request)

        client = BalancesClient(
            "http://test",
            max_retries=3,
            retry_backoff=0,
            transport=httpx.MockTransport(handler),
        )
        with pytest.raises(BalancesConnectionError):
            await client.health()
        await client.close()

        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_retry_recovers(self):
        """A later attempt can succeed."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, json={"ok": True, "storageKey": "dailyBalancesData"})

        async with BalancesClient(
            "http://test", retry_backoff=0, transport=httpx.MockTransport(handler)
        ) as client:
            assert await client.save() is True

        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_http_errors_not_retried(self):
        """Service errors are raised immediately."""
        seen: list[httpx.Request] = []
        transport = _json_transport({}, seen)

        async with BalancesClient("http://test", retry_backoff=0, transport=transport) as client:
            with pytest.raises(BalancesNotFoundError):
                await client.load()

        assert len(seen) == 1


class TestSyncClientMocked:
    """Sync client against canned responses."""

    def test_calculate_totals(self):
        """Totals come back as (sales_by_type, remaining_balances)."""
        transport = _json_transport(
            {
                ("POST", "/balances/recalculate"): (
                    200,
                    {
                        "salesByType": {"syriaTel": 1, "mtn": 2, "cash": 3},
                        "remainingBalances": {"syriaTel": 9, "mtn": 8},
                    },
                )
            }
        )

        with BalancesClientSync("http://test", transport=transport) as client:
            sales, remaining = client.calculate_totals()

        assert sales == CreditAmounts(1, 2, 3)
        assert remaining == CreditAmounts(9, 8)

    def test_export_returns_path(self):
        """Export returns the written path."""
        transport = _json_transport(
            {("POST", "/files/export"): (200, {"ok": True, "path": "/tmp/x.json"})}
        )

        with BalancesClientSync("http://test", transport=transport) as client:
            assert client.export("x") == "/tmp/x.json"

    def test_set_transactions_payload(self):
        """Transactions are sent in camelCase."""
        seen: list[httpx.Request] = []
        body = [SNAPSHOT["transactions"][0]]
        transport = _json_transport({("PUT", "/transactions"): (200, body)}, seen)

        txn = Transaction(id="1", employee_id="1", type="syriaTel", amount=5000, date="2023-05-01")
        with BalancesClientSync("http://test", transport=transport) as client:
            assert client.set_transactions([txn]) == [txn]

        assert json.loads(seen[0].content) == body

    def test_sync_retries_then_raises(self):
        """The sync client retries connection failures too."""
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            raise httpx.ConnectError("refused", request=request)

        with BalancesClientSync(
            "http://test",
            max_retries=2,
            retry_backoff=0,
            transport=httpx.MockTransport(handler),
        ) as client:
            with pytest.raises(BalancesConnectionError):
                client.get_balances()

        assert len(attempts) == 2


# ---------------------------------------------------------------------------
# Against the Application
# ---------------------------------------------------------------------------


@pytest.fixture
def app(tmp_path):
    """Application with a store attached directly (ASGITransport skips lifespan)."""
    config = BalancesConfig(
        export_dir=str(tmp_path / "exports"),
        slot_backend=SlotBackend.MEMORY,
        autoload=False,
    )
    application = create_balances_app(config)
    attach_store(application, BalanceLedgerStore())
    return application


class TestAsyncClientAgainstApp:
    """Async client talking to the real application in-process."""

    @pytest.mark.asyncio
    async def test_sales_flow(self, app):
        """Update, read back and persist through the client."""
        transport = httpx.ASGITransport(app=app)
        async with BalancesClient("http://test", transport=transport) as client:
            assert await client.update_sales_entry("1", "syriaTel", 5000) is True
            assert await client.update_sales_entry("2", "mtn", 3000) is True
            assert await client.update_sales_entry("nobody", "mtn", 1) is False

            state = await client.get_balances()
            assert state.remaining_balances.syria_tel == 95000
            assert state.remaining_balances.mtn == 97000
            assert state.entry_for("1").syria_tel == 5000

            assert await client.save() is True
            await client.set_opening_balance(1, 1)
            assert await client.load() is True
            assert (await client.get_balances()).opening_balance.syria_tel == 100000

    @pytest.mark.asyncio
    async def test_employees_and_transactions(self, app):
        """Replacement endpoints round-trip through the client."""
        transport = httpx.ASGITransport(app=app)
        async with BalancesClient("http://test", transport=transport) as client:
            employees = await client.set_employees([Employee("9", "Nine")])
            assert employees == [Employee("9", "Nine")]

            txn = Transaction(id="t", employee_id="9", type="cash", amount=5, date="2024-01-01")
            assert await client.set_transactions([txn]) == [txn]
            assert await client.list_transactions("9") == [txn]
            assert await client.list_transactions("1") == []

    @pytest.mark.asyncio
    async def test_export_and_import(self, app):
        """Exported files can be imported back through the client."""
        transport = httpx.ASGITransport(app=app)
        async with BalancesClient("http://test", transport=transport) as client:
            await client.update_sales_entry("3", "cash", 40)
            path = await client.export("client-backup")
            assert path is not None and path.endswith("client-backup.json")

            await client.update_sales_entry("3", "cash", 0)
            assert await client.import_file(path) is True
            sales, _ = await client.calculate_totals()
            assert sales.cash == 40

    @pytest.mark.asyncio
    async def test_invalid_field_raises_validation_error(self, app):
        """Unknown sales fields surface as BalancesValidationError."""
        transport = httpx.ASGITransport(app=app)
        async with BalancesClient("http://test", transport=transport) as client:
            with pytest.raises(BalancesValidationError):
                await client.update_sales_entry("1", "employeeId", 1)
