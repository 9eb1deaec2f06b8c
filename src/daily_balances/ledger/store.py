"""Balance Ledger Store - in-memory daily balance state with persistence.

The store owns six pieces of state:
- employees and their per-employee sales entries
- the opening balance for SyriaTel and MTN credit
- derived totals: sales by type and remaining balances
- the employee transaction history

Derived totals are recomputed synchronously inside every mutation that
touches sales entries or the opening balance, before the store lock is
released, so readers never observe stale totals.

Persistence goes through two collaborators:
- a SlotStore holding one JSON snapshot under a fixed key (save/load)
- a FileCollaborator writing and reading exported JSON files (export/import)

Failures in either path are logged and swallowed; callers get a bool (or
None for exports) instead of an exception.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from ..errors import InvalidPayloadError
from ..persistence.file_export import FileCollaborator, JsonFileExporter
from ..persistence.slots import MemorySlotStore, SlotStore
from .defaults import DEFAULT_OPENING_BALANCE, default_employees, default_transactions
from .models import (
    Employee,
    EmployeeTransaction,
    Number,
    OpeningBalance,
    RemainingBalance,
    SalesByType,
    SalesEntry,
    SalesField,
    coerce_field,
)

logger = logging.getLogger(__name__)

STORAGE_KEY = "dailyBalancesData"
EXPORT_FILENAME_PREFIX = "mtnsyr-data"

# Fields a slot snapshot must carry; employees are optional for older saves
LOAD_REQUIRED_FIELDS = ("openingBalance", "salesEntries", "remainingBalances", "transactions")
IMPORT_REQUIRED_FIELDS = ("openingBalance", "salesEntries", "transactions", "employees")


class StoreEvent(str, Enum):
    """Change notifications delivered to store listeners."""

    OPENING_BALANCE_SET = "opening_balance.set"
    SALES_ENTRY_UPDATED = "sales_entry.updated"
    SALES_ENTRIES_PROVISIONED = "sales_entries.provisioned"
    TOTALS_CALCULATED = "totals.calculated"
    EMPLOYEES_REPLACED = "employees.replaced"
    TRANSACTIONS_REPLACED = "transactions.replaced"
    DATA_LOADED = "data.loaded"
    DATA_IMPORTED = "data.imported"


StoreListener = Callable[[StoreEvent], None]


@dataclass(slots=True)
class _StagedSnapshot:
    """A fully parsed snapshot waiting to be committed."""

    opening_balance: OpeningBalance
    sales_entries: list[SalesEntry]
    transactions: list[EmployeeTransaction]
    sales_by_type: SalesByType
    remaining_balances: RemainingBalance
    stored_remaining_balances: RemainingBalance | None = None
    employees: list[Employee] | None = None


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _derive_totals(
    entries: list[SalesEntry],
    opening: OpeningBalance,
) -> tuple[SalesByType, RemainingBalance]:
    """Sales by type and remaining balances for the given entries.

    Raises TypeError for non-numeric amounts; callers derive before assigning
    so a failure leaves the store unchanged.
    """
    totals = SalesByType.from_entries(entries)
    remaining = RemainingBalance(
        syria_tel=opening.syria_tel - totals.syria_tel,
        mtn=opening.mtn - totals.mtn,
    )
    return totals, remaining


def _as_opening_balance(value: OpeningBalance | Mapping[str, Any]) -> OpeningBalance:
    if isinstance(value, OpeningBalance):
        return value
    return OpeningBalance.from_dict(dict(value))


def _as_employees(values: Iterable[Employee | Mapping[str, Any]]) -> list[Employee]:
    return [
        replace(v) if isinstance(v, Employee) else Employee.from_dict(dict(v))
        for v in values
    ]


def _as_transactions(
    values: Iterable[EmployeeTransaction | Mapping[str, Any]],
) -> list[EmployeeTransaction]:
    return [
        replace(v) if isinstance(v, EmployeeTransaction) else EmployeeTransaction.from_dict(dict(v))
        for v in values
    ]


def _stage_snapshot(payload: Any, required: tuple[str, ...]) -> _StagedSnapshot:
    """Validate required fields and parse a snapshot without touching the store."""
    if not isinstance(payload, Mapping):
        raise InvalidPayloadError(list(required))

    missing = [name for name in required if payload.get(name) is None]
    if missing:
        raise InvalidPayloadError(missing)

    remaining = payload.get("remainingBalances")
    employees = payload.get("employees")

    opening_balance = OpeningBalance.from_dict(payload["openingBalance"])
    sales_entries = [SalesEntry.from_dict(e) for e in payload["salesEntries"]]
    sales_by_type, remaining_balances = _derive_totals(sales_entries, opening_balance)

    return _StagedSnapshot(
        opening_balance=opening_balance,
        sales_entries=sales_entries,
        transactions=[EmployeeTransaction.from_dict(t) for t in payload["transactions"]],
        sales_by_type=sales_by_type,
        remaining_balances=remaining_balances,
        stored_remaining_balances=(
            RemainingBalance.from_dict(remaining) if remaining is not None else None
        ),
        employees=[Employee.from_dict(e) for e in employees] if employees is not None else None,
    )


class BalanceLedgerStore:
    """Daily balance state for one shop.

    Example:
        store = BalanceLedgerStore(slots=SQLiteSlotStore("data/balances.db"))

        store.set_opening_balance(OpeningBalance(syria_tel=100000, mtn=100000))
        store.update_sales_entry("1", "syriaTel", 5000)
        store.remaining_balances  # RemainingBalance(syria_tel=95000, mtn=100000)

        store.save_data()
        path = store.export_data()
        ok = await store.import_data(path)
    """

    def __init__(
        self,
        slots: SlotStore | None = None,
        files: FileCollaborator | None = None,
        *,
        storage_key: str = STORAGE_KEY,
        employees: Iterable[Employee | Mapping[str, Any]] | None = None,
        transactions: Iterable[EmployeeTransaction | Mapping[str, Any]] | None = None,
        opening_balance: OpeningBalance | Mapping[str, Any] | None = None,
        today: Callable[[], date] | None = None,
    ):
        """Create a store seeded with default (or given) data.

        Args:
            slots: Slot store for save_data/load_data (default: in-memory)
            files: File collaborator for export_data/import_data
            storage_key: Slot key snapshots are saved under
            employees: Initial employees (default: seed employees)
            transactions: Initial transaction history (default: seed history)
            opening_balance: Initial opening balance (default: 100000 each)
            today: Clock used for export dates (default: current UTC date)
        """
        self._slots: SlotStore = slots if slots is not None else MemorySlotStore()
        self._files: FileCollaborator = files if files is not None else JsonFileExporter()
        self._storage_key = storage_key
        self._today = today or _utc_today

        self._lock = threading.RLock()
        self._listeners: list[StoreListener] = []

        self._employees = (
            _as_employees(employees) if employees is not None else default_employees()
        )
        self._transactions = (
            _as_transactions(transactions) if transactions is not None else default_transactions()
        )
        self._opening_balance = (
            _as_opening_balance(opening_balance)
            if opening_balance is not None
            else DEFAULT_OPENING_BALANCE
        )
        self._sales_entries: list[SalesEntry] = []
        self._sales_by_type = SalesByType()
        self._remaining_balances = RemainingBalance()

        with self._lock:
            self._provision_sales_entries()
            self._recalculate()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def employees(self) -> list[Employee]:
        with self._lock:
            return [replace(e) for e in self._employees]

    @property
    def opening_balance(self) -> OpeningBalance:
        return self._opening_balance

    @property
    def sales_entries(self) -> list[SalesEntry]:
        with self._lock:
            return [replace(e) for e in self._sales_entries]

    @property
    def remaining_balances(self) -> RemainingBalance:
        return self._remaining_balances

    @property
    def sales_by_type(self) -> SalesByType:
        return self._sales_by_type

    @property
    def transactions(self) -> list[EmployeeTransaction]:
        with self._lock:
            return [replace(t) for t in self._transactions]

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def slots(self) -> SlotStore:
        return self._slots

    def transactions_for(self, employee_id: str) -> list[EmployeeTransaction]:
        """Transaction history of a single employee, in recorded order."""
        with self._lock:
            return [replace(t) for t in self._transactions if t.employee_id == employee_id]

    def snapshot(self) -> dict[str, Any]:
        """Full JSON-ready state, derived totals included."""
        with self._lock:
            return {
                "openingBalance": self._opening_balance.to_dict(),
                "salesEntries": [e.to_dict() for e in self._sales_entries],
                "remainingBalances": self._remaining_balances.to_dict(),
                "salesByType": self._sales_by_type.to_dict(),
                "transactions": [t.to_dict() for t in self._transactions],
                "employees": [e.to_dict() for e in self._employees],
            }

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Store listener failed handling {event.value}")

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def calculate_totals(self) -> SalesByType:
        """Recompute sales by type and remaining balances from current state."""
        with self._lock:
            totals = self._recalculate()
            self._notify(StoreEvent.TOTALS_CALCULATED)
            return totals

    def _recalculate(self) -> SalesByType:
        totals, remaining = _derive_totals(self._sales_entries, self._opening_balance)
        self._sales_by_type = totals
        self._remaining_balances = remaining
        return totals

    def _announce(self, *events: StoreEvent) -> None:
        """Notify listeners of a mutation whose totals are already current."""
        for event in events:
            self._notify(event)
        self._notify(StoreEvent.TOTALS_CALCULATED)

    def _provision_sales_entries(self) -> bool:
        """Give every employee a zero entry when there are no entries at all."""
        if not self._employees or self._sales_entries:
            return False
        self._sales_entries = [SalesEntry.zero(e.id) for e in self._employees]
        logger.debug(f"Provisioned {len(self._sales_entries)} empty sales entries")
        return True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_opening_balance(self, balance: OpeningBalance | Mapping[str, Any]) -> None:
        """Replace the opening balance wholesale."""
        opening = _as_opening_balance(balance)
        with self._lock:
            totals, remaining = _derive_totals(self._sales_entries, opening)
            self._opening_balance = opening
            self._sales_by_type = totals
            self._remaining_balances = remaining
            self._announce(StoreEvent.OPENING_BALANCE_SET)

    def update_sales_entry(
        self,
        employee_id: str,
        field: SalesField | str,
        value: Number,
    ) -> bool:
        """Replace one field of one employee's sales entry.

        An unknown employee id changes nothing and is not an error.

        Returns:
            True if an entry matched and was updated
        """
        sales_field = coerce_field(field)
        with self._lock:
            matched = False
            entries = []
            for entry in self._sales_entries:
                if entry.employee_id == employee_id:
                    entry = entry.with_field(sales_field, value)
                    matched = True
                entries.append(entry)

            if not matched:
                logger.debug(f"No sales entry for employee '{employee_id}', nothing updated")
                return False

            totals, remaining = _derive_totals(entries, self._opening_balance)
            self._sales_entries = entries
            self._sales_by_type = totals
            self._remaining_balances = remaining
            self._announce(StoreEvent.SALES_ENTRY_UPDATED)
            return True

    def set_employees(self, employees: Iterable[Employee | Mapping[str, Any]]) -> None:
        """Replace the employee list. Existing sales entries are kept as they are."""
        replacement = _as_employees(employees)
        with self._lock:
            self._employees = replacement
            if self._provision_sales_entries():
                self._recalculate()
                self._announce(
                    StoreEvent.EMPLOYEES_REPLACED,
                    StoreEvent.SALES_ENTRIES_PROVISIONED,
                )
            else:
                self._notify(StoreEvent.EMPLOYEES_REPLACED)

    def set_transactions(
        self,
        transactions: Iterable[EmployeeTransaction | Mapping[str, Any]],
    ) -> None:
        """Replace the transaction history."""
        replacement = _as_transactions(transactions)
        with self._lock:
            self._transactions = replacement
            self._notify(StoreEvent.TRANSACTIONS_REPLACED)

    def _commit(self, staged: _StagedSnapshot, event: StoreEvent) -> None:
        """Apply a staged snapshot; every value was derived while staging."""
        cached = staged.stored_remaining_balances
        if cached is not None and cached != staged.remaining_balances:
            logger.warning(
                "Stored remaining balances disagree with sales entries; "
                f"using recomputed values (stored={cached.to_dict()}, "
                f"recomputed={staged.remaining_balances.to_dict()})"
            )

        with self._lock:
            self._opening_balance = staged.opening_balance
            self._sales_entries = staged.sales_entries
            self._transactions = staged.transactions
            if staged.employees is not None:
                self._employees = staged.employees
            self._sales_by_type = staged.sales_by_type
            self._remaining_balances = staged.remaining_balances

            # Provisioned entries are all zero, so the staged totals still hold
            if self._provision_sales_entries():
                self._announce(event, StoreEvent.SALES_ENTRIES_PROVISIONED)
            else:
                self._announce(event)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_data(self) -> bool:
        """Write the current state to the storage slot.

        Returns:
            True if the snapshot was written
        """
        try:
            snapshot = self.snapshot()
            payload = {
                "openingBalance": snapshot["openingBalance"],
                "salesEntries": snapshot["salesEntries"],
                "remainingBalances": snapshot["remainingBalances"],
                "transactions": snapshot["transactions"],
                "employees": snapshot["employees"],
            }
            self._slots.set(self._storage_key, json.dumps(payload, ensure_ascii=False))
        except Exception as e:
            logger.error(f"Error saving data: {e}")
            return False

        logger.info("Data saved successfully")
        return True

    def load_data(self) -> bool:
        """Replace state with the snapshot in the storage slot, if there is one.

        The snapshot is parsed completely before anything is committed, so a
        malformed snapshot leaves the store untouched.

        Returns:
            True if a snapshot was found and applied
        """
        try:
            raw = self._slots.get(self._storage_key)
            if raw is None:
                logger.debug(f"Storage slot '{self._storage_key}' is empty, nothing to load")
                return False
            staged = _stage_snapshot(json.loads(raw), LOAD_REQUIRED_FIELDS)
        except Exception as e:
            logger.error(f"Error loading data: {e}")
            return False

        self._commit(staged, StoreEvent.DATA_LOADED)
        logger.info("Data loaded successfully")
        return True

    def export_data(self, filename: str | None = None) -> Path | None:
        """Export the current state, derived totals and date included, to a JSON file.

        Args:
            filename: Target file name (default: mtnsyr-data-<YYYY-MM-DD>)

        Returns:
            Path of the written file, or None if the export failed
        """
        try:
            today = self._today().isoformat()
            data = {"date": today, **self.snapshot()}
            path = self._files.export_to_json_file(
                data, filename or f"{EXPORT_FILENAME_PREFIX}-{today}"
            )
        except Exception as e:
            logger.error(f"Error exporting data: {e}")
            return None

        logger.info(f"Data exported to {path}")
        return path

    async def import_data(self, file: str | Path) -> bool:
        """Replace state with the contents of an exported JSON file.

        Nothing is changed unless the file parses and carries openingBalance,
        salesEntries, transactions and employees.

        Returns:
            True if the file was imported
        """
        try:
            payload = await self._files.import_from_json_file(file)
            staged = _stage_snapshot(payload, IMPORT_REQUIRED_FIELDS)
        except InvalidPayloadError as e:
            logger.error(f"Invalid data format in imported file: {e}")
            return False
        except Exception as e:
            logger.error(f"Error importing data: {e}")
            return False

        self._commit(staged, StoreEvent.DATA_IMPORTED)
        logger.info("Data imported successfully")
        return True

    def close(self) -> None:
        """Release the storage slot backend."""
        self._slots.close()


__all__ = [
    "BalanceLedgerStore",
    "StoreEvent",
    "StoreListener",
    "STORAGE_KEY",
    "EXPORT_FILENAME_PREFIX",
    "IMPORT_REQUIRED_FIELDS",
    "LOAD_REQUIRED_FIELDS",
]
