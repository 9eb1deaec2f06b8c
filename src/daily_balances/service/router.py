"""FastAPI router for the balances service.

Implements the API endpoints for:
- Balances and totals (/balances/*)
- Employees and transaction history (/employees, /transactions)
- Storage slot persistence (/storage/*)
- JSON file export and import (/files/*)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ..ledger.store import BalanceLedgerStore
from .dependencies import get_store
from .models import (
    BalancesSnapshot,
    EmployeeModel,
    ExportRequest,
    ExportResponse,
    ImportRequest,
    ImportResponse,
    OpeningBalanceModel,
    RemainingBalanceModel,
    SalesByTypeModel,
    SalesEntryUpdate,
    SalesEntryUpdateResponse,
    StorageResponse,
    TotalsResponse,
    TransactionModel,
)

StoreDep = Annotated[BalanceLedgerStore, Depends(get_store)]


def _snapshot(store: BalanceLedgerStore) -> BalancesSnapshot:
    return BalancesSnapshot.model_validate(store.snapshot())


def _totals(store: BalanceLedgerStore) -> TotalsResponse:
    return TotalsResponse(
        sales_by_type=SalesByTypeModel.model_validate(store.sales_by_type.to_dict()),
        remaining_balances=RemainingBalanceModel.model_validate(
            store.remaining_balances.to_dict()
        ),
    )


def build_router() -> APIRouter:
    """Build the balances API router."""
    router = APIRouter()

    # -----------------------------------------------------------------------
    # Balances
    # -----------------------------------------------------------------------

    @router.get("/balances", response_model=BalancesSnapshot)
    def get_balances(store: StoreDep) -> BalancesSnapshot:
        """Current state with derived totals."""
        return _snapshot(store)

    @router.put("/balances/opening", response_model=BalancesSnapshot)
    def set_opening_balance(body: OpeningBalanceModel, store: StoreDep) -> BalancesSnapshot:
        """Replace the opening balance."""
        store.set_opening_balance(body.to_payload())
        return _snapshot(store)

    @router.patch(
        "/balances/sales/{employee_id}",
        response_model=SalesEntryUpdateResponse,
    )
    def update_sales_entry(
        employee_id: str,
        body: SalesEntryUpdate,
        store: StoreDep,
    ) -> SalesEntryUpdateResponse:
        """Replace one field of an employee's sales entry.

        Unknown employees leave the entries unchanged and report updated=false.
        """
        updated = store.update_sales_entry(employee_id, body.field, body.value)
        totals = _totals(store)
        return SalesEntryUpdateResponse(
            updated=updated,
            remaining_balances=totals.remaining_balances,
            sales_by_type=totals.sales_by_type,
        )

    @router.post("/balances/recalculate", response_model=TotalsResponse)
    def recalculate(store: StoreDep) -> TotalsResponse:
        """Recompute totals from the current sales entries."""
        store.calculate_totals()
        return _totals(store)

    # -----------------------------------------------------------------------
    # Employees & Transactions
    # -----------------------------------------------------------------------

    @router.get("/employees", response_model=list[EmployeeModel])
    def list_employees(store: StoreDep) -> list[EmployeeModel]:
        return [EmployeeModel.model_validate(e.to_dict()) for e in store.employees]

    @router.put("/employees", response_model=list[EmployeeModel])
    def replace_employees(
        body: list[EmployeeModel],
        store: StoreDep,
    ) -> list[EmployeeModel]:
        """Replace the employee list; existing sales entries are kept."""
        store.set_employees([e.to_payload() for e in body])
        return [EmployeeModel.model_validate(e.to_dict()) for e in store.employees]

    @router.get("/transactions", response_model=list[TransactionModel])
    def list_transactions(
        store: StoreDep,
        employee_id: str | None = Query(default=None),
    ) -> list[TransactionModel]:
        """Transaction history, optionally for one employee."""
        if employee_id is None:
            transactions = store.transactions
        else:
            transactions = store.transactions_for(employee_id)
        return [TransactionModel.model_validate(t.to_dict()) for t in transactions]

    @router.put("/transactions", response_model=list[TransactionModel])
    def replace_transactions(
        body: list[TransactionModel],
        store: StoreDep,
    ) -> list[TransactionModel]:
        store.set_transactions([t.to_payload() for t in body])
        return [TransactionModel.model_validate(t.to_dict()) for t in store.transactions]

    # -----------------------------------------------------------------------
    # Storage Slot
    # -----------------------------------------------------------------------

    @router.post("/storage/save", response_model=StorageResponse)
    def save(store: StoreDep) -> StorageResponse:
        """Write the current state to the storage slot."""
        return StorageResponse(ok=store.save_data(), storage_key=store.storage_key)

    @router.post("/storage/load", response_model=StorageResponse)
    def load(store: StoreDep) -> StorageResponse:
        """Replace the current state with the saved snapshot, if any."""
        return StorageResponse(ok=store.load_data(), storage_key=store.storage_key)

    # -----------------------------------------------------------------------
    # File Export / Import
    # -----------------------------------------------------------------------

    @router.post("/files/export", response_model=ExportResponse)
    def export_file(store: StoreDep, body: ExportRequest | None = None) -> ExportResponse:
        """Export the current state to a JSON file in the export directory."""
        path = store.export_data(body.filename if body else None)
        return ExportResponse(ok=path is not None, path=str(path) if path else None)

    @router.post("/files/import", response_model=ImportResponse)
    async def import_file(body: ImportRequest, store: StoreDep) -> ImportResponse:
        """Import a previously exported JSON file."""
        return ImportResponse(imported=await store.import_data(body.path))

    return router


__all__ = ["build_router"]
