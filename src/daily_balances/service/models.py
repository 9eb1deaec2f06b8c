"""Pydantic models backing the balances API.

Field names are snake_case in Python and camelCase on the wire, matching
the JSON written to the storage slot and to exported files.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CreditField = Literal["syriaTel", "mtn", "cash"]

# Integer amounts must stay integers in saved and exported JSON
Amount = int | float


class WireModel(BaseModel):
    """Base model using camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Dump to the camelCase dict shape the store understands."""
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Ledger Records
# ---------------------------------------------------------------------------


class EmployeeModel(WireModel):
    """An employee selling credit."""

    id: str
    name: str


class SalesEntryModel(WireModel):
    """One employee's sales for the day."""

    employee_id: str
    syria_tel: Amount | None = 0
    mtn: Amount | None = 0
    cash: Amount | None = 0


class OpeningBalanceModel(WireModel):
    """Credit available at the start of the day."""

    syria_tel: Amount
    mtn: Amount


class RemainingBalanceModel(WireModel):
    """Opening balance minus sales, per credit type."""

    syria_tel: Amount
    mtn: Amount


class SalesByTypeModel(WireModel):
    """Sales summed over all employees."""

    syria_tel: Amount
    mtn: Amount
    cash: Amount


class TransactionModel(WireModel):
    """A historical credit or cash movement."""

    id: str
    employee_id: str
    type: CreditField
    amount: Amount
    date: str = Field(..., description="ISO date, YYYY-MM-DD")
    description: str = ""


class BalancesSnapshot(WireModel):
    """Complete store state, derived totals included."""

    opening_balance: OpeningBalanceModel
    sales_entries: list[SalesEntryModel]
    remaining_balances: RemainingBalanceModel
    sales_by_type: SalesByTypeModel
    transactions: list[TransactionModel]
    employees: list[EmployeeModel]


# ---------------------------------------------------------------------------
# Requests / Responses
# ---------------------------------------------------------------------------


class SalesEntryUpdate(WireModel):
    """Replace one field of an employee's sales entry."""

    field: CreditField
    value: Amount


class SalesEntryUpdateResponse(WireModel):
    """Outcome of a sales entry update; unknown employees are not an error."""

    updated: bool
    remaining_balances: RemainingBalanceModel
    sales_by_type: SalesByTypeModel


class TotalsResponse(WireModel):
    """Freshly calculated totals."""

    sales_by_type: SalesByTypeModel
    remaining_balances: RemainingBalanceModel


class StorageResponse(WireModel):
    """Outcome of a save or load against the storage slot."""

    ok: bool
    storage_key: str


class ExportRequest(WireModel):
    """Export the current state to a JSON file."""

    filename: str | None = Field(default=None, max_length=255)


class ExportResponse(WireModel):
    """Where the export was written; path is None if it failed."""

    ok: bool
    path: str | None = None


class ImportRequest(WireModel):
    """Import state from a JSON file readable by the service."""

    path: str = Field(..., min_length=1)


class ImportResponse(WireModel):
    """Whether the file was valid and applied."""

    imported: bool


__all__ = [
    "BalancesSnapshot",
    "Amount",
    "CreditField",
    "EmployeeModel",
    "ExportRequest",
    "ExportResponse",
    "ImportRequest",
    "ImportResponse",
    "OpeningBalanceModel",
    "RemainingBalanceModel",
    "SalesByTypeModel",
    "SalesEntryModel",
    "SalesEntryUpdate",
    "SalesEntryUpdateResponse",
    "StorageResponse",
    "TotalsResponse",
    "TransactionModel",
]
