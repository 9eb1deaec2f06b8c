"""Balance ledger records.

Each record serializes to the camelCase JSON shape used by the storage slot
and by exported files:

- Employee: {id, name}
- SalesEntry: {employeeId, syriaTel, mtn, cash}
- OpeningBalance / RemainingBalance: {syriaTel, mtn}
- SalesByType: {syriaTel, mtn, cash}
- EmployeeTransaction: {id, employeeId, type, amount, date, description}
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

Number = int | float


class SalesField(str, Enum):
    """Fields of a sales entry that can be updated."""

    SYRIATEL = "syriaTel"
    MTN = "mtn"
    CASH = "cash"

    @property
    def attr(self) -> str:
        """Dataclass attribute backing this field."""
        return _FIELD_ATTRS[self]


_FIELD_ATTRS = {
    SalesField.SYRIATEL: "syria_tel",
    SalesField.MTN: "mtn",
    SalesField.CASH: "cash",
}


class TransactionType(str, Enum):
    """Kind of credit or cash movement recorded for an employee."""

    SYRIATEL = "syriaTel"
    MTN = "mtn"
    CASH = "cash"


@dataclass(slots=True)
class Employee:
    """An employee selling credit."""

    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Employee:
        return cls(id=str(payload["id"]), name=payload["name"])


@dataclass(slots=True)
class SalesEntry:
    """What one employee sold today, per credit type plus cash."""

    employee_id: str
    syria_tel: Number | None = 0
    mtn: Number | None = 0
    cash: Number | None = 0

    def with_field(self, field: SalesField, value: Number) -> SalesEntry:
        """Return a copy with exactly one field replaced."""
        return replace(self, **{field.attr: value})

    def to_dict(self) -> dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "syriaTel": self.syria_tel,
            "mtn": self.mtn,
            "cash": self.cash,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> SalesEntry:
        return cls(
            employee_id=str(payload["employeeId"]),
            syria_tel=payload.get("syriaTel", 0),
            mtn=payload.get("mtn", 0),
            cash=payload.get("cash", 0),
        )

    @classmethod
    def zero(cls, employee_id: str) -> SalesEntry:
        return cls(employee_id=employee_id, syria_tel=0, mtn=0, cash=0)


@dataclass(slots=True, frozen=True)
class OpeningBalance:
    """Credit available at the start of the day."""

    syria_tel: Number = 100000
    mtn: Number = 100000

    def to_dict(self) -> dict[str, Any]:
        return {"syriaTel": self.syria_tel, "mtn": self.mtn}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> OpeningBalance:
        return cls(syria_tel=payload["syriaTel"], mtn=payload["mtn"])


@dataclass(slots=True, frozen=True)
class RemainingBalance:
    """Opening balance minus what has been sold."""

    syria_tel: Number = 0
    mtn: Number = 0

    def to_dict(self) -> dict[str, Any]:
        return {"syriaTel": self.syria_tel, "mtn": self.mtn}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> RemainingBalance:
        return cls(syria_tel=payload["syriaTel"], mtn=payload["mtn"])


@dataclass(slots=True, frozen=True)
class SalesByType:
    """Sales summed over all employees."""

    syria_tel: Number = 0
    mtn: Number = 0
    cash: Number = 0

    def to_dict(self) -> dict[str, Any]:
        return {"syriaTel": self.syria_tel, "mtn": self.mtn, "cash": self.cash}

    @classmethod
    def from_entries(cls, entries: list[SalesEntry]) -> SalesByType:
        """Sum every entry field-wise; missing amounts count as zero."""
        syria_tel = mtn = cash = 0
        for entry in entries:
            syria_tel += entry.syria_tel or 0
            mtn += entry.mtn or 0
            cash += entry.cash or 0
        return cls(syria_tel=syria_tel, mtn=mtn, cash=cash)


@dataclass(slots=True)
class EmployeeTransaction:
    """A historical credit or cash movement tied to an employee."""

    id: str
    employee_id: str
    type: TransactionType
    amount: Number
    date: str
    description: str = ""

    def __post_init__(self) -> None:
        self.type = TransactionType(self.type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "type": self.type.value,
            "amount": self.amount,
            "date": self.date,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> EmployeeTransaction:
        return cls(
            id=str(payload["id"]),
            employee_id=str(payload["employeeId"]),
            type=payload["type"],
            amount=payload["amount"],
            date=payload["date"],
            description=payload.get("description", ""),
        )


def coerce_field(field: SalesField | str) -> SalesField:
    """Resolve a sales field by wire name; unknown names raise ValueError."""
    if isinstance(field, SalesField):
        return field
    try:
        return SalesField(field)
    except ValueError:
        raise ValueError(
            f"Unknown sales field '{field}', expected one of "
            f"{[f.value for f in SalesField]}"
        ) from None


__all__ = [
    "Employee",
    "EmployeeTransaction",
    "Number",
    "OpeningBalance",
    "RemainingBalance",
    "SalesByType",
    "SalesEntry",
    "SalesField",
    "TransactionType",
    "coerce_field",
]
