"""Seed data for a freshly created store."""

from __future__ import annotations

from .models import Employee, EmployeeTransaction, OpeningBalance, TransactionType

DEFAULT_OPENING_BALANCE = OpeningBalance(syria_tel=100000, mtn=100000)

_EMPLOYEES = (
    ("1", "أحمد عبد الله"),
    ("2", "سارة خالد"),
    ("3", "محمد علي"),
    ("4", "ليلى عمر"),
)

_TRANSACTIONS = (
    ("1", "1", TransactionType.SYRIATEL, 5000, "2023-05-01", "طلب رصيد سيرياتيل"),
    ("2", "1", TransactionType.MTN, 3000, "2023-05-01", "طلب رصيد ام تي ان"),
    ("3", "1", TransactionType.CASH, 8000, "2023-05-01", "دفعة نقدية"),
    ("4", "2", TransactionType.SYRIATEL, 4000, "2023-05-02", "طلب رصيد سيرياتيل"),
    ("5", "3", TransactionType.MTN, 6000, "2023-05-02", "طلب رصيد ام تي ان"),
)


def default_employees() -> list[Employee]:
    """Fresh copy of the seed employee list."""
    return [Employee(id=emp_id, name=name) for emp_id, name in _EMPLOYEES]


def default_transactions() -> list[EmployeeTransaction]:
    """Fresh copy of the seed transaction history."""
    return [
        EmployeeTransaction(
            id=txn_id,
            employee_id=employee_id,
            type=txn_type,
            amount=amount,
            date=date,
            description=description,
        )
        for txn_id, employee_id, txn_type, amount, date, description in _TRANSACTIONS
    ]


__all__ = ["DEFAULT_OPENING_BALANCE", "default_employees", "default_transactions"]
