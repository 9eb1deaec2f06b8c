"""Unit tests for balance ledger records."""

import pytest

from daily_balances.ledger.defaults import (
    DEFAULT_OPENING_BALANCE,
    default_employees,
    default_transactions,
)
from daily_balances.ledger.models import (
    Employee,
    EmployeeTransaction,
    OpeningBalance,
    RemainingBalance,
    SalesByType,
    SalesEntry,
    SalesField,
    TransactionType,
    coerce_field,
)


class TestSalesEntry:
    """Tests for SalesEntry serialization and field updates."""

    def test_to_dict_uses_camel_case(self):
        """Wire keys match the stored JSON shape."""
        entry = SalesEntry(employee_id="1", syria_tel=5000, mtn=0, cash=250)
        assert entry.to_dict() == {
            "employeeId": "1",
            "syriaTel": 5000,
            "mtn": 0,
            "cash": 250,
        }

    def test_from_dict_defaults_missing_amounts(self):
        """Missing amounts default to zero."""
        entry = SalesEntry.from_dict({"employeeId": "7"})
        assert entry == SalesEntry(employee_id="7", syria_tel=0, mtn=0, cash=0)

    def test_from_dict_keeps_explicit_null(self):
        """An explicit null is kept as None rather than invented."""
        entry = SalesEntry.from_dict({"employeeId": "7", "mtn": None})
        assert entry.mtn is None

    def test_from_dict_coerces_numeric_employee_id(self):
        """Numeric ids from hand-edited files become strings."""
        assert SalesEntry.from_dict({"employeeId": 3}).employee_id == "3"

    def test_with_field_replaces_only_that_field(self):
        """with_field returns a copy with one field changed."""
        entry = SalesEntry(employee_id="1", syria_tel=10, mtn=20, cash=30)
        updated = entry.with_field(SalesField.MTN, 99)

        assert updated == SalesEntry(employee_id="1", syria_tel=10, mtn=99, cash=30)
        assert entry.mtn == 20

    def test_zero_entry(self):
        """zero() creates an all-zero entry."""
        assert SalesEntry.zero("4").to_dict() == {
            "employeeId": "4",
            "syriaTel": 0,
            "mtn": 0,
            "cash": 0,
        }


class TestSalesByType:
    """Tests for the sales total derivation."""

    def test_empty_entries_sum_to_zero(self):
        """No entries means zero totals."""
        assert SalesByType.from_entries([]) == SalesByType(0, 0, 0)

    def test_sums_each_field(self):
        """Each total is the sum of the matching field."""
        entries = [
            SalesEntry(employee_id="1", syria_tel=5000, mtn=0, cash=0),
            SalesEntry(employee_id="2", syria_tel=0, mtn=3000, cash=1000),
            SalesEntry(employee_id="3", syria_tel=250, mtn=750, cash=5),
        ]
        totals = SalesByType.from_entries(entries)
        assert totals == SalesByType(syria_tel=5250, mtn=3750, cash=1005)

    def test_none_amounts_count_as_zero(self):
        """Null amounts do not break the sum."""
        entries = [
            SalesEntry(employee_id="1", syria_tel=None, mtn=100, cash=None),
            SalesEntry(employee_id="2", syria_tel=40, mtn=None, cash=7),
        ]
        assert SalesByType.from_entries(entries) == SalesByType(40, 100, 7)

    def test_fractional_amounts(self):
        """Fractional amounts are summed as given."""
        entries = [
            SalesEntry(employee_id="1", syria_tel=0.5),
            SalesEntry(employee_id="2", syria_tel=1.25),
        ]
        assert SalesByType.from_entries(entries).syria_tel == pytest.approx(1.75)


class TestBalances:
    """Tests for opening and remaining balances."""

    def test_opening_balance_defaults(self):
        """Opening balance defaults to 100000 of each credit type."""
        assert OpeningBalance() == OpeningBalance(syria_tel=100000, mtn=100000)
        assert DEFAULT_OPENING_BALANCE.to_dict() == {"syriaTel": 100000, "mtn": 100000}

    def test_opening_balance_round_trip(self):
        """Opening balance survives dict conversion."""
        balance = OpeningBalance(syria_tel=123, mtn=456)
        assert OpeningBalance.from_dict(balance.to_dict()) == balance

    def test_opening_balance_requires_both_fields(self):
        """Missing a credit type is an error."""
        with pytest.raises(KeyError):
            OpeningBalance.from_dict({"syriaTel": 1})

    def test_remaining_balance_has_no_cash(self):
        """Remaining balance only tracks credit types."""
        assert set(RemainingBalance().to_dict()) == {"syriaTel", "mtn"}

    def test_balances_are_immutable(self):
        """Balance singletons are replaced, never edited."""
        balance = OpeningBalance()
        with pytest.raises(AttributeError):
            balance.mtn = 5  # type: ignore[misc]


class TestEmployeeTransaction:
    """Tests for transaction history records."""

    def test_type_is_coerced_to_enum(self):
        """String types are converted to TransactionType."""
        txn = EmployeeTransaction(
            id="9", employee_id="1", type="cash", amount=10, date="2024-01-01"
        )
        assert txn.type is TransactionType.CASH

    def test_unknown_type_rejected(self):
        """Only syriaTel, mtn and cash are valid types."""
        with pytest.raises(ValueError):
            EmployeeTransaction(
                id="9", employee_id="1", type="bitcoin", amount=10, date="2024-01-01"
            )

    def test_dict_round_trip(self):
        """Transactions survive dict conversion."""
        payload = {
            "id": "1",
            "employeeId": "2",
            "type": "mtn",
            "amount": 3000,
            "date": "2023-05-01",
            "description": "top-up",
        }
        assert EmployeeTransaction.from_dict(payload).to_dict() == payload

    def test_description_optional(self):
        """Description defaults to an empty string."""
        txn = EmployeeTransaction.from_dict(
            {"id": "1", "employeeId": "2", "type": "mtn", "amount": 1, "date": "2023-05-01"}
        )
        assert txn.description == ""


class TestCoerceField:
    """Tests for sales field name resolution."""

    @pytest.mark.parametrize("name", ["syriaTel", "mtn", "cash"])
    def test_known_names(self, name):
        """Wire names resolve to SalesField members."""
        assert coerce_field(name).value == name

    def test_enum_passthrough(self):
        """SalesField members are returned unchanged."""
        assert coerce_field(SalesField.CASH) is SalesField.CASH

    @pytest.mark.parametrize("name", ["employeeId", "syria_tel", "SYRIATEL", ""])
    def test_unknown_names_rejected(self, name):
        """Anything but the three amount fields is rejected."""
        with pytest.raises(ValueError, match="Unknown sales field"):
            coerce_field(name)


class TestSeedData:
    """Tests for default seed data."""

    def test_default_employees(self):
        """Four seed employees with ids 1-4."""
        employees = default_employees()
        assert [e.id for e in employees] == ["1", "2", "3", "4"]
        assert all(isinstance(e, Employee) and e.name for e in employees)

    def test_default_transactions(self):
        """Five seed transactions referencing seed employees."""
        transactions = default_transactions()
        assert [t.id for t in transactions] == ["1", "2", "3", "4", "5"]
        assert {t.employee_id for t in transactions} <= {"1", "2", "3", "4"}
        assert transactions[2].type is TransactionType.CASH
        assert transactions[2].amount == 8000

    def test_seed_lists_are_fresh_copies(self):
        """Mutating one seed list does not affect the next."""
        first = default_employees()
        first[0].name = "changed"
        assert default_employees()[0].name != "changed"
