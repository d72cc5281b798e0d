"""Unit tests for the penalty calculator."""

from datetime import date, timedelta

from lms.domain.model.value_objects import Money
from lms.domain.service import penalty_calculator as pc

DUE = date(2024, 3, 15)


class TestIsOverdue:

    def test_not_overdue_on_due_date(self):
        assert not pc.is_overdue(DUE, DUE, closed=False)

    def test_not_overdue_before_due_date(self):
        assert not pc.is_overdue(DUE, DUE - timedelta(days=3), closed=False)

    def test_overdue_day_after_due_date(self):
        assert pc.is_overdue(DUE, DUE + timedelta(days=1), closed=False)

    def test_closed_loan_is_never_overdue(self):
        assert not pc.is_overdue(DUE, DUE + timedelta(days=30), closed=True)


class TestLateFee:

    def test_zero_on_or_before_due_date(self):
        assert pc.late_fee(DUE, DUE) == Money.zero()
        assert pc.late_fee(DUE, DUE - timedelta(days=10)) == Money.zero()

    def test_half_unit_per_day(self):
        assert pc.late_fee(DUE, DUE + timedelta(days=1)) == Money.of("0.50")
        assert pc.late_fee(DUE, DUE + timedelta(days=6)) == Money.of("3.00")

    def test_days_overdue_never_negative(self):
        assert pc.days_overdue(DUE, DUE - timedelta(days=5)) == 0
        assert pc.days_overdue(DUE, DUE + timedelta(days=5)) == 5

    def test_deterministic(self):
        as_of = DUE + timedelta(days=9)
        assert pc.late_fee(DUE, as_of) == pc.late_fee(DUE, as_of)

    def test_monotonically_non_decreasing(self):
        fees = [pc.late_fee(DUE, DUE + timedelta(days=n)).amount for n in range(0, 40)]
        assert all(a <= b for a, b in zip(fees, fees[1:]))

    def test_later_due_date_reduces_fee(self):
        returned = DUE + timedelta(days=10)
        extended_due = DUE + timedelta(days=7)
        assert pc.late_fee(extended_due, returned).amount < pc.late_fee(DUE, returned).amount
        assert pc.late_fee(extended_due, returned) == Money.of("1.50")
