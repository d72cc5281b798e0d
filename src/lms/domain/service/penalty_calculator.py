"""Penalty calculator — overdue predicate and late-fee arithmetic.

Every function here is a pure function of its arguments.  Nothing reads
the clock: the caller always passes the date it wants the answer for,
which keeps fee computation and the overdue sweep repeatable.

Fees are always measured against the loan's *current* due date.  A loan
extended several times is therefore charged from its final due date only.
"""

from __future__ import annotations

from datetime import date

from lms.domain.model.value_objects import Money

UNIT_FEE = Money.of("0.50")  # per day past the due date


def is_overdue(due_date: date, as_of: date, closed: bool) -> bool:
    """An open loan is overdue once ``as_of`` is strictly after its due date."""
    return not closed and as_of > due_date


def days_overdue(due_date: date, as_of: date) -> int:
    return max(0, (as_of - due_date).days)


def late_fee(due_date: date, as_of: date) -> Money:
    """Fee owed for returning on ``as_of`` a loan due on ``due_date``.

    Zero when ``as_of <= due_date``; grows by ``UNIT_FEE`` per day after.
    """
    return UNIT_FEE * days_overdue(due_date, as_of)
