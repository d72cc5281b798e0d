"""LoanRecord aggregate — one lending episode of one item to one borrower.

Loan records are append-only history: they are created by ``LoanRecord.open``,
mutated by ``extend``, ``close`` and ``mark_overdue``, and never deleted.

``status`` is advisory.  Every decision that depends on lateness re-derives
it from the dates through the penalty calculator, so a loan whose status
still says OPEN (because the sweep has not run yet) is treated as overdue
as soon as its due date has passed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum

from lms.domain.exceptions import InvalidOperation
from lms.domain.model.value_objects import Money
from lms.domain.service import penalty_calculator


class LoanStatus(Enum):
    OPEN = "OPEN"
    RETURNED = "RETURNED"
    OVERDUE = "OVERDUE"
    LOST = "LOST"
    EXTENDED = "EXTENDED"


TERMINAL_STATUSES = frozenset({LoanStatus.RETURNED, LoanStatus.LOST})

# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
LOAN_PERIOD = timedelta(days=14)
DEFAULT_EXTENSION_DAYS = 7


@dataclass
class LoanRecord:
    """Aggregate root for a single loan.

    Use the ``LoanRecord.open()`` factory for new loans.  The ``__init__``
    is intentionally simple so the store can reconstitute persisted loans
    without re-validating.
    """

    id: int | None
    item_id: str
    borrower_id: str
    loan_date: date
    due_date: date
    return_date: date | None = None
    closed: bool = False
    status: LoanStatus = LoanStatus.OPEN
    late_fee: Money = field(default_factory=Money.zero)
    version: int = 0

    # --- Factory (used for NEW loans only) ------------------------------------

    @staticmethod
    def open(item_id: str, borrower_id: str, loan_date: date) -> LoanRecord:
        return LoanRecord(
            id=None,
            item_id=item_id,
            borrower_id=borrower_id,
            loan_date=loan_date,
            due_date=loan_date + LOAN_PERIOD,
        )

    # --- Queries --------------------------------------------------------------

    def is_overdue(self, as_of: date) -> bool:
        return penalty_calculator.is_overdue(self.due_date, as_of, self.closed)

    def days_overdue(self, as_of: date) -> int:
        if self.closed:
            return 0
        return penalty_calculator.days_overdue(self.due_date, as_of)

    def is_due_within(self, as_of: date, days: int) -> bool:
        """Open, not yet overdue, and due no later than ``as_of + days``."""
        return (
            not self.closed
            and not self.is_overdue(as_of)
            and self.due_date <= as_of + timedelta(days=days)
        )

    # --- State transitions ----------------------------------------------------

    def close(self, return_date: date) -> None:
        """Transition OPEN|OVERDUE|EXTENDED -> RETURNED.

        The late fee is fixed here, once, from the gap between the current
        due date and ``return_date``.
        """
        if self.closed or self.status in TERMINAL_STATUSES:
            raise InvalidOperation(f"Loan #{self.id} is already closed")

        if self.is_overdue(return_date):
            self.late_fee = penalty_calculator.late_fee(self.due_date, return_date)

        self.return_date = return_date
        self.closed = True
        self.status = LoanStatus.RETURNED

    def extend(self, days: int, as_of: date) -> None:
        """Push the due date forward; the loan becomes EXTENDED.

        A loan must be returned, not extended, once it is overdue.
        """
        if self.closed or self.status in TERMINAL_STATUSES:
            raise InvalidOperation("Cannot extend a returned loan")
        if self.is_overdue(as_of):
            raise InvalidOperation("Cannot extend an overdue loan; return it first")
        if days <= 0:
            raise InvalidOperation("Extension must be at least one day")

        self.due_date = self.due_date + timedelta(days=days)
        self.status = LoanStatus.EXTENDED

    def mark_overdue(self, as_of: date) -> bool:
        """Set status OVERDUE if the loan is open and past due.

        Returns True only when the status actually changed, so repeated
        calls for the same day are no-ops.
        """
        if not self.is_overdue(as_of):
            return False
        if self.status == LoanStatus.OVERDUE:
            return False
        self.status = LoanStatus.OVERDUE
        return True
