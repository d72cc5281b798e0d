"""Domain service: Lending.

Coordinates the cross-aggregate transitions of a loan: the LoanRecord,
the InventoryItem it references and the Borrower who holds it change
together.  The service only stages changes through the repositories it
was given; the caller owns the unit of work and decides when to commit.

Each operation validates every precondition before mutating anything, so
a rejected operation leaves all staged entities untouched.
"""

from __future__ import annotations

import logging
from datetime import date

from lms.domain.exceptions import (
    BorrowerHasOverdueLoans,
    BorrowerNotEligible,
    BorrowerNotFound,
    ItemNotFound,
    ItemUnavailable,
    LoanMismatch,
    LoanNotFound,
    NoActiveLoan,
)
from lms.domain.model.loan import DEFAULT_EXTENSION_DAYS, LoanRecord
from lms.domain.repository.borrower_repository import BorrowerRepository
from lms.domain.repository.item_repository import ItemRepository
from lms.domain.repository.loan_repository import LoanRepository

_log = logging.getLogger(__name__)


class LendingService:

    def __init__(
        self,
        item_repo: ItemRepository,
        borrower_repo: BorrowerRepository,
        loan_repo: LoanRepository,
    ) -> None:
        self._item_repo = item_repo
        self._borrower_repo = borrower_repo
        self._loan_repo = loan_repo

    def open_loan(self, item_id: str, borrower_id: str, today: date) -> LoanRecord:
        """Lend an item to a borrower.

        Preconditions, first failure wins:
          1. the item exists and is AVAILABLE;
          2. the borrower exists and is ACTIVE;
          3. none of the borrower's open loans is overdue as of ``today``.
        """
        # Phase 1: load and validate
        item = self._item_repo.get_by_id(item_id)
        if item is None:
            raise ItemNotFound(f"Item '{item_id}' not found")
        if not item.is_available:
            raise ItemUnavailable(
                f"Item '{item.title}' is not available for loan "
                f"(currently {item.availability.value})"
            )

        borrower = self._borrower_repo.get_by_id(borrower_id)
        if borrower is None:
            raise BorrowerNotFound(f"Borrower '{borrower_id}' not found")
        if not borrower.is_eligible:
            raise BorrowerNotEligible(
                f"Borrower '{borrower.name}' is not active "
                f"(membership {borrower.membership_status.value})"
            )

        overdue = [
            loan
            for loan in self._loan_repo.list_open_for_borrower(borrower_id)
            if loan.is_overdue(today)
        ]
        if overdue:
            raise BorrowerHasOverdueLoans(
                f"Borrower '{borrower.name}' has {len(overdue)} overdue loan(s) "
                f"and cannot borrow until they are returned"
            )

        # Phase 2: mutate and stage
        loan = LoanRecord.open(item_id=item.id, borrower_id=borrower.id, loan_date=today)
        item.check_out()
        borrower.record_loan()

        self._loan_repo.save(loan)
        self._item_repo.save(item)
        self._borrower_repo.save(borrower)

        _log.info(
            "Opened loan #%s: item %s -> borrower %s, due %s",
            loan.id, item.id, borrower.id, loan.due_date,
        )
        return loan

    def close_loan(self, item_id: str, borrower_id: str, today: date) -> LoanRecord:
        """Take an item back from the borrower who holds it."""
        loan = self._loan_repo.get_open_for_item(item_id)
        if loan is None:
            raise NoActiveLoan(f"No active loan for item '{item_id}'")
        if loan.borrower_id != borrower_id:
            raise LoanMismatch(
                f"Item '{item_id}' is on loan to another borrower, not '{borrower_id}'"
            )

        item = self._item_repo.get_by_id(item_id)
        if item is None:
            raise ItemNotFound(f"Item '{item_id}' not found")

        loan.close(today)
        item.check_in()

        self._loan_repo.save(loan)
        self._item_repo.save(item)

        if loan.late_fee.is_zero:
            _log.info("Closed loan #%s on time", loan.id)
        else:
            _log.info("Closed loan #%s late, fee %s", loan.id, loan.late_fee)
        return loan

    def extend_loan(
        self,
        loan_id: int,
        today: date,
        days: int = DEFAULT_EXTENSION_DAYS,
    ) -> LoanRecord:
        """Grant extra days on an open loan that is not yet overdue."""
        loan = self._loan_repo.get_by_id(loan_id)
        if loan is None:
            raise LoanNotFound(f"Loan #{loan_id} not found")

        loan.extend(days, as_of=today)
        self._loan_repo.save(loan)

        _log.info("Extended loan #%s by %d day(s), now due %s", loan.id, days, loan.due_date)
        return loan
