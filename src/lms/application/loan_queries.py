"""Application services: read-only loan queries.

None of these handlers stage or commit anything.  Overdue-ness is always
computed from the dates as of the clock's today, never read from the
stored status.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date

from lms.application.clock import Clock
from lms.application.dto import (
    BorrowerDTO,
    BorrowerStatisticsDTO,
    DailyStatisticsDTO,
    ItemPopularityDTO,
    LoanDTO,
    borrower_to_dto,
    loan_to_dto,
)
from lms.domain.exceptions import BorrowerNotFound, ItemNotFound, ValidationError
from lms.domain.model.loan import LoanStatus
from lms.domain.repository.unit_of_work import UnitOfWorkFactory

_log = logging.getLogger(__name__)


class CurrentLoanForItemHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, item_id: str) -> LoanDTO | None:
        """Return the open loan for an item, or None when it is not on loan."""
        today = self._clock.today()
        with self._uow_factory() as uow:
            loan = uow.loans.get_open_for_item(item_id)
            return loan_to_dto(loan, uow, today) if loan else None

    def is_on_loan(self, item_id: str) -> bool:
        with self._uow_factory() as uow:
            return uow.loans.get_open_for_item(item_id) is not None

    def current_borrower(self, item_id: str) -> BorrowerDTO | None:
        with self._uow_factory() as uow:
            loan = uow.loans.get_open_for_item(item_id)
            if loan is None:
                return None
            borrower = uow.borrowers.get_by_id(loan.borrower_id)
            return borrower_to_dto(borrower) if borrower else None


class BorrowerLoansHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, borrower_id: str) -> list[LoanDTO]:
        """Open loans currently held by the borrower."""
        _log.debug("Fetching open loans for borrower %s", borrower_id)
        today = self._clock.today()
        with self._uow_factory() as uow:
            self._require_borrower(uow, borrower_id)
            return [
                loan_to_dto(loan, uow, today)
                for loan in uow.loans.list_open_for_borrower(borrower_id)
            ]

    def history(self, borrower_id: str) -> list[LoanDTO]:
        """Every loan the borrower ever had, newest first."""
        _log.debug("Fetching loan history for borrower %s", borrower_id)
        today = self._clock.today()
        with self._uow_factory() as uow:
            self._require_borrower(uow, borrower_id)
            return [
                loan_to_dto(loan, uow, today)
                for loan in uow.loans.list_for_borrower(borrower_id)
            ]

    @staticmethod
    def _require_borrower(uow, borrower_id: str) -> None:
        if uow.borrowers.get_by_id(borrower_id) is None:
            raise BorrowerNotFound(f"Borrower '{borrower_id}' not found")


class ItemHistoryHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, item_id: str) -> list[LoanDTO]:
        today = self._clock.today()
        with self._uow_factory() as uow:
            if uow.items.get_by_id(item_id) is None:
                raise ItemNotFound(f"Item '{item_id}' not found")
            return [loan_to_dto(loan, uow, today) for loan in uow.loans.list_for_item(item_id)]


class OverdueLoansHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, as_of: date | None = None) -> list[LoanDTO]:
        """Open loans past their due date as of ``as_of`` (default today)."""
        as_of = as_of or self._clock.today()
        with self._uow_factory() as uow:
            return [
                loan_to_dto(loan, uow, as_of)
                for loan in uow.loans.list_open()
                if loan.is_overdue(as_of)
            ]


class BorrowerStatisticsHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, borrower_id: str) -> BorrowerStatisticsDTO:
        today = self._clock.today()
        with self._uow_factory() as uow:
            borrower = uow.borrowers.get_by_id(borrower_id)
            if borrower is None:
                raise BorrowerNotFound(f"Borrower '{borrower_id}' not found")
            history = uow.loans.list_for_borrower(borrower_id)

        open_loans = [loan for loan in history if not loan.closed]
        return BorrowerStatisticsDTO(
            borrower_id=borrower.id,
            name=borrower.name,
            membership_status=borrower.membership_status.value,
            member_since=borrower.member_since,
            total_loans=borrower.total_loans,
            currently_held=len(open_loans),
            currently_overdue=sum(1 for loan in open_loans if loan.is_overdue(today)),
            returned=sum(1 for loan in history if loan.status == LoanStatus.RETURNED),
        )


class DailyStatisticsHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, as_of: date | None = None) -> DailyStatisticsDTO:
        """Loans opened and returned on ``as_of``, plus current totals."""
        as_of = as_of or self._clock.today()
        with self._uow_factory() as uow:
            loans = uow.loans.list_all()

        open_loans = [loan for loan in loans if not loan.closed]
        return DailyStatisticsDTO(
            date=as_of,
            opened=sum(1 for loan in loans if loan.loan_date == as_of),
            returned=sum(1 for loan in loans if loan.return_date == as_of),
            currently_overdue=sum(1 for loan in open_loans if loan.is_overdue(as_of)),
            active=len(open_loans),
        )


class BorrowersWithOverdueLoansHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, as_of: date | None = None) -> list[BorrowerDTO]:
        """Borrowers holding at least one loan overdue as of ``as_of``."""
        as_of = as_of or self._clock.today()
        with self._uow_factory() as uow:
            late_ids = {
                loan.borrower_id for loan in uow.loans.list_open() if loan.is_overdue(as_of)
            }
            borrowers = [uow.borrowers.get_by_id(borrower_id) for borrower_id in late_ids]

        found = [b for b in borrowers if b is not None]
        return [borrower_to_dto(b) for b in sorted(found, key=lambda b: (len(b.id), b.id))]


class MostBorrowedItemsHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, limit: int = 10) -> list[ItemPopularityDTO]:
        """Items ranked by how many loans they have ever had.

        Items that were never lent, or have since been removed, are left
        out.  Ties are broken by item id.
        """
        if limit < 1:
            raise ValidationError("Limit must be at least 1")

        with self._uow_factory() as uow:
            counts = Counter(loan.item_id for loan in uow.loans.list_all())
            items = {item.id: item for item in uow.items.list_all()}

        ranked = sorted(
            (item_id for item_id in counts if item_id in items),
            key=lambda item_id: (-counts[item_id], len(item_id), item_id),
        )
        return [
            ItemPopularityDTO(
                item_id=item_id,
                title=items[item_id].title,
                loan_count=counts[item_id],
            )
            for item_id in ranked[:limit]
        ]
