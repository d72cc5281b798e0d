"""Application service: Open Loan use case.

Lends an item to a borrower.  The loan record, the item's availability and
the borrower's loan counter are committed together in one unit of work.

Two concurrent opens of the same item both stage a write of that item; the
second commit fails the version check, is retried once against fresh state
and then sees the item ON_LOAN.
"""

from __future__ import annotations

from lms.application.clock import Clock
from lms.application.dto import LoanDTO, loan_to_dto
from lms.application.retry import retry_on_conflict
from lms.domain.exceptions import ItemUnavailable
from lms.domain.repository.unit_of_work import UnitOfWorkFactory
from lms.domain.service.lending_service import LendingService


class OpenLoanHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, item_id: str, borrower_id: str) -> LoanDTO:
        return retry_on_conflict(
            lambda: self._open(item_id, borrower_id),
            on_exhausted=lambda: ItemUnavailable(
                f"Item '{item_id}' is being lent concurrently; try again later"
            ),
        )

    def _open(self, item_id: str, borrower_id: str) -> LoanDTO:
        today = self._clock.today()
        with self._uow_factory() as uow:
            svc = LendingService(uow.items, uow.borrowers, uow.loans)
            loan = svc.open_loan(item_id, borrower_id, today)
            uow.commit()
            return loan_to_dto(loan, uow, today)
