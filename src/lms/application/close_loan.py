"""Application service: Close Loan use case.

Takes an item back.  The late fee, if any, is fixed at this moment from
the loan's current due date and is never recomputed afterwards.
"""

from __future__ import annotations

from lms.application.clock import Clock
from lms.application.dto import LoanDTO, loan_to_dto
from lms.application.retry import retry_on_conflict
from lms.domain.exceptions import NoActiveLoan
from lms.domain.repository.unit_of_work import UnitOfWorkFactory
from lms.domain.service.lending_service import LendingService


class CloseLoanHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, item_id: str, borrower_id: str) -> LoanDTO:
        return retry_on_conflict(
            lambda: self._close(item_id, borrower_id),
            on_exhausted=lambda: NoActiveLoan(
                f"Loan for item '{item_id}' changed concurrently; try again later"
            ),
        )

    def _close(self, item_id: str, borrower_id: str) -> LoanDTO:
        today = self._clock.today()
        with self._uow_factory() as uow:
            svc = LendingService(uow.items, uow.borrowers, uow.loans)
            loan = svc.close_loan(item_id, borrower_id, today)
            uow.commit()
            return loan_to_dto(loan, uow, today)
