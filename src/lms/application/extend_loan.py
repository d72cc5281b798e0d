"""Application service: Extend Loan use case."""

from __future__ import annotations

from lms.application.clock import Clock
from lms.application.dto import LoanDTO, loan_to_dto
from lms.application.retry import retry_on_conflict
from lms.domain.exceptions import InvalidOperation
from lms.domain.model.loan import DEFAULT_EXTENSION_DAYS
from lms.domain.repository.unit_of_work import UnitOfWorkFactory
from lms.domain.service.lending_service import LendingService


class ExtendLoanHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, loan_id: int, days: int = DEFAULT_EXTENSION_DAYS) -> LoanDTO:
        """Push a loan's due date forward by ``days``.

        Rejected for returned loans and for loans already past their due
        date; those must be returned first.
        """
        return retry_on_conflict(
            lambda: self._extend(loan_id, days),
            on_exhausted=lambda: InvalidOperation(
                f"Loan #{loan_id} changed concurrently; try again later"
            ),
        )

    def _extend(self, loan_id: int, days: int) -> LoanDTO:
        today = self._clock.today()
        with self._uow_factory() as uow:
            svc = LendingService(uow.items, uow.borrowers, uow.loans)
            loan = svc.extend_loan(loan_id, today, days=days)
            uow.commit()
            return loan_to_dto(loan, uow, today)
