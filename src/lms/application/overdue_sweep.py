"""Application service: Overdue Sweep use case.

Run once a day.  Every open loan whose due date has passed gets status
OVERDUE.  Nothing else on the loan is touched, and items and borrowers
are never written.

Each loan is updated in its own unit of work: the loan is re-read, the
overdue predicate is evaluated against that fresh copy, and the commit is
conditioned on the version read.  A close or extend that commits first
therefore either removes the loan from the sweep or makes the sweep's
commit fail, in which case the loan is skipped until the next run.
"""

from __future__ import annotations

import logging
from datetime import date

from lms.application.clock import Clock
from lms.domain.exceptions import ConcurrencyConflict
from lms.domain.model.loan import LoanStatus
from lms.domain.repository.unit_of_work import UnitOfWorkFactory

_log = logging.getLogger(__name__)


class RunOverdueSweepHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, as_of: date | None = None) -> int:
        """Mark past-due open loans OVERDUE; return how many changed."""
        as_of = as_of or self._clock.today()
        _log.info("Running overdue sweep as of %s", as_of)

        with self._uow_factory() as uow:
            candidates = [
                loan.id
                for loan in uow.loans.list_open()
                if loan.is_overdue(as_of) and loan.status != LoanStatus.OVERDUE
            ]

        transitioned = 0
        for loan_id in candidates:
            try:
                if self._mark_overdue(loan_id, as_of):
                    transitioned += 1
            except ConcurrencyConflict as exc:
                _log.warning("Skipping loan #%s, changed during sweep: %s", loan_id, exc)
            except Exception:
                _log.exception("Overdue sweep could not update loan #%s", loan_id)

        _log.info("Overdue sweep done: %d of %d candidate(s) marked", transitioned, len(candidates))
        return transitioned

    def _mark_overdue(self, loan_id: int, as_of: date) -> bool:
        with self._uow_factory() as uow:
            loan = uow.loans.get_by_id(loan_id)
            if loan is None or not loan.mark_overdue(as_of):
                return False
            uow.loans.save(loan)
            uow.commit()

        _log.warning(
            "Item %s borrowed by %s is overdue (due %s)",
            loan.item_id, loan.borrower_id, loan.due_date,
        )
        return True
