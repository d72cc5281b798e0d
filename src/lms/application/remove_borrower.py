"""Application service: Remove Borrower use case.

A borrower holding an open loan cannot be removed.  Opening a loan writes
the borrower record, so a removal racing an open fails its version check
and is re-evaluated against the new loan.
"""

from __future__ import annotations

import logging

from lms.application.retry import retry_on_conflict
from lms.domain.exceptions import BorrowerNotFound, InvalidOperation
from lms.domain.repository.unit_of_work import UnitOfWorkFactory

_log = logging.getLogger(__name__)


class RemoveBorrowerHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, borrower_id: str) -> None:
        retry_on_conflict(
            lambda: self._remove(borrower_id),
            on_exhausted=lambda: InvalidOperation(
                f"Borrower '{borrower_id}' changed concurrently; try again later"
            ),
        )

    def _remove(self, borrower_id: str) -> None:
        with self._uow_factory() as uow:
            borrower = uow.borrowers.get_by_id(borrower_id)
            if borrower is None:
                raise BorrowerNotFound(f"Borrower '{borrower_id}' not found")
            held = uow.loans.list_open_for_borrower(borrower_id)
            if held:
                raise InvalidOperation(
                    f"Cannot remove borrower '{borrower.name}' while they hold "
                    f"{len(held)} open loan(s)"
                )
            uow.borrowers.remove(borrower)
            uow.commit()
        _log.info("Removed borrower %s", borrower_id)
