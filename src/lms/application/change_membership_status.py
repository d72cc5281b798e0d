"""Application service: Change Membership Status use case."""

from __future__ import annotations

import logging

from lms.application.dto import BorrowerDTO, borrower_to_dto
from lms.application.retry import retry_on_conflict
from lms.domain.exceptions import BorrowerNotFound, ValidationError
from lms.domain.model.borrower import MembershipStatus
from lms.domain.repository.unit_of_work import UnitOfWorkFactory

_log = logging.getLogger(__name__)


class ChangeMembershipStatusHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, borrower_id: str, status: str) -> BorrowerDTO:
        try:
            new_status = MembershipStatus(status.upper())
        except ValueError as exc:
            raise ValidationError(f"Unknown membership status: {status!r}") from exc

        return retry_on_conflict(
            lambda: self._change(borrower_id, new_status),
            on_exhausted=lambda: ValidationError(
                f"Borrower '{borrower_id}' changed concurrently; try again later"
            ),
        )

    def _change(self, borrower_id: str, status: MembershipStatus) -> BorrowerDTO:
        with self._uow_factory() as uow:
            borrower = uow.borrowers.get_by_id(borrower_id)
            if borrower is None:
                raise BorrowerNotFound(f"Borrower '{borrower_id}' not found")
            borrower.change_status(status)
            uow.borrowers.save(borrower)
            uow.commit()

        _log.info("Borrower %s membership is now %s", borrower.id, status.value)
        return borrower_to_dto(borrower)
