"""Application service: Register Borrower use case."""

from __future__ import annotations

import logging

from lms.application.clock import Clock
from lms.application.dto import BorrowerDTO, borrower_to_dto
from lms.application.retry import retry_on_conflict
from lms.domain.exceptions import ValidationError
from lms.domain.model.borrower import Borrower
from lms.domain.repository.unit_of_work import UnitOfWorkFactory

_log = logging.getLogger(__name__)


class RegisterBorrowerHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def handle(self, name: str, email: str) -> BorrowerDTO:
        """Register a new, ACTIVE borrower with a unique email address."""
        if not name or not name.strip():
            raise ValidationError("Borrower name is required")
        if not email or "@" not in email:
            raise ValidationError(f"Invalid email address: {email!r}")

        return retry_on_conflict(
            lambda: self._register(name.strip(), email.strip()),
            on_exhausted=lambda: ValidationError("Borrowers changed concurrently; try again"),
        )

    def _register(self, name: str, email: str) -> BorrowerDTO:
        with self._uow_factory() as uow:
            if uow.borrowers.get_by_email(email) is not None:
                raise ValidationError(f"Borrower with email {email} already exists")

            borrower = Borrower(
                id=uow.borrowers.next_id(),
                name=name,
                email=email,
                member_since=self._clock.today(),
            )
            uow.borrowers.save(borrower)
            uow.commit()

        _log.info("Registered borrower %s '%s'", borrower.id, borrower.name)
        return borrower_to_dto(borrower)
