"""Application service: Due-Date Reminders use case.

Best-effort and read-only.  Finds open loans that are not overdue yet but
fall due within ``REMINDER_WINDOW_DAYS`` and hands each one to the
notifier.  A failing notification is logged and skipped.
"""

from __future__ import annotations

import logging
from datetime import date

from lms.application.clock import Clock
from lms.application.dto import loan_to_dto
from lms.application.notifier import ReminderNotifier
from lms.domain.repository.unit_of_work import UnitOfWorkFactory

_log = logging.getLogger(__name__)

REMINDER_WINDOW_DAYS = 1


class SendDueRemindersHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        notifier: ReminderNotifier,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._notifier = notifier

    def handle(self, as_of: date | None = None) -> int:
        """Send reminders; return how many were delivered to the notifier."""
        as_of = as_of or self._clock.today()

        with self._uow_factory() as uow:
            due_soon = [
                (loan_to_dto(loan, uow, as_of), uow.borrowers.get_by_id(loan.borrower_id))
                for loan in uow.loans.list_open()
                if loan.is_due_within(as_of, REMINDER_WINDOW_DAYS)
            ]

        sent = 0
        for dto, borrower in due_soon:
            if borrower is None:
                _log.warning("No borrower '%s' for loan #%s", dto.borrower_id, dto.id)
                continue
            try:
                self._notifier.notify_due_soon(dto, borrower.email)
            except Exception:
                _log.exception("Reminder for loan #%s failed", dto.id)
                continue
            sent += 1

        _log.info("Sent %d of %d due-date reminder(s)", sent, len(due_soon))
        return sent
