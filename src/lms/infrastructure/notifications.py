"""Reminder notifier that only writes to the log.

Delivering mail is out of scope; a reminder is recorded as a log line.
"""

from __future__ import annotations

import logging

from lms.application.dto import LoanDTO
from lms.application.notifier import ReminderNotifier

_log = logging.getLogger(__name__)


class LoggingNotifier(ReminderNotifier):

    def notify_due_soon(self, loan: LoanDTO, email: str) -> None:
        _log.info(
            "Reminder: '%s' (loan #%s) is due on %s for %s <%s>",
            loan.item_title, loan.id, loan.due_date, loan.borrower_name, email,
        )
