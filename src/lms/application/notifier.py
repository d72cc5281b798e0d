"""Outbound port for due-date reminders."""

from __future__ import annotations

from abc import ABC, abstractmethod

from lms.application.dto import LoanDTO


class ReminderNotifier(ABC):

    @abstractmethod
    def notify_due_soon(self, loan: LoanDTO, email: str) -> None:
        """Tell a borrower that a loan is due soon.  May raise."""
