"""Abstract repository for LoanRecord aggregate.

There is deliberately no ``remove``: loan records are append-only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from lms.domain.model.loan import LoanRecord


class LoanRepository(ABC):

    @abstractmethod
    def get_by_id(self, loan_id: int) -> LoanRecord | None:
        """Return a loan by its ID, or None if not found."""

    @abstractmethod
    def get_open_for_item(self, item_id: str) -> LoanRecord | None:
        """Return the single open loan for an item, or None."""

    @abstractmethod
    def list_open(self) -> list[LoanRecord]:
        """Return every loan that is not yet closed."""

    @abstractmethod
    def list_open_for_borrower(self, borrower_id: str) -> list[LoanRecord]:
        """Return the open loans held by a borrower."""

    @abstractmethod
    def list_for_borrower(self, borrower_id: str) -> list[LoanRecord]:
        """Return a borrower's full loan history, newest first."""

    @abstractmethod
    def list_for_item(self, item_id: str) -> list[LoanRecord]:
        """Return an item's full loan history, newest first."""

    @abstractmethod
    def list_all(self) -> list[LoanRecord]:
        """Return every loan record."""

    @abstractmethod
    def save(self, loan: LoanRecord) -> None:
        """Stage a new or updated loan; assigns an ID to new loans."""
