"""Abstract repository for Borrower aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from lms.domain.model.borrower import Borrower


class BorrowerRepository(ABC):

    @abstractmethod
    def get_by_id(self, borrower_id: str) -> Borrower | None:
        """Return a borrower by ID, or None if not found."""

    @abstractmethod
    def get_by_email(self, email: str) -> Borrower | None:
        """Return a borrower by email (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Borrower]:
        """Return every registered borrower."""

    @abstractmethod
    def next_id(self) -> str:
        """Return an id that no borrower, current or removed, has ever used."""

    @abstractmethod
    def save(self, borrower: Borrower) -> None:
        """Stage a new or updated borrower for the next commit."""

    @abstractmethod
    def remove(self, borrower: Borrower) -> None:
        """Stage the removal of a borrower for the next commit."""
