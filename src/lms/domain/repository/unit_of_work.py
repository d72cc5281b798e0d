"""Abstract unit of work — one atomic commit across all three aggregates.

Usage::

    with uow_factory() as uow:
        item = uow.items.get_by_id(item_id)
        ...
        uow.items.save(item)
        uow.commit()

Entities handed out by the repositories are private copies.  Nothing is
visible to other units of work until ``commit()`` succeeds, and leaving
the ``with`` block without committing discards every staged change.

``commit()`` is all-or-nothing: if any staged entity was changed by
someone else since it was read, it raises ``ConcurrencyConflict`` and
writes nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from lms.domain.repository.borrower_repository import BorrowerRepository
from lms.domain.repository.item_repository import ItemRepository
from lms.domain.repository.loan_repository import LoanRepository


class UnitOfWork(ABC):

    items: ItemRepository
    borrowers: BorrowerRepository
    loans: LoanRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Atomically write every staged change, or raise ConcurrencyConflict."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard staged changes.  Safe to call after a commit."""


UnitOfWorkFactory = Callable[[], UnitOfWork]
