"""Application services: inventory and borrower listings (query)."""

from __future__ import annotations

from lms.application.dto import BorrowerDTO, ItemDTO, borrower_to_dto, item_to_dto
from lms.domain.repository.unit_of_work import UnitOfWorkFactory


class ShowInventoryHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self) -> list[ItemDTO]:
        with self._uow_factory() as uow:
            items = uow.items.list_all()
        return [item_to_dto(item) for item in sorted(items, key=lambda i: (len(i.id), i.id))]


class ListBorrowersHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self) -> list[BorrowerDTO]:
        with self._uow_factory() as uow:
            borrowers = uow.borrowers.list_all()
        return [borrower_to_dto(b) for b in sorted(borrowers, key=lambda b: (len(b.id), b.id))]
