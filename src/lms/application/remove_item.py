"""Application service: Remove Item use case.

An item can leave the inventory only while nothing is on loan.  Its loan
history stays behind.
"""

from __future__ import annotations

import logging

from lms.application.retry import retry_on_conflict
from lms.domain.exceptions import InvalidOperation, ItemNotFound
from lms.domain.repository.unit_of_work import UnitOfWorkFactory

_log = logging.getLogger(__name__)


class RemoveItemHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, item_id: str) -> None:
        retry_on_conflict(
            lambda: self._remove(item_id),
            on_exhausted=lambda: InvalidOperation(
                f"Item '{item_id}' changed concurrently; try again later"
            ),
        )

    def _remove(self, item_id: str) -> None:
        with self._uow_factory() as uow:
            item = uow.items.get_by_id(item_id)
            if item is None:
                raise ItemNotFound(f"Item '{item_id}' not found")
            if item.is_on_loan or uow.loans.get_open_for_item(item_id) is not None:
                raise InvalidOperation(f"Cannot remove item '{item.title}' while it is on loan")
            uow.items.remove(item)
            uow.commit()
        _log.info("Removed item %s", item_id)
