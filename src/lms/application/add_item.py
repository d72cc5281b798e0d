"""Application service: Add Item use case."""

from __future__ import annotations

import logging

from lms.application.dto import ItemDTO, item_to_dto
from lms.application.retry import retry_on_conflict
from lms.domain.exceptions import ValidationError
from lms.domain.model.item import InventoryItem
from lms.domain.repository.unit_of_work import UnitOfWorkFactory

_log = logging.getLogger(__name__)


class AddItemHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, title: str, external_id: str) -> ItemDTO:
        """Add a new item to the inventory, AVAILABLE for loan."""
        if not title or not title.strip():
            raise ValidationError("Item title is required")
        if not external_id or not external_id.strip():
            raise ValidationError("Item external identifier is required")

        return retry_on_conflict(
            lambda: self._add(title.strip(), external_id.strip()),
            on_exhausted=lambda: ValidationError("Inventory changed concurrently; try again"),
        )

    def _add(self, title: str, external_id: str) -> ItemDTO:
        with self._uow_factory() as uow:
            if uow.items.get_by_external_id(external_id) is not None:
                raise ValidationError(f"Item '{external_id}' already exists")

            item = InventoryItem(id=uow.items.next_id(), title=title, external_id=external_id)
            uow.items.save(item)
            uow.commit()

        _log.info("Added item %s '%s'", item.id, item.title)
        return item_to_dto(item)
