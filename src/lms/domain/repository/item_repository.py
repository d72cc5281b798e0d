"""Abstract repository for InventoryItem aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations live in the infrastructure
layer and are always reached through a ``UnitOfWork``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from lms.domain.model.item import InventoryItem


class ItemRepository(ABC):

    @abstractmethod
    def get_by_id(self, item_id: str) -> InventoryItem | None:
        """Return an item by its ID, or None if not found."""

    @abstractmethod
    def get_by_external_id(self, external_id: str) -> InventoryItem | None:
        """Return an item by its catalog identifier, or None."""

    @abstractmethod
    def list_all(self) -> list[InventoryItem]:
        """Return every item in the inventory."""

    @abstractmethod
    def next_id(self) -> str:
        """Return an id that no item, current or removed, has ever used."""

    @abstractmethod
    def save(self, item: InventoryItem) -> None:
        """Stage a new or updated item for the next commit."""

    @abstractmethod
    def remove(self, item: InventoryItem) -> None:
        """Stage the removal of an item for the next commit."""
