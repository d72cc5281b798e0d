"""InventoryItem aggregate — a physical thing that can be lent out.

Catalog fields (title, external identifier) are carried for display only.
The lending core cares about ``availability``, and that field is changed
exclusively through ``check_out()`` and ``check_in()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from lms.domain.exceptions import InvalidOperation, ItemUnavailable


class Availability(Enum):
    AVAILABLE = "AVAILABLE"
    ON_LOAN = "ON_LOAN"
    LOST = "LOST"
    DAMAGED = "DAMAGED"
    IN_REPAIR = "IN_REPAIR"
    RESERVED = "RESERVED"
    WITHDRAWN = "WITHDRAWN"


@dataclass
class InventoryItem:
    """Aggregate root for a lendable item.

    Invariant (held together with the loan records):
    - ``availability == ON_LOAN`` iff exactly one open loan references
      this item.

    ``version`` is the optimistic-concurrency counter.  It is 0 for an item
    that has never been committed and is bumped by the store on every write.
    """

    id: str
    title: str
    external_id: str
    availability: Availability = Availability.AVAILABLE
    version: int = 0

    @property
    def is_available(self) -> bool:
        return self.availability == Availability.AVAILABLE

    @property
    def is_on_loan(self) -> bool:
        return self.availability == Availability.ON_LOAN

    def check_out(self) -> None:
        """Transition AVAILABLE -> ON_LOAN."""
        if not self.is_available:
            raise ItemUnavailable(
                f"Item '{self.title}' is not available for loan "
                f"(currently {self.availability.value})"
            )
        self.availability = Availability.ON_LOAN

    def check_in(self) -> None:
        """Transition ON_LOAN -> AVAILABLE."""
        if not self.is_on_loan:
            raise InvalidOperation(
                f"Item '{self.title}' is not on loan "
                f"(currently {self.availability.value})"
            )
        self.availability = Availability.AVAILABLE
