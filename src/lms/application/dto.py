"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from lms.domain.model.borrower import Borrower
from lms.domain.model.item import InventoryItem
from lms.domain.model.loan import LoanRecord
from lms.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class LoanDTO:
    """Output: a loan record as displayed to the user."""

    id: int
    item_id: str
    item_title: str
    borrower_id: str
    borrower_name: str
    loan_date: date
    due_date: date
    return_date: date | None
    status: str
    late_fee: str  # formatted, e.g. "3.00"
    is_overdue: bool
    days_overdue: int


@dataclass(frozen=True)
class ItemDTO:
    id: str
    title: str
    external_id: str
    availability: str


@dataclass(frozen=True)
class BorrowerDTO:
    id: str
    name: str
    email: str
    membership_status: str
    total_loans: int


@dataclass(frozen=True)
class BorrowerStatisticsDTO:
    """Output: per-borrower loan aggregate.

    Only ``total_loans`` is stored; the rest is counted from loan records.
    """

    borrower_id: str
    name: str
    membership_status: str
    member_since: date
    total_loans: int
    currently_held: int
    currently_overdue: int
    returned: int


@dataclass(frozen=True)
class ItemPopularityDTO:
    item_id: str
    title: str
    loan_count: int


@dataclass(frozen=True)
class DailyStatisticsDTO:
    date: date
    opened: int
    returned: int
    currently_overdue: int
    active: int


# --- Mapping ------------------------------------------------------------------


def loan_to_dto(loan: LoanRecord, uow: UnitOfWork, today: date) -> LoanDTO:
    """Build a LoanDTO, resolving item title and borrower name.

    Items and borrowers can be removed after their loans close, so missing
    references are shown as empty strings.
    """
    item = uow.items.get_by_id(loan.item_id)
    borrower = uow.borrowers.get_by_id(loan.borrower_id)
    return LoanDTO(
        id=loan.id,  # type: ignore[arg-type]
        item_id=loan.item_id,
        item_title=item.title if item else "",
        borrower_id=loan.borrower_id,
        borrower_name=borrower.name if borrower else "",
        loan_date=loan.loan_date,
        due_date=loan.due_date,
        return_date=loan.return_date,
        status=loan.status.value,
        late_fee=str(loan.late_fee),
        is_overdue=loan.is_overdue(today),
        days_overdue=loan.days_overdue(today),
    )


def item_to_dto(item: InventoryItem) -> ItemDTO:
    return ItemDTO(
        id=item.id,
        title=item.title,
        external_id=item.external_id,
        availability=item.availability.value,
    )


def borrower_to_dto(borrower: Borrower) -> BorrowerDTO:
    return BorrowerDTO(
        id=borrower.id,
        name=borrower.name,
        email=borrower.email,
        membership_status=borrower.membership_status.value,
        total_loans=borrower.total_loans,
    )
