"""Borrower aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class MembershipStatus(Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"
    PENDING = "PENDING"


@dataclass
class Borrower:
    """A registered person who may borrow items.

    ``total_loans`` only ever goes up, once per opened loan.  The other
    loan statistics (held, overdue, returned) are derived from the loan
    records on read and are not stored here.
    """

    id: str
    name: str
    email: str
    membership_status: MembershipStatus = MembershipStatus.ACTIVE
    total_loans: int = 0
    member_since: date = field(default_factory=date.today)
    version: int = 0

    @property
    def is_eligible(self) -> bool:
        return self.membership_status == MembershipStatus.ACTIVE

    def record_loan(self) -> None:
        self.total_loans += 1

    def change_status(self, status: MembershipStatus) -> None:
        self.membership_status = status
