"""Unit tests for the InventoryItem and Borrower aggregates."""

import pytest

from lms.domain.exceptions import InvalidOperation, ItemUnavailable
from lms.domain.model.borrower import MembershipStatus
from lms.domain.model.item import Availability
from tests.fakes import make_borrower, make_item


class TestInventoryItemCheckOut:

    def test_available_item_goes_on_loan(self):
        item = make_item()
        item.check_out()
        assert item.availability == Availability.ON_LOAN
        assert item.is_on_loan

    def test_item_already_on_loan_rejected(self):
        item = make_item(availability=Availability.ON_LOAN)
        with pytest.raises(ItemUnavailable, match="not available"):
            item.check_out()

    @pytest.mark.parametrize(
        "availability",
        [Availability.LOST, Availability.DAMAGED, Availability.IN_REPAIR,
         Availability.RESERVED, Availability.WITHDRAWN],
    )
    def test_unlendable_states_rejected(self, availability):
        item = make_item(availability=availability)
        with pytest.raises(ItemUnavailable, match=availability.value):
            item.check_out()


class TestInventoryItemCheckIn:

    def test_on_loan_item_becomes_available(self):
        item = make_item(availability=Availability.ON_LOAN)
        item.check_in()
        assert item.availability == Availability.AVAILABLE

    def test_item_not_on_loan_rejected(self):
        item = make_item()
        with pytest.raises(InvalidOperation, match="not on loan"):
            item.check_in()


class TestBorrower:

    def test_only_active_borrowers_are_eligible(self):
        assert make_borrower().is_eligible
        for status in MembershipStatus:
            if status != MembershipStatus.ACTIVE:
                assert not make_borrower(membership_status=status).is_eligible

    def test_record_loan_increments_total(self):
        borrower = make_borrower()
        borrower.record_loan()
        borrower.record_loan()
        assert borrower.total_loans == 2
