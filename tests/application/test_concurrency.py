"""Concurrent use of the lending handlers against one shared store.

Threads are released together by a barrier so their reads overlap; the
assertions hold whichever thread wins.
"""

import threading

import pytest

from lms.application.close_loan import CloseLoanHandler
from lms.application.extend_loan import ExtendLoanHandler
from lms.application.open_loan import OpenLoanHandler
from lms.application.overdue_sweep import RunOverdueSweepHandler
from lms.domain.exceptions import DomainException, ItemUnavailable
from lms.domain.model.item import Availability
from lms.domain.model.loan import LoanStatus
from lms.infrastructure.persistence.memory_store import BORROWER, ITEM, LOAN, InMemoryStore
from tests.fakes import FixedClock, factory_for, make_borrower, make_item


def _run_together(*calls):
    """Run each call in its own thread; return (results, errors) by index."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)
    errors = [None] * len(calls)

    def worker(index, call):
        barrier.wait()
        try:
            results[index] = call()
        except DomainException as exc:
            errors[index] = exc

    threads = [threading.Thread(target=worker, args=(i, c)) for i, c in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return results, errors


def _open_loans_for(store, item_id):
    return [loan for loan in store.read_all(LOAN) if loan.item_id == item_id and not loan.closed]


class TestConcurrentOpen:

    def test_two_borrowers_one_item(self):
        store = InMemoryStore(
            items=[make_item("1")],
            borrowers=[make_borrower("1"), make_borrower("2", "Bob")],
        )
        clock = FixedClock()
        handler = OpenLoanHandler(factory_for(store), clock)

        results, errors = _run_together(
            lambda: handler.handle("1", "1"),
            lambda: handler.handle("1", "2"),
        )

        assert sum(r is not None for r in results) == 1
        assert sum(isinstance(e, ItemUnavailable) for e in errors) == 1
        assert len(_open_loans_for(store, "1")) == 1
        assert store.read(ITEM, "1").availability == Availability.ON_LOAN

    @pytest.mark.parametrize("contenders", [4, 8])
    def test_many_contenders_one_winner(self, contenders):
        borrowers = [make_borrower(str(n), f"B{n}") for n in range(1, contenders + 1)]
        store = InMemoryStore(items=[make_item("1")], borrowers=borrowers)
        handler = OpenLoanHandler(factory_for(store), FixedClock())

        results, errors = _run_together(
            *[lambda b=b: handler.handle("1", b.id) for b in borrowers]
        )

        winners = [r for r in results if r is not None]
        assert len(winners) == 1
        assert all(isinstance(e, ItemUnavailable) for e in errors if e is not None)
        [loan] = _open_loans_for(store, "1")
        assert loan.borrower_id == winners[0].borrower_id
        # only the winner's counter moved
        counters = {b.id: store.read(BORROWER, b.id).total_loans for b in borrowers}
        assert sum(counters.values()) == 1
        assert counters[winners[0].borrower_id] == 1

    def test_disjoint_items_all_succeed(self):
        items = [make_item(str(n)) for n in range(1, 7)]
        borrowers = [make_borrower(str(n), f"B{n}") for n in range(1, 7)]
        store = InMemoryStore(items=items, borrowers=borrowers)
        handler = OpenLoanHandler(factory_for(store), FixedClock())

        results, errors = _run_together(
            *[lambda n=n: handler.handle(str(n), str(n)) for n in range(1, 7)]
        )

        assert errors == [None] * 6
        assert len({r.id for r in results}) == 6
        assert all(
            store.read(ITEM, str(n)).availability == Availability.ON_LOAN for n in range(1, 7)
        )


class TestConcurrentMaintenance:

    def _overdue_setup(self):
        store = InMemoryStore(items=[make_item("1")], borrowers=[make_borrower("1")])
        clock = FixedClock()
        loan = OpenLoanHandler(factory_for(store), clock).handle("1", "1")
        clock.advance(16)
        return store, clock, loan

    def test_close_and_sweep(self):
        store, clock, loan = self._overdue_setup()
        closer = CloseLoanHandler(factory_for(store), clock)
        sweep = RunOverdueSweepHandler(factory_for(store), clock)

        results, errors = _run_together(lambda: closer.handle("1", "1"), sweep.handle)

        assert errors == [None, None]
        stored = store.read(LOAN, loan.id)
        assert stored.closed
        assert stored.status == LoanStatus.RETURNED
        assert str(stored.late_fee) == "1.00"
        assert store.read(ITEM, "1").availability == Availability.AVAILABLE

    def test_close_and_extend(self):
        store = InMemoryStore(items=[make_item("1")], borrowers=[make_borrower("1")])
        clock = FixedClock()
        loan = OpenLoanHandler(factory_for(store), clock).handle("1", "1")
        clock.advance(16)  # two days past the original due date
        closer = CloseLoanHandler(factory_for(store), clock)
        extender = ExtendLoanHandler(factory_for(store), clock)

        results, errors = _run_together(
            lambda: closer.handle("1", "1"),
            lambda: extender.handle(loan.id),
        )

        # an overdue loan cannot be extended, so the close always wins
        assert errors[0] is None
        assert errors[1] is not None
        stored = store.read(LOAN, loan.id)
        assert stored.status == LoanStatus.RETURNED
        assert str(stored.late_fee) == "1.00"
