"""Tests for the best-effort due-date reminders."""

from datetime import timedelta

from lms.application.close_loan import CloseLoanHandler
from lms.application.due_reminders import SendDueRemindersHandler
from lms.application.open_loan import OpenLoanHandler
from lms.infrastructure.persistence.memory_store import LOAN, InMemoryStore
from tests.fakes import (
    TODAY,
    FailingNotifier,
    FixedClock,
    RecordingNotifier,
    factory_for,
    make_borrower,
    make_item,
)


def _setup():
    store = InMemoryStore(
        items=[make_item("1"), make_item("2", "Emma"), make_item("3", "Ulysses")],
        borrowers=[make_borrower("1"), make_borrower("2", "Bob")],
    )
    clock = FixedClock()
    opener = OpenLoanHandler(factory_for(store), clock)
    return store, clock, opener


def test_reminds_loans_due_tomorrow():
    store, clock, opener = _setup()
    loan = opener.handle("1", "1")
    clock.advance(13)
    notifier = RecordingNotifier()

    sent = SendDueRemindersHandler(factory_for(store), clock, notifier).handle()

    assert sent == 1
    assert notifier.sent == [(loan.id, "alice@example.org")]


def test_reminds_loans_due_today():
    store, clock, opener = _setup()
    opener.handle("1", "1")
    clock.advance(14)
    notifier = RecordingNotifier()
    assert SendDueRemindersHandler(factory_for(store), clock, notifier).handle() == 1


def test_skips_loans_due_later_or_overdue():
    store, clock, opener = _setup()
    opener.handle("1", "1")
    clock.advance(5)
    opener.handle("2", "2")
    # loan 1 is overdue, loan 2 is due in 4 days
    notifier = RecordingNotifier()

    sent = SendDueRemindersHandler(factory_for(store), clock, notifier).handle(
        as_of=TODAY + timedelta(days=15)
    )

    assert sent == 0
    assert notifier.sent == []


def test_skips_returned_loans():
    store, clock, opener = _setup()
    opener.handle("1", "1")
    CloseLoanHandler(factory_for(store), clock).handle("1", "1")
    clock.advance(13)
    notifier = RecordingNotifier()
    assert SendDueRemindersHandler(factory_for(store), clock, notifier).handle() == 0


def test_failing_notification_does_not_block_others(caplog):
    store, clock, opener = _setup()
    first = opener.handle("1", "1")
    second = opener.handle("2", "2")
    third = opener.handle("3", "1")
    clock.advance(13)
    notifier = FailingNotifier(fail_for={second.id})

    sent = SendDueRemindersHandler(factory_for(store), clock, notifier).handle()

    assert sent == 2
    assert sorted(notifier.sent) == sorted([first.id, third.id])
    assert f"Reminder for loan #{second.id} failed" in caplog.text


def test_reminders_write_nothing():
    store, clock, opener = _setup()
    opener.handle("1", "1")
    clock.advance(13)
    before = store.read_all(LOAN)

    SendDueRemindersHandler(factory_for(store), clock, RecordingNotifier()).handle()

    assert store.read_all(LOAN) == before
