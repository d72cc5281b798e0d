"""Tests for registration of the daily background jobs.

The scheduler is never started; jobs are inspected and invoked directly.
"""

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from lms.application.due_reminders import SendDueRemindersHandler
from lms.application.open_loan import OpenLoanHandler
from lms.application.overdue_sweep import RunOverdueSweepHandler
from lms.domain.model.loan import LoanStatus
from lms.infrastructure.config import Settings
from lms.infrastructure.persistence.memory_store import LOAN, InMemoryStore
from lms.infrastructure.scheduler import REMINDER_JOB_ID, SWEEP_JOB_ID, register_daily_jobs
from tests.fakes import FixedClock, RecordingNotifier, factory_for, make_borrower, make_item


class _Exploding:

    def handle(self):
        raise RuntimeError("store unavailable")


@pytest.fixture
def scheduler():
    return BackgroundScheduler(timezone="UTC")


def _register(scheduler, sweep, reminders, **settings):
    register_daily_jobs(scheduler, sweep, reminders, Settings(**settings))


def test_both_jobs_registered(scheduler):
    _register(scheduler, _Exploding(), _Exploding(), sweep_hour=6, reminder_hour=7)

    sweep_job = scheduler.get_job(SWEEP_JOB_ID)
    reminder_job = scheduler.get_job(REMINDER_JOB_ID)

    assert "hour='6'" in str(sweep_job.trigger)
    assert "hour='7'" in str(reminder_job.trigger)
    assert sweep_job.max_instances == 1
    assert sweep_job.coalesce is True


def test_failing_jobs_are_logged_not_raised(scheduler, caplog):
    _register(scheduler, _Exploding(), _Exploding())

    scheduler.get_job(SWEEP_JOB_ID).func()
    scheduler.get_job(REMINDER_JOB_ID).func()

    assert "overdue sweep failed" in caplog.text
    assert "due-date reminders failed" in caplog.text


def test_sweep_job_runs_the_sweep(scheduler):
    store = InMemoryStore(items=[make_item("1")], borrowers=[make_borrower("1")])
    clock = FixedClock()
    loan = OpenLoanHandler(factory_for(store), clock).handle("1", "1")
    clock.advance(15)
    notifier = RecordingNotifier()
    _register(
        scheduler,
        RunOverdueSweepHandler(factory_for(store), clock),
        SendDueRemindersHandler(factory_for(store), clock, notifier),
    )

    scheduler.get_job(SWEEP_JOB_ID).func()
    scheduler.get_job(REMINDER_JOB_ID).func()

    assert store.read(LOAN, loan.id).status == LoanStatus.OVERDUE
    assert notifier.sent == []
