"""Daily background jobs: the overdue sweep and due-date reminders.

Both jobs are registered on an APScheduler scheduler supplied by the
caller.  They are independent jobs, so a failing reminder pass can never
undo or delay the sweep.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger

from lms.application.due_reminders import SendDueRemindersHandler
from lms.application.overdue_sweep import RunOverdueSweepHandler
from lms.infrastructure.config import Settings

_log = logging.getLogger(__name__)

SWEEP_JOB_ID = "overdue_sweep"
REMINDER_JOB_ID = "due_reminders"


def register_daily_jobs(
    scheduler: BaseScheduler,
    sweep: RunOverdueSweepHandler,
    reminders: SendDueRemindersHandler,
    settings: Settings,
) -> None:
    def _sweep_job() -> None:
        try:
            count = sweep.handle()
        except Exception:
            _log.exception("[scheduler] overdue sweep failed")
            return
        _log.info("[scheduler] overdue sweep marked %d loan(s)", count)

    def _reminder_job() -> None:
        try:
            reminders.handle()
        except Exception:
            _log.exception("[scheduler] due-date reminders failed")

    scheduler.add_job(
        func=_sweep_job,
        trigger=CronTrigger(hour=settings.sweep_hour, minute=0, timezone=settings.timezone),
        id=SWEEP_JOB_ID,
        replace_existing=True,
        max_instances=1,  # never overlap with yesterday's run
        coalesce=True,  # collapse missed runs into one
        misfire_grace_time=3600,
    )
    scheduler.add_job(
        func=_reminder_job,
        trigger=CronTrigger(hour=settings.reminder_hour, minute=0, timezone=settings.timezone),
        id=REMINDER_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=3600,
    )
    _log.info(
        "[scheduler] daily jobs registered (sweep %02d:00, reminders %02d:00 %s)",
        settings.sweep_hour, settings.reminder_hour, settings.timezone,
    )
