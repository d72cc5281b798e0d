"""CLI command that runs the daily background jobs in the foreground."""

from __future__ import annotations

import click
from apscheduler.schedulers.blocking import BlockingScheduler

from lms.application.due_reminders import SendDueRemindersHandler
from lms.application.overdue_sweep import RunOverdueSweepHandler
from lms.infrastructure.bootstrap import clock, notifier, settings, unit_of_work_factory
from lms.infrastructure.scheduler import register_daily_jobs


@click.command("run")
def scheduler_run() -> None:
    """Run the overdue sweep and reminders every day until interrupted."""
    config = settings()
    uow_factory = unit_of_work_factory()
    scheduler = BlockingScheduler(timezone=config.timezone)
    register_daily_jobs(
        scheduler,
        sweep=RunOverdueSweepHandler(uow_factory, clock()),
        reminders=SendDueRemindersHandler(uow_factory, clock(), notifier()),
        settings=config,
    )

    click.echo(
        f"Scheduler running (sweep {config.sweep_hour:02d}:00, "
        f"reminders {config.reminder_hour:02d}:00 {config.timezone}). Ctrl+C to stop."
    )
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        click.echo("Scheduler stopped.")
