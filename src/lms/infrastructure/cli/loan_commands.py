"""CLI commands for the lending state machine."""

from __future__ import annotations

from datetime import date, datetime

import click

from lms.application.close_loan import CloseLoanHandler
from lms.application.due_reminders import SendDueRemindersHandler
from lms.application.extend_loan import ExtendLoanHandler
from lms.application.loan_queries import (
    CurrentLoanForItemHandler,
    DailyStatisticsHandler,
    OverdueLoansHandler,
)
from lms.application.open_loan import OpenLoanHandler
from lms.application.overdue_sweep import RunOverdueSweepHandler
from lms.domain.exceptions import DomainException
from lms.domain.model.loan import DEFAULT_EXTENSION_DAYS
from lms.infrastructure.bootstrap import clock, notifier, unit_of_work_factory
from lms.infrastructure.cli.formatting import echo_loan, echo_loan_table

_as_of_option = click.option(
    "--as-of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Evaluate as of this date (YYYY-MM-DD). Defaults to today.",
)


def _to_date(value: datetime | None) -> date | None:
    return value.date() if value is not None else None


@click.command("open")
@click.option("--item", "item_id", required=True, help="Item ID.")
@click.option("--borrower", "borrower_id", required=True, help="Borrower ID.")
def loan_open(item_id: str, borrower_id: str) -> None:
    """Lend an item to a borrower."""
    handler = OpenLoanHandler(unit_of_work_factory(), clock())

    try:
        loan = handler.handle(item_id, borrower_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Loan #{loan.id} opened — due {loan.due_date.isoformat()}.")


@click.command("close")
@click.option("--item", "item_id", required=True, help="Item ID.")
@click.option("--borrower", "borrower_id", required=True, help="Borrower ID.")
def loan_close(item_id: str, borrower_id: str) -> None:
    """Return an item."""
    handler = CloseLoanHandler(unit_of_work_factory(), clock())

    try:
        loan = handler.handle(item_id, borrower_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Loan #{loan.id} returned. Late fee: {loan.late_fee}")


@click.command("extend")
@click.option("--id", "loan_id", required=True, type=int, help="Loan ID.")
@click.option(
    "--days",
    default=DEFAULT_EXTENSION_DAYS,
    show_default=True,
    type=int,
    help="Number of days to add to the due date.",
)
def loan_extend(loan_id: int, days: int) -> None:
    """Extend a loan that is not yet overdue."""
    handler = ExtendLoanHandler(unit_of_work_factory(), clock())

    try:
        loan = handler.handle(loan_id, days=days)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Loan #{loan.id} extended — now due {loan.due_date.isoformat()}.")


@click.command("current")
@click.option("--item", "item_id", required=True, help="Item ID.")
def loan_current(item_id: str) -> None:
    """Show the open loan for an item, if any."""
    loan = CurrentLoanForItemHandler(unit_of_work_factory(), clock()).handle(item_id)

    if loan is None:
        click.echo(f"Item #{item_id} is not on loan.")
        return
    echo_loan(loan)


@click.command("overdue")
@_as_of_option
def loan_overdue(as_of: datetime | None) -> None:
    """List every open loan past its due date."""
    loans = OverdueLoansHandler(unit_of_work_factory(), clock()).handle(_to_date(as_of))
    echo_loan_table(loans, empty="No overdue loans.")


@click.command("sweep")
@_as_of_option
def loan_sweep(as_of: datetime | None) -> None:
    """Mark past-due loans OVERDUE (normally run by the scheduler)."""
    count = RunOverdueSweepHandler(unit_of_work_factory(), clock()).handle(_to_date(as_of))
    click.echo(f"{count} loan(s) marked overdue.")


@click.command("remind")
@_as_of_option
def loan_remind(as_of: datetime | None) -> None:
    """Send reminders for loans due within a day."""
    handler = SendDueRemindersHandler(unit_of_work_factory(), clock(), notifier())
    count = handler.handle(_to_date(as_of))
    click.echo(f"{count} reminder(s) sent.")


@click.command("stats")
@_as_of_option
def loan_stats(as_of: datetime | None) -> None:
    """Show lending statistics for a day."""
    stats = DailyStatisticsHandler(unit_of_work_factory(), clock()).handle(_to_date(as_of))

    click.echo(f"Date:              {stats.date.isoformat()}")
    click.echo(f"Opened:            {stats.opened}")
    click.echo(f"Returned:          {stats.returned}")
    click.echo(f"Currently overdue: {stats.currently_overdue}")
    click.echo(f"Active loans:      {stats.active}")
