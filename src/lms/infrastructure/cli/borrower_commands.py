"""CLI commands for borrowers."""

from __future__ import annotations

import click

from lms.application.catalog_queries import ListBorrowersHandler
from lms.application.change_membership_status import ChangeMembershipStatusHandler
from lms.application.loan_queries import (
    BorrowerLoansHandler,
    BorrowersWithOverdueLoansHandler,
    BorrowerStatisticsHandler,
)
from lms.application.register_borrower import RegisterBorrowerHandler
from lms.application.remove_borrower import RemoveBorrowerHandler
from lms.domain.exceptions import DomainException
from lms.domain.model.borrower import MembershipStatus
from lms.infrastructure.bootstrap import clock, unit_of_work_factory
from lms.infrastructure.cli.formatting import echo_loan_table


@click.command("register")
@click.option("--name", required=True, help="Full name.")
@click.option("--email", required=True, help="Email address (must be unique).")
def borrower_register(name: str, email: str) -> None:
    """Register a new borrower."""
    handler = RegisterBorrowerHandler(unit_of_work_factory(), clock())

    try:
        borrower = handler.handle(name=name, email=email)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Borrower #{borrower.id} '{borrower.name}' registered ({borrower.membership_status})")


@click.command("list")
def borrower_list() -> None:
    """List all borrowers."""
    borrowers = ListBorrowersHandler(unit_of_work_factory()).handle()

    if not borrowers:
        click.echo("No borrowers found.")
        return

    click.echo(f"{'ID':<6} {'Name':<24} {'Email':<30} {'Status':<10} {'Loans':>6}")
    click.echo("-" * 80)
    for b in borrowers:
        click.echo(
            f"{b.id:<6} {b.name:<24} {b.email:<30} {b.membership_status:<10} {b.total_loans:>6}"
        )


@click.command("overdue")
def borrower_overdue() -> None:
    """List borrowers holding at least one overdue loan."""
    borrowers = BorrowersWithOverdueLoansHandler(unit_of_work_factory(), clock()).handle()

    if not borrowers:
        click.echo("No borrowers with overdue loans.")
        return

    click.echo(f"{'ID':<6} {'Name':<24} {'Email':<30} {'Status':<10}")
    click.echo("-" * 73)
    for b in borrowers:
        click.echo(f"{b.id:<6} {b.name:<24} {b.email:<30} {b.membership_status:<10}")


@click.command("status")
@click.option("--id", "borrower_id", required=True, help="Borrower ID.")
@click.option(
    "--status",
    required=True,
    type=click.Choice([s.value for s in MembershipStatus], case_sensitive=False),
    help="New membership status.",
)
def borrower_status(borrower_id: str, status: str) -> None:
    """Change a borrower's membership status."""
    handler = ChangeMembershipStatusHandler(unit_of_work_factory())

    try:
        borrower = handler.handle(borrower_id, status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Borrower #{borrower.id} is now {borrower.membership_status}.")


@click.command("stats")
@click.option("--id", "borrower_id", required=True, help="Borrower ID.")
def borrower_stats(borrower_id: str) -> None:
    """Show a borrower's loan statistics."""
    handler = BorrowerStatisticsHandler(unit_of_work_factory(), clock())

    try:
        stats = handler.handle(borrower_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Borrower #{stats.borrower_id}  {stats.name}  ({stats.membership_status})")
    click.echo(f"Member since:      {stats.member_since.isoformat()}")
    click.echo(f"Total loans:       {stats.total_loans}")
    click.echo(f"Currently held:    {stats.currently_held}")
    click.echo(f"Currently overdue: {stats.currently_overdue}")
    click.echo(f"Returned:          {stats.returned}")


@click.command("loans")
@click.option("--id", "borrower_id", required=True, help="Borrower ID.")
@click.option("--history", is_flag=True, default=False, help="Include returned loans.")
def borrower_loans(borrower_id: str, history: bool) -> None:
    """Show the loans a borrower holds (or has ever held)."""
    handler = BorrowerLoansHandler(unit_of_work_factory(), clock())

    try:
        loans = handler.history(borrower_id) if history else handler.handle(borrower_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_loan_table(loans)


@click.command("remove")
@click.option("--id", "borrower_id", required=True, help="Borrower ID.")
def borrower_remove(borrower_id: str) -> None:
    """Remove a borrower who holds no open loans."""
    handler = RemoveBorrowerHandler(unit_of_work_factory())

    try:
        handler.handle(borrower_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Borrower #{borrower_id} removed.")
