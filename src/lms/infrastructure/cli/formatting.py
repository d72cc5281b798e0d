"""Shared table formatting for loan listings."""

from __future__ import annotations

import click

from lms.application.dto import LoanDTO


def echo_loan_table(loans: list[LoanDTO], empty: str = "No loans found.") -> None:
    if not loans:
        click.echo(empty)
        return

    click.echo(
        f"{'Loan':<6} {'Item':<24} {'Borrower':<20} {'Loaned':<10} "
        f"{'Due':<10} {'Status':<9} {'Fee':>6}"
    )
    click.echo("-" * 91)
    for loan in loans:
        status = "OVERDUE*" if loan.is_overdue and loan.status != "OVERDUE" else loan.status
        click.echo(
            f"{loan.id:<6} {loan.item_title[:24]:<24} {loan.borrower_name[:20]:<20} "
            f"{loan.loan_date.isoformat():<10} {loan.due_date.isoformat():<10} "
            f"{status:<9} {loan.late_fee:>6}"
        )


def echo_loan(loan: LoanDTO) -> None:
    click.echo(f"Loan #{loan.id}  (status={loan.status})")
    click.echo(f"Item:     {loan.item_title} [{loan.item_id}]")
    click.echo(f"Borrower: {loan.borrower_name} [{loan.borrower_id}]")
    click.echo(f"Loaned:   {loan.loan_date.isoformat()}")
    click.echo(f"Due:      {loan.due_date.isoformat()}")
    if loan.return_date is not None:
        click.echo(f"Returned: {loan.return_date.isoformat()}")
        click.echo(f"Late fee: {loan.late_fee}")
    elif loan.is_overdue:
        click.echo(f"Overdue by {loan.days_overdue} day(s)")
