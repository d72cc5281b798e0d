import click

from lms.infrastructure.bootstrap import settings
from lms.infrastructure.cli.borrower_commands import (
    borrower_list,
    borrower_loans,
    borrower_overdue,
    borrower_register,
    borrower_remove,
    borrower_stats,
    borrower_status,
)
from lms.infrastructure.cli.item_commands import (
    item_add,
    item_history,
    item_list,
    item_popular,
    item_remove,
)
from lms.infrastructure.cli.loan_commands import (
    loan_close,
    loan_current,
    loan_extend,
    loan_open,
    loan_overdue,
    loan_remind,
    loan_stats,
    loan_sweep,
)
from lms.infrastructure.cli.scheduler_commands import scheduler_run
from lms.infrastructure.logging_setup import configure_logging


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """LMS — Lending Management System"""
    configure_logging(settings().log_level, verbose=verbose)


@cli.group()
def item() -> None:
    """Manage inventory items."""


@cli.group()
def borrower() -> None:
    """Manage borrowers."""


@cli.group()
def loan() -> None:
    """Open, close and extend loans."""


@cli.group()
def scheduler() -> None:
    """Run background jobs."""


# Register subcommands
item.add_command(item_add)
item.add_command(item_history)
item.add_command(item_list)
item.add_command(item_popular)
item.add_command(item_remove)
borrower.add_command(borrower_list)
borrower.add_command(borrower_loans)
borrower.add_command(borrower_overdue)
borrower.add_command(borrower_register)
borrower.add_command(borrower_remove)
borrower.add_command(borrower_stats)
borrower.add_command(borrower_status)
loan.add_command(loan_close)
loan.add_command(loan_current)
loan.add_command(loan_extend)
loan.add_command(loan_open)
loan.add_command(loan_overdue)
loan.add_command(loan_remind)
loan.add_command(loan_stats)
loan.add_command(loan_sweep)
scheduler.add_command(scheduler_run)
