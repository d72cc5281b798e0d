"""CLI commands for inventory items."""

from __future__ import annotations

import click

from lms.application.add_item import AddItemHandler
from lms.application.catalog_queries import ShowInventoryHandler
from lms.application.loan_queries import ItemHistoryHandler, MostBorrowedItemsHandler
from lms.application.remove_item import RemoveItemHandler
from lms.domain.exceptions import DomainException
from lms.infrastructure.bootstrap import clock, unit_of_work_factory
from lms.infrastructure.cli.formatting import echo_loan_table


@click.command("add")
@click.option("--title", required=True, help="Item title.")
@click.option("--external-id", required=True, help="Catalog identifier, e.g. an ISBN.")
def item_add(title: str, external_id: str) -> None:
    """Add a new item to the inventory."""
    handler = AddItemHandler(unit_of_work_factory())

    try:
        item = handler.handle(title=title, external_id=external_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item #{item.id} '{item.title}' added ({item.availability})")


@click.command("list")
def item_list() -> None:
    """List all items and their availability."""
    items = ShowInventoryHandler(unit_of_work_factory()).handle()

    if not items:
        click.echo("No items found.")
        return

    click.echo(f"{'ID':<6} {'Title':<30} {'External ID':<18} {'Availability':<12}")
    click.echo("-" * 69)
    for i in items:
        click.echo(f"{i.id:<6} {i.title:<30} {i.external_id:<18} {i.availability:<12}")


@click.command("history")
@click.option("--id", "item_id", required=True, help="Item ID.")
def item_history(item_id: str) -> None:
    """Show every loan of an item, newest first."""
    handler = ItemHistoryHandler(unit_of_work_factory(), clock())

    try:
        loans = handler.handle(item_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_loan_table(loans, empty="No loans recorded for this item.")


@click.command("popular")
@click.option("--limit", default=10, show_default=True, type=int, help="How many items to show.")
def item_popular(limit: int) -> None:
    """Rank items by how often they have been lent."""
    handler = MostBorrowedItemsHandler(unit_of_work_factory())

    try:
        ranking = handler.handle(limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not ranking:
        click.echo("No loans recorded yet.")
        return

    click.echo(f"{'ID':<6} {'Title':<30} {'Loans':>6}")
    click.echo("-" * 44)
    for entry in ranking:
        click.echo(f"{entry.item_id:<6} {entry.title[:30]:<30} {entry.loan_count:>6}")


@click.command("remove")
@click.option("--id", "item_id", required=True, help="Item ID.")
def item_remove(item_id: str) -> None:
    """Remove an item that is not on loan."""
    handler = RemoveItemHandler(unit_of_work_factory())

    try:
        handler.handle(item_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item #{item_id} removed.")
