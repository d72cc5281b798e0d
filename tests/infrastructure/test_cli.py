"""End-to-end tests of the command line against a temporary data file."""

from datetime import date, timedelta

import pytest
from click.testing import CliRunner

from lms.infrastructure import bootstrap
from lms.infrastructure.cli.main import cli
from lms.infrastructure.persistence.memory_store import InMemoryUnitOfWork


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("LMS_DATA_FILE", str(tmp_path / "lending.json"))
    bootstrap.settings.cache_clear()
    bootstrap.store.cache_clear()
    yield CliRunner()
    bootstrap.settings.cache_clear()
    bootstrap.store.cache_clear()


def _ok(runner, *args):
    result = runner.invoke(cli, list(args))
    assert result.exit_code == 0, result.output
    return result.output


def _fails(runner, *args):
    result = runner.invoke(cli, list(args))
    assert result.exit_code == 1, result.output
    return result.output


@pytest.fixture
def library(runner):
    _ok(runner, "item", "add", "--title", "Dune", "--external-id", "978-0441013593")
    _ok(runner, "item", "add", "--title", "Emma", "--external-id", "978-0141439587")
    _ok(runner, "borrower", "register", "--name", "Alice", "--email", "alice@example.org")
    _ok(runner, "borrower", "register", "--name", "Bob", "--email", "bob@example.org")
    return runner


def test_add_and_list_items(runner):
    out = _ok(runner, "item", "add", "--title", "Dune", "--external-id", "978-0441013593")
    assert "Item #1 'Dune' added (AVAILABLE)" in out
    assert "Dune" in _ok(runner, "item", "list")


def test_empty_listings(runner):
    assert "No items found." in _ok(runner, "item", "list")
    assert "No borrowers found." in _ok(runner, "borrower", "list")
    assert "No overdue loans." in _ok(runner, "loan", "overdue")


def test_open_and_close(library):
    due = (date.today() + timedelta(days=14)).isoformat()
    assert f"Loan #1 opened — due {due}." in _ok(library, "loan", "open", "--item", "1", "--borrower", "1")
    assert "ON_LOAN" in _ok(library, "item", "list")

    out = _ok(library, "loan", "current", "--item", "1")
    assert "Borrower: Alice [1]" in out

    assert "Loan #1 returned. Late fee: 0.00" in _ok(
        library, "loan", "close", "--item", "1", "--borrower", "1"
    )
    assert "Item #1 is not on loan." in _ok(library, "loan", "current", "--item", "1")


def test_domain_errors_exit_with_message(library):
    _ok(library, "loan", "open", "--item", "1", "--borrower", "1")
    out = _fails(library, "loan", "open", "--item", "1", "--borrower", "2")
    assert "Error: Item 'Dune' is not available for loan" in out

    out = _fails(library, "loan", "close", "--item", "1", "--borrower", "2")
    assert "another borrower" in out


def test_extend(library):
    _ok(library, "loan", "open", "--item", "1", "--borrower", "1")
    due = (date.today() + timedelta(days=17)).isoformat()
    assert f"now due {due}" in _ok(library, "loan", "extend", "--id", "1", "--days", "3")


def test_sweep_and_overdue_listing(library):
    _ok(library, "loan", "open", "--item", "1", "--borrower", "1")
    later = (date.today() + timedelta(days=20)).isoformat()

    assert "OVERDUE*" in _ok(library, "loan", "overdue", "--as-of", later)
    assert "1 loan(s) marked overdue." in _ok(library, "loan", "sweep", "--as-of", later)
    assert "0 loan(s) marked overdue." in _ok(library, "loan", "sweep", "--as-of", later)


def test_remind(library):
    _ok(library, "loan", "open", "--item", "1", "--borrower", "1")
    tomorrow_is_due = (date.today() + timedelta(days=13)).isoformat()
    assert "1 reminder(s) sent." in _ok(library, "loan", "remind", "--as-of", tomorrow_is_due)


def test_suspended_borrower(library):
    assert "is now SUSPENDED" in _ok(library, "borrower", "status", "--id", "2", "--status", "suspended")
    out = _fails(library, "loan", "open", "--item", "1", "--borrower", "2")
    assert "SUSPENDED" in out


def test_borrower_stats_and_loans(library):
    _ok(library, "loan", "open", "--item", "1", "--borrower", "1")
    _ok(library, "loan", "close", "--item", "1", "--borrower", "1")
    _ok(library, "loan", "open", "--item", "2", "--borrower", "1")

    stats = _ok(library, "borrower", "stats", "--id", "1")
    assert "Total loans:       2" in stats
    assert "Returned:          1" in stats

    assert "Emma" in _ok(library, "borrower", "loans", "--id", "1")
    history = _ok(library, "borrower", "loans", "--id", "1", "--history")
    assert "Dune" in history and "Emma" in history


def test_daily_stats(library):
    _ok(library, "loan", "open", "--item", "1", "--borrower", "1")
    out = _ok(library, "loan", "stats")
    assert "Opened:            1" in out
    assert "Active loans:      1" in out


def test_removal_guards(library):
    _ok(library, "loan", "open", "--item", "1", "--borrower", "1")
    assert "while it is on loan" in _fails(library, "item", "remove", "--id", "1")
    assert "open loan(s)" in _fails(library, "borrower", "remove", "--id", "1")
    assert "Item #2 removed." in _ok(library, "item", "remove", "--id", "2")
    assert "Borrower #2 removed." in _ok(library, "borrower", "remove", "--id", "2")


def test_item_history(library):
    _ok(library, "loan", "open", "--item", "1", "--borrower", "2")
    assert "Bob" in _ok(library, "item", "history", "--id", "1")
    assert "No loans recorded for this item." in _ok(library, "item", "history", "--id", "2")


def test_unknown_status_rejected_by_click(library):
    result = library.invoke(cli, ["borrower", "status", "--id", "1", "--status", "VIP"])
    assert result.exit_code == 2


def test_borrower_overdue(library):
    assert "No borrowers with overdue loans." in _ok(library, "borrower", "overdue")
    _ok(library, "loan", "open", "--item", "1", "--borrower", "2")
    # back-date the due date so the loan is late today
    store = bootstrap.store()
    with InMemoryUnitOfWork(store) as uow:
        loan = uow.loans.get_open_for_item("1")
        loan.due_date = date.today() - timedelta(days=1)
        uow.loans.save(loan)
        uow.commit()

    out = _ok(library, "borrower", "overdue")
    assert "bob@example.org" in out
    assert "alice@example.org" not in out


def test_item_popular(library):
    assert "No loans recorded yet." in _ok(library, "item", "popular")
    for _ in range(2):
        _ok(library, "loan", "open", "--item", "2", "--borrower", "1")
        _ok(library, "loan", "close", "--item", "2", "--borrower", "1")
    _ok(library, "loan", "open", "--item", "1", "--borrower", "1")

    lines = _ok(library, "item", "popular", "--limit", "1").splitlines()
    assert "Emma" in lines[-1]
    assert "Dune" not in "\n".join(lines)
    assert "Limit must be at least 1" in _fails(library, "item", "popular", "--limit", "0")
