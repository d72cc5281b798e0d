"""In-memory, versioned implementation of the UnitOfWork.

``InMemoryStore`` holds the committed state of every aggregate.  Each
``InMemoryUnitOfWork`` works on private copies and, at commit time, asks
the store to apply its staged writes with a compare-and-set on every
record's ``version``.

Locking is per record and only for the duration of a commit.  Records
are striped over a fixed pool of locks; a commit takes the stripes of the
records it touches in index order, so commits on disjoint items and
borrowers rarely wait for each other.  A short internal latch guards the
dict structure itself.

Item and borrower ids are numeric strings handed out above a high-water
mark that only grows.  The mark covers every id ever committed and every
id a loan record still refers to, so a removed entity's id is never
reused and its loan history stays its own.
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from contextlib import ExitStack
from typing import Any, Callable, Iterable

from lms.domain.exceptions import ConcurrencyConflict
from lms.domain.model.borrower import Borrower
from lms.domain.model.item import InventoryItem
from lms.domain.model.loan import LoanRecord
from lms.domain.repository.borrower_repository import BorrowerRepository
from lms.domain.repository.item_repository import ItemRepository
from lms.domain.repository.loan_repository import LoanRepository
from lms.domain.repository.unit_of_work import UnitOfWork

_log = logging.getLogger(__name__)

ITEM = "item"
BORROWER = "borrower"
LOAN = "loan"

Key = tuple[str, Any]

LOCK_STRIPES = 64

# loan attribute holding the id of each referenced kind
_LOAN_REFERENCES = {ITEM: "item_id", BORROWER: "borrower_id"}


class InMemoryStore:
    """Committed state of items, borrowers and loans."""

    def __init__(
        self,
        items: Iterable[InventoryItem] = (),
        borrowers: Iterable[Borrower] = (),
        loans: Iterable[LoanRecord] = (),
        id_marks: dict[str, int] | None = None,
    ) -> None:
        self._tables: dict[str, dict[Any, Any]] = {ITEM: {}, BORROWER: {}, LOAN: {}}
        self._latch = threading.Lock()
        self._stripes = [threading.Lock() for _ in range(LOCK_STRIPES)]
        self._seed(ITEM, items)
        self._seed(BORROWER, borrowers)
        self._seed(LOAN, loans)
        self._reset_loan_ids()
        self._id_marks = {kind: self._highest_known_id(kind) for kind in _LOAN_REFERENCES}
        for kind, mark in (id_marks or {}).items():
            if kind in self._id_marks:
                self._id_marks[kind] = max(self._id_marks[kind], mark)

    # --- Reads ----------------------------------------------------------------

    def read(self, kind: str, entity_id: Any) -> Any | None:
        with self._latch:
            stored = self._tables[kind].get(entity_id)
        return copy.deepcopy(stored)

    def read_all(self, kind: str) -> list[Any]:
        with self._latch:
            stored = list(self._tables[kind].values())
        return [copy.deepcopy(entity) for entity in stored]

    def next_loan_id(self) -> int:
        with self._latch:
            return next(self._loan_ids)

    def next_free_id(self, kind: str) -> str:
        """The id the next new item or borrower should take.

        Not reserved: two callers may get the same id, and the second
        commit then fails its version check like any other insert race.
        """
        with self._latch:
            return str(self._id_marks[kind] + 1)

    def id_marks(self) -> dict[str, int]:
        with self._latch:
            return dict(self._id_marks)

    # --- Commit ---------------------------------------------------------------

    def commit(self, writes: dict[Key, Any | None], expected: dict[Key, int]) -> None:
        """Apply ``writes`` if every record is still at its ``expected`` version.

        A value of ``None`` in ``writes`` removes the record.  An expected
        version of 0 means the record must not exist yet.
        """
        if not writes:
            return

        keys = sorted(writes, key=lambda k: (k[0], str(k[1])))
        with ExitStack() as stack:
            for stripe in sorted({self._stripe_for(key) for key in keys}):
                stack.enter_context(self._stripes[stripe])

            for key in keys:
                kind, entity_id = key
                with self._latch:
                    current = self._tables[kind].get(entity_id)
                current_version = current.version if current is not None else 0
                if current_version != expected[key]:
                    raise ConcurrencyConflict(
                        f"{kind} '{entity_id}' changed concurrently "
                        f"(read v{expected[key]}, now v{current_version})"
                    )

            self._apply(keys, writes, expected)

    def _apply(
        self,
        keys: list[Key],
        writes: dict[Key, Any | None],
        expected: dict[Key, int],
    ) -> None:
        with self._latch:
            for key in keys:
                kind, entity_id = key
                entity = writes[key]
                if entity is None:
                    self._tables[kind].pop(entity_id, None)
                    continue
                self._tables[kind][entity_id] = _stored_copy(entity, expected[key] + 1)
            self._id_marks = _marks_after(self._id_marks, writes)

    def _snapshot_after(
        self,
        writes: dict[Key, Any | None],
        expected: dict[Key, int],
    ) -> tuple[dict[str, list[Any]], dict[str, int]]:
        """Every table, and the id marks, as they will be once ``writes`` apply.

        Nothing in the store changes; subclasses use this to persist a
        commit before it becomes visible.
        """
        with self._latch:
            tables = {kind: dict(rows) for kind, rows in self._tables.items()}
            marks = _marks_after(self._id_marks, writes)
        for (kind, entity_id), entity in writes.items():
            if entity is None:
                tables[kind].pop(entity_id, None)
            else:
                tables[kind][entity_id] = _stored_copy(entity, expected[(kind, entity_id)] + 1)
        return {kind: list(rows.values()) for kind, rows in tables.items()}, marks

    # --- Internal helpers -----------------------------------------------------

    def _stripe_for(self, key: Key) -> int:
        return hash((key[0], str(key[1]))) % LOCK_STRIPES

    def _seed(self, kind: str, entities: Iterable[Any]) -> None:
        for entity in entities:
            stored = copy.deepcopy(entity)
            stored.version = max(stored.version, 1)
            self._tables[kind][stored.id] = stored

    def _reset_loan_ids(self) -> None:
        existing = [loan_id for loan_id in self._tables[LOAN] if loan_id is not None]
        self._loan_ids = itertools.count(max(existing, default=0) + 1)

    def _highest_known_id(self, kind: str) -> int:
        attr = _LOAN_REFERENCES[kind]
        ids = list(self._tables[kind])
        ids += [getattr(loan, attr) for loan in self._tables[LOAN].values()]
        return max((int(i) for i in ids if str(i).isdigit()), default=0)


def _stored_copy(entity: Any, version: int) -> Any:
    stored = copy.deepcopy(entity)
    stored.version = version
    return stored


def _marks_after(marks: dict[str, int], writes: dict[Key, Any | None]) -> dict[str, int]:
    updated = dict(marks)
    for (kind, entity_id), entity in writes.items():
        if entity is not None and kind in updated and str(entity_id).isdigit():
            updated[kind] = max(updated[kind], int(entity_id))
    return updated


class InMemoryUnitOfWork(UnitOfWork):
    """Stages changes against an ``InMemoryStore`` and commits them atomically.

    Keeps an identity map so an entity loaded twice within one unit of work
    is the same object, and queries see this unit's own staged changes.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._identity: dict[Key, Any] = {}
        self._writes: dict[Key, Any | None] = {}
        self._expected: dict[Key, int] = {}
        self.items = _ItemRepository(self)
        self.borrowers = _BorrowerRepository(self)
        self.loans = _LoanRepository(self)

    # --- UnitOfWork interface -------------------------------------------------

    def commit(self) -> None:
        self._store.commit(self._writes, self._expected)
        for key, entity in self._writes.items():
            if entity is not None:
                entity.version = self._expected[key] + 1
        _log.debug("Committed %d record(s)", len(self._writes))
        self._clear()

    def rollback(self) -> None:
        if self._writes:
            _log.debug("Discarding %d staged record(s)", len(self._writes))
        self._clear()

    # --- Used by the repositories ---------------------------------------------

    def get(self, kind: str, entity_id: Any) -> Any | None:
        key = (kind, entity_id)
        if key in self._identity:
            return self._identity[key]
        entity = self._store.read(kind, entity_id)
        if entity is not None:
            self._identity[key] = entity
        return entity

    def query(self, kind: str, predicate: Callable[[Any], bool]) -> list[Any]:
        merged: dict[Any, Any] = {}
        for entity in self._store.read_all(kind):
            key = (kind, entity.id)
            merged[entity.id] = self._identity.setdefault(key, entity)
        for (entity_kind, entity_id), entity in self._identity.items():
            if entity_kind == kind:
                merged[entity_id] = entity
        return [entity for entity in merged.values() if entity is not None and predicate(entity)]

    def stage(self, kind: str, entity: Any) -> None:
        key = (kind, entity.id)
        self._identity[key] = entity
        self._writes[key] = entity
        self._expected.setdefault(key, entity.version)

    def stage_removal(self, kind: str, entity: Any) -> None:
        key = (kind, entity.id)
        self._identity[key] = None
        self._writes[key] = None
        self._expected.setdefault(key, entity.version)

    def next_loan_id(self) -> int:
        return self._store.next_loan_id()

    def next_free_id(self, kind: str) -> str:
        return self._store.next_free_id(kind)

    def _clear(self) -> None:
        self._identity.clear()
        self._writes.clear()
        self._expected.clear()


# ---------------------------------------------------------------------------
# Repositories bound to a unit of work
# ---------------------------------------------------------------------------


class _ItemRepository(ItemRepository):

    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    def get_by_id(self, item_id: str) -> InventoryItem | None:
        return self._uow.get(ITEM, item_id)

    def get_by_external_id(self, external_id: str) -> InventoryItem | None:
        matches = self._uow.query(ITEM, lambda i: i.external_id == external_id)
        return matches[0] if matches else None

    def list_all(self) -> list[InventoryItem]:
        return self._uow.query(ITEM, lambda i: True)

    def next_id(self) -> str:
        return self._uow.next_free_id(ITEM)

    def save(self, item: InventoryItem) -> None:
        self._uow.stage(ITEM, item)

    def remove(self, item: InventoryItem) -> None:
        self._uow.stage_removal(ITEM, item)


class _BorrowerRepository(BorrowerRepository):

    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    def get_by_id(self, borrower_id: str) -> Borrower | None:
        return self._uow.get(BORROWER, borrower_id)

    def get_by_email(self, email: str) -> Borrower | None:
        matches = self._uow.query(BORROWER, lambda b: b.email.lower() == email.lower())
        return matches[0] if matches else None

    def list_all(self) -> list[Borrower]:
        return self._uow.query(BORROWER, lambda b: True)

    def next_id(self) -> str:
        return self._uow.next_free_id(BORROWER)

    def save(self, borrower: Borrower) -> None:
        self._uow.stage(BORROWER, borrower)

    def remove(self, borrower: Borrower) -> None:
        self._uow.stage_removal(BORROWER, borrower)


class _LoanRepository(LoanRepository):

    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    def get_by_id(self, loan_id: int) -> LoanRecord | None:
        return self._uow.get(LOAN, loan_id)

    def get_open_for_item(self, item_id: str) -> LoanRecord | None:
        matches = self._uow.query(LOAN, lambda loan: loan.item_id == item_id and not loan.closed)
        return matches[0] if matches else None

    def list_open(self) -> list[LoanRecord]:
        return _newest_first(self._uow.query(LOAN, lambda loan: not loan.closed))

    def list_open_for_borrower(self, borrower_id: str) -> list[LoanRecord]:
        return _newest_first(
            self._uow.query(LOAN, lambda loan: loan.borrower_id == borrower_id and not loan.closed)
        )

    def list_for_borrower(self, borrower_id: str) -> list[LoanRecord]:
        return _newest_first(self._uow.query(LOAN, lambda loan: loan.borrower_id == borrower_id))

    def list_for_item(self, item_id: str) -> list[LoanRecord]:
        return _newest_first(self._uow.query(LOAN, lambda loan: loan.item_id == item_id))

    def list_all(self) -> list[LoanRecord]:
        return _newest_first(self._uow.query(LOAN, lambda loan: True))

    def save(self, loan: LoanRecord) -> None:
        if loan.id is None:
            loan.id = self._uow.next_loan_id()
        self._uow.stage(LOAN, loan)


def _newest_first(loans: list[LoanRecord]) -> list[LoanRecord]:
    return sorted(loans, key=lambda loan: (loan.loan_date, loan.id or 0), reverse=True)
