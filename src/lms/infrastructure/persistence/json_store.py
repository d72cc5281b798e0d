"""JSON-file-backed store.

All three collections live in one document so that a commit touching an
item, a borrower and a loan is written in a single ``os.replace``::

    {"items": [...], "borrowers": [...], "loans": [...],
     "id_marks": {"item": 7, "borrower": 3}}

Version checks and per-record locking are inherited from ``InMemoryStore``.
A commit is written to disk first and applied in memory only once the
file is replaced, so a failed write leaves both unchanged.  Because every
commit rewrites the whole file, commits on this store are additionally
serialized by a file lock.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import date
from decimal import Decimal
from pathlib import Path

from lms.domain.model.borrower import Borrower, MembershipStatus
from lms.domain.model.item import Availability, InventoryItem
from lms.domain.model.loan import LoanRecord, LoanStatus
from lms.domain.model.value_objects import Money
from lms.infrastructure.persistence.memory_store import (
    BORROWER,
    ITEM,
    LOAN,
    InMemoryStore,
    Key,
)

_log = logging.getLogger(__name__)


class JsonStore(InMemoryStore):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._file_lock = threading.Lock()
        self._ensure_file()
        raw = self._load_raw()
        super().__init__(
            items=[self._item_to_domain(r) for r in raw.get("items", [])],
            borrowers=[self._borrower_to_domain(r) for r in raw.get("borrowers", [])],
            loans=[self._loan_to_domain(r) for r in raw.get("loans", [])],
            id_marks=raw.get("id_marks"),
        )
        _log.debug("Loaded store from %s", self._file_path)

    def commit(self, writes: dict[Key, object | None], expected: dict[Key, int]) -> None:
        if not writes:
            return
        with self._file_lock:
            super().commit(writes, expected)

    def _apply(
        self,
        keys: list[Key],
        writes: dict[Key, object | None],
        expected: dict[Key, int],
    ) -> None:
        tables, id_marks = self._snapshot_after(writes, expected)
        self._persist_raw(
            {
                "items": [self._item_to_raw(i) for i in tables[ITEM]],
                "borrowers": [self._borrower_to_raw(b) for b in tables[BORROWER]],
                "loans": [self._loan_to_raw(loan) for loan in tables[LOAN]],
                "id_marks": id_marks,
            }
        )
        super()._apply(keys, writes, expected)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _item_to_raw(item: InventoryItem) -> dict:
        return {
            "id": item.id,
            "title": item.title,
            "external_id": item.external_id,
            "availability": item.availability.value,
            "version": item.version,
        }

    @staticmethod
    def _item_to_domain(raw: dict) -> InventoryItem:
        return InventoryItem(
            id=raw["id"],
            title=raw["title"],
            external_id=raw["external_id"],
            availability=Availability(raw["availability"]),
            version=raw.get("version", 1),
        )

    @staticmethod
    def _borrower_to_raw(borrower: Borrower) -> dict:
        return {
            "id": borrower.id,
            "name": borrower.name,
            "email": borrower.email,
            "membership_status": borrower.membership_status.value,
            "total_loans": borrower.total_loans,
            "member_since": borrower.member_since.isoformat(),
            "version": borrower.version,
        }

    @staticmethod
    def _borrower_to_domain(raw: dict) -> Borrower:
        return Borrower(
            id=raw["id"],
            name=raw["name"],
            email=raw["email"],
            membership_status=MembershipStatus(raw["membership_status"]),
            total_loans=raw.get("total_loans", 0),
            member_since=date.fromisoformat(raw["member_since"]),
            version=raw.get("version", 1),
        )

    @staticmethod
    def _loan_to_raw(loan: LoanRecord) -> dict:
        return {
            "id": loan.id,
            "item_id": loan.item_id,
            "borrower_id": loan.borrower_id,
            "loan_date": loan.loan_date.isoformat(),
            "due_date": loan.due_date.isoformat(),
            "return_date": loan.return_date.isoformat() if loan.return_date else None,
            "closed": loan.closed,
            "status": loan.status.value,
            "late_fee": str(loan.late_fee.amount),
            "version": loan.version,
        }

    @staticmethod
    def _loan_to_domain(raw: dict) -> LoanRecord:
        return_date = raw.get("return_date")
        return LoanRecord(
            id=raw["id"],
            item_id=raw["item_id"],
            borrower_id=raw["borrower_id"],
            loan_date=date.fromisoformat(raw["loan_date"]),
            due_date=date.fromisoformat(raw["due_date"]),
            return_date=date.fromisoformat(return_date) if return_date else None,
            closed=raw.get("closed", False),
            status=LoanStatus(raw["status"]),
            late_fee=Money(Decimal(raw.get("late_fee", "0.00"))),
            version=raw.get("version", 1),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, document: dict) -> None:
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp_path, self._file_path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(
                json.dumps({"items": [], "borrowers": [], "loans": []}, indent=2) + "\n",
                encoding="utf-8",
            )
