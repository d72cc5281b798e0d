"""Retry-once policy for optimistic-concurrency conflicts.

A use case whose commit loses a race is re-run once from scratch, so its
precondition checks see the winner's committed state.  If it loses again
the conflict is reported to the caller as an ordinary rejected operation.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from lms.domain.exceptions import ConcurrencyConflict, DomainException

_log = logging.getLogger(__name__)

T = TypeVar("T")


def retry_on_conflict(
    operation: Callable[[], T],
    on_exhausted: Callable[[], DomainException],
) -> T:
    """Run ``operation``; on ConcurrencyConflict run it exactly once more.

    ``on_exhausted`` builds the exception raised when the second attempt
    conflicts as well.
    """
    try:
        return operation()
    except ConcurrencyConflict as exc:
        _log.info("Commit conflict, retrying with fresh state: %s", exc)

    try:
        return operation()
    except ConcurrencyConflict as exc:
        _log.warning("Commit conflict on retry, giving up: %s", exc)
        raise on_exhausted() from exc
