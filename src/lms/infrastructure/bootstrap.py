"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from lms.application.clock import Clock, SystemClock
from lms.domain.repository.unit_of_work import UnitOfWork, UnitOfWorkFactory
from lms.infrastructure.config import Settings
from lms.infrastructure.notifications import LoggingNotifier
from lms.infrastructure.persistence.json_store import JsonStore
from lms.infrastructure.persistence.memory_store import InMemoryUnitOfWork


@lru_cache(maxsize=1)
def settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=1)
def store() -> JsonStore:
    return JsonStore(settings().data_file)


def unit_of_work_factory() -> UnitOfWorkFactory:
    json_store = store()

    def _factory() -> UnitOfWork:
        return InMemoryUnitOfWork(json_store)

    return _factory


def clock() -> Clock:
    return SystemClock()


def notifier() -> LoggingNotifier:
    return LoggingNotifier()
