"""Clock abstraction — the only source of "today" for the use cases."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date


class Clock(ABC):

    @abstractmethod
    def today(self) -> date:
        """Return the current business date."""


class SystemClock(Clock):

    def today(self) -> date:
        return date.today()
