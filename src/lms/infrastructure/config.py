"""Runtime settings, read from environment variables.

Every value has a default so the CLI works out of the box against a data
file inside the repository.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_FILE = Path(__file__).resolve().parents[3] / "data" / "lending.json"


@dataclass(frozen=True)
class Settings:
    data_file: Path = _DEFAULT_DATA_FILE
    sweep_hour: int = 8
    reminder_hour: int = 9
    timezone: str = "UTC"
    log_level: str = "WARNING"

    @staticmethod
    def from_env() -> Settings:
        return Settings(
            data_file=Path(os.getenv("LMS_DATA_FILE", str(_DEFAULT_DATA_FILE))),
            sweep_hour=_hour("LMS_SWEEP_HOUR", 8),
            reminder_hour=_hour("LMS_REMINDER_HOUR", 9),
            timezone=os.getenv("LMS_TIMEZONE", "UTC"),
            log_level=os.getenv("LMS_LOG_LEVEL", "WARNING").upper(),
        )


def _hour(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer hour, got {raw!r}") from exc
    if not 0 <= value <= 23:
        raise ValueError(f"{name} must be between 0 and 23, got {value}")
    return value
