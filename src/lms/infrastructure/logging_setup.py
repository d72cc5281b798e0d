"""Logging configuration for the command line entry point.

Library modules only ever create module loggers; handlers and levels are
set here, once, by the CLI.
"""

from __future__ import annotations

import logging


def configure_logging(level: str = "WARNING", verbose: bool = False) -> None:
    logging.basicConfig(format="%(asctime)s %(levelname)-7s %(name)s: %(message)s")
    logging.getLogger().setLevel(logging.DEBUG if verbose else level)
