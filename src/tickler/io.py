"""Console output helpers for command modules."""

from __future__ import annotations

import sys
from typing import NoReturn

from . import log


def say(message: str) -> None:
    """Print a plain line to stdout, unaffected by the log level."""
    print(message)


def die(message: str, code: int = 1) -> NoReturn:
    """Log an error and exit with ``code``."""
    log.error(f"error: {message}")
    sys.exit(code)
