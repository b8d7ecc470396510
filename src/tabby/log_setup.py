"""Centralized logging configuration for Tabby."""

from __future__ import annotations

import logging
import os
from typing import Final

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["configure_logging", "console"]

_LOG_LEVEL_ENV: Final[str] = "TABBY_LOG_LEVEL"
_DEFAULT_LEVEL_NAME: Final[str] = "INFO"
_MANAGED_ATTR: Final[str] = "_tabby_managed"

console = Console(stderr=True)


def _resolve_level() -> int:
    """Return the logging level defined via environment variable."""
    level_name = os.getenv(_LOG_LEVEL_ENV, _DEFAULT_LEVEL_NAME).upper()
    level = getattr(logging, level_name, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> None:
    """Configure logging once with a Rich handler.

    Safe to call repeatedly: the managed handler is installed only once and
    handlers added by the host application are left alone.
    """
    root_logger = logging.getLogger()

    if not any(getattr(h, _MANAGED_ATTR, False) for h in root_logger.handlers):
        handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        setattr(handler, _MANAGED_ATTR, True)
        root_logger.addHandler(handler)

    root_logger.setLevel(_resolve_level())
    logging.captureWarnings(True)
