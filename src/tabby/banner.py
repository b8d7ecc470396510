"""Terminal output — start banner and export summary.

Detects ``NO_COLOR`` / ``TERM`` for safe fallback to plain text.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from tabby._types import TabbyMode
    from tabby.config import TabbyConfig
    from tabby.export.builder import BuildResult


# ---------------------------------------------------------------------------
# ANSI helpers, respecting NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_BLUE = "\033[34m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_RED = "\033[31m" if _COLOR else ""
_ORANGE = "\033[38;5;214m" if _COLOR else ""


def format_bytes(size: int, decimals: int = 2) -> str:
    """Render a byte count as ``"1.5 KB"``-style text (powers of 1024)."""
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB", "TB", "PB")
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {units[index]}"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: TabbyConfig,
    *,
    patterns: Sequence[str] | None = None,
    plugin_count: int = 0,
) -> None:
    """Print the Tabby start banner to stderr.

    Args:
        config: Resolved TabbyConfig.
        patterns: Glob patterns of an incremental export, if any.
        plugin_count: Number of registered build plugins.

    """
    from tabby import __version__

    mode: TabbyMode = "incremental" if patterns is not None else "build"
    color = _YELLOW if patterns is not None else _GREEN
    header = (
        f"  {_ORANGE}{_BOLD}Tabby{_RESET} {_DIM}v{__version__}{_RESET}  "
        f"{color}[{mode}]{_RESET}"
    )

    lines: list[str] = [
        "",
        header,
        f"  {_DIM}{'─' * 43}{_RESET}",
        f"  {_DIM}├─{_RESET} root: {_DIM}{config.root}{_RESET}",
    ]
    if patterns is not None:
        lines.append(f"  {_DIM}├─{_RESET} patterns: {', '.join(patterns)}")
    if plugin_count > 0:
        lines.append(f"  {_DIM}├─{_RESET} {_plural(plugin_count, 'plugin')}")
    lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}")
    lines.append("")

    print("\n".join(lines), file=sys.stderr)


def print_export_summary(
    result: BuildResult,
    output_dir: Path,
    *,
    incremental: bool = False,
) -> None:
    """Print export completion summary to stderr."""
    metrics = result.metrics
    diff = result.diff

    lines = [
        "",
        f"{_BLUE}Memory usage:{_RESET} {format_bytes(metrics.memory_usage)}",
    ]
    if metrics.num_document_routes:
        marker = " *incremental build" if incremental else ""
        lines.append(
            f"{_BLUE}Documents:{_RESET} {metrics.num_document_routes} "
            f"({format_bytes(metrics.output_size_documents)}){marker}"
        )
    if metrics.num_static_routes:
        lines.append(
            f"{_BLUE}Static files:{_RESET} {metrics.num_static_routes} "
            f"({format_bytes(metrics.output_size_static_files)})"
        )
    if metrics.num_missing_translations:
        per_locale = ", ".join(
            f"{locale} ({count})"
            for locale, count in sorted(metrics.locales_to_num_missing_translations.items())
        )
        lines.append(f"{_BLUE}Missing translations:{_RESET} {per_locale}")
    lines.append(
        f"{_BLUE}Changes:{_RESET} "
        f"{_GREEN}{_plural(len(diff.adds), 'add')}{_RESET}, "
        f"{_YELLOW}{_plural(len(diff.edits), 'edit')}{_RESET}, "
        f"{_RED}{_plural(len(diff.deletes), 'delete')}{_RESET}"
    )
    lines.append(f"{_BLUE}Build complete:{_RESET} {output_dir}")

    print("\n".join(lines), file=sys.stderr)
