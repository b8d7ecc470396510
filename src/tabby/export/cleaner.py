"""Cleanup — remove stale outputs and the staging tree."""

from __future__ import annotations

import logging
import posixpath
import shutil
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from tabby._types import OutputPath

logger = logging.getLogger(__name__)


def delete_output_files(output_dir: Path, paths: Iterable[OutputPath]) -> int:
    """Delete stale outputs and return how many files were removed.

    A file that is already gone counts as cleaned.  Any other failure is
    logged as a warning and the remaining paths are still processed.  After
    each deletion the file's immediate parent directory is removed if it is
    now empty (the output directory itself is never removed).  Paths that
    resolve outside ``output_dir`` are skipped with a warning.

    """
    deleted = 0
    for output_path in paths:
        relative = posixpath.normpath(output_path.lstrip("/"))
        if relative.startswith("../") or relative in ("..", "."):
            logger.warning("Skipping stale output %s: outside the output directory", output_path)
            continue
        target = output_dir / relative
        try:
            target.unlink()
            deleted += 1
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning(
                "Unable to delete stale output %s (%s). Avoid manually editing "
                "files in the build output directory.",
                target,
                exc,
            )
            continue

        parent = target.parent
        if parent == output_dir or not parent.is_dir():
            continue
        try:
            if not any(parent.iterdir()):
                parent.rmdir()
        except OSError as exc:
            logger.warning("Unable to remove empty directory %s (%s)", parent, exc)

    return deleted


def remove_staging_root(path: Path) -> None:
    """Recursively delete the staging tree."""
    if path.exists():
        shutil.rmtree(path)
