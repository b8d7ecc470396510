"""Promotion — move staged files into the output directory.

A move is an atomic ``os.replace``.  When the staging tree and the output
directory live on different filesystems the rename is impossible; the file is
then copied next to its destination, swapped in with ``os.replace``, and the
staged copy removed.  Either way a reader never sees a half-written output.
"""

from __future__ import annotations

import asyncio
import errno
import shutil
from typing import TYPE_CHECKING

from tabby._errors import PromotionError
from tabby.export.pool import run_bounded

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from tabby.export.paths import CreatedPath


def move_file(source: Path, destination: Path) -> bool:
    """Move ``source`` to ``destination``.

    Returns True if the cross-device copy fallback was used.

    Raises:
        PromotionError: If the file cannot be moved for any other reason.

    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            source.replace(destination)
            return False
        except OSError as exc:
            if exc.errno != errno.EXDEV:
                raise

        tmp = destination.with_name(f".{destination.name}.tabby-tmp")
        try:
            shutil.copyfile(source, tmp)
            tmp.replace(destination)
        finally:
            tmp.unlink(missing_ok=True)
        source.unlink(missing_ok=True)
        return True
    except OSError as exc:
        msg = f"Failed to move {source} to {destination}: {exc}"
        raise PromotionError(msg) from exc


class Promoter:
    """Moves staged files to their final locations with bounded concurrency.

    Args:
        limit: Maximum number of moves in flight.
        on_complete: Called once after each successful move.

    """

    __slots__ = ("_limit", "_on_complete")

    def __init__(
        self,
        *,
        limit: int = 2000,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self._limit = limit
        self._on_complete = on_complete

    async def run(self, created_paths: Iterable[CreatedPath]) -> int:
        """Promote every staged file; return how many needed the copy fallback."""
        fallbacks = await run_bounded(created_paths, self._limit, self._move_one)
        return sum(fallbacks)

    async def _move_one(self, created: CreatedPath) -> bool:
        copied = await asyncio.to_thread(move_file, created.staging_path, created.final_path)
        if self._on_complete is not None:
            self._on_complete()
        return copied
