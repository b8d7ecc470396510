"""Missing-translation bookkeeping consumed by the build metrics.

The exporter only needs per-locale counts of recorded missing-string lookups.
Locale resolution itself happens elsewhere; renderers report misses into a
``TranslationCache`` while documents are built.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping


class TranslationCache(Protocol):
    """Per-locale counts of missing-string lookups."""

    @property
    def default_locale(self) -> str: ...

    def missing_counts(self) -> Mapping[str, int]: ...


class MissingTranslations:
    """Thread-safe recorder of distinct missing strings, keyed by locale id.

    Renderers running in worker threads call ``record()``; the exporter reads
    ``missing_counts()`` once, after promotion.

    Args:
        default_locale: Locale whose misses are expected (source strings) and
            therefore never reported.

    """

    __slots__ = ("_default_locale", "_lock", "_recorded")

    def __init__(self, default_locale: str = "en") -> None:
        self._default_locale = default_locale
        self._recorded: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    @property
    def default_locale(self) -> str:
        return self._default_locale

    def record(self, locale: str, string: str) -> None:
        """Record that ``string`` had no translation in ``locale``."""
        with self._lock:
            self._recorded.setdefault(locale, set()).add(string)

    def missing_counts(self) -> dict[str, int]:
        with self._lock:
            return {locale: len(strings) for locale, strings in self._recorded.items()}

    def clear(self) -> None:
        with self._lock:
            self._recorded.clear()
