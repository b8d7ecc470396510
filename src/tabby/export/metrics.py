"""Build metrics — output sizes, route counts, memory, missing translations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import psutil

if TYPE_CHECKING:
    from tabby.translations import TranslationCache


@dataclass(slots=True)
class BuildMetrics:
    """Snapshot of one export (not cumulative across builds).

    Attributes:
        memory_usage: Resident set size of the process after promotion, in bytes.
        locales_to_num_missing_translations: Missing-string count per locale
            (default locale and zero counts omitted).
        num_missing_translations: Sum of the per-locale counts.
        num_document_routes: Number of rendered outputs.
        num_static_routes: Number of copied outputs.
        output_size_documents: Total bytes of rendered outputs.
        output_size_static_files: Total bytes of copied outputs.

    """

    memory_usage: int = 0
    locales_to_num_missing_translations: dict[str, int] = field(default_factory=dict)
    num_missing_translations: int = 0
    num_document_routes: int = 0
    num_static_routes: int = 0
    output_size_documents: int = 0
    output_size_static_files: int = 0

    def record_output(self, *, static: bool, size: int) -> None:
        """Count one output file of ``size`` bytes."""
        if static:
            self.num_static_routes += 1
            self.output_size_static_files += size
        else:
            self.num_document_routes += 1
            self.output_size_documents += size

    def to_dict(self) -> dict[str, Any]:
        return {
            "memoryUsage": self.memory_usage,
            "localesToNumMissingTranslations": dict(self.locales_to_num_missing_translations),
            "numMissingTranslations": self.num_missing_translations,
            "numDocumentRoutes": self.num_document_routes,
            "numStaticRoutes": self.num_static_routes,
            "outputSizeDocuments": self.output_size_documents,
            "outputSizeStaticFiles": self.output_size_static_files,
        }


def memory_usage() -> int:
    """Return the resident set size of this process in bytes."""
    return psutil.Process().memory_info().rss


def collect_missing_translations(metrics: BuildMetrics, cache: TranslationCache) -> None:
    """Copy non-default, non-zero missing-string counts into ``metrics``."""
    per_locale: dict[str, int] = {}
    total = 0
    for locale, count in cache.missing_counts().items():
        if locale == cache.default_locale or count <= 0:
            continue
        per_locale[locale] = count
        total += count
    metrics.locales_to_num_missing_translations = per_locale
    metrics.num_missing_translations = total
