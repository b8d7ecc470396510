"""Tests for tabby.banner — start banner and export summary output."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import patch

from tabby.banner import format_bytes, print_banner, print_export_summary
from tabby.config import TabbyConfig
from tabby.export.builder import BuildResult
from tabby.export.manifest import BuildDiffPaths, BuildManifest
from tabby.export.metrics import BuildMetrics


class TestFormatBytes:
    """format_bytes — human readable sizes in powers of 1024."""

    def test_zero(self) -> None:
        assert format_bytes(0) == "0 Bytes"

    def test_bytes(self) -> None:
        assert format_bytes(100) == "100 Bytes"

    def test_kilobytes(self) -> None:
        assert format_bytes(1536) == "1.5 KB"

    def test_megabytes_trailing_zeros_trimmed(self) -> None:
        assert format_bytes(1024 * 1024) == "1 MB"

    def test_decimals(self) -> None:
        assert format_bytes(1234567, decimals=1) == "1.2 MB"


class TestPrintBanner:
    """Tests for the start banner."""

    def _capture_banner(self, **kwargs: object) -> str:
        buf = io.StringIO()
        with patch.object(sys, "stderr", buf):
            config = TabbyConfig(root=Path("/tmp/test-site"))
            print_banner(config, **kwargs)  # type: ignore[arg-type]
        return buf.getvalue()

    def test_build_mode_banner(self) -> None:
        output = self._capture_banner()

        assert "Tabby" in output
        assert "[build]" in output
        assert "/tmp/test-site" in output
        assert "output:" in output
        assert "patterns:" not in output

    def test_incremental_banner(self) -> None:
        output = self._capture_banner(patterns=("/blog/**", "*.md"))

        assert "[incremental]" in output
        assert "patterns: /blog/**, *.md" in output

    def test_plugin_count(self) -> None:
        assert "1 plugin" in self._capture_banner(plugin_count=1)
        assert "3 plugins" in self._capture_banner(plugin_count=3)


class TestPrintExportSummary:
    """Tests for the post-export summary."""

    def _result(self, **metrics: object) -> BuildResult:
        return BuildResult(
            metrics=BuildMetrics(**metrics),  # type: ignore[arg-type]
            manifest=BuildManifest(),
            diff=BuildDiffPaths(adds=("/a.html",), edits=("/b.html", "/c.html")),
        )

    def _capture(self, result: BuildResult, **kwargs: object) -> str:
        buf = io.StringIO()
        with patch.object(sys, "stderr", buf):
            print_export_summary(result, Path("/tmp/out"), **kwargs)  # type: ignore[arg-type]
        return buf.getvalue()

    def test_counts_and_sizes(self) -> None:
        output = self._capture(self._result(
            memory_usage=2048,
            num_document_routes=2,
            output_size_documents=1536,
            num_static_routes=1,
            output_size_static_files=100,
        ))

        assert "Memory usage: 2 KB" in output
        assert "Documents: 2 (1.5 KB)" in output
        assert "Static files: 1 (100 Bytes)" in output
        assert "1 add, 2 edits, 0 deletes" in output
        assert "Build complete: /tmp/out" in output

    def test_empty_sections_omitted(self) -> None:
        output = self._capture(self._result())

        assert "Documents:" not in output
        assert "Static files:" not in output
        assert "Missing translations:" not in output

    def test_incremental_marker(self) -> None:
        output = self._capture(self._result(num_document_routes=1), incremental=True)
        assert "*incremental build" in output

    def test_missing_translations_sorted(self) -> None:
        output = self._capture(self._result(
            locales_to_num_missing_translations={"fr": 1, "de": 2},
            num_missing_translations=3,
        ))
        assert "Missing translations: de (2), fr (1)" in output
