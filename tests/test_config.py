"""Tests for tabby.config."""

from pathlib import Path

import pytest

from tabby._errors import ConfigError
from tabby.config import TabbyConfig


class TestTabbyConfig:
    """TabbyConfig — frozen dataclass with sensible defaults."""

    def test_defaults(self) -> None:
        config = TabbyConfig()
        assert config.output == Path("build")
        assert config.control_dir == ".tabby"
        assert config.tmp_dir is None
        assert config.build_concurrency == 40
        assert config.copy_concurrency == 2000
        assert config.move_progress_threshold == 1000
        assert config.progress is None
        assert config.vcs is True
        assert config.keep_failed_staging is False

    def test_frozen(self) -> None:
        config = TabbyConfig()
        with pytest.raises(AttributeError):
            config.build_concurrency = 1  # type: ignore[misc]

    def test_paths_resolve_from_root(self, tmp_path: Path) -> None:
        config = TabbyConfig(root=tmp_path)
        assert config.output_path == tmp_path / "build"
        assert config.control_path == tmp_path / "build" / ".tabby"
        assert config.manifest_path == tmp_path / "build" / ".tabby" / "manifest.json"
        assert config.metrics_path == tmp_path / "build" / ".tabby" / "metrics.json"
        assert config.benchmark_path == tmp_path / "build" / ".tabby" / "benchmark.txt"

    def test_absolute_output_preserved(self, tmp_path: Path) -> None:
        output = Path("/tmp/custom-output")
        config = TabbyConfig(root=tmp_path, output=output)
        assert config.output_path == output

    def test_custom_control_dir(self, tmp_path: Path) -> None:
        config = TabbyConfig(root=tmp_path, control_dir="_meta")
        assert config.manifest_path == tmp_path / "build" / "_meta" / "manifest.json"

    def test_relative_root_resolved_to_absolute(self) -> None:
        config = TabbyConfig(root=Path("site"))
        assert config.root.is_absolute()

    def test_absolute_root_unchanged(self, tmp_path: Path) -> None:
        config = TabbyConfig(root=tmp_path)
        assert config.root == tmp_path

    @pytest.mark.parametrize("field", ["build_concurrency", "copy_concurrency"])
    def test_concurrency_must_be_positive(self, field: str) -> None:
        with pytest.raises(ConfigError, match=field):
            TabbyConfig(**{field: 0})  # type: ignore[arg-type]

    def test_negative_threshold_rejected(self) -> None:
        with pytest.raises(ConfigError, match="move_progress_threshold"):
            TabbyConfig(move_progress_threshold=-1)

    def test_zero_threshold_allowed(self) -> None:
        assert TabbyConfig(move_progress_threshold=0).move_progress_threshold == 0
