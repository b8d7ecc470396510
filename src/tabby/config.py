"""Tabby configuration.

TabbyConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path

from tabby._errors import ConfigError


@dataclass(frozen=True, slots=True)
class TabbyConfig:
    """Configuration for a Tabby export.

    Attributes:
        root: Path to the site root directory. Always resolved to an absolute
              path on construction.
        output: Output directory for the export (relative to ``root`` unless
            absolute).
        control_dir: Name of the control subdirectory inside the output
            directory (holds ``manifest.json``, ``metrics.json``, ...).
        tmp_dir: Parent directory for the per-export staging tree.  ``None``
            uses the system temporary directory.
        build_concurrency: Maximum routes staged (copied or rendered) at once.
        copy_concurrency: Maximum files hashed, and separately moved, at once.
        move_progress_threshold: Minimum artifact count before the move
            progress bar is shown.
        progress: Show progress bars.  ``None`` auto-detects a terminal.
        vcs: Record the git branch and commit in the manifest.
        keep_failed_staging: Leave the staging tree on disk when an export
            fails, for postmortem inspection.

    """

    root: Path = field(default_factory=Path.cwd)
    output: Path = field(default_factory=lambda: Path("build"))
    control_dir: str = ".tabby"
    tmp_dir: Path | None = None
    build_concurrency: int = 40
    copy_concurrency: int = 2000
    move_progress_threshold: int = 1000
    progress: bool | None = None
    vcs: bool = True
    keep_failed_staging: bool = False

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        for name in ("build_concurrency", "copy_concurrency"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                msg = f"{name} must be a positive integer, got {value!r}"
                raise ConfigError(msg)
        if self.move_progress_threshold < 0:
            msg = (
                "move_progress_threshold must not be negative, "
                f"got {self.move_progress_threshold!r}"
            )
            raise ConfigError(msg)

    @property
    def output_path(self) -> Path:
        """Absolute path to output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

    @property
    def control_path(self) -> Path:
        """Absolute path to the control directory inside the output."""
        return self.output_path / self.control_dir

    @property
    def manifest_path(self) -> Path:
        return self.control_path / "manifest.json"

    @property
    def metrics_path(self) -> Path:
        return self.control_path / "metrics.json"

    @property
    def benchmark_path(self) -> Path:
        return self.control_path / "benchmark.txt"
