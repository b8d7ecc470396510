"""Export layer: stage, hash, diff, promote, and clean build outputs.

Writes every route to a private staging tree first and only moves finished
files into the output directory once the whole build has succeeded.
"""

from tabby.export.builder import Builder, BuildResult, BuildState, ExportOptions
from tabby.export.manifest import BuildDiffPaths, BuildManifest, PathHash
from tabby.export.metrics import BuildMetrics
from tabby.vcs import Commit, CommitAuthor

__all__ = [
    "BuildDiffPaths",
    "BuildManifest",
    "BuildMetrics",
    "BuildResult",
    "BuildState",
    "Builder",
    "Commit",
    "CommitAuthor",
    "ExportOptions",
    "PathHash",
]
