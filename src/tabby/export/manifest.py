"""Build manifest — content hashes of every output, and diffing between builds.

The manifest written by one export is the only input the next export uses to
classify its outputs as added, edited, unchanged, or deleted.  Diffing uses
set semantics: the order of ``files`` is not significant.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from tabby._errors import ManifestError
from tabby.export.pool import run_bounded
from tabby.vcs import Commit, CommitAuthor

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from tabby._types import OutputPath
    from tabby.export.paths import CreatedPath

_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class PathHash:
    """One output path and the SHA-1 hex digest of its bytes."""

    path: OutputPath
    sha: str


@dataclass(slots=True)
class BuildManifest:
    """Durable record of one export.

    Attributes:
        branch: VCS branch the build was made from, if known.
        built: ISO-8601 timestamp of the build.
        commit: VCS commit the build was made from, if known.
        files: One entry per output file, in no particular order.

    """

    branch: str | None = None
    built: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    commit: Commit | None = None
    files: list[PathHash] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        commit = None
        if self.commit is not None:
            commit = {
                "sha": self.commit.sha,
                "author": {
                    "name": self.commit.author.name,
                    "email": self.commit.author.email,
                },
                "message": self.commit.message,
            }
        return {
            "branch": self.branch,
            "built": self.built,
            "commit": commit,
            "files": [{"path": f.path, "sha": f.sha} for f in self.files],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuildManifest:
        raw_commit = data.get("commit")
        commit = None
        if raw_commit:
            author = raw_commit.get("author") or {}
            commit = Commit(
                sha=str(raw_commit["sha"]),
                author=CommitAuthor(
                    name=str(author.get("name", "")),
                    email=str(author.get("email", "")),
                ),
                message=str(raw_commit.get("message", "")),
            )
        return cls(
            branch=data.get("branch"),
            built=str(data.get("built", "")),
            commit=commit,
            files=[PathHash(path=f["path"], sha=f["sha"]) for f in data.get("files", [])],
        )


@dataclass(frozen=True, slots=True)
class BuildDiffPaths:
    """Classification of every output path against the previous build.

    The four tuples are disjoint.  ``deletes`` is always empty for
    incremental builds.

    """

    adds: tuple[OutputPath, ...] = ()
    edits: tuple[OutputPath, ...] = ()
    no_changes: tuple[OutputPath, ...] = ()
    deletes: tuple[OutputPath, ...] = ()

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "adds": list(self.adds),
            "edits": list(self.edits),
            "noChanges": list(self.no_changes),
            "deletes": list(self.deletes),
        }


@dataclass(frozen=True, slots=True)
class HashedOutput:
    """A staged file's digest and size."""

    created: CreatedPath
    sha: str
    size: int


def hash_file(path: Path) -> str:
    """Return the SHA-1 hex digest of a file, read in chunks."""
    digest = hashlib.sha1(usedforsecurity=False)
    with path.open("rb") as fh:
        while chunk := fh.read(_CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def _hash_and_stat(created: CreatedPath) -> HashedOutput:
    sha = hash_file(created.staging_path)
    size = created.staging_path.stat().st_size
    return HashedOutput(created=created, sha=sha, size=size)


async def hash_outputs(
    created_paths: Iterable[CreatedPath],
    *,
    limit: int = 2000,
) -> list[HashedOutput]:
    """Hash and stat every staged file with at most ``limit`` in flight."""

    async def _one(created: CreatedPath) -> HashedOutput:
        return await asyncio.to_thread(_hash_and_stat, created)

    return await run_bounded(created_paths, limit, _one)


def diff_manifests(
    existing: BuildManifest | None,
    new: BuildManifest,
    *,
    incremental: bool = False,
) -> BuildDiffPaths:
    """Classify every path of ``new`` (and, outside incremental mode, ``existing``).

    Algorithm:
        1. No existing manifest: every new path is an add.
        2. Otherwise look each new path up in the existing manifest: absent
           is an add, same digest is a no-change, different digest an edit.
        3. Paths only in the existing manifest are deletes, unless the build
           is incremental (it only saw a subset of the routes).

    """
    if existing is None:
        return BuildDiffPaths(adds=tuple(f.path for f in new.files))

    existing_shas = {f.path: f.sha for f in existing.files}
    adds: list[str] = []
    edits: list[str] = []
    no_changes: list[str] = []
    for path_hash in new.files:
        previous = existing_shas.get(path_hash.path)
        if previous is None:
            adds.append(path_hash.path)
        elif previous == path_hash.sha:
            no_changes.append(path_hash.path)
        else:
            edits.append(path_hash.path)

    deletes: list[str] = []
    if not incremental:
        new_paths = {f.path for f in new.files}
        deletes = [f.path for f in existing.files if f.path not in new_paths]

    return BuildDiffPaths(
        adds=tuple(adds),
        edits=tuple(edits),
        no_changes=tuple(no_changes),
        deletes=tuple(deletes),
    )


def read_manifest(path: Path) -> BuildManifest | None:
    """Load the previous build's manifest, or ``None`` if there is none.

    Raises:
        ManifestError: If the file exists but cannot be parsed.

    """
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return BuildManifest.from_dict(data)
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
        msg = f"Failed to read build manifest {path}: {exc}"
        raise ManifestError(msg) from exc


def write_json(path: Path, data: dict[str, Any]) -> Path:
    """Pretty-print ``data`` to ``path`` atomically (temp file + rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp")
    tmp.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    os.replace(tmp, path)
    return path
