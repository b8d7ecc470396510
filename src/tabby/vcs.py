"""Git metadata recorded in the build manifest."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True, slots=True)
class CommitAuthor:
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class Commit:
    sha: str
    author: CommitAuthor
    message: str


def _git(root: Path, *args: str) -> str | None:
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        )
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError):
        return None
    return result.stdout.strip()


def read_vcs_info(root: Path) -> tuple[str | None, Commit | None]:
    """Return the current branch and HEAD commit for ``root``.

    Returns ``(None, None)`` when ``root`` is not inside a git repository or
    git is not installed.  A detached HEAD yields a ``None`` branch.

    """
    head = _git(root, "log", "-1", "--format=%H%n%an%n%ae%n%s")
    if not head:
        return None, None

    sha, name, email, message = (head.split("\n", 3) + ["", "", ""])[:4]
    commit = Commit(sha=sha, author=CommitAuthor(name=name, email=email), message=message)

    branch = _git(root, "rev-parse", "--abbrev-ref", "HEAD")
    if branch == "HEAD":
        branch = None
    return branch, commit
