# pyright: reportUnusedFunction=false

from __future__ import annotations

from collections.abc import Iterator, Mapping
import os
from pathlib import Path
import shutil
import subprocess

import pytest

from mxm.branchgraph.errors import OracleError
from mxm.branchgraph.types import CommitId


class FakeHistory:
    """
    In-memory commit DAG with a `git merge-base`-like query.

    `parents` maps each commit to its parent commits. The merge-base of two
    commits is the common ancestor that is not an ancestor of another common
    ancestor (smallest id if several). Every query is counted per ordered
    argument pair.
    """

    def __init__(self, parents: Mapping[str, list[str]]) -> None:
        self.parents = {CommitId(k): [CommitId(p) for p in v] for k, v in parents.items()}
        self.calls: list[tuple[CommitId, CommitId]] = []

    def ancestors(self, commit: CommitId) -> set[CommitId]:
        """`commit` and everything reachable through parents."""
        seen: set[CommitId] = set()
        stack = [commit]
        while stack:
            c = stack.pop()
            if c in seen:
                continue
            seen.add(c)
            stack.extend(self.parents.get(c, []))
        return seen

    def merge_base(self, lhs: CommitId, rhs: CommitId) -> CommitId:
        self.calls.append((lhs, rhs))
        if lhs not in self.parents or rhs not in self.parents:
            raise OracleError(lhs, rhs, "unknown commit")
        common = self.ancestors(lhs) & self.ancestors(rhs)
        if not common:
            raise OracleError(lhs, rhs, "no common ancestor")
        best = [
            c
            for c in common
            if not any(c != o and c in self.ancestors(o) for o in common)
        ]
        return min(best)


@pytest.fixture
def make_history() -> type[FakeHistory]:
    return FakeHistory


# --- git-backed fixtures ------------------------------------------------------

_GIT_ENV = {
    "GIT_AUTHOR_NAME": "Test",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test",
    "GIT_COMMITTER_EMAIL": "test@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def git(repo: Path, *args: str) -> str:
    env = {**os.environ, **_GIT_ENV, "HOME": str(repo.parent)}
    out = subprocess.run(
        ["git", "-C", str(repo), *args],
        check=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        env=env,
    )
    return out.stdout.strip()


def commit(repo: Path, message: str) -> str:
    git(repo, "commit", "--allow-empty", "-q", "-m", message)
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture
def git_repo(tmp_path: Path) -> Iterator[dict[str, str | Path]]:
    """
    A small repository:

        root -- main
            \\-- feature -- topic

    `feature` tracks `origin/feature`, where `origin/feature` is a
    remote-tracking ref left at `root`.
    """
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")

    root = commit(repo, "root")
    git(repo, "branch", "feature")
    main = commit(repo, "main work")

    git(repo, "checkout", "-q", "feature")
    feature = commit(repo, "feature work")
    git(repo, "checkout", "-q", "-b", "topic")
    topic = commit(repo, "topic work")
    git(repo, "checkout", "-q", "main")

    git(repo, "update-ref", "refs/remotes/origin/feature", root)
    git(repo, "config", "branch.feature.remote", "origin")
    git(repo, "config", "branch.feature.merge", "refs/heads/feature")

    yield {
        "path": repo,
        "root": root,
        "main": main,
        "feature": feature,
        "topic": topic,
    }


@pytest.fixture
def orphan_repo(git_repo: dict[str, str | Path]) -> dict[str, str | Path]:
    """`git_repo` plus a branch `island` with an unrelated history."""
    repo = Path(git_repo["path"])
    git(repo, "checkout", "-q", "--orphan", "island")
    island = commit(repo, "island root")
    git(repo, "checkout", "-q", "main")
    return {**git_repo, "island": island}
