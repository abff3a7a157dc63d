"""
Git collaborators: repository handle, branch discovery and merge-base queries.

Everything here shells out to the `git` binary with an explicit
``git -C <directory>``; nothing reads the process working directory or
global state, the :class:`RepositoryHandle` carries the location.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import subprocess

from mxm.branchgraph.errors import (
    BranchGraphError,
    BranchResolutionError,
    InvalidRepositoryError,
    OracleError,
)
from mxm.branchgraph.types import BranchLabels, CommitId

__all__ = [
    "GitBranchSource",
    "RepositoryHandle",
    "branch_config",
    "git_merge_base",
    "local_branch_names",
    "open_repository",
    "remote_tracking_alias",
    "resolve_branch",
    "run_git",
]

logger = logging.getLogger("mxm.branchgraph.repository")

_HEADS_PREFIX = "refs/heads/"


@dataclass(frozen=True)
class RepositoryHandle:
    directory: Path
    git_dir: Path


def _stderr_of(exc: subprocess.CalledProcessError) -> str:
    return (exc.stderr or "").strip() or f"exit status {exc.returncode}"


def run_git(handle: RepositoryHandle, *args: str) -> str:
    """
    Run a git command inside the repository and return its stripped stdout.

    Raises
    ------
    subprocess.CalledProcessError
        If git exits non-zero.
    """
    cmd = ["git", "-C", str(handle.directory), *args]
    logger.debug("running %s", " ".join(cmd))
    result = subprocess.run(
        cmd,
        check=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    return result.stdout.strip()


def open_repository(directory: Path | str) -> RepositoryHandle:
    """
    Validate `directory` as the top level of a git working tree and return
    a handle for it.

    Raises
    ------
    InvalidRepositoryError
        If the path is not a directory, git does not recognize it, or it is
        a subdirectory of a working tree rather than its top level.
    """
    path = Path(directory)
    if not path.is_dir():
        raise InvalidRepositoryError(f"Not a directory: {str(path)!r}")

    try:
        out = subprocess.run(
            ["git", "-C", str(path), "rev-parse", "--show-toplevel", "--git-dir"],
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        ).stdout.strip()
    except (OSError, subprocess.CalledProcessError) as exc:
        raise InvalidRepositoryError(f"Not a git directory: {str(path)!r}") from exc

    toplevel, _, git_dir_out = out.partition("\n")
    if Path(toplevel).resolve() != path.resolve():
        raise InvalidRepositoryError(
            f"Not a repository root: {str(path)!r} (top level is {toplevel!r})"
        )

    git_dir = Path(git_dir_out.strip())
    if not git_dir.is_absolute():
        git_dir = path / git_dir
    return RepositoryHandle(directory=path, git_dir=git_dir)


def git_merge_base(
    handle: RepositoryHandle, lhs: CommitId, rhs: CommitId
) -> CommitId:
    """
    Return `git merge-base lhs rhs`.

    Raises
    ------
    OracleError
        If git fails or reports no common ancestor.
    """
    try:
        out = run_git(handle, "merge-base", lhs, rhs)
    except subprocess.CalledProcessError as exc:
        raise OracleError(lhs, rhs, _stderr_of(exc)) from exc
    if not out:
        raise OracleError(lhs, rhs, "no common ancestor")
    return CommitId(out)


def resolve_branch(handle: RepositoryHandle, name: str) -> CommitId:
    """
    Return the commit a branch (or any revision) points at.

    Raises
    ------
    BranchResolutionError
        If git cannot resolve `name`.
    """
    try:
        out = run_git(handle, "rev-list", "--max-count=1", name, "--")
    except subprocess.CalledProcessError as exc:
        raise BranchResolutionError(name, _stderr_of(exc)) from exc
    if not out:
        raise BranchResolutionError(name, "no commit")
    return CommitId(out)


def local_branch_names(handle: RepositoryHandle) -> list[str]:
    """Names of all local branches (`refs/heads/*`), in ref order."""
    try:
        out = run_git(
            handle, "for-each-ref", "--format=%(refname:short)", "refs/heads"
        )
    except subprocess.CalledProcessError as exc:
        raise BranchGraphError(f"Unable to list branches: {_stderr_of(exc)}") from exc
    return [line for line in out.splitlines() if line]


def branch_config(handle: RepositoryHandle) -> dict[str, dict[str, str]]:
    """
    Return the `branch.<name>.<key>` configuration as `{name: {key: value}}`.

    Later values win for multi-valued keys. A repository without any
    branch section yields an empty mapping.
    """
    try:
        out = run_git(handle, "config", "--get-regexp", r"^branch\.")
    except subprocess.CalledProcessError as exc:
        # Exit status 1 means no matching key.
        if exc.returncode != 1:
            logger.warning("ignoring branch configuration: %s", _stderr_of(exc))
        return {}

    config: dict[str, dict[str, str]] = {}
    for line in out.splitlines():
        key, _, value = line.partition(" ")
        # branch names may contain dots; the key never does
        section, _, var = key.rpartition(".")
        name = section[len("branch.") :]
        if not name or not var:
            logger.warning("ignoring malformed config entry %r", line)
            continue
        config.setdefault(name, {})[var] = value
    return config


def remote_tracking_alias(
    config: dict[str, dict[str, str]], branch: str
) -> str | None:
    """
    Return `<remote>/<merge target>` for a local branch, if configured.

    The merge target is `branch.<name>.merge` stripped of `refs/heads/`;
    targets outside `refs/heads/` have no alias.
    """
    section = config.get(branch, {})
    remote = section.get("remote")
    merge = section.get("merge")
    if not remote or not merge or not merge.startswith(_HEADS_PREFIX):
        return None
    return f"{remote}/{merge[len(_HEADS_PREFIX):]}"


class GitBranchSource:
    """
    Collects branch tips of a repository into a :data:`BranchLabels` map.

    Branches requested explicitly must resolve; branches found by discovery
    and their remote-tracking aliases are skipped with a warning when they
    do not.
    """

    def __init__(self, handle: RepositoryHandle, remote: bool = False):
        self.handle = handle
        self.remote = remote
        self.branch_names: list[str] = []
        self.labels: BranchLabels = {}
        self._config: dict[str, dict[str, str]] | None = None

    def _branch_config(self) -> dict[str, dict[str, str]]:
        if self._config is None:
            self._config = branch_config(self.handle)
        return self._config

    def _record(self, name: str, explicit: bool) -> bool:
        try:
            commit = resolve_branch(self.handle, name)
        except BranchResolutionError as exc:
            if explicit:
                raise
            logger.warning("skipping branch %s: %s", name, exc)
            return False

        logger.debug("add_branch: %s -> %s", name, commit)
        self.branch_names.append(name)
        self.labels.setdefault(commit, set()).add(name)
        return True

    def add_branch(self, name: str, explicit: bool = True) -> None:
        """
        Resolve a local branch and record it, plus its remote alias in
        remote mode.

        Raises
        ------
        BranchResolutionError
            If `explicit` and the branch does not resolve.
        """
        if not self._record(name, explicit):
            return
        if not self.remote:
            return
        alias = remote_tracking_alias(self._branch_config(), name)
        if alias is not None:
            self._record(alias, explicit=False)

    def discover(self) -> BranchLabels:
        """Record every local branch and return the labels map."""
        for name in local_branch_names(self.handle):
            self.add_branch(name, explicit=False)
        return self.labels
