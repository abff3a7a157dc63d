"""mxm-branchgraph error types."""

from __future__ import annotations

__all__ = [
    "BranchGraphError",
    "BranchResolutionError",
    "InvalidRepositoryError",
    "NoRootError",
    "OracleError",
]


class BranchGraphError(Exception):
    """Base class for every error raised by mxm-branchgraph."""


class InvalidRepositoryError(BranchGraphError):
    """Raised when a path is not a recognizable git repository."""


class OracleError(BranchGraphError):
    """Raised when the merge-base of two commits cannot be resolved.

    Typical causes are an invalid object name or two commits with
    disjoint histories. Fatal for the run: the closure is undefined.

    Attributes:
        lhs: First commit of the failed query.
        rhs: Second commit of the failed query.
    """

    def __init__(self, lhs: str, rhs: str, reason: str | None = None) -> None:
        self.lhs = lhs
        self.rhs = rhs
        msg = f"Unable to determine merge-base of {lhs} and {rhs}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class NoRootError(BranchGraphError):
    """Raised when no node of a closure is free of recorded parents."""


class BranchResolutionError(BranchGraphError):
    """Raised when a branch name cannot be resolved to a commit.

    Attributes:
        branch: The branch name that failed to resolve.
    """

    def __init__(self, branch: str, reason: str | None = None) -> None:
        self.branch = branch
        msg = f"Unknown branch: {branch}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)
