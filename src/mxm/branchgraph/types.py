"""
Lightweight types and protocols for mxm-branchgraph.

This module intentionally contains *only* typing constructs (aliases,
NewTypes, Protocols) so that the engine modules and the git collaborators
can share them without importing each other.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import NewType, Protocol, runtime_checkable

__all__ = [
    "Adjacency",
    "BranchLabels",
    "BranchSource",
    "CommitId",
    "MergeBaseFn",
]

# Opaque commit identifier (a hex object name for git). Ordering is plain
# string ordering and is only used to canonicalize unordered pairs.
CommitId = NewType("CommitId", str)

# commit -> branch names pointing at it (local and remote-tracking aliases)
BranchLabels = dict[CommitId, set[str]]

# commit -> set of adjacent commits (children or parents)
Adjacency = dict[CommitId, set[CommitId]]

# Black-box common-ancestor query over two commits.
MergeBaseFn = Callable[[CommitId, CommitId], CommitId]


@runtime_checkable
class BranchSource(Protocol):
    """
    Anything that can supply branch tips to the engine.

    Implementations populate `labels` once; the engine only reads it.
    """

    branch_names: list[str]
    labels: BranchLabels

    def discover(self) -> BranchLabels:
        """Populate and return the commit -> branch-names mapping."""
        ...
