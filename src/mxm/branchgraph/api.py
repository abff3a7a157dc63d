"""
Public API for building branch graphs.

This module is the small façade used by callers (e.g., CLI, tests) to go
from branch tips to a reduced :class:`AncestryGraph` without wiring the
oracle, closure and reducer by hand.

Layering:
- mxm.branchgraph.oracle / closure / reduce : Engine (no git knowledge)
- mxm.branchgraph.repository               : Git collaborators
- mxm.branchgraph.api                      : Public façade (this module)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from mxm.branchgraph.closure import AncestryGraph, build_closure
from mxm.branchgraph.oracle import MergeBaseOracle
from mxm.branchgraph.reduce import reduce_graph
from mxm.branchgraph.repository import (
    GitBranchSource,
    git_merge_base,
    open_repository,
)
from mxm.branchgraph.types import Adjacency, BranchLabels, CommitId, MergeBaseFn

__all__ = [
    "BranchGraph",
    "branch_graph_for_repository",
    "build_branch_graph",
    "collect_branches",
]


@dataclass
class BranchGraph:
    labels: BranchLabels
    graph: AncestryGraph
    root: CommitId | None

    @property
    def children(self) -> Adjacency:
        """The reduced descendant map, i.e. what gets rendered."""
        return self.graph.children


def build_branch_graph(labels: BranchLabels, merge_base_fn: MergeBaseFn) -> BranchGraph:
    """
    Compute the reduced merge-base graph of the commits in `labels`.

    Parameters
    ----------
    labels : BranchLabels
        Branch tips, commit -> branch names.
    merge_base_fn : MergeBaseFn
        Common-ancestor query; wrapped in a memoizing :class:`MergeBaseOracle`.

    Returns
    -------
    BranchGraph
        Labels, reduced graph and its root (``None`` when there are no tips).

    Raises
    ------
    OracleError
        If a merge-base query fails.
    NoRootError
        If the closure has no parentless node.
    """
    oracle = MergeBaseOracle(merge_base_fn)
    graph = build_closure(sorted(labels), oracle)
    root = reduce_graph(graph)
    return BranchGraph(labels=labels, graph=graph, root=root)


def collect_branches(
    directory: Path | str,
    branches: Iterable[str] = (),
    remote: bool = False,
) -> GitBranchSource:
    """
    Open a repository and collect branch tips.

    Explicit `branches` must all resolve; with none given every local branch
    is discovered.
    """
    handle = open_repository(directory)
    source = GitBranchSource(handle, remote=remote)
    names = list(branches)
    for name in names:
        source.add_branch(name, explicit=True)
    if not names:
        source.discover()
    return source


def branch_graph_for_repository(
    directory: Path | str,
    branches: Iterable[str] = (),
    remote: bool = False,
) -> BranchGraph:
    """
    Build the branch graph of a git repository.

    Raises
    ------
    InvalidRepositoryError
        If `directory` is not a git repository.
    BranchResolutionError
        If an explicitly requested branch does not resolve.
    OracleError, NoRootError
        As for :func:`build_branch_graph`.
    """
    source = collect_branches(directory, branches, remote=remote)
    return build_branch_graph(source.labels, partial(git_merge_base, source.handle))
