"""
Transitive reduction of a merge-base closure.

Both adjacency maps of an :class:`AncestryGraph` are pruned in place, each
on its own:

- the descendant map top-down from the root,
- the ancestor map bottom-up from the leaves.

An edge `node -> child` survives only if no *other* direct child of `node`
lists `child` among its own direct children. This is a one-hop check against
sibling adjacency, not a full reachability test.

Only the descendant map is rendered. The ancestor pass keeps that map
minimal as well but its result never feeds back into the descendant map, so
the two views may disagree after reduction.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging

from mxm.branchgraph.closure import AncestryGraph
from mxm.branchgraph.errors import NoRootError
from mxm.branchgraph.types import Adjacency, CommitId

__all__ = [
    "find_leaves",
    "find_root",
    "reduce_ancestors",
    "reduce_descendants",
    "reduce_graph",
]

logger = logging.getLogger("mxm.branchgraph.reduce")


def find_root(graph: AncestryGraph) -> CommitId:
    """
    Return the node without recorded parents.

    If several nodes qualify (disconnected histories), the smallest
    identifier wins and a warning is logged.

    Raises
    ------
    NoRootError
        If every node has at least one parent.
    """
    roots = sorted(node for node, parents in graph.parents.items() if not parents)
    if not roots:
        raise NoRootError("Unable to determine ultimate parent node")
    if len(roots) > 1:
        logger.warning(
            "ambiguous root: %d parentless nodes, using %s",
            len(roots),
            roots[0],
        )
    return roots[0]


def find_leaves(graph: AncestryGraph) -> list[CommitId]:
    """Nodes without children, fewest parents first (ties by identifier)."""
    leaves = [node for node, children in graph.children.items() if not children]
    leaves.sort(key=lambda leaf: (len(graph.parents.get(leaf, ())), leaf))
    return leaves


def _prune(adjacency: Adjacency, starts: Iterable[CommitId]) -> int:
    # Depth-first, pre-order, neighbours in ascending order. Each node is
    # filtered at its first visit only: sets only ever shrink, so a later
    # visit through another path would keep everything it finds.
    removed = 0
    visited: set[CommitId] = set()
    stack: list[CommitId] = list(reversed(list(starts)))

    while stack:
        node = stack.pop()
        if node in visited:
            continue
        visited.add(node)

        snapshot = set(adjacency.get(node, ()))
        kept = {
            n
            for n in snapshot
            if not any(
                n in adjacency.get(other, ()) for other in snapshot if other != n
            )
        }
        removed += len(snapshot) - len(kept)
        adjacency[node] = kept

        stack.extend(sorted(snapshot, reverse=True))

    return removed


def reduce_descendants(graph: AncestryGraph, root: CommitId) -> None:
    """Prune redundant edges from the descendant map, starting at `root`."""
    removed = _prune(graph.children, [root])
    logger.debug("descendant reduction removed %d edges", removed)


def reduce_ancestors(graph: AncestryGraph, leaves: Iterable[CommitId]) -> None:
    """Prune redundant edges from the ancestor map, starting at `leaves`."""
    removed = _prune(graph.parents, leaves)
    logger.debug("ancestor reduction removed %d edges", removed)


def reduce_graph(graph: AncestryGraph) -> CommitId | None:
    """
    Reduce both maps of `graph` in place and return its root.

    An empty graph is left untouched and yields ``None``.

    Raises
    ------
    NoRootError
        If the closure has no parentless node.
    """
    if not graph.children:
        return None

    root = find_root(graph)
    reduce_descendants(graph, root)
    reduce_ancestors(graph, find_leaves(graph))
    return root
