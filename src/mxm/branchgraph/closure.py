"""
Merge-base closure over a set of branch tips.

Starting from the tips, every pair of known commits is joined through its
merge-base. Bases that were not known yet are added and themselves paired
with everything known, until no new commit appears. The result is an
:class:`AncestryGraph` holding both adjacency views.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
import logging

from mxm.branchgraph.oracle import MergeBaseOracle
from mxm.branchgraph.types import Adjacency, CommitId

__all__ = ["AncestryGraph", "build_closure"]

logger = logging.getLogger("mxm.branchgraph.closure")


def _empty_adjacency() -> Adjacency:
    return {}


@dataclass
class AncestryGraph:
    """
    Two adjacency maps over the same vertex set.

    Attributes
    ----------
    children : Adjacency
        Descendant map: commit -> commits it is the recorded merge-base of.
    parents : Adjacency
        Ancestor map: commit -> recorded merge-bases of it with a sibling.
    """

    children: Adjacency = field(default_factory=_empty_adjacency)
    parents: Adjacency = field(default_factory=_empty_adjacency)

    def add_node(self, node: CommitId) -> bool:
        """Insert `node` into both maps; return True if it was new."""
        is_new = node not in self.children
        self.children.setdefault(node, set())
        self.parents.setdefault(node, set())
        return is_new

    def add_edge(self, base: CommitId, node: CommitId) -> None:
        """Record `base -> node` in both maps, ignoring self edges."""
        if base == node:
            return
        self.children[base].add(node)
        self.parents[node].add(base)

    @property
    def nodes(self) -> list[CommitId]:
        return sorted(self.children)

    def edges(self) -> list[tuple[CommitId, CommitId]]:
        """Descendant-map edges as sorted `(parent, child)` pairs."""
        return sorted(
            (node, child) for node, kids in self.children.items() for child in kids
        )

    def __len__(self) -> int:
        return len(self.children)


def build_closure(tips: Iterable[CommitId], oracle: MergeBaseOracle) -> AncestryGraph:
    """
    Expand `tips` into the full merge-base closure.

    Each popped commit is paired with every commit known at the start of its
    turn (including ones discovered earlier in the same pass). A merge-base
    not seen before is queued so that it gets connected to everything too.

    Parameters
    ----------
    tips : Iterable[CommitId]
        Initial commits, usually branch tips. Duplicates are ignored.
    oracle : MergeBaseOracle
        Memoizing merge-base adapter.

    Returns
    -------
    AncestryGraph
        Raw (unreduced) closure. Empty for no tips, a single edgeless node
        for one tip.

    Raises
    ------
    OracleError
        Propagated from the oracle; the closure is abandoned.
    """
    graph = AncestryGraph()
    worklist: deque[CommitId] = deque()
    for tip in tips:
        if graph.add_node(tip):
            worklist.append(tip)

    while worklist:
        new_node = worklist.popleft()
        for node in list(graph.children):
            base = oracle.common_ancestor(new_node, node)

            if graph.add_node(base):
                logger.debug("discovered merge-base %s", base)
                worklist.append(base)

            graph.add_edge(base, node)
            graph.add_edge(base, new_node)

    logger.info(
        "closure: %d nodes from %d merge-base queries", len(graph), oracle.queries
    )
    return graph
