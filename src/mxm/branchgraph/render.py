"""
Renderers for a reduced branch graph.

The primary output is a Graphviz DOT description:

    digraph {
        0 [label="1a2b3c4d5 main"]
        1 [label="6e7f8a9b0 feature, origin/feature"]
        0 -> 1
    }

Node ids are small integers assigned in ascending commit order; edges follow
the descendant map in parent -> child order.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rich.text import Text

from mxm.branchgraph.types import Adjacency, BranchLabels, CommitId

__all__ = [
    "commit_label",
    "graph_json",
    "node_ids",
    "render_dot",
    "render_rich",
]

HASH_WIDTH = 9


def commit_label(commit: CommitId, labels: Mapping[CommitId, set[str]]) -> str:
    """Abbreviated hash, followed by the branch names of the commit, if any."""
    names = labels.get(commit)
    short = commit[:HASH_WIDTH]
    if not names:
        return short
    return f"{short} {', '.join(sorted(names))}"


def node_ids(children: Adjacency) -> dict[CommitId, int]:
    """Assign each node a stable small integer id."""
    return {node: i for i, node in enumerate(sorted(children))}


def _edges(children: Adjacency) -> list[tuple[CommitId, CommitId]]:
    return [
        (node, child) for node in sorted(children) for child in sorted(children[node])
    ]


def _quote(label: str) -> str:
    return label.replace("\\", "\\\\").replace('"', '\\"')


def render_dot(children: Adjacency, labels: BranchLabels) -> str:
    """
    Render the descendant map as DOT text.

    Parameters
    ----------
    children : Adjacency
        Reduced descendant map.
    labels : BranchLabels
        Branch names per commit, used for node labels.

    Returns
    -------
    str
        Newline-separated DOT document (no trailing newline).
    """
    ids = node_ids(children)
    lines = ["digraph {"]
    for node, i in ids.items():
        lines.append(f'\t{i} [label="{_quote(commit_label(node, labels))}"]')
    for parent, child in _edges(children):
        lines.append(f"\t{ids[parent]} -> {ids[child]}")
    lines.append("}")
    return "\n".join(lines)


def render_rich(children: Adjacency, labels: BranchLabels) -> Text:
    """Same document as :func:`render_dot`, hashes in red, branches in green."""
    ids = node_ids(children)
    text = Text("digraph {\n")
    for node, i in ids.items():
        text.append(f'\t{i} [label="')
        text.append(node[:HASH_WIDTH], style="red")
        names = labels.get(node)
        if names:
            text.append(" ")
            text.append(_quote(", ".join(sorted(names))), style="green")
        text.append('"]\n')
    for parent, child in _edges(children):
        text.append(f"\t{ids[parent]} -> {ids[child]}\n")
    text.append("}")
    return text


def graph_json(
    children: Adjacency, labels: BranchLabels, root: CommitId | None
) -> dict[str, Any]:
    """JSON-ready mapping with nodes, edges (by node id) and the root commit."""
    ids = node_ids(children)
    return {
        "root": root,
        "nodes": [
            {
                "id": i,
                "commit": node,
                "branches": sorted(labels.get(node, ())),
                "label": commit_label(node, labels),
            }
            for node, i in ids.items()
        ],
        "edges": [{"u": ids[u], "v": ids[v]} for u, v in _edges(children)],
    }
