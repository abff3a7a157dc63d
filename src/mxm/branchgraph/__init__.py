"""
Public API for mxm-branchgraph.
"""

from .api import BranchGraph, branch_graph_for_repository, build_branch_graph
from .closure import AncestryGraph, build_closure
from .errors import (
    BranchGraphError,
    BranchResolutionError,
    InvalidRepositoryError,
    NoRootError,
    OracleError,
)
from .oracle import MergeBaseOracle
from .reduce import reduce_graph
from .render import render_dot
from .types import CommitId

__all__ = [
    "AncestryGraph",
    "BranchGraph",
    "BranchGraphError",
    "BranchResolutionError",
    "CommitId",
    "InvalidRepositoryError",
    "MergeBaseOracle",
    "NoRootError",
    "OracleError",
    "branch_graph_for_repository",
    "build_branch_graph",
    "build_closure",
    "reduce_graph",
    "render_dot",
]
