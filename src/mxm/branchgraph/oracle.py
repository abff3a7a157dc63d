"""
Memoizing adapter around a merge-base query.

The underlying query (typically `git merge-base`) is treated as a black box.
Results are cached per *unordered* pair of commits for the lifetime of one
run, so `common_ancestor(a, b)` and `common_ancestor(b, a)` cost at most one
query between them.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from types import MappingProxyType

from mxm.branchgraph.errors import OracleError
from mxm.branchgraph.types import CommitId, MergeBaseFn

__all__ = ["MergeBaseOracle", "canonical_pair"]

logger = logging.getLogger("mxm.branchgraph.oracle")


def canonical_pair(lhs: CommitId, rhs: CommitId) -> tuple[CommitId, CommitId]:
    """Order a pair with the larger identifier first."""
    return (rhs, lhs) if rhs > lhs else (lhs, rhs)


class MergeBaseOracle:
    def __init__(self, merge_base_fn: MergeBaseFn):
        self._merge_base_fn = merge_base_fn
        self._memo: dict[tuple[CommitId, CommitId], CommitId] = {}
        self.queries = 0

    @property
    def memo(self) -> Mapping[tuple[CommitId, CommitId], CommitId]:
        return MappingProxyType(self._memo)

    def common_ancestor(self, lhs: CommitId, rhs: CommitId) -> CommitId:
        """
        Return the merge-base of two commits.

        Raises
        ------
        OracleError
            If the underlying query fails. Failures are not cached and
            not retried.
        """
        if lhs == rhs:
            return lhs

        key = canonical_pair(lhs, rhs)
        cached = self._memo.get(key)
        if cached is not None:
            return cached

        self.queries += 1
        try:
            base = self._merge_base_fn(*key)
        except OracleError:
            raise
        except Exception as exc:
            raise OracleError(key[0], key[1], str(exc)) from exc

        logger.debug("merge-base %s %s -> %s", key[0], key[1], base)
        self._memo[key] = base
        return base
