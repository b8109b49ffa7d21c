"""Memoized walk of the commit graph.

For every commit the walker computes the best release found on the commit
itself (through its content group) and the best one inherited from its
parents, together with the number of commits separating them. Results are
cached per excluded version: the default view excludes nothing, the other
views are used to reason about a tagged commit as if its own tag did not
exist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..common.logging_utils import extra_context, is_debug_enabled
from ..repository.models import Commit, RepositoryAccessor
from ..versioning.scheme import TagVersion
from .tag_catalog import TagCommit, VersionCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineageInfo:
    """Version information on and below one commit.

    Attributes:
        this_commit: Tagged commit for the commit itself, whatever the exclusion.
        best_commit: Best release of the commit's content group after exclusion.
        best_commit_below: Best release inherited from the parents when it is
            not dominated by ``best_commit``.
        below_depth: Longest number of commits to reach ``best_commit_below``;
            zero when ``best_commit`` dominates.
        is_shallow_cloned: True when part of the parent graph is missing.
    """
    this_commit: Optional[TagCommit]
    best_commit: Optional[TagCommit]
    best_commit_below: Optional[TagCommit]
    below_depth: int
    is_shallow_cloned: bool

    @property
    def max_commit(self) -> TagCommit:
        """The best of ``best_commit`` and ``best_commit_below``; never None."""
        if self.best_commit is not None and (
            self.best_commit_below is None or self.best_commit.version > self.best_commit_below.version
        ):
            return self.best_commit
        return self.best_commit_below

    @property
    def max_version(self) -> TagVersion:
        return self.max_commit.version

    def is_better_than(self, other: "LineageInfo") -> bool:
        """Greater max version wins; on a tie the deeper lineage wins."""
        if self.max_version == other.max_version:
            return self.below_depth > other.below_depth
        return self.max_version > other.max_version

    @classmethod
    def create(
        cls,
        this_commit: Optional[TagCommit],
        best: Optional[TagCommit],
        parent: Optional["LineageInfo"],
        is_shallow_cloned: bool,
    ) -> "LineageInfo":
        if best is None and parent is None:
            raise ValueError("Lineage information requires a local release or a parent lineage.")
        if best is not None:
            if parent is None or best.version > parent.max_version:
                return cls(this_commit, best, None, 0, is_shallow_cloned)
            return cls(this_commit, best, parent.max_commit, parent.below_depth + 1, is_shallow_cloned)
        return cls(this_commit, None, parent.max_commit, parent.below_depth + 1, is_shallow_cloned)


_Entry = Tuple[Optional[LineageInfo], bool]


class LineageWalker:
    """Computes :class:`LineageInfo` for commits of one catalog.

    A walker owns its caches: create a new one for each resolution.
    """

    def __init__(self, catalog: VersionCatalog, repository: RepositoryAccessor):
        self.catalog = catalog
        self.repository = repository
        self._views: Dict[Optional[TagVersion], Dict[str, _Entry]] = {}
        self._parents: Dict[str, List[Optional[Commit]]] = {}

    def _view(self, excluded: Optional[TagVersion]) -> Dict[str, _Entry]:
        view = self._views.get(excluded)
        if view is None:
            view = self._views[excluded] = {}
        return view

    def _parents_of(self, commit: Commit) -> List[Optional[Commit]]:
        parents = self._parents.get(commit.sha)
        if parents is None:
            parents = self._parents[commit.sha] = list(self.repository.parents(commit))
        return parents

    def get_info(self, commit: Commit, excluded: Optional[TagVersion] = None) -> Tuple[Optional[LineageInfo], bool]:
        """Return the lineage of ``commit`` and whether the walk hit a shallow boundary.

        Args:
            commit: The commit to analyze.
            excluded: A cataloged version to ignore, or None.

        Returns:
            Tuple of (lineage or None when no release exists on or below, shallow flag).
        """
        view = self._view(excluded)
        if commit.sha in view:
            return view[commit.sha]

        # Explicit stack: histories are routinely deeper than the recursion limit.
        stack = [commit]
        computed = 0
        while stack:
            current = stack[-1]
            if current.sha in view:
                stack.pop()
                continue
            parents = self._parents_of(current)
            pending = [p for p in parents if p is not None and p.sha not in view]
            if pending:
                stack.extend(reversed(pending))
                continue
            stack.pop()
            view[current.sha] = self._compute(current, parents, view, excluded)
            computed += 1

        if is_debug_enabled(logger):
            logger.debug(
                "Lineage computed",
                extra=extra_context(
                    event="lineage_walk",
                    component="lineage",
                    commit=commit.sha,
                    count=computed,
                ),
            )
        return view[commit.sha]

    def _compute(
        self,
        commit: Commit,
        parents: List[Optional[Commit]],
        view: Dict[str, _Entry],
        excluded: Optional[TagVersion],
    ) -> _Entry:
        this_commit = self.catalog.by_sha(commit.sha)
        if this_commit is not None:
            best = this_commit.best_except(excluded)
        else:
            group = self.catalog.by_content(self.repository.content_id(commit))
            best = group.best_except(excluded) if group is not None else None

        shallow = commit.shallow
        current: Optional[LineageInfo] = None
        for parent in parents:
            if parent is None:
                shallow = True
                continue
            info, parent_shallow = view[parent.sha]
            shallow = shallow or parent_shallow
            if current is None or (info is not None and info.is_better_than(current)):
                current = info

        if best is None and current is None:
            return None, shallow
        return LineageInfo.create(this_commit, best, current, shallow), shallow
