"""Legal version windows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..repository.models import Commit
from ..versioning.scheme import TagVersion, direct_successors
from .lineage import LineageInfo, LineageWalker
from .tag_catalog import TagCommit, VersionCatalog


def possible_versions(
    catalog: VersionCatalog,
    base: Optional[TagVersion],
    excluded: Optional[TagVersion] = None,
    starting_version: Optional[TagVersion] = None,
) -> List[TagVersion]:
    """Versions that may be released right after ``base``.

    The next cataloged version above ``base`` (``excluded`` aside) is an
    exclusive upper bound: a release can neither collide with nor skip over
    an existing one. Versions below ``starting_version`` are dropped.
    """
    successors = direct_successors(base)
    upper = catalog.first_above(base, excluded)
    if upper is not None:
        successors = [v for v in successors if v < upper]
    if starting_version is not None:
        successors = [v for v in successors if v >= starting_version]
    return successors


def filter_versions(
    versions: Iterable[TagVersion],
    only_patch: bool = False,
    single_major: Optional[int] = None,
) -> List[TagVersion]:
    """Apply the ``only_patch`` and ``single_major`` policies."""
    filtered = sorted(set(versions))
    if only_patch:
        filtered = [v for v in filtered if v.is_patch]
    if single_major is not None:
        filtered = [v for v in filtered if v.major == single_major]
    return filtered


@dataclass(frozen=True)
class CommitVersions:
    """Unfiltered windows and release references of one commit."""
    commit_sha: str
    lineage: Optional[LineageInfo]
    is_shallow_cloned: bool
    already_existing_version: Optional[TagCommit]
    best_commit_below: Optional[TagCommit]
    possible_versions: List[TagVersion]
    next_possible_versions: List[TagVersion]

    @property
    def release_tag_commit(self) -> Optional[TagCommit]:
        return self.lineage.this_commit if self.lineage is not None else None


def commit_versions(catalog: VersionCatalog, walker: LineageWalker, commit: Commit) -> CommitVersions:
    """Compute the windows of ``commit``.

    ``possible_versions`` are the versions the commit itself may carry;
    ``next_possible_versions`` the ones its descendants may carry.
    """
    lineage, shallow = walker.get_info(commit)
    start = catalog.starting_version
    already_existing = None
    below = None

    if start is not None and catalog.starting_version_commit is None:
        # The starting version is a fresh starting point: it is the only option.
        possible = [start]
        following = [start]
    elif lineage is None:
        possible = following = possible_versions(catalog, None, None, start)
    else:
        following = possible_versions(catalog, lineage.max_version, None, start)
        if lineage.this_commit is None:
            possible = following
            already_existing = lineage.best_commit
            below = lineage.best_commit_below
        elif lineage.this_commit is catalog.starting_version_commit:
            possible = [start]
        else:
            excluded = lineage.this_commit.version
            without_tag, _ = walker.get_info(commit, excluded)
            if without_tag is not None:
                already_existing = without_tag.best_commit
                below = without_tag.best_commit_below
                base = without_tag.max_version
            else:
                base = None
            possible = possible_versions(catalog, base, excluded, start)

    return CommitVersions(
        commit_sha=commit.sha,
        lineage=lineage,
        is_shallow_cloned=shallow,
        already_existing_version=already_existing,
        best_commit_below=below,
        possible_versions=list(possible),
        next_possible_versions=list(following),
    )
