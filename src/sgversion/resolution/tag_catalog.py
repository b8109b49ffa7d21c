"""Tag discovery, conflict resolution and content-identity linking.

The catalog is built once per resolution from every tag of the repository
plus the configured overrides. Each commit ends up with at most one version;
commits sharing the same content (tree) are linked in a content group so a
release found through a merge or a cherry-pick counts as the same release.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..common.logging_utils import extra_context, is_debug_enabled
from ..constants import Constants
from ..repository.models import Commit, RepositoryAccessor
from ..versioning.scheme import TagVersion, first_possible_versions, is_direct_successor, parse_tag, parse_version
from .errors import ErrorCode

logger = logging.getLogger(__name__)


class TagCommit:
    """A commit carrying exactly one release version."""

    __slots__ = ("sha", "content_id", "version", "_group")

    def __init__(self, sha: str, content_id: str, version: TagVersion):
        self.sha = sha
        self.content_id = content_id
        self.version = version
        self._group: List["TagCommit"] = [self]

    @property
    def content_group(self) -> Tuple["TagCommit", ...]:
        """All tagged commits with the same content, this one included."""
        return tuple(self._group)

    def link_same_content(self, other: "TagCommit") -> None:
        if other._group is self._group:
            return
        merged = self._group + other._group
        for member in merged:
            member._group = merged

    def best_except(self, excluded: Optional[TagVersion] = None) -> Optional["TagCommit"]:
        """Best version of the content group, ignoring ``excluded``."""
        best = None
        for member in self._group:
            if excluded is not None and member.version == excluded:
                continue
            if best is None or member.version > best.version:
                best = member
        return best

    def to_dict(self) -> Dict[str, str]:
        return {"version": str(self.version), "commit": self.sha}

    def __str__(self) -> str:
        return f"'{self.version}' (commit {self.sha})"

    def __repr__(self) -> str:
        return f"TagCommit({self.version!s}, {self.sha})"


class VersionCatalog:
    """Ascending list of the tagged commits with lookups by sha and content."""

    def __init__(
        self,
        tag_commits: Sequence[TagCommit],
        starting_version: Optional[TagVersion] = None,
        starting_version_commit: Optional[TagCommit] = None,
    ):
        self.tag_commits: List[TagCommit] = sorted(tag_commits, key=lambda t: t.version)
        self.starting_version = starting_version
        self.starting_version_commit = starting_version_commit
        self._by_sha: Dict[str, TagCommit] = {t.sha: t for t in self.tag_commits}
        self._by_content: Dict[str, TagCommit] = {}
        for tag_commit in self.tag_commits:
            existing = self._by_content.get(tag_commit.content_id)
            if existing is None:
                self._by_content[tag_commit.content_id] = tag_commit
            else:
                existing.link_same_content(tag_commit)

    def __len__(self) -> int:
        return len(self.tag_commits)

    @property
    def versions(self) -> List[TagVersion]:
        return [t.version for t in self.tag_commits]

    def by_sha(self, sha: str) -> Optional[TagCommit]:
        return self._by_sha.get(sha)

    def by_content(self, content_id: str) -> Optional[TagCommit]:
        return self._by_content.get(content_id)

    def first_above(self, base: Optional[TagVersion], excluded: Optional[TagVersion] = None) -> Optional[TagVersion]:
        """Smallest cataloged version strictly greater than ``base``."""
        for tag_commit in self.tag_commits:
            if excluded is not None and tag_commit.version == excluded:
                continue
            if base is None or tag_commit.version > base:
                return tag_commit.version
        return None

    def check_existing_versions(self) -> Tuple[ErrorCode, List[str]]:
        """Check the first version and the absence of holes between versions."""
        lines: List[str] = []
        if not self.tag_commits:
            return ErrorCode.NONE, lines
        first = self.tag_commits[0]
        if self.starting_version is None:
            firsts = first_possible_versions()
            if first.version not in firsts:
                lines.append(
                    f"First existing version is '{first.version}' (on '{first.sha}'). "
                    f"A very first version is missing ({', '.join(str(v) for v in firsts)}) "
                    "or a StartingVersion must be specified."
                )
                return ErrorCode.CHECK_EXISTING_VERSION_FIRST_MISSING, lines
        has_hole = False
        for previous, following in zip(self.tag_commits, self.tag_commits[1:]):
            if previous.version == following.version:
                continue
            if not is_direct_successor(previous.version, following.version):
                lines.append(f"Missing one or more version(s) between '{previous.version}' and '{following.version}'.")
                has_hole = True
        if self.starting_version is not None and self.starting_version_commit is None:
            lines.append(f"Missing specified StartingVersion='{self.starting_version}'.")
            return ErrorCode.CHECK_EXISTING_VERSION_STARTING_VERSION_NOT_FOUND, lines
        if has_hole:
            return ErrorCode.CHECK_EXISTING_VERSION_HOLE_FOUND, lines
        return ErrorCode.NONE, lines


@dataclass
class CatalogBuildResult:
    """Either a catalog or an error code with its message lines."""
    catalog: Optional[VersionCatalog] = None
    starting_version: Optional[TagVersion] = None
    error_code: ErrorCode = ErrorCode.NONE
    messages: List[str] = field(default_factory=list)

    @property
    def has_error(self) -> bool:
        return self.error_code is not ErrorCode.NONE


class _CollectedCommit:
    """Versions and invalid markers gathered on one commit before resolution."""

    def __init__(self, commit: Commit):
        self.commit = commit
        self.versions: List[TagVersion] = []
        self.invalid: List[TagVersion] = []

    def add(self, version: TagVersion, is_invalid_marker: bool) -> None:
        target = self.invalid if is_invalid_marker else self.versions
        if version not in target:
            target.append(version)

    def remaining(self) -> List[TagVersion]:
        return sorted(v for v in self.versions if v not in self.invalid)


class _TagCollector:
    def __init__(self, starting_version: Optional[TagVersion], single_major: Optional[int]):
        self.starting_version = starting_version
        self.single_major = single_major
        self.collected: Dict[str, _CollectedCommit] = {}

    def register(self, commit: Commit, tag_name: str) -> None:
        parsed = parse_tag(tag_name)
        if parsed is None:
            return
        version = parsed.version
        if self.single_major is not None and version.major != self.single_major:
            return
        if self.starting_version is not None and version < self.starting_version:
            return
        entry = self.collected.get(commit.sha)
        if entry is None:
            entry = self.collected[commit.sha] = _CollectedCommit(commit)
        entry.add(version, parsed.is_invalid_marker)

    def close(self, repository: RepositoryAccessor, lines: List[str]) -> List[TagCommit]:
        tag_commits = []
        for sha, entry in self.collected.items():
            remaining = entry.remaining()
            if len(remaining) > 1:
                lines.append(
                    f"Commit '{sha}' has {len(remaining)} different released version tags. "
                    "Delete some of them or create +invalid tag(s) if they are already pushed "
                    "to a remote repository."
                )
                continue
            if remaining:
                tag_commits.append(TagCommit(sha, repository.content_id(entry.commit), remaining[0]))
        return tag_commits


def _apply_overrides(
    collector: _TagCollector,
    repository: RepositoryAccessor,
    overrides: Mapping[str, Sequence[str]],
    lines: List[str],
) -> ErrorCode:
    for key, tag_names in overrides.items():
        if not key:
            lines.append("Invalid overridden commit: the key is null or empty.")
            return ErrorCode.INVALID_OVERRIDDEN_TAG
        if key.lower() == Constants.HEAD_OVERRIDE_KEY:
            target = repository.head()
        else:
            target = repository.lookup(key)
        if target is None:
            lines.append(f"Overridden commit '{key}' does not exist.")
            return ErrorCode.INVALID_OVERRIDDEN_TAG
        if isinstance(tag_names, str):
            tag_names = [tag_names]
        for tag_name in tag_names:
            collector.register(target, tag_name)
    return ErrorCode.NONE


def build_catalog(
    repository: RepositoryAccessor,
    overrides: Optional[Mapping[str, Sequence[str]]] = None,
    starting_version: Optional[str] = None,
    single_major: Optional[int] = None,
    check_existing_versions: bool = False,
) -> CatalogBuildResult:
    """Collect the release tags of ``repository`` into a :class:`VersionCatalog`.

    Args:
        repository: Accessor of the repository.
        overrides: Commit-ish (or ``head``) to tag names applied as if they existed.
        starting_version: Versions below this one are ignored.
        single_major: Only versions with this major are considered.
        check_existing_versions: Verify the first version and the absence of holes.

    Returns:
        CatalogBuildResult: The catalog, or an error code with its message lines.
    """
    if repository is None:
        raise ValueError("A repository is required to build the version catalog.")
    result = CatalogBuildResult()

    start = None
    if starting_version is not None:
        start = parse_version(starting_version)
        if start is None:
            result.error_code = ErrorCode.INVALID_STARTING_VERSION
            result.messages.append(f"Invalid StartingVersion. '{starting_version}' is not a valid release version.")
            return result
        if single_major is not None and start.major > single_major:
            result.error_code = ErrorCode.STARTING_VERSION_CONFLICTS_WITH_SINGLE_MAJOR
            result.messages.append(
                f"StartingVersion '{start}' is defined, its major must not be greater than "
                f"defined SingleMajor = {single_major}."
            )
            return result
    result.starting_version = start

    collector = _TagCollector(start, single_major)
    for tag in repository.tags():
        commit = repository.lookup(tag.sha)
        if commit is not None:
            collector.register(commit, tag.name)

    if overrides:
        code = _apply_overrides(collector, repository, overrides, result.messages)
        if code is not ErrorCode.NONE:
            result.error_code = code
            return result

    tag_commits = collector.close(repository, result.messages)
    if result.messages:
        result.error_code = ErrorCode.MULTIPLE_VERSION_TAG_CONFLICT
        return result

    starting_commit = None
    if start is not None:
        starting_commit = next((t for t in tag_commits if t.version == start), None)
    catalog = VersionCatalog(tag_commits, start, starting_commit)

    if check_existing_versions:
        code, lines = catalog.check_existing_versions()
        if code is not ErrorCode.NONE:
            result.error_code = code
            result.messages.extend(lines)
            return result

    if is_debug_enabled(logger):
        logger.debug(
            "Version catalog built",
            extra=extra_context(event="catalog_built", component="tag_catalog", count=len(catalog)),
        )
    result.catalog = catalog
    return result
