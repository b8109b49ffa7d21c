"""Release version scheme built on ``semantic_version``.

Release tags look like ``v1.2.3`` or ``v1.2.3-beta.2``. Prerelease names come
from a closed, alphabetically ordered list so that plain semantic version
precedence gives the expected order (``alpha < beta < ... < rc < stable``).
A tag whose build metadata is ``invalid`` (``v1.2.3+invalid``) is an invalid
marker: it cancels the same version on the same commit.
"""

from __future__ import annotations

import functools
import re
from datetime import datetime, timezone
from typing import List, Optional

import semantic_version

from ..constants import Constants
from .models import PackageQuality, ParsedTag

PRERELEASE_NAMES = ("alpha", "beta", "delta", "epsilon", "gamma", "kappa", "pre", "rc")
_ABBREVIATIONS = {name[0]: name for name in PRERELEASE_NAMES}

_QUALITY_BY_NAME = {
    "alpha": PackageQuality.EXPLORATORY,
    "beta": PackageQuality.EXPLORATORY,
    "delta": PackageQuality.EXPLORATORY,
    "epsilon": PackageQuality.PREVIEW,
    "gamma": PackageQuality.PREVIEW,
    "kappa": PackageQuality.PREVIEW,
    "pre": PackageQuality.RELEASE_CANDIDATE,
    "rc": PackageQuality.RELEASE_CANDIDATE,
}

_TAG_RE = re.compile(
    r"^[vV]?(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?:-(?P<name>[A-Za-z]+)(?:\.(?P<number>\d+))?)?"
    r"(?:\+(?P<build>[0-9A-Za-z.-]+))?$"
)
_INVALID_BUILD_METADATA = "invalid"
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_BRANCH_LABEL_RE = re.compile(r"[^0-9A-Za-z-]")

ZERO_VERSION = semantic_version.Version("0.0.0-0")


@functools.total_ordering
class TagVersion:
    """A release version: ``major.minor.patch`` with an optional named prerelease.

    Ordering is delegated to :class:`semantic_version.Version`.
    """

    __slots__ = ("major", "minor", "patch", "prerelease_name", "prerelease_number", "_semver")

    def __init__(
        self,
        major: int,
        minor: int,
        patch: int,
        prerelease_name: Optional[str] = None,
        prerelease_number: int = 0,
    ):
        if min(major, minor, patch, prerelease_number) < 0:
            raise ValueError("Version numbers must be non-negative.")
        if prerelease_name is not None and prerelease_name not in PRERELEASE_NAMES:
            raise ValueError(f"Unknown prerelease name '{prerelease_name}'.")
        if prerelease_name is None and prerelease_number:
            raise ValueError("A prerelease number requires a prerelease name.")
        self.major = major
        self.minor = minor
        self.patch = patch
        self.prerelease_name = prerelease_name
        self.prerelease_number = prerelease_number
        self._semver = semantic_version.Version(self._format())

    def _format(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease_name:
            text += f"-{self.prerelease_name}"
            if self.prerelease_number:
                text += f".{self.prerelease_number}"
        return text

    @property
    def semver(self) -> semantic_version.Version:
        """The underlying ``semantic_version.Version``."""
        return self._semver

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease_name is not None

    @property
    def is_patch(self) -> bool:
        """True for any version with a non-zero patch number."""
        return self.patch > 0

    def __str__(self) -> str:
        return self._format()

    def __repr__(self) -> str:
        return f"TagVersion('{self}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagVersion):
            return NotImplemented
        return self._semver == other._semver

    def __lt__(self, other: "TagVersion") -> bool:
        if not isinstance(other, TagVersion):
            return NotImplemented
        return self._semver < other._semver

    def __hash__(self) -> int:
        return hash(self._format())


def _resolve_prerelease_name(text: str) -> Optional[str]:
    lowered = text.lower()
    if lowered in PRERELEASE_NAMES:
        return lowered
    if len(lowered) == 1:
        return _ABBREVIATIONS.get(lowered)
    return None


def _has_leading_zero(digits: str) -> bool:
    return len(digits) > 1 and digits.startswith("0")


def parse_tag(name: str) -> Optional[ParsedTag]:
    """Parse a tag name into a version of the scheme.

    Args:
        name: Tag name, with or without a ``v`` prefix.

    Returns:
        The parsed tag, or None when the name is not a release tag.
    """
    match = _TAG_RE.match(name or "")
    if not match:
        return None
    core = [match.group("major"), match.group("minor"), match.group("patch")]
    if any(_has_leading_zero(part) for part in core):
        return None

    prerelease_name = None
    prerelease_number = 0
    if match.group("name"):
        prerelease_name = _resolve_prerelease_name(match.group("name"))
        if prerelease_name is None:
            return None
        number = match.group("number")
        if number is not None:
            if _has_leading_zero(number) or int(number) == 0:
                return None
            prerelease_number = int(number)

    build = match.group("build")
    is_marker = build is not None and build.lower() == _INVALID_BUILD_METADATA
    try:
        version = TagVersion(int(core[0]), int(core[1]), int(core[2]), prerelease_name, prerelease_number)
    except ValueError:
        return None
    return ParsedTag(raw=name, version=version, is_invalid_marker=is_marker)


def parse_version(text: str) -> Optional[TagVersion]:
    """Parse a plain version (invalid markers are rejected)."""
    parsed = parse_tag(text)
    if parsed is None or parsed.is_invalid_marker:
        return None
    return parsed.version


def _family(major: int, minor: int, patch: int) -> List[TagVersion]:
    versions = [TagVersion(major, minor, patch, name) for name in PRERELEASE_NAMES]
    versions.append(TagVersion(major, minor, patch))
    return versions


def first_possible_versions() -> List[TagVersion]:
    """The versions a repository without any release may start with."""
    return direct_successors(None)


def direct_successors(base: Optional[TagVersion]) -> List[TagVersion]:
    """Enumerate the versions that may immediately follow ``base``.

    Args:
        base: The previous release, or None for a repository with no release.

    Returns:
        Ascending, de-duplicated list of successors.
    """
    found: List[TagVersion] = []
    if base is None:
        for core in ((0, 0, 0), (0, 1, 0), (1, 0, 0)):
            found.extend(_family(*core))
        return sorted(set(found))

    major, minor, patch = base.major, base.minor, base.patch
    if not base.is_prerelease:
        found.extend(_family(major, minor, patch + 1))
        found.extend(_family(major, minor + 1, 0))
        found.extend(_family(major + 1, 0, 0))
        return sorted(set(found))

    found.append(TagVersion(major, minor, patch, base.prerelease_name, base.prerelease_number + 1))
    index = PRERELEASE_NAMES.index(base.prerelease_name)
    found.extend(TagVersion(major, minor, patch, name) for name in PRERELEASE_NAMES[index + 1:])
    found.append(TagVersion(major, minor, patch))
    if patch > 0:
        found.extend(_family(major, minor + 1, 0))
        found.extend(_family(major + 1, 0, 0))
    elif minor > 0:
        found.extend(_family(major + 1, 0, 0))
    elif major == 0:
        found.extend(_family(0, 1, 0))
        found.extend(_family(1, 0, 0))
    return sorted(set(found))


def is_direct_successor(previous: Optional[TagVersion], candidate: TagVersion) -> bool:
    """Return True when ``candidate`` may immediately follow ``previous``."""
    return candidate in direct_successors(previous)


def branch_label(name: str) -> str:
    """Reduce a branch name to characters allowed in a prerelease identifier."""
    return _BRANCH_LABEL_RE.sub("-", name)


def ci_last_release_based(base: TagVersion, branch_name: str, depth: int) -> semantic_version.Version:
    """Format a CI build version anchored on the last release.

    A stable base bumps the patch and uses a ``--`` prerelease that sorts before
    any named prerelease: ``1.0.1--0003-develop``. A prerelease base appends a
    ``ci`` identifier: ``1.0.0-beta.2.ci-0003-develop``.
    """
    if depth < 0:
        raise ValueError("CI build depth must be non-negative.")
    label = branch_label(branch_name)
    index = str(depth).zfill(Constants.CI_DEPTH_DIGITS)
    if not base.is_prerelease:
        text = f"{base.major}.{base.minor}.{base.patch + 1}--{index}-{label}"
    else:
        text = (
            f"{base.major}.{base.minor}.{base.patch}-{base.prerelease_name}."
            f"{base.prerelease_number}.ci-{index}-{label}"
        )
    return semantic_version.Version(text)


def _base36(value: int) -> str:
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def zero_timed_marker(when: datetime) -> str:
    """Encode ``when`` as base-36 seconds since the CI epoch, zero padded."""
    epoch = datetime.fromisoformat(Constants.CI_ZERO_TIMED_EPOCH)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    seconds = max(0, int((when - epoch).total_seconds()))
    return _base36(seconds).rjust(Constants.CI_ZERO_TIMED_DIGITS, "0")


def ci_zero_timed(branch_name: str, when: datetime, base: Optional[TagVersion] = None) -> semantic_version.Version:
    """Format a CI build version anchored on the zero version and a timestamp.

    The base release, when known, is only carried as build metadata.
    """
    text = f"0.0.0--{zero_timed_marker(when)}-{branch_label(branch_name)}"
    if base is not None:
        text += f"+v{base}"
    return semantic_version.Version(text)


def informational_version(version: Optional[semantic_version.Version], sha: Optional[str], when: Optional[datetime]) -> str:
    """Build the ``<version>/<sha>/<date>`` informational string."""
    if version is None or sha is None or when is None:
        return f"{ZERO_VERSION}/{Constants.ZERO_COMMIT_SHA}/{Constants.ZERO_COMMIT_DATE}"
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return f"{version}/{sha}/{when:%Y-%m-%d %H:%M:%S}Z"


def is_ci_version(version: semantic_version.Version) -> bool:
    prerelease = version.prerelease
    if not prerelease:
        return False
    if version == ZERO_VERSION or prerelease[0].startswith("-"):
        return True
    return any(part.startswith("ci-") for part in prerelease)


def package_quality(version) -> PackageQuality:
    """Classify a release or CI version.

    Args:
        version: A :class:`TagVersion` or a ``semantic_version.Version``.
    """
    semver = version.semver if isinstance(version, TagVersion) else version
    if not semver.prerelease:
        return PackageQuality.STABLE
    if is_ci_version(semver):
        return PackageQuality.CI
    return _QUALITY_BY_NAME.get(semver.prerelease[0], PackageQuality.CI)
