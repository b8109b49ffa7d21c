"""Data models for the version scheme."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .scheme import TagVersion


class PackageQuality(IntEnum):
    """Quality level of a version, from the least to the most stable.

    ``NONE`` is only meaningful as a build configuration threshold: it never
    selects the release configuration.
    """
    NONE = 0
    CI = 1
    EXPLORATORY = 2
    PREVIEW = 3
    RELEASE_CANDIDATE = 4
    STABLE = 5

    @classmethod
    def parse(cls, text: str) -> "PackageQuality":
        """Parse a quality name such as ``rc``, ``ReleaseCandidate`` or ``stable``.

        Raises:
            ValueError: When the text does not name a quality.
        """
        key = str(text).strip().replace("-", "").replace("_", "").lower()
        if key == "rc":
            return cls.RELEASE_CANDIDATE
        for member in cls:
            if member.name.replace("_", "").lower() == key:
                return member
        raise ValueError(
            f"Invalid package quality '{text}'. It must be one of: "
            + ", ".join(m.name.lower() for m in cls)
            + " (or 'rc')."
        )


@dataclass(frozen=True)
class ParsedTag:
    """A tag name that parsed into a version of the scheme."""
    raw: str
    version: "TagVersion"
    is_invalid_marker: bool = False

