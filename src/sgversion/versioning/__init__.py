"""Release version scheme used by the resolution engine."""

from .models import PackageQuality, ParsedTag
from .scheme import (
    PRERELEASE_NAMES,
    ZERO_VERSION,
    TagVersion,
    ci_last_release_based,
    ci_zero_timed,
    direct_successors,
    first_possible_versions,
    informational_version,
    is_direct_successor,
    package_quality,
    parse_tag,
    parse_version,
)

__all__ = [
    "PackageQuality",
    "ParsedTag",
    "PRERELEASE_NAMES",
    "ZERO_VERSION",
    "TagVersion",
    "ci_last_release_based",
    "ci_zero_timed",
    "direct_successors",
    "first_possible_versions",
    "informational_version",
    "is_direct_successor",
    "package_quality",
    "parse_tag",
    "parse_version",
]
