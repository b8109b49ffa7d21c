"""Build configuration selection."""

from __future__ import annotations

from typing import Callable, Optional, Union

import semantic_version

from ..constants import Constants
from ..versioning.models import PackageQuality
from ..versioning.scheme import TagVersion, package_quality
from .options import BranchOptions, RepositoryOptions

VersionLike = Union[TagVersion, semantic_version.Version]
BuildConfigurationSelector = Callable[[VersionLike, RepositoryOptions, Optional[BranchOptions]], str]


def default_build_configuration_selector(
    version: VersionLike,
    options: RepositoryOptions,
    branch: Optional[BranchOptions] = None,
) -> str:
    """``Release`` when the version quality reaches the configured threshold, else ``Debug``.

    A ``none`` threshold always selects ``Debug``; a ``ci`` threshold always
    selects ``Release``. The branch threshold, when set, wins over the
    repository one.
    """
    threshold = options.release_threshold(branch)
    if threshold is PackageQuality.NONE:
        return Constants.BUILD_CONFIGURATION_DEBUG
    if package_quality(version) >= threshold:
        return Constants.BUILD_CONFIGURATION_RELEASE
    return Constants.BUILD_CONFIGURATION_DEBUG


def simple_build_configuration_selector(
    version: VersionLike,
    options: RepositoryOptions,
    branch: Optional[BranchOptions] = None,
) -> str:
    """``Release`` for stable and ``rc`` versions, ``Debug`` otherwise; options are ignored."""
    semver = version.semver if isinstance(version, TagVersion) else version
    if not semver.prerelease or semver.prerelease[0] == "rc":
        return Constants.BUILD_CONFIGURATION_RELEASE
    return Constants.BUILD_CONFIGURATION_DEBUG
