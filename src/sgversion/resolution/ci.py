"""CI pseudo-version synthesis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import semantic_version

from ..constants import Constants
from ..repository.models import Commit
from ..versioning.scheme import ZERO_VERSION, TagVersion, ci_last_release_based, ci_zero_timed
from .errors import ErrorCode
from .lineage import LineageInfo
from .options import CIBranchVersionMode, RepositoryOptions
from .starting_commit import StartingCommit

_NO_CI_PREFIX = "No release tag found and CI build is not possible: "


@dataclass(frozen=True)
class CIReleaseInfo:
    """A CI build version for a commit without a release tag.

    ``base_tag`` is the release found below, None when there is none. A
    time-anchored build only carries it as build metadata.
    """
    base_tag: Optional[TagVersion]
    depth: int
    build_version: semantic_version.Version
    is_zero_timed: bool

    @property
    def base_version(self):
        return self.base_tag if self.base_tag is not None else ZERO_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_tag": str(self.base_version),
            "depth": self.depth,
            "build_version": str(self.build_version),
            "is_zero_timed": self.is_zero_timed,
        }


def create_ci_release(
    commit: Commit,
    mode: CIBranchVersionMode,
    name: str,
    info: Optional[LineageInfo],
) -> CIReleaseInfo:
    """Build the CI version of ``commit``.

    Args:
        commit: The commit being built.
        mode: CI mode of the branch; must not be ``NONE``.
        name: Branch label, at most 8 characters.
        info: Lineage of the commit, None when no release exists below.

    Raises:
        ValueError: When the mode is ``NONE`` or the name is too long.
    """
    if mode is CIBranchVersionMode.NONE:
        raise ValueError("CI builds are disabled for this branch.")
    if not name or len(name) > Constants.CI_BRANCH_NAME_MAX_LENGTH:
        raise ValueError(
            f"CI version name must have 1 to {Constants.CI_BRANCH_NAME_MAX_LENGTH} characters: '{name}'."
        )
    base = info.max_version if info is not None else None
    # Without any release below, a release-anchored build falls back to the time-anchored form.
    if mode is CIBranchVersionMode.ZERO_TIMED or base is None:
        return CIReleaseInfo(
            base_tag=base,
            depth=0,
            build_version=ci_zero_timed(name, commit.author_time, base),
            is_zero_timed=True,
        )
    return CIReleaseInfo(
        base_tag=base,
        depth=info.below_depth,
        build_version=ci_last_release_based(base, name, info.below_depth),
        is_zero_timed=False,
    )


def ci_build_failure(start: StartingCommit, options: RepositoryOptions) -> Tuple[ErrorCode, List[str]]:
    """Explain why a commit without release tag cannot get a CI version."""
    name = start.ci_branch_version_name
    if name is not None:
        short = name[:Constants.CI_BRANCH_NAME_MAX_LENGTH]
        return ErrorCode.CI_BUILD_VERSION_NAME_TOO_LONG, [
            _NO_CI_PREFIX + f"the branch name must not be longer than {Constants.CI_BRANCH_NAME_MAX_LENGTH} characters.",
            "Add a version_name to the branch in the configuration file with a shorter name:",
            "branches:",
            f"  - name: {start.found_branch_option.name}",
            f"    version_name: {short}",
        ]
    if not start.considered_branch_names:
        if options.head_commit and options.head_commit.strip():
            return ErrorCode.CI_BUILD_HEAD_COMMIT_IS_DETACHED, [
                _NO_CI_PREFIX + f"no branches reference the specified commit '{options.head_commit}'."
            ]
        return ErrorCode.CI_BUILD_REPOSITORY_HEAD_IS_DETACHED, [
            _NO_CI_PREFIX + "no branches reference the current repository's head commit."
        ]
    if start.found_branch_option is None:
        names = start.considered_branch_names
        if len(names) == 1:
            target = f"branch '{names[0]}'."
        else:
            target = "any of the branches '" + "', '".join(names) + "'."
        return ErrorCode.CI_BUILD_MISSING_BRANCH_OPTION, [
            _NO_CI_PREFIX + "no CI Branch information defined for " + target,
            "Add a branch entry to the configuration file with the branch name of interest, for instance:",
            "branches:",
            "  - name: develop",
            "    ci_version_mode: last_release_based",
            "  - name: exploratory",
            "    ci_version_mode: zero_timed",
            "    version_name: explo",
            "    use_release_build_configuration_from: ci",
        ]
    return ErrorCode.CI_BUILD_BRANCH_EXPLICIT_NONE, [
        _NO_CI_PREFIX
        + f"configured CI branch '{start.found_branch_option.name}' found explicitly states that ci_version_mode is none.",
        "Use ci_version_mode: zero_timed or ci_version_mode: last_release_based to enable CI builds on this branch.",
    ]
