"""Policy options driving a resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set

from ..constants import Constants
from ..versioning.models import PackageQuality


class CIBranchVersionMode(Enum):
    """How CI builds are versioned on a branch.

    Args:
        Enum (string): Mode name as written in configuration files.
    """

    NONE = "none"
    ZERO_TIMED = "zero_timed"
    LAST_RELEASE_BASED = "last_release_based"

    @classmethod
    def parse(cls, text: str) -> "CIBranchVersionMode":
        """Accept ``zero_timed``, ``ZeroTimed``, ``zero-timed`` and similar spellings."""
        key = str(text).strip().replace("-", "").replace("_", "").lower()
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        raise ValueError(
            f"Invalid CI version mode '{text}'. It must be one of: "
            + ", ".join(m.value for m in cls)
            + "."
        )


@dataclass
class BranchOptions:
    """CI settings of one branch."""
    name: str
    ci_version_mode: CIBranchVersionMode = CIBranchVersionMode.NONE
    version_name: Optional[str] = None
    use_release_build_configuration_from: Optional[PackageQuality] = None

    def __post_init__(self) -> None:
        if not self.name or not str(self.name).strip():
            raise ValueError("A branch option requires a name.")
        if isinstance(self.ci_version_mode, str):
            self.ci_version_mode = CIBranchVersionMode.parse(self.ci_version_mode)
        if isinstance(self.use_release_build_configuration_from, str):
            self.use_release_build_configuration_from = PackageQuality.parse(
                self.use_release_build_configuration_from
            )

    @property
    def ci_version_name(self) -> str:
        """Label used in CI versions: the version name, else the branch name."""
        if self.version_name and self.version_name.strip():
            return self.version_name
        return self.name


@dataclass
class RepositoryOptions:
    """Options of a resolution.

    ``head_commit`` (any commit-ish) wins over ``head_branch_name``; when both
    are empty the repository head is resolved. ``overridden_tags`` maps
    commit-ishes (or ``head``) to tag names applied as if they existed.
    """
    head_commit: Optional[str] = None
    head_branch_name: Optional[str] = None
    overridden_tags: Dict[str, List[str]] = field(default_factory=dict)
    starting_version: Optional[str] = None
    single_major: Optional[int] = None
    only_patch: bool = False
    use_release_build_configuration_from: PackageQuality = PackageQuality.RELEASE_CANDIDATE
    branches: List[BranchOptions] = field(default_factory=list)
    ignore_modified_files: Set[str] = field(default_factory=set)
    ignore_modified_file_predicate: Optional[Callable[[str], bool]] = None
    ignore_modified_file_full_process: bool = False
    remote_name: str = Constants.DEFAULT_REMOTE_NAME
    ignore_dirty_working_folder: bool = False
    check_existing_versions: bool = False
    ignore_already_existing_version: bool = False

    def __post_init__(self) -> None:
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name must not be empty.")
        if self.single_major is not None:
            if isinstance(self.single_major, bool) or not isinstance(self.single_major, int):
                raise TypeError("single_major must be an integer.")
            if self.single_major < 0:
                raise ValueError("single_major must be non-negative.")
        if isinstance(self.use_release_build_configuration_from, str):
            self.use_release_build_configuration_from = PackageQuality.parse(
                self.use_release_build_configuration_from
            )
        self.ignore_modified_files = set(self.ignore_modified_files or ())
        for branch in self.branches:
            if not isinstance(branch, BranchOptions):
                raise TypeError("branches must contain BranchOptions instances.")

    def find_branch(self, names: Iterable[str]) -> Optional[BranchOptions]:
        """Return the first configured branch whose name is in ``names``."""
        wanted = set(names)
        for branch in self.branches:
            if branch.name in wanted:
                return branch
        return None

    def release_threshold(self, branch: Optional[BranchOptions] = None) -> PackageQuality:
        """Quality from which the release build configuration is used."""
        if branch is not None and branch.use_release_build_configuration_from is not None:
            return branch.use_release_build_configuration_from
        return self.use_release_build_configuration_from
