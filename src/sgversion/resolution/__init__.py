"""Version resolution engine.

- tag_catalog.py: tag discovery, conflicts and content-identity groups
- lineage.py: memoized commit graph walk
- window.py: legal version windows
- ci.py: CI pseudo-versions
- starting_commit.py: head commit and branch options lookup
- orchestrator.py: ties everything together into a ResolutionResult
"""

from .build_info import default_build_configuration_selector, simple_build_configuration_selector
from .ci import CIReleaseInfo, create_ci_release
from .errors import ErrorCode
from .explain import explain
from .lineage import LineageInfo, LineageWalker
from .options import BranchOptions, CIBranchVersionMode, RepositoryOptions
from .orchestrator import ResolutionResult, resolve
from .starting_commit import StartingCommit, locate_starting_commit
from .tag_catalog import CatalogBuildResult, TagCommit, VersionCatalog, build_catalog
from .window import CommitVersions, commit_versions, filter_versions, possible_versions

__all__ = [
    "BranchOptions",
    "CIBranchVersionMode",
    "CIReleaseInfo",
    "CatalogBuildResult",
    "CommitVersions",
    "ErrorCode",
    "LineageInfo",
    "LineageWalker",
    "RepositoryOptions",
    "ResolutionResult",
    "StartingCommit",
    "TagCommit",
    "VersionCatalog",
    "build_catalog",
    "commit_versions",
    "create_ci_release",
    "default_build_configuration_selector",
    "explain",
    "filter_versions",
    "locate_starting_commit",
    "possible_versions",
    "resolve",
    "simple_build_configuration_selector",
]
