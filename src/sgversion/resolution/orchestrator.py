"""Resolution of the version of one commit."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import semantic_version

from ..common.logging_utils import extra_context
from ..constants import Constants
from ..repository.models import RepositoryAccessor
from ..versioning.scheme import ZERO_VERSION, TagVersion, informational_version
from .build_info import BuildConfigurationSelector, default_build_configuration_selector
from .ci import CIReleaseInfo, ci_build_failure, create_ci_release
from .errors import ErrorCode
from .lineage import LineageInfo, LineageWalker
from .options import RepositoryOptions
from .starting_commit import StartingCommit, locate_starting_commit
from .tag_catalog import TagCommit, build_catalog
from .window import commit_versions, filter_versions

logger = logging.getLogger(__name__)


def already_existing_message(tag_commit: TagCommit) -> str:
    return (
        f"This commit has already been released with version '{tag_commit.version}', "
        f"by commit '{tag_commit.sha}'."
    )


@dataclass
class ResolutionResult:
    """Outcome of :func:`resolve`.

    ``error_code`` is ``ErrorCode.NONE`` exactly when ``final_version`` is a
    usable version; otherwise ``final_version`` is the zero version.
    """
    options: RepositoryOptions
    starting_commit: StartingCommit
    final_version: semantic_version.Version = ZERO_VERSION
    final_informational_version: str = ""
    build_configuration: str = Constants.BUILD_CONFIGURATION_DEBUG
    release_tag: Optional[TagVersion] = None
    ci_release: Optional[CIReleaseInfo] = None
    possible_versions: Optional[List[TagVersion]] = None
    next_possible_versions: Optional[List[TagVersion]] = None
    already_existing_version: Optional[TagCommit] = None
    best_commit_below: Optional[TagCommit] = None
    existing_versions: Optional[List[TagCommit]] = None
    lineage: Optional[LineageInfo] = None
    is_shallow_cloned: bool = False
    is_dirty_explanations: Optional[str] = None
    error_code: ErrorCode = ErrorCode.NONE
    error: Optional[str] = None
    commit_sha: Optional[str] = None
    commit_date: Optional[datetime] = None

    @property
    def has_error(self) -> bool:
        return self.error_code is not ErrorCode.NONE

    @property
    def is_dirty(self) -> bool:
        return self.is_dirty_explanations is not None

    def to_dict(self) -> Dict[str, Any]:
        """JSON friendly representation."""
        def versions(values):
            return None if values is None else [str(v) for v in values]

        if self.commit_date is not None:
            commit_date = self.commit_date.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%SZ")
        else:
            commit_date = Constants.ZERO_COMMIT_DATE
        return {
            "final_version": str(self.final_version),
            "informational_version": self.final_informational_version,
            "build_configuration": self.build_configuration,
            "commit_sha": self.commit_sha or Constants.ZERO_COMMIT_SHA,
            "commit_date": commit_date,
            "release_tag": str(self.release_tag) if self.release_tag is not None else None,
            "ci_release": self.ci_release.to_dict() if self.ci_release is not None else None,
            "possible_versions": versions(self.possible_versions),
            "next_possible_versions": versions(self.next_possible_versions),
            "already_existing_version": (
                self.already_existing_version.to_dict() if self.already_existing_version is not None else None
            ),
            "best_commit_below": self.best_commit_below.to_dict() if self.best_commit_below is not None else None,
            "is_shallow_cloned": self.is_shallow_cloned,
            "is_dirty": self.is_dirty,
            "dirty_explanations": self.is_dirty_explanations,
            "considered_branch_names": list(self.starting_commit.considered_branch_names),
            "error_code": self.error_code.value,
            "error": self.error,
        }


def resolve(
    repository: Optional[RepositoryAccessor],
    options: Optional[RepositoryOptions] = None,
    build_configuration_selector: BuildConfigurationSelector = default_build_configuration_selector,
) -> ResolutionResult:
    """Resolve the version of the commit selected by ``options``.

    Expected failures (missing head, conflicting tags, no CI option, ...) are
    reported through ``error_code`` and ``error``; they never raise. A git
    failure while reading the repository (unreadable working tree, missing
    executable, ...) propagates as ``GitCommandError``.

    Args:
        repository: Repository accessor, None when there is no repository.
        options: Policy; defaults to :class:`RepositoryOptions` defaults.
        build_configuration_selector: Chooses the build configuration of a version.

    Returns:
        ResolutionResult: The final version and every intermediate piece of information.
    """
    options = options if options is not None else RepositoryOptions()
    start = locate_starting_commit(repository, options)
    result = ResolutionResult(options=options, starting_commit=start)
    branch = start.found_branch_option
    final_version: Optional[Any] = None
    lines: List[str] = []

    if start.error is not None:
        result.error_code = start.error_code
        lines.append(start.error)
    else:
        commit = start.commit
        result.commit_sha = commit.sha
        result.commit_date = commit.author_time
        result.is_dirty_explanations = repository.working_tree_status().explain(
            options.ignore_modified_files,
            options.ignore_modified_file_predicate,
            options.ignore_modified_file_full_process,
        )
        if result.is_dirty and not options.ignore_dirty_working_folder:
            result.error_code = ErrorCode.DIRTY_WORKING_FOLDER
            lines.append("Working folder has non committed changes.")
            lines.append(result.is_dirty_explanations)
        else:
            built = build_catalog(
                repository,
                options.overridden_tags,
                options.starting_version,
                options.single_major,
                options.check_existing_versions,
            )
            if built.has_error:
                result.error_code = built.error_code
                lines.extend(built.messages)
            else:
                catalog = built.catalog
                result.existing_versions = list(catalog.tag_commits)
                info = commit_versions(catalog, LineageWalker(catalog, repository), commit)
                result.lineage = info.lineage
                result.is_shallow_cloned = info.is_shallow_cloned
                result.already_existing_version = info.already_existing_version
                result.best_commit_below = info.best_commit_below

                result.possible_versions = filter_versions(info.possible_versions, options.only_patch, options.single_major)
                result.next_possible_versions = filter_versions(
                    info.next_possible_versions, options.only_patch, options.single_major
                )

                tag_commit = info.release_tag_commit
                if tag_commit is not None:
                    result.release_tag = tag_commit.version
                    if result.release_tag in result.possible_versions:
                        final_version = result.release_tag.semver
                    else:
                        lines.append(f"Release tag '{result.release_tag}' is not valid here.")
                        if result.release_tag in info.possible_versions:
                            lines.append(
                                "Note: this version is invalid because of the single_major or only_patch "
                                "setting in the configuration."
                            )
                            result.error_code = ErrorCode.RELEASE_TAG_CONFLICTS_WITH_SINGLE_MAJOR_OR_ONLY_PATCH
                        else:
                            result.error_code = ErrorCode.RELEASE_TAG_IS_NOT_POSSIBLE
                else:
                    name = start.ci_branch_version_name
                    if name is not None and len(name) <= Constants.CI_BRANCH_NAME_MAX_LENGTH:
                        result.ci_release = create_ci_release(commit, start.ci_version_mode, name, info.lineage)
                        final_version = result.ci_release.build_version
                    else:
                        code, messages = ci_build_failure(start, options)
                        result.error_code = code
                        lines.extend(messages)

        # An existing release of this content cancels the final version, except for
        # a depth 0 release-anchored CI build whose build configuration differs from
        # the release one (a Debug build of released content).
        existing = result.already_existing_version
        if not options.ignore_already_existing_version and existing is not None:
            result.possible_versions = []
            ci = result.ci_release
            if final_version is not None and (
                ci is None
                or ci.is_zero_timed
                or ci.depth > 0
                or build_configuration_selector(ci.base_version, options, branch)
                == build_configuration_selector(final_version, options, branch)
            ):
                lines.append(already_existing_message(existing))
                lines.append(
                    "To ignore such already existing version and force a release, "
                    "set the ignore_already_existing_version option to true."
                )
                final_version = None
                result.error_code = ErrorCode.ALREADY_EXISTING_VERSION

    if result.has_error:
        result.error = "\n".join(lines)
    result.final_version = final_version if final_version is not None else ZERO_VERSION
    if result.commit_sha is not None:
        result.final_informational_version = informational_version(
            result.final_version, result.commit_sha, result.commit_date
        )
    else:
        result.final_informational_version = informational_version(None, None, None)
    result.build_configuration = build_configuration_selector(result.final_version, options, branch)

    logger.debug(
        "Resolution finished",
        extra=extra_context(
            event="resolution",
            component="orchestrator",
            commit=result.commit_sha,
            outcome=result.error_code.value,
        ),
    )
    return result
