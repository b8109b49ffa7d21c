"""Error codes reported by a resolution."""

from enum import Enum


class ErrorCode(Enum):
    """Structured error of a :class:`~sgversion.resolution.orchestrator.ResolutionResult`.

    Args:
        Enum (string): Error code, serialized with its value.
    """

    NONE = "None"

    # Repository state
    INIT_NO_GIT_REPOSITORY = "InitNoGitRepository"
    INIT_UNINITIALIZED_GIT_REPOSITORY = "InitUnitializedGitRepository"
    INIT_HEAD_BRANCH_NAME_NOT_FOUND = "InitHeadBranchNameNotFound"
    INIT_HEAD_REMOTE_BRANCH_NAME_NOT_FOUND = "InitHeadRemoteBranchNameNotFound"
    INIT_HEAD_COMMIT_NOT_FOUND = "InitHeadCommitNotFound"

    # Working tree
    DIRTY_WORKING_FOLDER = "DirtyWorkingFolder"

    # Configuration
    INVALID_STARTING_VERSION = "InvalidStartingVersion"
    STARTING_VERSION_CONFLICTS_WITH_SINGLE_MAJOR = "StartingVersionConflictsWithSingleMajor"
    INVALID_OVERRIDDEN_TAG = "InvalidOverriddenTag"

    # Tag catalog
    MULTIPLE_VERSION_TAG_CONFLICT = "MultipleVersionTagConflict"
    CHECK_EXISTING_VERSION_FIRST_MISSING = "CheckExistingVersionFirstMissing"
    CHECK_EXISTING_VERSION_STARTING_VERSION_NOT_FOUND = "CheckExistingVersionStartingVersionNotFound"
    CHECK_EXISTING_VERSION_HOLE_FOUND = "CheckExistingVersionHoleFound"

    # Release tag
    RELEASE_TAG_CONFLICTS_WITH_SINGLE_MAJOR_OR_ONLY_PATCH = "ReleaseTagConflictsWithSingleMajorOrOnlyPatch"
    RELEASE_TAG_IS_NOT_POSSIBLE = "ReleaseTagIsNotPossible"

    # CI builds
    CI_BUILD_VERSION_NAME_TOO_LONG = "CIBuildVersionNameTooLong"
    CI_BUILD_HEAD_COMMIT_IS_DETACHED = "CIBuildHeadCommitIsDetached"
    CI_BUILD_REPOSITORY_HEAD_IS_DETACHED = "CIBuildRepositoryHeadIsDetached"
    CI_BUILD_MISSING_BRANCH_OPTION = "CIBuildMissingBranchOption"
    CI_BUILD_BRANCH_EXPLICIT_NONE = "CIBuildBranchExplicitNone"

    ALREADY_EXISTING_VERSION = "AlreadyExistingVersion"
