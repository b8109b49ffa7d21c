"""End to end tests of version resolution on in-memory repositories."""

from datetime import datetime, timedelta, timezone

import pytest

from sgversion.repository.memory import MemoryRepository
from sgversion.resolution.errors import ErrorCode
from sgversion.resolution.options import BranchOptions, RepositoryOptions
from sgversion.resolution.orchestrator import resolve
from sgversion.versioning.scheme import ZERO_VERSION, direct_successors, first_possible_versions, parse_version

NO_CI = "No release tag found and CI build is not possible: "


@pytest.fixture
def released(repo):
    """``v1.0.0`` on the root commit, three commits on develop above it."""
    root = repo.commit()
    repo.tag(root, "v1.0.0")
    tip = repo.chain(root, 3)[-1]
    repo.set_head(tip, "develop")
    return repo, root, tip


class TestReleases:
    """Commits carrying a release tag."""

    def test_tagged_head(self, repo):
        root = repo.commit()
        repo.tag(root, "v1.0.0")
        repo.set_head(root, "master")
        result = resolve(repo)
        assert not result.has_error
        assert result.error is None
        assert str(result.final_version) == "1.0.0"
        assert result.release_tag == parse_version("1.0.0")
        assert result.build_configuration == "Release"
        assert result.final_informational_version == f"1.0.0/{root}/2020-01-01 00:00:00Z"
        assert parse_version("1.0.1") in result.next_possible_versions
        assert result.possible_versions == first_possible_versions()

    def test_prerelease_build_configuration(self, repo):
        root = repo.commit()
        repo.set_head(root, "master")
        repo.tag(root, "v1.0.0-beta")
        assert resolve(repo).build_configuration == "Debug"
        options = RepositoryOptions(use_release_build_configuration_from="exploratory")
        assert resolve(repo, options).build_configuration == "Release"

    def test_release_candidate_is_release_by_default(self, repo):
        root = repo.commit()
        repo.set_head(root, "master")
        repo.tag(root, "v1.0.0-rc")
        assert resolve(repo).build_configuration == "Release"

    def test_tag_not_possible(self, repo):
        root = repo.commit()
        child = repo.commit(root)
        repo.tag(root, "v1.0.0")
        repo.tag(child, "v1.0.2")
        repo.set_head(child, "master")
        result = resolve(repo)
        assert result.error_code is ErrorCode.RELEASE_TAG_IS_NOT_POSSIBLE
        assert result.error == "Release tag '1.0.2' is not valid here."
        assert result.final_version == ZERO_VERSION
        assert result.build_configuration == "Debug"

    def test_tag_filtered_by_only_patch(self, repo):
        root = repo.commit()
        child = repo.commit(root)
        repo.tag(root, "v1.0.0")
        repo.tag(child, "v1.1.0")
        repo.set_head(child, "master")
        assert not resolve(repo).has_error
        result = resolve(repo, RepositoryOptions(only_patch=True))
        assert result.error_code is ErrorCode.RELEASE_TAG_CONFLICTS_WITH_SINGLE_MAJOR_OR_ONLY_PATCH
        assert result.error.splitlines()[0] == "Release tag '1.1.0' is not valid here."
        assert all(v.is_patch for v in result.possible_versions)

    def test_tag_filtered_by_single_major(self, repo):
        root = repo.commit()
        child = repo.commit(root)
        repo.tag(root, "v1.0.0")
        repo.tag(child, "v2.0.0")
        repo.set_head(child, "master")
        result = resolve(repo, RepositoryOptions(single_major=1))
        # 2.0.0 is dropped from the catalog, the commit has no release tag anymore
        assert result.release_tag is None
        assert result.error_code is ErrorCode.CI_BUILD_MISSING_BRANCH_OPTION

    def test_starting_version_allows_any_first_release(self, repo):
        root = repo.commit()
        repo.set_head(root, "master")
        repo.tag(root, "v3.0.0")
        assert resolve(repo).error_code is ErrorCode.RELEASE_TAG_IS_NOT_POSSIBLE
        result = resolve(repo, RepositoryOptions(starting_version="v3.0.0"))
        assert not result.has_error
        assert str(result.final_version) == "3.0.0"

    def test_starting_version_window_without_tag(self, repo):
        root = repo.commit()
        repo.set_head(root, "master")
        result = resolve(repo, RepositoryOptions(starting_version="v3.0.0"))
        assert result.possible_versions == [parse_version("3.0.0")]

    def test_overridden_head_tag(self, repo):
        root = repo.commit()
        tip = repo.commit(root)
        repo.tag(root, "v1.0.0")
        repo.set_head(tip, "master")
        result = resolve(repo, RepositoryOptions(overridden_tags={"head": ["v1.1.0"]}))
        assert str(result.final_version) == "1.1.0"

    @pytest.mark.parametrize("successor", [str(v) for v in direct_successors(parse_version("1.0.0"))])
    def test_successor_is_valid_only_above_its_base(self, repo, successor):
        root = repo.commit()
        repo.tag(root, "v1.0.0")
        child = repo.commit(root)
        unrelated = repo.commit()
        options = RepositoryOptions(overridden_tags={"head": ["v" + successor]})

        repo.set_head(child, "master")
        result = resolve(repo, options)
        assert not result.has_error
        assert str(result.final_version) == successor

        repo.set_head(unrelated, "other")
        result = resolve(repo, options)
        assert result.error_code is ErrorCode.RELEASE_TAG_IS_NOT_POSSIBLE
        assert result.final_version == ZERO_VERSION

    def test_invalid_starting_version(self, repo):
        repo.set_head(repo.commit(), "master")
        result = resolve(repo, RepositoryOptions(starting_version="nope"))
        assert result.error_code is ErrorCode.INVALID_STARTING_VERSION

    def test_idempotent(self, released):
        repo, _, _ = released
        options = RepositoryOptions(branches=[BranchOptions("develop", "last_release_based")])
        assert resolve(repo, options).to_dict() == resolve(repo, options).to_dict()


class TestCIBuilds:
    """Commits without release tag on CI-enabled branches."""

    def test_last_release_based(self, released, develop_options):
        repo, root, tip = released
        result = resolve(repo, develop_options)
        assert not result.has_error
        assert str(result.final_version) == "1.0.1--0003-develop"
        assert result.ci_release.depth == 3
        assert result.ci_release.base_tag == parse_version("1.0.0")
        assert result.best_commit_below.sha == root
        assert result.build_configuration == "Debug"
        assert result.final_informational_version.startswith(f"1.0.1--0003-develop/{tip}/")

    def test_version_name(self, released):
        repo, _, _ = released
        options = RepositoryOptions(branches=[BranchOptions("develop", "last_release_based", version_name="dev")])
        assert str(resolve(repo, options).final_version) == "1.0.1--0003-dev"

    def test_ci_build_configuration_threshold(self, released):
        repo, _, _ = released
        options = RepositoryOptions(
            branches=[BranchOptions("develop", "last_release_based", use_release_build_configuration_from="ci")]
        )
        assert resolve(repo, options).build_configuration == "Release"

    def test_zero_timed(self, repo):
        root = repo.commit(when=datetime(2015, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=36))
        repo.set_head(root, "explo")
        options = RepositoryOptions(branches=[BranchOptions("explo", "zero_timed")])
        result = resolve(repo, options)
        assert str(result.final_version) == "0.0.0--0000010-explo"
        assert result.ci_release.is_zero_timed

    def test_zero_timed_keeps_base_release(self, repo):
        root = repo.commit()
        repo.tag(root, "v1.0.0")
        repo.set_head(repo.commit(root), "explo")
        options = RepositoryOptions(branches=[BranchOptions("explo", "zero_timed")])
        result = resolve(repo, options)
        assert str(result.final_version).endswith("-explo+v1.0.0")
        assert result.ci_release.is_zero_timed
        assert result.ci_release.base_tag == parse_version("1.0.0")
        assert result.to_dict()["ci_release"]["base_tag"] == "1.0.0"

    def test_last_release_based_without_release_falls_back_to_zero_timed(self, repo):
        root = repo.commit(when=datetime(2015, 1, 1, tzinfo=timezone.utc))
        repo.set_head(root, "develop")
        options = RepositoryOptions(branches=[BranchOptions("develop", "last_release_based")])
        assert str(resolve(repo, options).final_version) == "0.0.0--0000000-develop"

    def test_detached_head_uses_remote_branch(self, develop_options):
        other = MemoryRepository()
        root = other.commit()
        other.tag(root, "v1.0.0")
        tip = other.chain(root, 2)[-1]
        other.branch("develop", tip, remote="origin")
        other.set_head(tip)
        result = resolve(other, develop_options)
        assert result.starting_commit.considered_branch_names == ("develop",)
        assert str(result.final_version) == "1.0.1--0002-develop"

    def test_missing_branch_option(self, repo):
        repo.set_head(repo.commit(), "master")
        result = resolve(repo)
        assert result.error_code is ErrorCode.CI_BUILD_MISSING_BRANCH_OPTION
        assert result.error.splitlines()[0] == NO_CI + "no CI Branch information defined for branch 'master'."
        assert result.possible_versions == first_possible_versions()
        assert result.final_version == ZERO_VERSION

    def test_repository_head_detached(self, repo):
        tip = repo.chain(None, 2)[-1]
        repo.set_head(tip)
        result = resolve(repo)
        assert result.error_code is ErrorCode.CI_BUILD_REPOSITORY_HEAD_IS_DETACHED
        assert result.error == NO_CI + "no branches reference the current repository's head commit."

    def test_head_commit_detached(self, repo):
        first, second = repo.chain(None, 2)
        repo.set_head(second, "master")
        result = resolve(repo, RepositoryOptions(head_commit=first))
        assert result.error_code is ErrorCode.CI_BUILD_HEAD_COMMIT_IS_DETACHED
        assert result.error == NO_CI + f"no branches reference the specified commit '{first}'."

    def test_branch_explicitly_none(self, repo):
        repo.set_head(repo.commit(), "master")
        result = resolve(repo, RepositoryOptions(branches=[BranchOptions("master", "none")]))
        assert result.error_code is ErrorCode.CI_BUILD_BRANCH_EXPLICIT_NONE

    def test_name_too_long(self, repo):
        repo.set_head(repo.commit(), "feature-long")
        result = resolve(repo, RepositoryOptions(branches=[BranchOptions("feature-long", "zero_timed")]))
        assert result.error_code is ErrorCode.CI_BUILD_VERSION_NAME_TOO_LONG
        lines = result.error.splitlines()
        assert lines[0] == NO_CI + "the branch name must not be longer than 8 characters."
        assert lines[-1] == "    version_name: feature-"


class TestAlreadyExistingVersion:
    """Content that has already been released."""

    def test_released_content_is_rejected(self, repo, develop_options):
        root = repo.commit(content="tree")
        repo.tag(root, "v1.0.0")
        same = repo.commit(root, content="tree")
        repo.set_head(same, "develop")
        result = resolve(repo, develop_options)
        assert result.error_code is ErrorCode.ALREADY_EXISTING_VERSION
        assert result.already_existing_version.sha == root
        assert result.final_version == ZERO_VERSION
        assert result.possible_versions == []
        assert result.error.splitlines()[-2] == (
            f"This commit has already been released with version '1.0.0', by commit '{root}'."
        )

    def test_ignore_already_existing_version(self, repo):
        root = repo.commit(content="tree")
        repo.tag(root, "v1.0.0")
        same = repo.commit(root, content="tree")
        repo.set_head(same, "develop")
        options = RepositoryOptions(
            branches=[BranchOptions("develop", "last_release_based")],
            ignore_already_existing_version=True,
        )
        result = resolve(repo, options)
        assert not result.has_error
        assert str(result.final_version) == "1.0.1--0001-develop"

    def test_debug_build_of_released_content(self, repo, develop_options):
        root = repo.commit()
        released = repo.commit(root, content="tree")
        repo.tag(released, "v1.0.0")
        cherry_picked = repo.commit(root, content="tree")
        repo.set_head(cherry_picked, "develop")
        result = resolve(repo, develop_options)
        assert not result.has_error
        assert result.already_existing_version.sha == released
        assert str(result.final_version) == "1.0.1--0000-develop"
        assert result.build_configuration == "Debug"

    def test_same_configuration_at_depth_zero_is_rejected(self, repo):
        root = repo.commit()
        released = repo.commit(root, content="tree")
        repo.tag(released, "v1.0.0")
        cherry_picked = repo.commit(root, content="tree")
        repo.set_head(cherry_picked, "develop")
        options = RepositoryOptions(
            branches=[BranchOptions("develop", "last_release_based", use_release_build_configuration_from="ci")]
        )
        result = resolve(repo, options)
        assert result.error_code is ErrorCode.ALREADY_EXISTING_VERSION


class TestRepositoryState:
    """Head selection and working folder checks."""

    def test_no_repository(self):
        result = resolve(None)
        assert result.error_code is ErrorCode.INIT_NO_GIT_REPOSITORY
        assert result.error == "No Git repository."
        assert result.final_informational_version == (
            "0.0.0-0/0000000000000000000000000000000000000000/0001-01-01 00:00:00Z"
        )

    def test_uninitialized(self, repo):
        result = resolve(repo)
        assert result.error_code is ErrorCode.INIT_UNINITIALIZED_GIT_REPOSITORY
        assert result.error == "Uninitialized Git repository."

    def test_head_commit_not_found(self, repo):
        repo.set_head(repo.commit(), "master")
        result = resolve(repo, RepositoryOptions(head_commit="zzzz"))
        assert result.error_code is ErrorCode.INIT_HEAD_COMMIT_NOT_FOUND
        assert result.error == "Unable to find HeadCommit 'zzzz' commit."

    def test_head_branch_not_found(self, repo):
        repo.set_head(repo.commit(), "master")
        result = resolve(repo, RepositoryOptions(head_branch_name="develop"))
        assert result.error_code is ErrorCode.INIT_HEAD_BRANCH_NAME_NOT_FOUND
        assert result.error == "Unknown HeadBranchName: 'develop' (also tested on remote 'origin/develop')."

    def test_head_remote_branch_not_found(self, repo):
        repo.set_head(repo.commit(), "master")
        result = resolve(repo, RepositoryOptions(head_branch_name="origin/develop"))
        assert result.error_code is ErrorCode.INIT_HEAD_REMOTE_BRANCH_NAME_NOT_FOUND

    def test_head_branch_on_remote(self, repo, develop_options):
        root = repo.commit()
        repo.tag(root, "v1.0.0")
        tip = repo.commit(root)
        repo.set_head(root, "master")
        repo.branch("develop", tip, remote="origin")
        options = RepositoryOptions(head_branch_name="develop", branches=develop_options.branches)
        result = resolve(repo, options)
        assert result.commit_sha == tip
        assert str(result.final_version) == "1.0.1--0001-develop"

    def test_dirty_working_folder(self, released, develop_options):
        repo, _, _ = released
        repo.set_status([("??", "new.txt")])
        result = resolve(repo, develop_options)
        assert result.error_code is ErrorCode.DIRTY_WORKING_FOLDER
        assert result.error == "Working folder has non committed changes.\nFound: 1 file(s) added."

    def test_dirty_check_disabled(self, released):
        repo, _, _ = released
        repo.set_status([(" M", "src/app.py")])
        options = RepositoryOptions(
            branches=[BranchOptions("develop", "last_release_based")],
            ignore_dirty_working_folder=True,
        )
        result = resolve(repo, options)
        assert not result.has_error
        assert result.is_dirty
        assert result.is_dirty_explanations == "At least one Modified file found: src/app.py."

    def test_ignored_modified_file(self, released):
        repo, _, _ = released
        repo.set_status([(" M", "version.txt")])
        options = RepositoryOptions(
            branches=[BranchOptions("develop", "last_release_based")],
            ignore_modified_files={"version.txt"},
        )
        assert not resolve(repo, options).is_dirty

    def test_to_dict(self, released, develop_options):
        repo, root, tip = released
        data = resolve(repo, develop_options).to_dict()
        assert data["final_version"] == "1.0.1--0003-develop"
        assert data["commit_sha"] == tip
        assert data["error_code"] == "None"
        assert data["best_commit_below"] == {"version": "1.0.0", "commit": root}
        assert data["ci_release"]["depth"] == 3
        assert data["considered_branch_names"] == ["develop"]
