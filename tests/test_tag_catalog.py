"""Tests for tag collection, conflicts and existing version checks."""

import pytest

from sgversion.repository.memory import MemoryRepository
from sgversion.resolution.errors import ErrorCode
from sgversion.resolution.tag_catalog import TagCommit, build_catalog
from sgversion.versioning.scheme import parse_version


def versions(result):
    return [str(t.version) for t in result.catalog.tag_commits]


class TestBuildCatalog:
    """Catalog construction from repository tags."""

    def test_collects_sorted_versions(self, repo):
        a, b, c = repo.chain(None, 3)
        repo.tag(c, "v1.1.0")
        repo.tag(a, "v1.0.0")
        repo.tag(b, "not-a-version", "v1.0.1-beta")
        result = build_catalog(repo)
        assert not result.has_error
        assert versions(result) == ["1.0.0", "1.0.1-beta", "1.1.0"]
        assert result.catalog.by_sha(b).version == parse_version("1.0.1-beta")

    def test_same_version_twice_on_a_commit_is_not_a_conflict(self, repo):
        a = repo.commit()
        repo.tag(a, "v1.0.0", "1.0.0")
        assert versions(build_catalog(repo)) == ["1.0.0"]

    def test_conflicting_tags(self, repo):
        a = repo.commit()
        repo.tag(a, "v1.0.0", "v1.1.0")
        result = build_catalog(repo)
        assert result.error_code is ErrorCode.MULTIPLE_VERSION_TAG_CONFLICT
        assert result.catalog is None
        assert result.messages == [
            f"Commit '{a}' has 2 different released version tags. Delete some of them or create "
            "+invalid tag(s) if they are already pushed to a remote repository."
        ]

    def test_invalid_marker_resolves_conflict(self, repo):
        a = repo.commit()
        repo.tag(a, "v1.0.0", "v1.1.0", "v1.0.0+invalid")
        result = build_catalog(repo)
        assert not result.has_error
        assert versions(result) == ["1.1.0"]

    def test_invalid_marker_alone_removes_commit(self, repo):
        a = repo.commit()
        repo.tag(a, "v1.0.0", "v1.0.0+invalid")
        assert versions(build_catalog(repo)) == []

    def test_single_major_filter(self, repo):
        a, b = repo.chain(None, 2)
        repo.tag(a, "v1.0.0")
        repo.tag(b, "v2.0.0")
        assert versions(build_catalog(repo, single_major=1)) == ["1.0.0"]

    def test_single_major_filter_avoids_conflict(self, repo):
        a = repo.commit()
        repo.tag(a, "v1.0.0", "v2.0.0")
        assert versions(build_catalog(repo, single_major=2)) == ["2.0.0"]

    def test_starting_version_filters_lower_versions(self, repo):
        a, b = repo.chain(None, 2)
        repo.tag(a, "v1.0.0")
        repo.tag(b, "v2.0.0")
        result = build_catalog(repo, starting_version="v2.0.0")
        assert versions(result) == ["2.0.0"]
        assert result.catalog.starting_version_commit.sha == b

    def test_invalid_starting_version(self, repo):
        result = build_catalog(repo, starting_version="next")
        assert result.error_code is ErrorCode.INVALID_STARTING_VERSION
        assert result.messages == ["Invalid StartingVersion. 'next' is not a valid release version."]

    def test_starting_version_above_single_major(self, repo):
        result = build_catalog(repo, starting_version="v3.0.0", single_major=2)
        assert result.error_code is ErrorCode.STARTING_VERSION_CONFLICTS_WITH_SINGLE_MAJOR
        assert result.messages == [
            "StartingVersion '3.0.0' is defined, its major must not be greater than defined SingleMajor = 2."
        ]

    def test_repository_is_required(self):
        with pytest.raises(ValueError):
            build_catalog(None)


class TestOverriddenTags:
    """Tags applied through configuration."""

    def test_override_on_head(self, repo):
        a, b = repo.chain(None, 2)
        repo.set_head(b, "master")
        result = build_catalog(repo, {"head": ["v1.0.0"]})
        assert result.catalog.by_sha(b).version == parse_version("v1.0.0")

    def test_override_by_branch_and_single_string(self, repo):
        a = repo.commit()
        repo.branch("release", a)
        result = build_catalog(repo, {"release": "v0.1.0"})
        assert versions(result) == ["0.1.0"]

    def test_override_can_invalidate_existing_tag(self, repo):
        a = repo.commit()
        repo.tag(a, "v1.0.0")
        result = build_catalog(repo, {a: ["v1.0.0+invalid"]})
        assert versions(result) == []

    def test_empty_key(self, repo):
        repo.commit()
        result = build_catalog(repo, {"": ["v1.0.0"]})
        assert result.error_code is ErrorCode.INVALID_OVERRIDDEN_TAG
        assert result.messages == ["Invalid overridden commit: the key is null or empty."]

    def test_unknown_commit(self, repo):
        repo.commit()
        result = build_catalog(repo, {"nowhere": ["v1.0.0"]})
        assert result.error_code is ErrorCode.INVALID_OVERRIDDEN_TAG
        assert result.messages == ["Overridden commit 'nowhere' does not exist."]


class TestContentGroups:
    """Commits sharing the same content are linked."""

    def test_same_content_linked(self, repo):
        a = repo.commit(content="tree-1")
        b = repo.commit(a)
        c = repo.commit(b, content="tree-1")
        repo.tag(a, "v1.0.0")
        repo.tag(c, "v1.0.1")
        catalog = build_catalog(repo).catalog
        first = catalog.by_sha(a)
        assert {t.sha for t in first.content_group} == {a, c}
        assert first.best_except().version == parse_version("1.0.1")
        assert first.best_except(parse_version("1.0.1")).version == parse_version("1.0.0")
        assert catalog.by_content("tree-1") is first

    def test_tag_commit_to_dict(self):
        tag_commit = TagCommit("abc", "tree", parse_version("1.0.0"))
        assert tag_commit.to_dict() == {"version": "1.0.0", "commit": "abc"}
        assert tag_commit.best_except(parse_version("1.0.0")) is None

    def test_first_above(self, repo):
        a, b = repo.chain(None, 2)
        repo.tag(a, "v1.0.0")
        repo.tag(b, "v1.1.0")
        catalog = build_catalog(repo).catalog
        assert catalog.first_above(None) == parse_version("1.0.0")
        assert catalog.first_above(parse_version("1.0.0")) == parse_version("1.1.0")
        assert catalog.first_above(parse_version("1.0.0"), parse_version("1.1.0")) is None


class TestCheckExistingVersions:
    """Optional verification of the released versions."""

    def test_valid_history(self, repo):
        a, b, c = repo.chain(None, 3)
        repo.tag(a, "v1.0.0")
        repo.tag(b, "v1.1.0-rc")
        repo.tag(c, "v1.1.0")
        assert not build_catalog(repo, check_existing_versions=True).has_error

    def test_first_version_missing(self, repo):
        a = repo.commit()
        repo.tag(a, "v1.0.1")
        result = build_catalog(repo, check_existing_versions=True)
        assert result.error_code is ErrorCode.CHECK_EXISTING_VERSION_FIRST_MISSING
        assert result.messages[0].startswith(f"First existing version is '1.0.1' (on '{a}').")
        assert result.messages[0].endswith("or a StartingVersion must be specified.")

    def test_hole(self, repo):
        a, b = repo.chain(None, 2)
        repo.tag(a, "v1.0.0")
        repo.tag(b, "v1.0.2")
        result = build_catalog(repo, check_existing_versions=True)
        assert result.error_code is ErrorCode.CHECK_EXISTING_VERSION_HOLE_FOUND
        assert result.messages == ["Missing one or more version(s) between '1.0.0' and '1.0.2'."]

    def test_same_version_on_two_commits_is_not_a_hole(self, repo):
        a, b = repo.chain(None, 2)
        repo.tag(a, "v1.0.0")
        repo.tag(b, "v1.0.0")
        assert not build_catalog(repo, check_existing_versions=True).has_error

    def test_starting_version_not_found(self, repo):
        a, b = repo.chain(None, 2)
        repo.tag(a, "v1.0.0")
        repo.tag(b, "v2.1.0")
        result = build_catalog(repo, starting_version="v2.0.0", check_existing_versions=True)
        assert result.error_code is ErrorCode.CHECK_EXISTING_VERSION_STARTING_VERSION_NOT_FOUND
        assert result.messages == ["Missing specified StartingVersion='2.0.0'."]

    def test_starting_version_skips_first_check(self, repo):
        a, b = repo.chain(None, 2)
        repo.tag(a, "v5.0.0")
        repo.tag(b, "v5.0.1")
        result = build_catalog(repo, starting_version="v5.0.0", check_existing_versions=True)
        assert not result.has_error
