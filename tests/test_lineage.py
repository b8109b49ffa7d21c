"""Tests for the memoized commit graph walk."""

import pytest

from sgversion.resolution.lineage import LineageInfo, LineageWalker
from sgversion.resolution.tag_catalog import TagCommit, build_catalog
from sgversion.versioning.scheme import parse_version


def walk(repo, sha, excluded=None):
    catalog = build_catalog(repo).catalog
    walker = LineageWalker(catalog, repo)
    return walker.get_info(repo.lookup(sha), parse_version(excluded) if excluded else None)


class TestLinearHistory:
    """Single parent chains."""

    def test_tagged_commit(self, repo):
        root = repo.commit()
        repo.tag(root, "v1.0.0")
        info, shallow = walk(repo, root)
        assert not shallow
        assert info.this_commit.sha == root
        assert info.best_commit.sha == root
        assert info.best_commit_below is None
        assert info.below_depth == 0

    def test_depth_counts_commits_above_release(self, repo):
        root = repo.commit()
        repo.tag(root, "v1.0.0")
        tip = repo.chain(root, 3)[-1]
        info, _ = walk(repo, tip)
        assert info.this_commit is None
        assert info.best_commit is None
        assert info.best_commit_below.sha == root
        assert info.below_depth == 3
        assert info.max_version == parse_version("1.0.0")

    def test_no_release(self, repo):
        tip = repo.chain(None, 4)[-1]
        info, shallow = walk(repo, tip)
        assert info is None
        assert not shallow

    def test_tagged_commit_above_lower_release(self, repo):
        root = repo.commit()
        tip = repo.chain(root, 2)[-1]
        repo.tag(root, "v1.0.0")
        repo.tag(tip, "v1.0.1")
        info, _ = walk(repo, tip)
        assert info.best_commit.sha == tip
        assert info.best_commit_below is None
        assert info.below_depth == 0

    def test_excluding_own_version(self, repo):
        root = repo.commit()
        tip = repo.chain(root, 2)[-1]
        repo.tag(root, "v1.0.0")
        repo.tag(tip, "v1.0.1")
        info, _ = walk(repo, tip, excluded="1.0.1")
        assert info.this_commit.sha == tip
        assert info.best_commit is None
        assert info.best_commit_below.sha == root
        assert info.below_depth == 2

    def test_deep_history_does_not_recurse(self, repo):
        root = repo.commit()
        repo.tag(root, "v1.0.0")
        tip = repo.chain(root, 3000)[-1]
        info, _ = walk(repo, tip)
        assert info.below_depth == 3000


class TestMerges:
    """Merge commits take the best parent."""

    def test_deepest_parent_wins_on_same_version(self, repo):
        root = repo.commit()
        repo.tag(root, "v1.0.0")
        left = repo.chain(root, 5)[-1]
        right = repo.chain(root, 6)[-1]
        merge = repo.commit(left, right)
        info, _ = walk(repo, merge)
        assert info.best_commit_below.sha == root
        assert info.below_depth == 7

    def test_greater_version_wins_over_depth(self, repo):
        root = repo.commit()
        repo.tag(root, "v1.0.0")
        long_branch = repo.chain(root, 5)[-1]
        feature = repo.commit(root)
        repo.tag(feature, "v1.1.0")
        short_branch = repo.commit(feature)
        merge = repo.commit(long_branch, short_branch)
        info, _ = walk(repo, merge)
        assert info.best_commit_below.sha == feature
        assert info.below_depth == 2


class TestContentIdentity:
    """Commits with the content of a release."""

    def test_untagged_commit_with_released_content(self, repo):
        root = repo.commit()
        released = repo.commit(root, content="released-tree")
        repo.tag(released, "v1.0.0")
        cherry_picked = repo.commit(root, content="released-tree")
        info, _ = walk(repo, cherry_picked)
        assert info.this_commit is None
        assert info.best_commit.sha == released
        assert info.best_commit_below is None
        assert info.below_depth == 0

    def test_released_content_above_the_release(self, repo):
        root = repo.commit(content="released-tree")
        repo.tag(root, "v1.0.0")
        merged = repo.commit(root, content="released-tree")
        info, _ = walk(repo, merged)
        assert info.best_commit.sha == root
        assert info.best_commit_below.sha == root
        assert info.below_depth == 1


class TestShallowClones:
    """Missing parents flag the analysis as incomplete."""

    def test_missing_parent(self, repo):
        orphan = repo.commit("f" * 40)
        child = repo.commit(orphan)
        info, shallow = walk(repo, child)
        assert info is None
        assert shallow
        assert repo.is_shallow

    def test_boundary_flag_propagates(self, repo):
        boundary = repo.commit(shallow=True)
        repo.tag(boundary, "v1.0.0")
        tip = repo.chain(boundary, 2)[-1]
        info, shallow = walk(repo, tip)
        assert shallow
        assert info.is_shallow_cloned
        assert info.below_depth == 2


class TestLineageInfo:
    """Direct construction rules."""

    def test_create_requires_some_release(self):
        with pytest.raises(ValueError):
            LineageInfo.create(None, None, None, False)

    def test_is_better_than(self):
        low = TagCommit("a", "t1", parse_version("1.0.0"))
        high = TagCommit("b", "t2", parse_version("1.1.0"))
        shallow_low = LineageInfo(None, None, low, 1, False)
        deep_low = LineageInfo(None, None, low, 4, False)
        high_info = LineageInfo(None, high, None, 0, False)
        assert deep_low.is_better_than(shallow_low)
        assert not shallow_low.is_better_than(deep_low)
        assert high_info.is_better_than(deep_low)
