"""In-memory commit graph, for tests and programmatic use."""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Branch, Commit, TagRef, WorkingTreeStatus

_BASE_TIME = datetime(2020, 1, 1, tzinfo=timezone.utc)


class MemoryRepository:
    """Mutable commit graph builder implementing the accessor protocol.

    Example:
        >>> repo = MemoryRepository()
        >>> root = repo.commit()
        >>> child = repo.commit(root)
        >>> repo.tag(root, "v1.0.0")
        >>> repo.set_head(child, branch="develop")
    """

    def __init__(self) -> None:
        self._commits: Dict[str, Commit] = {}
        self._order: List[str] = []
        self._tags: List[TagRef] = []
        self._branches: List[Branch] = []
        self._head_sha: Optional[str] = None
        self._head_branch: Optional[str] = None
        self._status: Tuple[Tuple[str, str], ...] = ()

    # ------------------------------------------------------------------
    # Builder API

    def commit(
        self,
        *parents: str,
        content: Optional[str] = None,
        when: Optional[datetime] = None,
        sha: Optional[str] = None,
        shallow: bool = False,
    ) -> str:
        """Add a commit and return its sha.

        Args:
            parents: Parent shas; they do not need to exist (shallow clone).
            content: Content identifier; unique per commit by default.
            when: Author time; defaults to one minute after the previous commit.
            sha: Explicit sha; a deterministic one is generated otherwise.
            shallow: Flag the commit as a shallow clone boundary.
        """
        index = len(self._order)
        if sha is None:
            sha = hashlib.sha1(f"commit-{index}".encode("utf-8")).hexdigest()
        if sha in self._commits:
            raise ValueError(f"Commit '{sha}' already exists.")
        if content is None:
            content = hashlib.sha1(f"tree-{sha}".encode("utf-8")).hexdigest()
        if when is None:
            when = _BASE_TIME + timedelta(minutes=index)
        self._commits[sha] = Commit(
            sha=sha,
            parents=tuple(parents),
            content_id=content,
            author_time=when,
            shallow=shallow,
        )
        self._order.append(sha)
        return sha

    def chain(self, parent: Optional[str], count: int) -> List[str]:
        """Add ``count`` commits in a line below ``parent`` and return them in order."""
        created = []
        for _ in range(count):
            parent = self.commit(*([parent] if parent else []))
            created.append(parent)
        return created

    def tag(self, sha: str, *names: str) -> None:
        self._require(sha)
        self._tags.extend(TagRef(name=name, sha=sha) for name in names)

    def branch(self, name: str, sha: str, remote: Optional[str] = None) -> None:
        """Create or move a branch; remote branches are named ``<remote>/<name>``."""
        self._require(sha)
        full_name = f"{remote}/{name}" if remote else name
        self._branches = [b for b in self._branches if b.name != full_name]
        self._branches.append(Branch(name=full_name, tip=sha, remote=remote))

    def set_head(self, sha: str, branch: Optional[str] = None) -> None:
        """Check out ``sha``; with ``branch`` the branch is created or moved there."""
        self._require(sha)
        self._head_sha = sha
        self._head_branch = branch
        if branch:
            self.branch(branch, sha)

    def set_status(self, entries: Iterable[Tuple[str, str]]) -> None:
        self._status = tuple(entries)

    def _require(self, sha: str) -> None:
        if sha not in self._commits:
            raise ValueError(f"Unknown commit '{sha}'.")

    # ------------------------------------------------------------------
    # RepositoryAccessor

    @property
    def is_shallow(self) -> bool:
        return any(
            commit.shallow or any(p not in self._commits for p in commit.parents)
            for commit in self._commits.values()
        )

    def head(self) -> Optional[Commit]:
        if self._head_sha is None:
            return None
        return self._commits[self._head_sha]

    def head_branch_name(self) -> Optional[str]:
        return self._head_branch

    def lookup(self, commit_ish: str) -> Optional[Commit]:
        if not commit_ish:
            return None
        if commit_ish == "HEAD":
            return self.head()
        if commit_ish in self._commits:
            return self._commits[commit_ish]
        for branch in self._branches:
            if branch.name == commit_ish:
                return self._commits[branch.tip]
        for tag in self._tags:
            if tag.name == commit_ish:
                return self._commits[tag.sha]
        if len(commit_ish) >= 4:
            matches = [sha for sha in self._commits if sha.startswith(commit_ish.lower())]
            if len(matches) == 1:
                return self._commits[matches[0]]
        return None

    def parents(self, commit: Commit) -> List[Optional[Commit]]:
        return [self._commits.get(sha) for sha in commit.parents]

    def content_id(self, commit: Commit) -> str:
        return commit.content_id

    def tags(self) -> Sequence[TagRef]:
        return list(self._tags)

    def branches(self) -> Sequence[Branch]:
        return list(self._branches)

    def branches_pointing_at(self, sha: str) -> List[Branch]:
        return [branch for branch in self._branches if branch.tip == sha]

    def working_tree_status(self) -> WorkingTreeStatus:
        return WorkingTreeStatus(entries=self._status)

    def is_dirty(self) -> bool:
        return self.working_tree_status().is_dirty()
