"""Data models and the accessor protocol for commit graphs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple


@dataclass(frozen=True)
class Commit:
    """An immutable commit of the graph.

    ``shallow`` is set on the boundary commits of a shallow clone: their
    parents exist upstream but are not available locally.
    """
    sha: str
    parents: Tuple[str, ...]
    content_id: str
    author_time: datetime
    shallow: bool = False


@dataclass(frozen=True)
class Branch:
    """A local or remote-tracking branch."""
    name: str
    tip: str
    remote: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return self.remote is not None

    @property
    def short_name(self) -> str:
        """Name without the ``<remote>/`` prefix."""
        if self.remote and self.name.startswith(self.remote + "/"):
            return self.name[len(self.remote) + 1:]
        return self.name


@dataclass(frozen=True)
class TagRef:
    """A tag peeled to the commit it designates."""
    name: str
    sha: str


@dataclass(frozen=True)
class WorkingTreeStatus:
    """Uncommitted changes of a working folder as ``(status, path)`` pairs."""
    entries: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def _count(self, predicate: Callable[[str], bool]) -> int:
        return sum(1 for status, _ in self.entries if predicate(status.ljust(2)))

    def explain(
        self,
        ignored: Iterable[str] = (),
        ignore_predicate: Optional[Callable[[str], bool]] = None,
        full_process: bool = False,
    ) -> Optional[str]:
        """Describe why the folder is dirty, None when it is clean.

        Added, missing, removed and staged files always make the folder dirty.
        Otherwise files modified in the working tree do, unless their path is
        in ``ignored`` or ``ignore_predicate`` accepts it.

        Args:
            ignored: Paths whose local modifications are ignored.
            ignore_predicate: Optional filter called with each remaining modified path.
            full_process: List every modified file instead of stopping at the first one.
        """
        added = self._count(lambda s: s == "??" or s[0] == "A")
        missing = self._count(lambda s: s[1] == "D" and s[0] != "D")
        removed = self._count(lambda s: s[0] == "D")
        staged = self._count(lambda s: s[0] in "MRCT")
        if added or missing or removed or staged:
            parts = []
            if added:
                parts.append(f"{added} file(s) added")
            if missing:
                parts.append(f"{missing} file(s) missing")
            if removed:
                parts.append(f"{removed} file(s) removed")
            if staged:
                parts.append(f"{staged} file(s) staged")
            return "Found: " + ", ".join(parts) + "."

        skip = {path.replace("\\", "/") for path in ignored}
        found: List[str] = []
        for status, path in self.entries:
            if status.ljust(2)[1] not in "MT":
                continue
            normalized = path.replace("\\", "/")
            if normalized in skip or (ignore_predicate is not None and ignore_predicate(normalized)):
                continue
            found.append(normalized)
            if not full_process:
                return f"At least one Modified file found: {normalized}."
        if not found:
            return None
        text = "Modified file(s) found: " + ", ".join(found[:10])
        if len(found) > 10:
            text += f", and {len(found) - 10} other file(s)"
        return text + "."

    def is_dirty(self, ignored: Iterable[str] = ()) -> bool:
        return self.explain(ignored) is not None


class RepositoryAccessor(Protocol):
    """Read-only view of a repository used by the resolution engine."""

    @property
    def is_shallow(self) -> bool:
        ...

    def head(self) -> Optional[Commit]:
        """Commit of the repository head, None for an uninitialized repository."""
        ...

    def head_branch_name(self) -> Optional[str]:
        """Checked out branch name, None when the head is detached."""
        ...

    def lookup(self, commit_ish: str) -> Optional[Commit]:
        """Resolve a sha (or abbreviation), branch, tag or ``HEAD``."""
        ...

    def parents(self, commit: Commit) -> Sequence[Optional[Commit]]:
        """Parents of ``commit``; None stands for a parent missing from a shallow clone."""
        ...

    def content_id(self, commit: Commit) -> str:
        ...

    def tags(self) -> Sequence[TagRef]:
        ...

    def branches(self) -> Sequence[Branch]:
        ...

    def branches_pointing_at(self, sha: str) -> Sequence[Branch]:
        ...

    def working_tree_status(self) -> WorkingTreeStatus:
        ...

    def is_dirty(self) -> bool:
        ...
