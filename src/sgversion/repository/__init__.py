"""Commit graph access.

- models.py: commit, branch and tag records plus the accessor protocol
- git.py: accessor reading a real repository through the git executable
- memory.py: in-memory accessor used to build graphs programmatically
"""

from .git import GitCommandError, GitRepository
from .memory import MemoryRepository
from .models import Branch, Commit, RepositoryAccessor, TagRef, WorkingTreeStatus

__all__ = [
    "Branch",
    "Commit",
    "GitCommandError",
    "GitRepository",
    "MemoryRepository",
    "RepositoryAccessor",
    "TagRef",
    "WorkingTreeStatus",
]
