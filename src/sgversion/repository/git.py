"""Repository accessor backed by the git command line."""

from __future__ import annotations

import logging
import os
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set

from ..common.logging_utils import extra_context, is_debug_enabled
from ..constants import Constants
from .models import Branch, Commit, TagRef, WorkingTreeStatus

logger = logging.getLogger(__name__)

_SEP = "\x1f"
_LOG_FORMAT = "%H%x1f%P%x1f%T%x1f%at"


class GitCommandError(RuntimeError):
    """Raised when the git executable fails unexpectedly."""

    def __init__(self, args: Iterable[str], returncode: Optional[int] = None, stderr: str = ""):
        self.command = list(args)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        detail = f" (exit code {returncode})" if returncode is not None else ""
        message = f"git command failed{detail}: {' '.join(self.command)}"
        if self.stderr:
            message += f"\n{self.stderr}"
        super().__init__(message)


def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
    completed = subprocess.run(
        list(args),
        cwd=str(cwd),
        check=True,
        text=True,
        capture_output=True,
        timeout=Constants.GIT_COMMAND_TIMEOUT_SEC,
    )
    return completed.stdout


class GitRepository:
    """Snapshot of a git repository read through the ``git`` executable.

    The whole commit graph is read in a single ``git log --all`` pass the first
    time it is needed; later queries are served from memory.
    """

    def __init__(
        self,
        path: str = ".",
        runner: Optional[Callable[..., str]] = None,
        git_executable: str = Constants.GIT_EXECUTABLE,
    ) -> None:
        self.path = Path(path)
        self._runner = runner or _default_runner
        self._git_executable = git_executable
        self._commits: Optional[Dict[str, Commit]] = None
        self._shallow: Optional[Set[str]] = None
        self._tags: Optional[List[TagRef]] = None
        self._branches: Optional[List[Branch]] = None

    @classmethod
    def discover(cls, path: str = ".", runner: Optional[Callable[..., str]] = None) -> Optional["GitRepository"]:
        """Open the repository that contains ``path``, None when there is none."""
        probe = cls(path, runner=runner)
        top = probe._try("rev-parse", "--show-toplevel")
        if top is None:
            return None
        return cls(top.strip() or path, runner=runner)

    # ------------------------------------------------------------------
    # Command helpers

    def _run(self, *args: str) -> str:
        command = [self._git_executable, *args]
        try:
            return self._runner(command, cwd=self.path)
        except subprocess.CalledProcessError as exc:
            raise GitCommandError(command, exc.returncode, exc.stderr or "") from exc
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise GitCommandError(command, None, str(exc)) from exc

    def _try(self, *args: str) -> Optional[str]:
        """Run a command whose failure is an expected answer."""
        command = [self._git_executable, *args]
        try:
            return self._runner(command, cwd=self.path)
        except subprocess.CalledProcessError:
            return None
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise GitCommandError(command, None, str(exc)) from exc

    # ------------------------------------------------------------------
    # Graph loading

    def _shallow_boundary(self) -> Set[str]:
        if self._shallow is None:
            self._shallow = set()
            location = self._try("rev-parse", "--git-path", "shallow")
            if location:
                shallow_file = Path(location.strip())
                if not shallow_file.is_absolute():
                    shallow_file = self.path / shallow_file
                if shallow_file.is_file():
                    content = shallow_file.read_text(encoding="utf-8")
                    self._shallow = {line.strip() for line in content.splitlines() if line.strip()}
        return self._shallow

    def _parse_commit_line(self, line: str) -> Optional[Commit]:
        parts = line.split(_SEP)
        if len(parts) != 4:
            return None
        sha, parents, tree, timestamp = parts
        return Commit(
            sha=sha,
            parents=tuple(parents.split()),
            content_id=tree,
            author_time=datetime.fromtimestamp(int(timestamp), tz=timezone.utc),
            shallow=sha in self._shallow_boundary(),
        )

    def _graph(self) -> Dict[str, Commit]:
        if self._commits is None:
            self._commits = {}
            if self._try("rev-parse", "--verify", "-q", "HEAD") is not None:
                output = self._run("log", "--all", f"--format={_LOG_FORMAT}")
                for line in output.splitlines():
                    commit = self._parse_commit_line(line.strip())
                    if commit is not None:
                        self._commits[commit.sha] = commit
            if is_debug_enabled(logger):
                logger.debug(
                    "Read commit graph",
                    extra=extra_context(
                        event="git_graph_loaded",
                        component="repository",
                        count=len(self._commits),
                    ),
                )
        return self._commits

    def _read_commit(self, sha: str) -> Optional[Commit]:
        graph = self._graph()
        if sha in graph:
            return graph[sha]
        output = self._try("log", "-1", f"--format={_LOG_FORMAT}", sha, "--")
        if not output:
            return None
        commit = self._parse_commit_line(output.strip())
        if commit is not None:
            graph[commit.sha] = commit
        return commit

    # ------------------------------------------------------------------
    # RepositoryAccessor

    @property
    def is_shallow(self) -> bool:
        return bool(self._shallow_boundary())

    def head(self) -> Optional[Commit]:
        sha = self._try("rev-parse", "--verify", "-q", "HEAD")
        if not sha:
            return None
        return self._read_commit(sha.strip())

    def head_branch_name(self) -> Optional[str]:
        name = self._try("symbolic-ref", "-q", "--short", "HEAD")
        return name.strip() if name else None

    def lookup(self, commit_ish: str) -> Optional[Commit]:
        if not commit_ish:
            return None
        graph = self._graph()
        if commit_ish in graph:
            return graph[commit_ish]
        sha = self._try("rev-parse", "--verify", "-q", f"{commit_ish}^{{commit}}")
        if not sha:
            return None
        return self._read_commit(sha.strip())

    def parents(self, commit: Commit) -> List[Optional[Commit]]:
        return [self._read_commit(sha) for sha in commit.parents]

    def content_id(self, commit: Commit) -> str:
        return commit.content_id

    def tags(self) -> List[TagRef]:
        if self._tags is None:
            output = self._run(
                "for-each-ref",
                "--format=%(refname)%1f%(objectname)%1f%(*objectname)",
                "refs/tags",
            )
            self._tags = []
            for line in output.splitlines():
                parts = line.rstrip("\r\n").split(_SEP)
                if len(parts) != 3:
                    continue
                refname, target, peeled = parts
                self._tags.append(TagRef(name=refname[len("refs/tags/"):], sha=peeled or target))
        return self._tags

    def branches(self) -> List[Branch]:
        if self._branches is None:
            output = self._run(
                "for-each-ref",
                "--format=%(refname)%1f%(objectname)",
                "refs/heads",
                "refs/remotes",
            )
            self._branches = []
            for line in output.splitlines():
                parts = line.rstrip("\r\n").split(_SEP)
                if len(parts) != 2:
                    continue
                refname, tip = parts
                if refname.startswith("refs/heads/"):
                    self._branches.append(Branch(name=refname[len("refs/heads/"):], tip=tip))
                elif refname.startswith("refs/remotes/"):
                    name = refname[len("refs/remotes/"):]
                    if name.endswith("/HEAD"):
                        continue
                    self._branches.append(Branch(name=name, tip=tip, remote=name.split("/", 1)[0]))
        return self._branches

    def branches_pointing_at(self, sha: str) -> List[Branch]:
        return [branch for branch in self.branches() if branch.tip == sha]

    def working_tree_status(self) -> WorkingTreeStatus:
        output = self._run("status", "--porcelain", "--untracked-files=all")
        entries = []
        for line in output.splitlines():
            if len(line) < 4:
                continue
            status, path = line[:2], line[3:]
            if " -> " in path:
                path = path.split(" -> ", 1)[1]
            entries.append((status, path.strip('"').replace(os.sep, "/")))
        return WorkingTreeStatus(entries=tuple(entries))

    def is_dirty(self) -> bool:
        return self.working_tree_status().is_dirty()
