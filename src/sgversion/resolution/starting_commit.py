"""Locate the commit to resolve and the branch options that apply to it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..repository.models import Branch, Commit, RepositoryAccessor
from .errors import ErrorCode
from .options import BranchOptions, CIBranchVersionMode, RepositoryOptions


@dataclass(frozen=True)
class StartingCommit:
    """Outcome of :func:`locate_starting_commit`."""
    commit: Optional[Commit] = None
    considered_branch_names: Tuple[str, ...] = ()
    found_branch_option: Optional[BranchOptions] = None
    error_code: ErrorCode = ErrorCode.NONE
    error: Optional[str] = None

    @property
    def ci_version_mode(self) -> CIBranchVersionMode:
        if self.found_branch_option is None:
            return CIBranchVersionMode.NONE
        return self.found_branch_option.ci_version_mode

    @property
    def ci_branch_version_name(self) -> Optional[str]:
        """CI label of the found branch; None when CI builds are disabled."""
        if self.ci_version_mode is CIBranchVersionMode.NONE:
            return None
        return self.found_branch_option.ci_version_name


def _failure(code: ErrorCode, message: str) -> StartingCommit:
    return StartingCommit(error_code=code, error=message)


def _find_branch(repository: RepositoryAccessor, name: str) -> Optional[Branch]:
    for branch in repository.branches():
        if branch.name == name:
            return branch
    return None


def _branches_at(repository: RepositoryAccessor, commit: Commit, remote_name: str) -> Tuple[str, ...]:
    """Local branches and ``remote_name`` branches whose tip is ``commit``, de-duplicated."""
    names: List[str] = []
    for branch in repository.branches_pointing_at(commit.sha):
        if branch.is_remote and branch.remote != remote_name:
            continue
        name = branch.short_name if branch.is_remote else branch.name
        if name not in names:
            names.append(name)
    return tuple(names)


def locate_starting_commit(repository: Optional[RepositoryAccessor], options: RepositoryOptions) -> StartingCommit:
    """Resolve the head commit selected by ``options``.

    Args:
        repository: Accessor, None when no repository could be opened.
        options: Options holding ``head_commit`` / ``head_branch_name``.

    Returns:
        StartingCommit: The commit with the considered branch names, or an error.
    """
    if options is None:
        raise ValueError("options are required.")
    if repository is None:
        return _failure(ErrorCode.INIT_NO_GIT_REPOSITORY, "No Git repository.")

    commit_ish = (options.head_commit or "").strip()
    if commit_ish:
        commit = repository.lookup(commit_ish)
        if commit is None:
            return _failure(ErrorCode.INIT_HEAD_COMMIT_NOT_FOUND, f"Unable to find HeadCommit '{commit_ish}' commit.")
        branch_names = _branches_at(repository, commit, options.remote_name)
    elif options.head_branch_name and options.head_branch_name.strip():
        requested = options.head_branch_name.strip()
        remote_prefix = options.remote_name + "/"
        is_remote_name = requested.startswith(remote_prefix)
        local_name = requested[len(remote_prefix):] if is_remote_name else requested
        branch = _find_branch(repository, requested)
        if branch is None and not is_remote_name:
            remote_branch_name = remote_prefix + requested
            branch = _find_branch(repository, remote_branch_name)
            if branch is None:
                return _failure(
                    ErrorCode.INIT_HEAD_BRANCH_NAME_NOT_FOUND,
                    f"Unknown HeadBranchName: '{requested}' (also tested on remote '{remote_branch_name}').",
                )
        if branch is None:
            return _failure(
                ErrorCode.INIT_HEAD_REMOTE_BRANCH_NAME_NOT_FOUND,
                f"Unknown (remote) HeadBranchName: '{requested}'.",
            )
        commit = repository.lookup(branch.tip)
        if commit is None:
            return _failure(ErrorCode.INIT_HEAD_COMMIT_NOT_FOUND, f"Unable to find HeadCommit '{branch.tip}' commit.")
        branch_names = (local_name,)
    else:
        commit = repository.head()
        if commit is None:
            return _failure(ErrorCode.INIT_UNINITIALIZED_GIT_REPOSITORY, "Uninitialized Git repository.")
        head_branch = repository.head_branch_name()
        if head_branch:
            branch_names = (head_branch,)
        else:
            # Detached head: the branches pointing at the commit still select CI options.
            branch_names = _branches_at(repository, commit, options.remote_name)

    return StartingCommit(
        commit=commit,
        considered_branch_names=branch_names,
        found_branch_option=options.find_branch(branch_names),
    )
