"""Log a human readable account of a resolution."""

from __future__ import annotations

import logging
from typing import Optional

from .options import CIBranchVersionMode
from .orchestrator import ResolutionResult, already_existing_message

logger = logging.getLogger(__name__)

_SHALLOW_WARNING = "The parent graph analysis is not complete because we are on a shallow cloned repository."


def _filters_annotation(result: ResolutionResult) -> str:
    active = []
    if result.options.only_patch:
        active.append("OnlyPatch")
    if result.options.single_major is not None:
        active.append(f"SingleMajor = {result.options.single_major}")
    return f" ({', '.join(active)})" if active else ""


def _log_commit_info(result: ResolutionResult, target: logging.Logger) -> None:
    if result.lineage is None:
        target.info("No version information found on or below this commit.")
        if result.is_shallow_cloned:
            target.warning(_SHALLOW_WARNING)
        return
    if result.release_tag is not None:
        target.info("Tag: %s", result.release_tag)
    else:
        target.info("No tag found on the commit itself.")
    if result.best_commit_below is not None:
        target.info("Base tag below: %s", result.best_commit_below)
    else:
        target.info("No base tag found below this commit.")
    if result.already_existing_version is not None and not result.has_error:
        target.warning(already_existing_message(result.already_existing_version))
    if result.lineage.is_shallow_cloned:
        target.warning(_SHALLOW_WARNING)


def _log_possible_versions(result: ResolutionResult, target: logging.Logger) -> None:
    annotation = _filters_annotation(result)
    if not result.possible_versions:
        target.warning("No possible versions%s.", annotation)
    else:
        target.info(
            "Possible version(s)%s: %s",
            annotation,
            ", ".join(str(v) for v in result.possible_versions),
        )


def explain(result: ResolutionResult, target: Optional[logging.Logger] = None) -> None:
    """Log the outcome of ``result``: errors, release or CI release and windows."""
    target = target or logger
    if result.has_error:
        target.error(result.error)
        if result.existing_versions is not None:
            _log_commit_info(result, target)
        if result.possible_versions is not None:
            _log_possible_versions(result, target)
        return

    if result.is_dirty:
        target.warning(
            "Working folder is Dirty! Checking this has been disabled since "
            "ignore_dirty_working_folder option is true."
        )
        target.warning(result.is_dirty_explanations)
    _log_commit_info(result, target)
    if result.ci_release is not None:
        _log_possible_versions(result, target)
        mode = CIBranchVersionMode.ZERO_TIMED if result.ci_release.is_zero_timed else CIBranchVersionMode.LAST_RELEASE_BASED
        target.info("CI release: '%s' (%s).", result.final_version, mode.value)
    else:
        target.info("Release: '%s'.", result.release_tag)
