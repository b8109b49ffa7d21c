"""Command line entry point: resolve and print the version of a commit."""

from __future__ import annotations

import json
import logging
import sys
from typing import List, Optional

from .args import parse_args
from .common.logging_utils import configure_logging, extra_context, is_debug_enabled
from .config import ConfigError, collect_overrides, load_options
from .constants import ExitCodes, OutputFormats
from .repository.git import GitCommandError, GitRepository
from .resolution.explain import explain
from .resolution.options import RepositoryOptions
from .resolution.orchestrator import ResolutionResult, resolve

logger = logging.getLogger(__name__)


def apply_tag_overrides(options: RepositoryOptions, pairs: Optional[List[str]]) -> None:
    """Add ``COMMIT=TAG`` pairs to the overridden tags of ``options``.

    Raises:
        ConfigError: For a pair without ``=``.
    """
    for item in pairs or []:
        if "=" not in item:
            raise ConfigError(f"Invalid tag override '{item}': expected COMMIT=TAG.")
        key, tag = item.split("=", 1)
        options.overridden_tags.setdefault(key.strip(), []).append(tag.strip())


def render(result: ResolutionResult, output_format: str) -> str:
    if output_format == OutputFormats.JSON.value:
        return json.dumps(result.to_dict(), indent=2)
    return str(result.final_version)


def _write_output(text: str, path: Optional[str]) -> None:
    if not path:
        sys.stdout.write(text + "\n")
        return
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(text + "\n")
    logger.info("Result written to %s", path)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function of the program. Returns the process exit code."""
    args = parse_args(argv)
    level = args.LOG_LEVEL
    if args.EXPLAIN and logging.getLevelName(level) > logging.INFO:
        level = "INFO"
    configure_logging(level, args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug("CLI start", extra=extra_context(event="function_entry", component="cli", action="main"))

    try:
        repository = GitRepository.discover(args.PATH)
    except GitCommandError as exc:
        logger.error("Unable to run git: %s", exc)
        return ExitCodes.GIT_ERROR.value

    config_dir = getattr(repository, "path", None) or args.PATH
    try:
        options = load_options(args.CONFIG, config_dir, collect_overrides(args.CONFIG_SET))
        apply_tag_overrides(options, args.TAG_OVERRIDES)
    except ConfigError as exc:
        logger.error(str(exc))
        return ExitCodes.FILE_ERROR.value
    if args.HEAD_COMMIT:
        options.head_commit = args.HEAD_COMMIT
    if args.HEAD_BRANCH:
        options.head_branch_name = args.HEAD_BRANCH

    try:
        result = resolve(repository, options)
    except GitCommandError as exc:
        logger.error("Git command failed: %s", exc)
        return ExitCodes.GIT_ERROR.value

    if args.EXPLAIN or result.has_error:
        explain(result)
    try:
        _write_output(render(result, args.OUTPUT_FORMAT), args.OUTPUT)
    except OSError as exc:
        logger.error("Unable to write output file: %s", exc)
        return ExitCodes.FILE_ERROR.value

    outcome = ExitCodes.RESOLUTION_ERROR if result.has_error else ExitCodes.SUCCESS
    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main", outcome=outcome.name.lower()),
        )
    return outcome.value


def run() -> None:
    """Console script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
