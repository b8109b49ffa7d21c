"""Configuration file loading for sgversion.

Options live in a YAML (``.sgversion.yml``) or JSON file at the repository
root, optionally nested under a top-level ``sgversion`` section::

    starting_version: v1.0.0
    check_existing_versions: true
    branches:
      - name: develop
        ci_version_mode: last_release_based
        version_name: dev

Files are validated against :data:`CONFIG_SCHEMA` (JSON Schema draft 7)
before being turned into :class:`~sgversion.resolution.options.RepositoryOptions`.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional

import yaml
from jsonschema import Draft7Validator

from .constants import Constants
from .resolution.options import BranchOptions, RepositoryOptions
from .versioning.models import PackageQuality

logger = logging.getLogger(__name__)

_SECTION = "sgversion"

_QUALITY_SCHEMA = {"type": "string", "minLength": 1}

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "starting_version": {"type": ["string", "null"]},
        "single_major": {"type": ["integer", "null"], "minimum": 0},
        "only_patch": {"type": "boolean"},
        "remote_name": {"type": "string", "minLength": 1},
        "use_release_build_configuration_from": _QUALITY_SCHEMA,
        "ignore_dirty_working_folder": {"type": "boolean"},
        "check_existing_versions": {"type": "boolean"},
        "ignore_already_existing_version": {"type": "boolean"},
        "ignore_modified_files": {"type": "array", "items": {"type": "string"}},
        "ignore_modified_file_full_process": {"type": "boolean"},
        "head_commit": {"type": ["string", "null"]},
        "head_branch_name": {"type": ["string", "null"]},
        "overridden_tags": {
            "type": "object",
            "additionalProperties": {
                "anyOf": [
                    {"type": "string"},
                    {"type": "array", "items": {"type": "string"}},
                ]
            },
        },
        "branches": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["name"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "ci_version_mode": {"type": "string"},
                    "version_name": {"type": ["string", "null"]},
                    "use_release_build_configuration_from": _QUALITY_SCHEMA,
                },
            },
        },
    },
}

_STRING_KEYS = {"starting_version", "remote_name", "head_commit", "head_branch_name"}


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or is invalid."""


def find_config_file(directory: str) -> Optional[str]:
    """Return the first default configuration file present in ``directory``."""
    for name in Constants.DEFAULT_CONFIG_FILES:
        candidate = os.path.join(directory, name)
        if os.path.isfile(candidate):
            return candidate
    return None


def load_config_data(path: str) -> Dict[str, Any]:
    """Read a YAML or JSON configuration file.

    Raises:
        ConfigError: When the file is missing, unreadable or not a mapping.
    """
    if not os.path.isfile(path):
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as handle:
            if path.lower().endswith(".json"):
                data = json.load(handle)
            else:
                data = yaml.safe_load(handle)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to load config '{path}': {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping.")
    section = data.get(_SECTION, data)
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{_SECTION}' of '{path}' must be a mapping.")
    return dict(section)


def validate_config(data: Dict[str, Any]) -> None:
    """Validate ``data`` against :data:`CONFIG_SCHEMA`; raise on the first error."""
    validator = Draft7Validator(CONFIG_SCHEMA)
    errs = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise ConfigError(f"Invalid configuration at '{path}': {first.message}")


def _coerce_value(text: str) -> Any:
    """Best-effort convert string to JSON/number/bool, else raw string."""
    s = str(text).strip()
    try:
        return json.loads(s)
    except ValueError:
        sl = s.lower()
        if sl == "true":
            return True
        if sl == "false":
            return False
        if s.isdigit() or (s.startswith("-") and s[1:].isdigit()):
            return int(s)
        return s


def collect_overrides(pairs: Optional[Iterable[str]]) -> Dict[str, Any]:
    """Turn ``KEY=VALUE`` pairs into a configuration mapping.

    Raises:
        ConfigError: For a pair without ``=`` or with an empty key.
    """
    overrides: Dict[str, Any] = {}
    for item in pairs or []:
        if "=" not in item:
            raise ConfigError(f"Invalid override '{item}': expected KEY=VALUE.")
        key, value = item.split("=", 1)
        key = key.strip()
        if key.startswith(_SECTION + "."):
            key = key[len(_SECTION) + 1:]
        if not key:
            raise ConfigError(f"Invalid override '{item}': the key is empty.")
        overrides[key] = value.strip() if key in _STRING_KEYS else _coerce_value(value)
    return overrides


def options_from_dict(data: Dict[str, Any]) -> RepositoryOptions:
    """Build options from a validated configuration mapping.

    Raises:
        ConfigError: When a value is valid JSON but not a valid option.
    """
    validate_config(data)
    try:
        branches: List[BranchOptions] = [
            BranchOptions(
                name=entry["name"],
                ci_version_mode=entry.get("ci_version_mode", "none"),
                version_name=entry.get("version_name"),
                use_release_build_configuration_from=entry.get("use_release_build_configuration_from"),
            )
            for entry in data.get("branches", [])
        ]
        overridden = {
            key: [value] if isinstance(value, str) else list(value)
            for key, value in (data.get("overridden_tags") or {}).items()
        }
        quality = data.get("use_release_build_configuration_from")
        return RepositoryOptions(
            head_commit=data.get("head_commit"),
            head_branch_name=data.get("head_branch_name"),
            overridden_tags=overridden,
            starting_version=data.get("starting_version"),
            single_major=data.get("single_major"),
            only_patch=bool(data.get("only_patch", False)),
            use_release_build_configuration_from=(
                PackageQuality.parse(quality) if quality is not None else PackageQuality.RELEASE_CANDIDATE
            ),
            branches=branches,
            ignore_modified_files=set(data.get("ignore_modified_files", [])),
            ignore_modified_file_full_process=bool(data.get("ignore_modified_file_full_process", False)),
            remote_name=data.get("remote_name", Constants.DEFAULT_REMOTE_NAME),
            ignore_dirty_working_folder=bool(data.get("ignore_dirty_working_folder", False)),
            check_existing_versions=bool(data.get("check_existing_versions", False)),
            ignore_already_existing_version=bool(data.get("ignore_already_existing_version", False)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_options(
    path: Optional[str] = None,
    directory: str = ".",
    overrides: Optional[Dict[str, Any]] = None,
) -> RepositoryOptions:
    """Load options from ``path`` (or the default file of ``directory``) plus overrides.

    A missing default file yields default options; an explicit ``path`` must exist.
    """
    data: Dict[str, Any] = {}
    source = path or find_config_file(directory)
    if source:
        data = load_config_data(source)
        logger.debug("Loaded configuration from %s", source)
    elif path is None:
        logger.debug("No configuration file found in %s, using defaults.", directory)
    if overrides:
        data.update(overrides)
    return options_from_dict(data)
