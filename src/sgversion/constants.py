"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    GIT_ERROR = 2
    RESOLUTION_ERROR = 3


class OutputFormats(Enum):
    """Output formats supported by the command line.

    Args:
        Enum (string): Output formats supported by the command line.
    """

    TEXT = "text"
    JSON = "json"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SUPPORTED_FORMATS = [
        OutputFormats.TEXT.value,
        OutputFormats.JSON.value,
    ]
    DEFAULT_CONFIG_FILES = [".sgversion.yml", ".sgversion.yaml", ".sgversion.json"]
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "SGVERSION_LOG_LEVEL"
    LOG_FORMAT_ENV = "SGVERSION_LOG_FORMAT"

    # Repository defaults
    DEFAULT_REMOTE_NAME = "origin"
    HEAD_OVERRIDE_KEY = "head"
    GIT_EXECUTABLE = "git"
    GIT_COMMAND_TIMEOUT_SEC = 60

    # CI builds
    CI_BRANCH_NAME_MAX_LENGTH = 8
    CI_DEPTH_DIGITS = 4
    CI_ZERO_TIMED_EPOCH = "2015-01-01T00:00:00+00:00"
    CI_ZERO_TIMED_DIGITS = 7

    # Build configurations
    BUILD_CONFIGURATION_RELEASE = "Release"
    BUILD_CONFIGURATION_DEBUG = "Debug"

    # Well-known zero values (see versioning.scheme)
    ZERO_COMMIT_SHA = "0" * 40
    ZERO_COMMIT_DATE = "0001-01-01 00:00:00Z"
