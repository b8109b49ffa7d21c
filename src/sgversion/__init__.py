"""sgversion: release versions computed from the tags of a git repository.

Typical use::

    from sgversion import GitRepository, RepositoryOptions, resolve

    result = resolve(GitRepository.discover("."), RepositoryOptions())
    print(result.final_version)
"""

from .config import ConfigError, load_options
from .repository import GitRepository, MemoryRepository
from .resolution import (
    BranchOptions,
    CIBranchVersionMode,
    ErrorCode,
    RepositoryOptions,
    ResolutionResult,
    explain,
    resolve,
)
from .versioning import PackageQuality, TagVersion, parse_tag

__version__ = "0.1.0"

__all__ = [
    "BranchOptions",
    "CIBranchVersionMode",
    "ConfigError",
    "ErrorCode",
    "GitRepository",
    "MemoryRepository",
    "PackageQuality",
    "RepositoryOptions",
    "ResolutionResult",
    "TagVersion",
    "__version__",
    "explain",
    "load_options",
    "parse_tag",
    "resolve",
]
