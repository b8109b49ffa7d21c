"""Shared fixtures for the sgversion test-suite."""

import pytest

from sgversion.repository.memory import MemoryRepository
from sgversion.resolution.options import BranchOptions, RepositoryOptions


@pytest.fixture
def repo():
    """An empty in-memory repository."""
    return MemoryRepository()


@pytest.fixture
def develop_options():
    """Options enabling release based CI builds on ``develop``."""
    return RepositoryOptions(branches=[BranchOptions("develop", "last_release_based")])
