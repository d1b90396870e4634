"""
Shared fixtures for the test suite.
"""
import sys
from pathlib import Path

import pytest

# Ensure project root is importable
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def config():
    """Default runtime config with a short stall budget."""
    from framescript.config import RuntimeConfig
    return RuntimeConfig(stall_budget=30)


@pytest.fixture
def host():
    """A fresh in-memory host; RAM starts zeroed, so the player is grounded."""
    from framescript.hosts import MemoryHost
    return MemoryHost()


@pytest.fixture
def runtime(host, config):
    """An unthrottled runtime bound to the in-memory host."""
    from framescript.runtime import Runtime
    return Runtime(host, config)
