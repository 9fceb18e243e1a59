"""
Shared pytest configuration.

This file ensures the project root is on sys.path so that `import supportbot`
and `from tests.utils import ...` work consistently in all tests.
"""

import sys
from pathlib import Path

import pytest

# Ensure project root is importable for test modules.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from tests.utils import FakeClock, InMemoryRedis  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def redis(clock: FakeClock) -> InMemoryRedis:
    return InMemoryRedis(clock=clock)
