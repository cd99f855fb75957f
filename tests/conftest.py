"""Root conftest.py for pytest configuration.

Adds project root to sys.path so shared helpers are importable as
``tests.helpers``, and provides fixtures common to unit and integration
tests.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from tests.helpers import FakeClock  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    """Controllable monotonic clock starting at 1000.0 seconds."""
    return FakeClock()
