"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Default configuration fixture.
- Console isolation so CLI tests do not leak logging handlers.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'hoist_mocks' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from hoist_mocks.config import HoistConfig  # noqa: E402
from hoist_mocks.utils.console import reset_console  # noqa: E402


@pytest.fixture
def config() -> HoistConfig:
  """Default configuration."""
  return HoistConfig()


@pytest.fixture(autouse=True)
def isolate_console():
  """
  Restores the default console after each test so handler swaps made by
  CLI tests do not leak.
  """
  yield
  reset_console()
