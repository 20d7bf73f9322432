"""
Tests for the Logging Console.

Verifies:
1. Proxy delegation and console injection.
2. Semantic log wrappers.
3. Verbosity toggling of the pass's debug records.
"""

import logging

from rich.console import Console

from hoist_mocks.core.engine import hoist_code
from hoist_mocks.utils.console import console, log_error, log_info, log_success, reset_console, set_console, set_verbose


def test_proxy_delegates_to_backend():
  backend = Console(record=True)
  set_console(backend)
  assert console.backend is backend
  assert console.width == backend.width


def test_reset_creates_fresh_backend():
  temp = Console()
  set_console(temp)
  reset_console()
  assert console.backend is not temp


def test_log_wrappers_reach_injected_console():
  capture = Console(record=True, width=120)
  set_console(capture)

  log_info("InfoText")
  log_success("SuccessText")
  log_error("ErrorText")

  output = capture.export_text()
  assert "InfoText" in output
  assert "SuccessText" in output
  assert "ErrorText" in output
  assert "❌" in output


def test_verbose_shows_hoisting_details():
  capture = Console(record=True, width=200)
  set_console(capture)

  set_verbose(True)
  try:
    hoist_code('from jest_globals import jest\nimport a\njest.mock("./a")\n', filename="test_a.py")
  finally:
    set_verbose(False)

  assert "test_a.py" in capture.export_text()


def test_quiet_hides_hoisting_details():
  capture = Console(record=True, width=200)
  set_console(capture)

  set_verbose(False)
  hoist_code('from jest_globals import jest\nimport a\njest.mock("./a")\n', filename="test_a.py")

  assert "test_a.py" not in capture.export_text()
  assert logging.getLogger("hoist_mocks").level == logging.NOTSET


def test_reset_restores_info_level():
  set_verbose(True)
  reset_console()
  assert logging.getLogger().level == logging.INFO
  set_verbose(False)
