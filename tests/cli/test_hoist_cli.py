"""
Tests for the hoist-mocks command line.

Verifies that:
1. Files are rewritten in place, or reported with `--check`.
2. `--stdout` prints one transformed file.
3. Validation failures and missing inputs exit with 1.
4. Directories are scanned recursively.
"""

import io
import textwrap

import pytest
from rich.console import Console

from hoist_mocks.cli.__main__ import main
from hoist_mocks.cli.handlers import collect_source_files
from hoist_mocks.utils.console import set_console

SOURCE = textwrap.dedent(
  """\
  from jest_globals import jest
  from .service import fetch
  jest.mock("./service")
  """
)

EXPECTED = textwrap.dedent(
  """\
  from jest_globals import jest
  jest.mock(script.Parent.service)
  from .service import fetch
  """
)


@pytest.fixture
def log_buffer():
  buffer = io.StringIO()
  set_console(Console(file=buffer, width=200, force_terminal=False))
  return buffer


def test_rewrites_file_in_place(tmp_path, log_buffer):
  target = tmp_path / "test_service.py"
  target.write_text(SOURCE)

  assert main([str(target)]) == 0
  assert target.read_text() == EXPECTED
  assert "Hoisted" in log_buffer.getvalue()


def test_already_hoisted_file_is_untouched(tmp_path, log_buffer):
  target = tmp_path / "test_service.py"
  target.write_text(EXPECTED)

  assert main([str(target)]) == 0
  assert target.read_text() == EXPECTED
  assert "Hoisted:" not in log_buffer.getvalue()


def test_check_mode_reports_without_writing(tmp_path, log_buffer):
  target = tmp_path / "test_service.py"
  target.write_text(SOURCE)

  assert main(["--check", str(target)]) == 1
  assert target.read_text() == SOURCE
  assert "Would hoist" in log_buffer.getvalue()


def test_check_mode_passes_on_clean_file(tmp_path, log_buffer):
  target = tmp_path / "test_service.py"
  target.write_text(EXPECTED)
  assert main(["--check", str(target)]) == 0


def test_stdout_prints_transformed_code(tmp_path, capsys, log_buffer):
  target = tmp_path / "test_service.py"
  target.write_text(SOURCE)

  assert main(["--stdout", str(target)]) == 0
  assert capsys.readouterr().out == EXPECTED
  assert target.read_text() == SOURCE


def test_stdout_requires_single_file(tmp_path, log_buffer):
  (tmp_path / "a.py").write_text(SOURCE)
  (tmp_path / "b.py").write_text(SOURCE)

  assert main(["--stdout", str(tmp_path)]) == 1
  assert "exactly one" in log_buffer.getvalue()


def test_validation_failure_exits_with_error(tmp_path, log_buffer):
  target = tmp_path / "test_bad.py"
  code = 'from jest_globals import jest\njest.mock("./f", lambda: some_var)\n'
  target.write_text(code)

  assert main([str(target)]) == 1
  assert target.read_text() == code
  output = log_buffer.getvalue()
  assert "Hoisting Report" in output
  assert "some_var" in output


def test_syntax_error_exits_with_error(tmp_path, log_buffer):
  target = tmp_path / "broken.py"
  target.write_text("def broken(:\n")
  assert main([str(target)]) == 1


def test_missing_input(tmp_path, log_buffer):
  assert main([str(tmp_path / "nope.py")]) == 1
  assert "Input not found" in log_buffer.getvalue()


def test_directory_recursion(tmp_path, log_buffer):
  nested = tmp_path / "pkg" / "sub"
  nested.mkdir(parents=True)
  first = tmp_path / "pkg" / "test_a.py"
  second = nested / "test_b.py"
  untouched = nested / "notes.txt"
  first.write_text(SOURCE)
  second.write_text(SOURCE)
  untouched.write_text(SOURCE)

  assert main([str(tmp_path / "pkg")]) == 0
  assert first.read_text() == EXPECTED
  assert second.read_text() == EXPECTED
  assert untouched.read_text() == SOURCE


def test_handle_module_override(tmp_path, log_buffer):
  target = tmp_path / "test_service.py"
  target.write_text('from testing_globals import jest\nfrom .a import a\njest.mock("./a")\n')

  assert main(["--handle-module", "testing_globals", str(target)]) == 0
  assert target.read_text() == 'from testing_globals import jest\njest.mock(script.Parent.a)\nfrom .a import a\n'


def test_handle_module_from_pyproject(tmp_path, log_buffer):
  (tmp_path / "pyproject.toml").write_text('[tool.hoist_mocks]\nhandle_module = "testing_globals"\n')
  target = tmp_path / "test_service.py"
  target.write_text('from testing_globals import jest\nfrom .a import a\njest.mock("./a")\n')

  assert main([str(target)]) == 0
  assert target.read_text().startswith("from testing_globals import jest\njest.mock(script.Parent.a)\n")


def test_invalid_pyproject_exits_with_error(tmp_path, log_buffer):
  (tmp_path / "pyproject.toml").write_text('[tool.hoist_mocks]\nmock_prefix = "("\n')
  target = tmp_path / "test_service.py"
  target.write_text(SOURCE)

  assert main([str(target)]) == 1
  assert target.read_text() == SOURCE


def test_collect_source_files_deduplicates(tmp_path):
  first = tmp_path / "a.py"
  first.write_text("")
  (tmp_path / "b.py").write_text("")

  assert collect_source_files([first, tmp_path]) == [first, tmp_path / "b.py"]
