"""
Hoist Command Handler.

Runs the hoisting pass over files and directories:

1.  Configuration loading (``pyproject.toml`` + CLI overrides).
2.  File discovery (directories are scanned recursively for ``*.py``).
3.  Transformation via the ``HoistEngine``, one file at a time.
4.  Output: in-place rewrite, ``--check`` report, or ``--stdout`` print.
"""

from pathlib import Path
from typing import Dict, List, Optional

from rich.markup import escape
from rich.table import Table

from hoist_mocks.config import HoistConfig
from hoist_mocks.core.engine import HoistEngine, HoistResult
from hoist_mocks.errors import ConfigError
from hoist_mocks.utils.console import console, log_error, log_info, log_success, log_warning


def collect_source_files(paths: List[Path]) -> List[Path]:
  """
  Expands the given paths into a sorted, de-duplicated list of Python files.

  Args:
      paths: Files and directories from the command line.

  Returns:
      List[Path]: Python source files, in command-line order.
  """
  files: List[Path] = []
  for path in paths:
    if path.is_dir():
      files.extend(sorted(path.rglob("*.py")))
    else:
      files.append(path)

  seen = set()
  unique = []
  for path in files:
    if path not in seen:
      seen.add(path)
      unique.append(path)
  return unique


def handle_hoist(
  paths: List[Path],
  check: bool = False,
  stdout: bool = False,
  handle_module: Optional[str] = None,
) -> int:
  """
  Handles the hoist command execution.

  Args:
      paths: Input files or directories.
      check: Report files that would change instead of writing them.
      stdout: Print the transformed code of a single file.
      handle_module: Override for the handle module specifier.

  Returns:
      int: Exit code (0 for success, 1 for failures or pending changes in check mode).
  """
  missing = [p for p in paths if not p.exists()]
  if missing:
    for path in missing:
      log_error(f"Input not found: {escape(str(path))}")
    return 1

  search_path = paths[0] if paths[0].is_dir() else paths[0].parent
  try:
    config = HoistConfig.load(search_path=search_path, handle_module=handle_module)
  except ConfigError as e:
    log_error(escape(str(e)))
    return 1

  files = collect_source_files(paths)
  if stdout and len(files) != 1:
    log_error("--stdout requires exactly one input file.")
    return 1

  if not files:
    log_warning(f"No .py files found in {escape(', '.join(str(p) for p in paths))}")
    return 0

  engine = HoistEngine(config)

  if stdout:
    result = _hoist_single_file(files[0], engine)
    if not result.success:
      _report_errors(files[0], result)
      return 1
    print(result.code, end="")
    return 0

  if len(files) > 1:
    log_info(f"Processing {len(files)} files...")

  results: Dict[str, HoistResult] = {}
  pending = 0
  for path in files:
    result = _hoist_single_file(path, engine)
    results[str(path)] = result
    if not result.success or not result.changed:
      continue

    if check:
      pending += 1
      log_warning(f"Would hoist: [path]{escape(str(path))}[/path]")
    else:
      with open(path, "wt", encoding="utf-8") as f:
        f.write(result.code)
      log_success(f"Hoisted: [path]{escape(str(path))}[/path]")

  failures = _print_batch_summary(results)
  return 1 if failures or pending else 0


def _hoist_single_file(path: Path, engine: HoistEngine) -> HoistResult:
  """
  Reads and transforms one file.

  Args:
      path: Source file path.
      engine: Configured engine.

  Returns:
      HoistResult: The engine's result, or a failed result when the file cannot be read.
  """
  try:
    with open(path, "rt", encoding="utf-8") as f:
      code = f.read()
  except (OSError, UnicodeDecodeError) as e:
    return HoistResult(success=False, errors=[f"Read Error: {e}"])
  return engine.run(code, filename=str(path))


def _report_errors(path: Path, result: HoistResult) -> None:
  for error in result.errors:
    log_error(f"{escape(str(path))}: {escape(error)}")


def _print_batch_summary(results: Dict[str, HoistResult]) -> int:
  """
  Renders a summary of failed files to the console.

  Args:
      results: Mapping of file names to results.

  Returns:
      int: Number of failed files.
  """
  failed = {name: r for name, r in results.items() if not r.success}
  if not failed:
    changed = sum(1 for r in results.values() if r.changed)
    log_success(f"Done: {len(results)} file(s) checked, {changed} with registrations to hoist.")
    return 0

  table = Table(title="Hoisting Report")
  table.add_column("File", style="cyan")
  table.add_column("Issues", style="red")
  for filename, result in failed.items():
    table.add_row(escape(filename), escape("; ".join(result.errors) or "Unknown Error"))

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {len(results) - len(failed)} Passed, {len(failed)} Failed.")
  return len(failed)
