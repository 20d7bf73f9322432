"""
Main Entry Point for the hoist-mocks CLI.

This module handles argument parsing and dispatches to the command handler
defined in `hoist_mocks.cli.handlers`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from hoist_mocks import __version__
from hoist_mocks.cli.handlers import handle_hoist
from hoist_mocks.utils.console import set_verbose


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(
    prog="hoist-mocks",
    description="hoist-mocks: Move mock registrations ahead of the imports they intercept",
  )
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("paths", nargs="+", type=Path, help="Input source files or directories")

  mode = parser.add_mutually_exclusive_group()
  mode.add_argument(
    "--check",
    action="store_true",
    help="Report files that would change and exit 1 instead of rewriting them",
  )
  mode.add_argument("--stdout", action="store_true", help="Print the transformed code of a single file")

  parser.add_argument(
    "--handle-module",
    default=None,
    help="Module exporting the test-framework handle (default: from toml, else jest_globals)",
  )
  parser.add_argument("--verbose", "-v", action="store_true", help="Show per-list hoisting details")

  args = parser.parse_args(argv)
  set_verbose(args.verbose)

  return handle_hoist(
    args.paths,
    check=args.check,
    stdout=args.stdout,
    handle_module=args.handle_module,
  )


if __name__ == "__main__":
  sys.exit(main())
