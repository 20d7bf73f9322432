"""
Entry point for module execution (``python -m hoist_mocks``).

This module delegates execution to the CLI handler in ``hoist_mocks.cli.__main__``.
"""

import sys
from hoist_mocks.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
