"""
Central Logging and Console Utilities.

All command-line output goes through the standard ``logging`` library and is
rendered by ``rich``:

1.  **Pass diagnostics**: the core modules only emit ``logger.debug`` records
    on their own module loggers (per-list hoist summaries, rewritten paths,
    resolver failures). ``set_verbose`` decides whether they are shown.
2.  **User messages**: the CLI reports per-file outcomes through the
    ``log_info`` / ``log_success`` / ``log_warning`` / ``log_error`` helpers.
3.  **Destination injection**: the console is held behind a proxy, so tests
    can redirect both printing and logging with ``set_console`` (e.g. a
    ``Console(file=io.StringIO())``) while every importer keeps the same
    ``console`` reference.

Attributes:
    console (_ConsoleProxy): A global, stable reference to the active Rich Console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Between INFO and WARNING, shown by default.
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

PACKAGE_LOGGER = "hoist_mocks"

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
    "code": "bold magenta",
  }
)


def _default_console() -> Console:
  return Console(theme=_THEME)


def _build_handler(backend: Console) -> RichHandler:
  """
  Creates the root handler rendering log records onto a console.

  Records are rendered without time or source path so that per-file CLI
  messages read like plain output lines; markup is enabled for ``[path]``
  highlighting.

  Args:
      backend (Console): The destination console.

  Returns:
      RichHandler: A handler bound to ``backend``.
  """
  return RichHandler(
    console=backend,
    show_time=False,
    omit_repeated_times=False,
    show_path=False,
    markup=True,
    rich_tracebacks=True,
  )


class _ConsoleProxy:
  """
  A Proxy wrapper around `rich.console.Console`.

  Modules import the proxy once; swapping the backend redirects both direct
  ``console.print`` calls and every ``logging`` record, since the root
  ``RichHandler`` is rebuilt around the new backend.

  Attributes:
      _backend (Console): The active Rich Console instance.
  """

  def __init__(self) -> None:
    """Starts on a themed standard output console."""
    self._backend: Console = _default_console()
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Switches printing and logging to another console.

    Args:
        new_console (Console): The new Rich Console instance to use.
    """
    self._backend = new_console
    self._configure_logging()

  def reset(self) -> None:
    """Goes back to a fresh themed standard output console."""
    self.set_backend(_default_console())

  @property
  def backend(self) -> Console:
    """
    The console currently receiving output.

    Returns:
        Console: The active backend, e.g. the capture console installed by a test.
    """
    return self._backend

  def _configure_logging(self) -> None:
    """
    Replaces the root ``RichHandler`` with one bound to the current backend.

    Only ``RichHandler`` instances are removed; handlers installed by others
    (such as pytest's log capture) stay attached. The root level is put back
    to INFO, so a previous ``set_verbose(True)`` does not survive a reset.
    """
    root_logger = logging.getLogger()
    stale = [h for h in root_logger.handlers if isinstance(h, RichHandler)]
    for handler in stale:
      root_logger.removeHandler(handler)

    root_logger.addHandler(_build_handler(self._backend))
    root_logger.setLevel(logging.INFO)

  def print(self, *args: Any, **kwargs: Any) -> None:
    """
    Prints through the active backend (tables, summaries).

    Args:
        *args: Positional arguments for Rich print.
        **kwargs: Keyword arguments for Rich print.
    """
    self._backend.print(*args, **kwargs)

  def __getattr__(self, name: str) -> Any:
    """Falls through to the backend for any other Console attribute (``width``, ``export_text``)."""
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Injects a specific console instance for both printing and logging.

  Args:
      new_console (Console): The configured Rich console to use globally.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Resets logging and console to standard output."""
  console.reset()


def set_verbose(verbose: bool) -> None:
  """
  Shows or hides the debug records of the hoisting pass.

  The package logger is opened to DEBUG together with the root logger, since
  the root ``RichHandler`` is what renders the records.

  Args:
      verbose (bool): True to emit ``hoist_mocks`` debug records.
  """
  logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.NOTSET)
  logging.getLogger().setLevel(logging.DEBUG if verbose else logging.INFO)


def _emit(level: int, icon: str, msg: str) -> None:
  logging.log(level, f"{icon} {msg}", extra={"markup": True})


def log_info(msg: str) -> None:
  """
  Reports progress, e.g. the number of files about to be processed.

  Args:
      msg (str): The message content. Can include rich markup like [bold].
  """
  _emit(logging.INFO, "ℹ️ ", msg)


def log_success(msg: str) -> None:
  """
  Reports a file that was rewritten, or a clean batch.

  Args:
      msg (str): The message content.
  """
  _emit(SUCCESS_LEVEL_NUM, "✅", msg)


def log_warning(msg: str) -> None:
  """
  Reports a file that would change in ``--check`` mode, or an empty input.

  Args:
      msg (str): The message content.
  """
  _emit(logging.WARNING, "⚠️ ", msg)


def log_error(msg: str) -> None:
  """
  Reports a file or input that could not be processed.

  Args:
      msg (str): The message content.
  """
  _emit(logging.ERROR, "❌", msg)
