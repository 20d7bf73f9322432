"""
Error Types for the Hoisting Pass.

Only one condition is fatal to a transform: a module factory that closes over
state which may not be initialized when the registration runs. Every other
irregular shape (unsupported declarations, unknown receivers, resolver misses)
simply disqualifies a statement from hoisting and is not reported.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CodePosition:
  """
  Location of a statement in the source file.
  """

  line: int
  """1-based line number."""

  column: int = 0
  """0-based column offset."""

  def __str__(self) -> str:
    return f"{self.line}:{self.column}"


class HoistError(Exception):
  """Base class for errors raised by hoist_mocks."""


class ConfigError(HoistError, ValueError):
  """Raised when configuration values are invalid."""


class FactoryScopeError(HoistError):
  """
  Raised when a module factory references an out-of-scope variable.

  Attributes:
      invalid_name (str): The offending free identifier.
      module_path (Optional[str]): The literal first argument of the registration, if any.
      position (Optional[CodePosition]): Start of the registration statement.
      filename (Optional[str]): The file being transformed.
  """

  ALLOWED_NOTE = (
    "Allowed objects: expect, jest, Ellipsis, NotImplemented, __debug__.\n"
    "Note: This is a precaution to guard against uninitialized mock variables. "
    "If it is ensured that the mock is required lazily, variable names prefixed "
    "with `mock` (case insensitive) are permitted."
  )

  def __init__(
    self,
    invalid_name: str,
    module_path: Optional[str] = None,
    position: Optional[CodePosition] = None,
    filename: Optional[str] = None,
    call_name: str = "jest.mock",
  ):
    """
    Initializes the error and renders its message.

    Args:
        invalid_name: The identifier that failed validation.
        module_path: Evaluated string literal of the first argument.
        position: Source position of the registration statement.
        filename: Name of the file being transformed.
        call_name: Display name of the registration call.
    """
    self.invalid_name = invalid_name
    self.module_path = module_path
    self.position = position
    self.filename = filename
    super().__init__(self._render(call_name))

  def _render(self, call_name: str) -> str:
    target = f"{call_name}({self.module_path})" if self.module_path is not None else f"{call_name}()"
    if self.position is not None:
      target = f"{target} at {self.filename or '<unknown>'}:{self.position.line}"
    return (
      f"The module factory of `{target}` is not allowed to reference any out-of-scope variables.\n"
      f"Invalid variable access: {self.invalid_name}\n"
      f"{self.ALLOWED_NOTE}"
    )
