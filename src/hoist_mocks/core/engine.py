"""
Hoisting Pass Entry Points.

- ``transform``: tree in, tree out. Raises ``FactoryScopeError``.
- ``hoist_code``: source in, source out.
- ``HoistEngine``: per-file driver returning a structured ``HoistResult``
  instead of raising, used by the command line.
"""

import logging
from typing import List, Optional

import libcst as cst
from libcst.metadata import MetadataWrapper
from pydantic import BaseModel, Field

from hoist_mocks.config import HoistConfig
from hoist_mocks.core.resolver import PathResolver, StaticPathResolver
from hoist_mocks.core.transformer import HoistTransformer
from hoist_mocks.errors import HoistError

logger = logging.getLogger(__name__)


def transform(
  tree: cst.Module,
  config: Optional[HoistConfig] = None,
  filename: Optional[str] = None,
  resolver: Optional[PathResolver] = None,
) -> cst.Module:
  """
  Hoists registration calls in every statement list of a module.

  Args:
      tree: The parsed module.
      config: Active configuration. Defaults to ``HoistConfig()``.
      filename: Name of the file, for diagnostics and the resolver.
      resolver: Optional resolver for non-relative module paths.

  Returns:
      cst.Module: The rewritten module, or ``tree`` itself when nothing changed.

  Raises:
      FactoryScopeError: If a module factory references an out-of-scope name.
  """
  config = config or HoistConfig()
  transformer = HoistTransformer(config, resolver=resolver, filename=filename)
  result = MetadataWrapper(tree).visit(transformer)
  if not transformer.changed:
    return tree

  logger.debug("%s: restructured %d statement list(s)", filename or "<module>", transformer.hoisted_lists)
  return result


def hoist_code(
  code: str,
  config: Optional[HoistConfig] = None,
  filename: Optional[str] = None,
  resolver: Optional[PathResolver] = None,
) -> str:
  """
  Source-to-source form of ``transform``.

  Args:
      code: Python source.
      config: Active configuration.
      filename: Name of the file.
      resolver: Optional resolver for non-relative module paths.

  Returns:
      str: The rewritten source.

  Raises:
      libcst.ParserSyntaxError: If ``code`` is not valid Python.
      FactoryScopeError: If a module factory references an out-of-scope name.
  """
  return transform(cst.parse_module(code), config, filename=filename, resolver=resolver).code


class HoistResult(BaseModel):
  """
  Structured result of hoisting one file.
  """

  code: str = Field(default="", description="The transformed source code.")
  errors: List[str] = Field(default_factory=list, description="Error messages encountered.")
  success: bool = Field(default=True, description="True if the file was transformed without fatal errors.")
  changed: bool = Field(default=False, description="True if the output differs from the input.")

  @property
  def has_errors(self) -> bool:
    """
    Check if the result contains any error messages.

    Returns:
        True if one or more errors are present.
    """
    return len(self.errors) > 0


class HoistEngine:
  """
  Drives the hoisting pass for individual source files.
  """

  def __init__(self, config: Optional[HoistConfig] = None, resolver: Optional[PathResolver] = None):
    """
    Initializes the engine.

    Args:
        config: Active configuration. Defaults to ``HoistConfig()``.
        resolver: Resolver for non-relative module paths. Defaults to a
            ``StaticPathResolver`` built from ``config.package_paths``.
    """
    self.config = config or HoistConfig()
    self.resolver = resolver if resolver is not None else StaticPathResolver.from_config(self.config)

  def parse(self, code: str) -> cst.Module:
    """
    Parses source string into a LibCST Module.

    Raises:
        libcst.ParserSyntaxError: If the input code is invalid Python.
    """
    return cst.parse_module(code)

  def to_source(self, tree: cst.Module) -> str:
    return tree.code

  def run(self, code: str, filename: Optional[str] = None) -> HoistResult:
    """
    Hoists one source file.

    Args:
        code: The input source string.
        filename: Name of the file, for diagnostics and the resolver.

    Returns:
        HoistResult: The transformed code, or the input code and the error
        message when parsing or validation failed.
    """
    try:
      tree = self.parse(code)
    except cst.ParserSyntaxError as e:
      return HoistResult(code=code, errors=[f"Parse Error: {e}"], success=False)

    try:
      result = transform(tree, self.config, filename=filename, resolver=self.resolver)
    except HoistError as e:
      return HoistResult(code=code, errors=[str(e)], success=False)

    output = self.to_source(result)
    return HoistResult(code=output, changed=output != code)
