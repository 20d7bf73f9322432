"""
Module Factory Validation.

A factory closure is moved above the code that precedes its registration, so
it must not close over names that may be uninitialized when it runs. Each
free reference of a factory must be:

1.  an allowed identifier (``expect``, the handle, universal constants),
2.  mock-prefixed (``mock_*``, case-insensitive),
3.  a coverage-instrumentation name (``cov_*``, ``__cov*``),
4.  a pure constant of the same statement list, or
5.  an import binding of the same list, unless it comes from a mocked module.

Anything else raises ``FactoryScopeError`` and aborts the whole file.
"""

from typing import AbstractSet, Iterable, Optional, Set

import libcst as cst

from hoist_mocks.analysis.bindings import collect_free_references
from hoist_mocks.config import HoistConfig
from hoist_mocks.core.calls import collect_factories
from hoist_mocks.errors import CodePosition, FactoryScopeError


def is_allowed_reference(
  name: str,
  config: HoistConfig,
  allowed: AbstractSet[str],
  pure_constants: AbstractSet[str],
) -> bool:
  """
  Applies the out-of-scope reference rule to one free name.

  Args:
      name: The free identifier.
      config: Active configuration.
      allowed: Allow-list for this list (configured names, tracked roots,
          rewriter globals and permitted import bindings).
      pure_constants: PureConstant set of the containing list.

  Returns:
      bool: True if the factory may reference the name.
  """
  return (
    name in allowed
    or config.is_mock_name(name)
    or config.coverage_re.match(name) is not None
    or name in pure_constants
  )


def validate_factories(
  statement: cst.BaseStatement,
  config: HoistConfig,
  allowed: AbstractSet[str],
  pure_constants: AbstractSet[str],
  position: Optional[CodePosition] = None,
  filename: Optional[str] = None,
) -> None:
  """
  Validates every factory of a registration statement.

  Unregister links carry no factory and are never validated.

  Args:
      statement: A recognized registration statement.
      config: Active configuration.
      allowed: Allow-list for the containing list.
      pure_constants: PureConstant set of the containing list.
      position: Position of the statement, for diagnostics.
      filename: File being transformed, for diagnostics.

  Raises:
      FactoryScopeError: On the first disallowed free reference.
  """
  for mock_factory in collect_factories(statement, config):
    for name in sorted(collect_free_references(mock_factory.factory)):
      if not is_allowed_reference(name, config, allowed, pure_constants):
        raise FactoryScopeError(
          name,
          module_path=mock_factory.module_path,
          position=position,
          filename=filename,
          call_name=f"{config.handle_name}.{config.factory_method}",
        )


def collect_factory_references(statements: Iterable[cst.BaseStatement], config: HoistConfig) -> Set[str]:
  """
  Collects all free references of the factories of registration statements.

  Args:
      statements: Recognized registration statements.
      config: Active configuration.

  Returns:
      Set[str]: The union of the factories' FreeReferenceSets.
  """
  refs: Set[str] = set()
  for statement in statements:
    for mock_factory in collect_factories(statement, config):
      refs.update(collect_free_references(mock_factory.factory))
  return refs
