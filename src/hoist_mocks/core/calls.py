"""
Registration Call Recognition.

A registration call is an expression statement such as::

    jest.mock("./service", lambda: {"fetch": mock_fetch})
    JG.jest.unmock("./a")
    jest.mock("./a").unmock("./b").mock("./c")

The receiver must resolve to the tracked handle; fluent chains of any depth
are recognized and hoisted as one unit.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

import libcst as cst

from hoist_mocks.config import HoistConfig
from hoist_mocks.core.names import TrackedNames
from hoist_mocks.core.statements import evaluated_string, get_full_name, single_small_statement


@dataclass(frozen=True)
class ChainLink:
  """
  One call of a (possibly chained) registration expression.
  """

  method: str
  """The registration method name (e.g. ``mock``)."""

  call: cst.Call
  """The call node of this link."""

  @property
  def path_argument(self) -> Optional[cst.BaseExpression]:
    """The module-path expression (first positional argument), if any."""
    if not self.call.args:
      return None
    first = self.call.args[0]
    if first.keyword is not None or first.star:
      return None
    return first.value

  def factory_argument(self, config: HoistConfig) -> Optional[cst.BaseExpression]:
    """
    The factory expression of this link, if any.

    Either the second positional argument or the argument passed under
    ``config.factory_keyword``.
    """
    positional = [arg for arg in self.call.args if arg.keyword is None and not arg.star]
    if len(positional) >= 2:
      return positional[1].value
    for arg in self.call.args:
      if arg.keyword is not None and arg.keyword.value == config.factory_keyword:
        return arg.value
    return None


@dataclass(frozen=True)
class MockFactory:
  """
  A factory passed to a registration link.

  Usually a lambda. Any other expression (a function name, a call building
  the factory) is kept as-is so its free names get the same scope check.
  """

  factory: cst.BaseExpression
  module_path: Optional[str]


def _hoist_method(node: cst.BaseExpression, config: HoistConfig) -> Optional[str]:
  if isinstance(node, cst.Call) and isinstance(node.func, cst.Attribute):
    if node.func.attr.value in config.hoist_methods:
      return node.func.attr.value
  return None


def is_registration_receiver(node: cst.BaseExpression, names: TrackedNames, config: HoistConfig) -> bool:
  """
  Checks whether an expression resolves to the tracked handle.

  Args:
      node: The receiver expression.
      names: Tracked names of the containing list.
      config: Active configuration.

  Returns:
      bool: True for a tracked direct name, ``<namespace>.<handle_name>``, or a
      registration call whose receiver is itself a handle.
  """
  if isinstance(node, cst.Name):
    return node.value in names.direct

  if isinstance(node, cst.Attribute):
    return node.attr.value == config.handle_name and get_full_name(node.value) in names.namespaces

  if _hoist_method(node, config) is not None:
    return is_registration_receiver(node.func.value, names, config)

  return False


def registration_expression(
  statement: cst.BaseStatement,
  names: TrackedNames,
  config: HoistConfig,
) -> Optional[cst.Call]:
  """
  Returns the outermost registration call of a statement, if it is one.

  Args:
      statement: A statement of the list.
      names: Tracked names of the list.
      config: Active configuration.

  Returns:
      Optional[cst.Call]: The call expression, or None.
  """
  if not names:
    return None
  small = single_small_statement(statement)
  if not isinstance(small, cst.Expr):
    return None
  if _hoist_method(small.value, config) is None:
    return None
  if not is_registration_receiver(small.value.func.value, names, config):
    return None
  return small.value


def is_registration_call(statement: cst.BaseStatement, names: TrackedNames, config: HoistConfig) -> bool:
  """Checks whether a statement is a (chained) registration call."""
  return registration_expression(statement, names, config) is not None


def iter_chain_links(call: cst.BaseExpression, config: HoistConfig) -> Iterator[ChainLink]:
  """
  Walks a registration chain from the outermost call inward.

  ``jest.mock(a).unmock(b)`` yields the ``unmock`` link, then the ``mock`` link.

  Args:
      call: The outermost call.
      config: Active configuration.

  Yields:
      ChainLink: Each registration link.
  """
  node = call
  while True:
    method = _hoist_method(node, config)
    if method is None:
      return
    yield ChainLink(method, node)
    node = node.func.value


def statement_call(statement: cst.BaseStatement) -> cst.Call:
  """Returns the call of a statement already recognized as a registration."""
  return single_small_statement(statement).value


def collect_factories(statement: cst.BaseStatement, config: HoistConfig) -> List[MockFactory]:
  """
  Collects the factories of a registration statement.

  Only factory-method links (``mock``) carry factories: the second positional
  argument, or the ``factory=`` keyword argument.

  Args:
      statement: A recognized registration statement.
      config: Active configuration.

  Returns:
      List[MockFactory]: Factories, outermost link first.
  """
  factories: List[MockFactory] = []
  for link in iter_chain_links(statement_call(statement), config):
    if link.method != config.factory_method:
      continue
    factory = link.factory_argument(config)
    if factory is None:
      continue
    module_path = evaluated_string(link.path_argument) if link.path_argument is not None else None
    factories.append(MockFactory(factory, module_path))
  return factories


def is_actual_call(node: cst.CSTNode, names: TrackedNames, config: HoistConfig) -> bool:
  """
  Checks for a "load the real implementation" call, e.g. ``jest.require_actual("./a")``.

  Args:
      node: Any node.
      names: Tracked names of the list.
      config: Active configuration.

  Returns:
      bool: True if the call goes through ``config.actual_method`` on a handle receiver.
  """
  return (
    isinstance(node, cst.Call)
    and isinstance(node.func, cst.Attribute)
    and node.func.attr.value == config.actual_method
    and is_registration_receiver(node.func.value, names, config)
  )
