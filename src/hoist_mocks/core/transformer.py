"""
Block-Scoped Hoisting Transformer.

Applies the hoisting engine once to the module body and once to every
indented block (function, class, ``if``, ``for``, ``while``, ``with``, ``try``,
``match`` case bodies). Each list is handled with its own tracked names:

- The module list resolves names from its own imports.
- A nested list starts from the module's unfiltered names, adds its own
  handle imports, then drops whatever it shadows itself.

Registrations never leave the list they appear in.
"""

from typing import List, Optional, Sequence

import libcst as cst
from libcst.metadata import PositionProvider

from hoist_mocks.config import HoistConfig
from hoist_mocks.core.hoisting import partition_statements
from hoist_mocks.core.names import TrackedNames, collect_tracked_names, resolve_tracked_names
from hoist_mocks.core.resolver import PathResolver
from hoist_mocks.errors import CodePosition


class HoistTransformer(cst.CSTTransformer):
  """
  Reorders every statement list so registrations run first.

  Attributes:
      changed (bool): True once any list has been reordered or rewritten.
      hoisted_lists (int): Number of statement lists that were restructured.
  """

  METADATA_DEPENDENCIES = (PositionProvider,)

  def __init__(
    self,
    config: HoistConfig,
    resolver: Optional[PathResolver] = None,
    filename: Optional[str] = None,
  ):
    """
    Initializes the transformer.

    Args:
        config: Active configuration.
        resolver: Optional resolver for non-relative module paths.
        filename: File being transformed.
    """
    super().__init__()
    self.config = config
    self.resolver = resolver
    self.filename = filename
    self.module_names = TrackedNames()
    self.changed = False
    self.hoisted_lists = 0

  def _positions(self, statements: Sequence[cst.BaseStatement]) -> List[Optional[CodePosition]]:
    positions: List[Optional[CodePosition]] = []
    for statement in statements:
      code_range = self.get_metadata(PositionProvider, statement, None)
      positions.append(CodePosition(code_range.start.line, code_range.start.column) if code_range else None)
    return positions

  def _hoist(
    self,
    original_body: Sequence[cst.BaseStatement],
    updated_body: Sequence[cst.BaseStatement],
    names: TrackedNames,
  ) -> Optional[List[cst.BaseStatement]]:
    groups = partition_statements(
      updated_body,
      names,
      self.config,
      resolver=self.resolver,
      filename=self.filename,
      positions=self._positions(original_body),
    )
    if groups is None:
      return None

    body = groups.emit()
    if len(body) == len(updated_body) and all(a is b for a, b in zip(body, updated_body)):
      return None

    self.changed = True
    self.hoisted_lists += 1
    return body

  def visit_Module(self, node: cst.Module) -> Optional[bool]:
    self.module_names = collect_tracked_names(node.body, self.config)
    return True

  def leave_IndentedBlock(self, original_node: cst.IndentedBlock, updated_node: cst.IndentedBlock) -> cst.BaseSuite:
    names = resolve_tracked_names(updated_node.body, self.module_names, self.config)
    body = self._hoist(original_node.body, updated_node.body, names)
    if body is None:
      return updated_node
    return updated_node.with_changes(body=body)

  def leave_Module(self, original_node: cst.Module, updated_node: cst.Module) -> cst.Module:
    names = resolve_tracked_names(updated_node.body, TrackedNames(), self.config)
    body = self._hoist(original_node.body, updated_node.body, names)
    if body is None:
      return updated_node
    return updated_node.with_changes(body=body)
