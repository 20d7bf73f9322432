"""
Tracked Handle Name Resolution.

Determines which identifiers denote the test-framework handle in a statement
list. The handle is imported from a fixed module (``config.handle_module``):

- ``from jest_globals import jest`` / ``... import jest as h`` bind a *direct* name.
- ``from jest_globals import *`` binds the conventional name directly.
- ``import jest_globals`` / ``import jest_globals as JG`` bind a *namespace*
  through which the handle is reached as ``JG.jest``.

Any later declaration of a tracked name in the same list (assignment, ``def``,
``class``, or an import from another module) shadows it for that list only.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Sequence, Set

import libcst as cst

from hoist_mocks.config import HoistConfig
from hoist_mocks.core.statements import (
  alias_binding,
  get_full_name,
  import_bindings,
  import_from_module,
  import_nodes,
  iter_target_names,
)


@dataclass(frozen=True)
class TrackedNames:
  """
  Identifiers resolving to the test-framework handle in one statement list.
  """

  direct: FrozenSet[str] = field(default_factory=frozenset)
  """Names bound to the handle itself (e.g. ``jest``, ``h``)."""

  namespaces: FrozenSet[str] = field(default_factory=frozenset)
  """Dotted paths bound to the handle module (e.g. ``JG``)."""

  def __bool__(self) -> bool:
    return bool(self.direct or self.namespaces)

  @property
  def roots(self) -> Set[str]:
    """Local names through which the handle is reachable."""
    return set(self.direct) | {path.split(".")[0] for path in self.namespaces}

  def union(self, other: "TrackedNames") -> "TrackedNames":
    return TrackedNames(self.direct | other.direct, self.namespaces | other.namespaces)


def is_handle_import(statement: cst.BaseStatement, config: HoistConfig) -> bool:
  """
  Checks whether a statement imports the handle module.

  Args:
      statement: A statement of the list.
      config: Active configuration.

  Returns:
      bool: True for an import line referencing ``config.handle_module``.
  """
  nodes = import_nodes(statement)
  if nodes is None:
    return False
  return any(_references_handle_module(node, config) for node in nodes)


def _references_handle_module(node: cst.CSTNode, config: HoistConfig) -> bool:
  if isinstance(node, cst.ImportFrom):
    return import_from_module(node) == config.handle_module
  if isinstance(node, cst.Import):
    return any(get_full_name(alias.name) == config.handle_module for alias in node.names)
  return False


def collect_tracked_names(statements: Iterable[cst.BaseStatement], config: HoistConfig) -> TrackedNames:
  """
  Scans handle-module imports for names bound to the handle.

  An import of the handle module that binds no handle name (e.g.
  ``from jest_globals import expect``) contributes nothing.

  Args:
      statements: The statement list.
      config: Active configuration.

  Returns:
      TrackedNames: Unfiltered tracked names.
  """
  direct: Set[str] = set()
  namespaces: Set[str] = set()
  for statement in statements:
    for node in import_nodes(statement) or ():
      if not _references_handle_module(node, config):
        continue

      if isinstance(node, cst.ImportFrom):
        if isinstance(node.names, cst.ImportStar):
          direct.add(config.handle_name)
          continue
        for alias in node.names:
          local = alias_binding(alias, True)
          if get_full_name(alias.name) == config.handle_name or local == config.handle_name:
            direct.add(local)
      else:
        for alias in node.names:
          if get_full_name(alias.name) != config.handle_module:
            continue
          # `import pkg.globals` binds `pkg`, but the handle lives at `pkg.globals.jest`.
          namespaces.add(alias_binding(alias, False) if alias.asname is not None else config.handle_module)

  return TrackedNames(frozenset(direct), frozenset(namespaces))


def collect_shadowed_names(
  statements: Iterable[cst.BaseStatement],
  names: TrackedNames,
  config: HoistConfig,
) -> Set[str]:
  """
  Finds tracked roots re-declared in the same statement list.

  Args:
      statements: The statement list.
      names: Candidate tracked names.
      config: Active configuration.

  Returns:
      Set[str]: Roots that are shadowed in this list.
  """
  roots = names.roots
  if not roots:
    return set()

  shadowed: Set[str] = set()
  for statement in statements:
    for bound in _declared_names(statement, config):
      if bound in roots:
        shadowed.add(bound)
  return shadowed


def _declared_names(statement: cst.BaseStatement, config: HoistConfig) -> Iterable[str]:
  if isinstance(statement, (cst.FunctionDef, cst.ClassDef)):
    return [statement.name.value]
  if not isinstance(statement, cst.SimpleStatementLine):
    return []

  declared = []
  for small in statement.body:
    if isinstance(small, cst.Assign):
      for target in small.targets:
        declared.extend(n.value for n in iter_target_names(target.target))
    elif isinstance(small, cst.AnnAssign):
      declared.extend(n.value for n in iter_target_names(small.target))
    elif isinstance(small, (cst.Import, cst.ImportFrom)) and not _references_handle_module(small, config):
      bound, _ = import_bindings(small)
      declared.extend(bound)
  return declared


def filter_shadowed(names: TrackedNames, shadowed: Set[str]) -> TrackedNames:
  """
  Drops shadowed names from a TrackedNames value.

  Args:
      names: Tracked names before filtering.
      shadowed: Shadowed roots.

  Returns:
      TrackedNames: The filtered names (the same object if nothing is shadowed).
  """
  if not shadowed:
    return names
  return TrackedNames(
    frozenset(n for n in names.direct if n not in shadowed),
    frozenset(n for n in names.namespaces if n.split(".")[0] not in shadowed),
  )


def resolve_tracked_names(
  statements: Sequence[cst.BaseStatement],
  base: TrackedNames,
  config: HoistConfig,
) -> TrackedNames:
  """
  Computes the effective TrackedNames of one statement list.

  Args:
      statements: The statement list.
      base: Names inherited from the module top level (unfiltered).
      config: Active configuration.

  Returns:
      TrackedNames: ``base`` plus the list's own handle imports, minus the
      names the list shadows.
  """
  names = base.union(collect_tracked_names(statements, config))
  return filter_shadowed(names, collect_shadowed_names(statements, names, config))
