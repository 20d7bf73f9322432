"""
Dependency Import Analysis.

Hoisted registrations and declarations may still need names bound by imports
(``jest.mock(Svc.path)`` needs ``from pkg import Svc``). This module:

1.  Normalizes module specifiers into comparable *module keys*.
2.  Collects names bound by import lines, excluding the handle module and the
    modules being mocked.
3.  Collects identifiers referenced by hoisted material.
4.  Splits the remaining statements into the imports that supply those
    identifiers and everything else.
"""

from typing import AbstractSet, Iterable, List, Sequence, Set, Tuple

import libcst as cst

from hoist_mocks.analysis.bindings import collect_free_references
from hoist_mocks.config import HoistConfig
from hoist_mocks.core.calls import iter_chain_links, statement_call
from hoist_mocks.core.names import is_handle_import
from hoist_mocks.core.statements import (
  alias_binding,
  evaluated_string,
  get_full_name,
  import_bindings,
  import_from_module,
  import_nodes,
)


def strip_extension(path: str, extensions: Iterable[str]) -> str:
  """
  Removes one recognized source-file extension from a path.

  Args:
      path: Slash-separated module path.
      extensions: Extensions to recognize (e.g. ``.py``).

  Returns:
      str: The path without its extension.
  """
  for extension in extensions:
    if path.endswith(extension):
      return path[: -len(extension)]
  return path


def module_key(specifier: str, config: HoistConfig) -> str:
  """
  Normalizes a module specifier to a dotted key.

  ``"./a/b.py"`` -> ``".a.b"``; ``"../x"`` -> ``"..x"``; ``"pkg.mod"`` and
  ``".rel"`` are returned as is.

  Args:
      specifier: Path-style or dotted module specifier.
      config: Active configuration (extensions and index segments).

  Returns:
      str: The module key.
  """
  if "/" not in specifier and specifier not in (".", ".."):
    return specifier

  segments = strip_extension(specifier.rstrip("/"), config.strippable_extensions).split("/")
  if segments and segments[-1] in config.index_segments:
    segments = segments[:-1]

  dots = 0
  index = 0
  while index < len(segments) and segments[index] in (".", ".."):
    dots += 1 if segments[index] == "." else 2 if dots == 0 else 1
    index += 1

  rest = ".".join(segment for segment in segments[index:] if segment)
  return "." * dots + rest


def _join_key(base: str, name: str) -> str:
  return f"{base}{name}" if base.endswith(".") or not base else f"{base}.{name}"


def registration_targets(calls: Iterable[cst.BaseStatement], config: HoistConfig) -> Set[str]:
  """
  Collects the module keys of string-literal registration arguments.

  Args:
      calls: Recognized registration statements.
      config: Active configuration.

  Returns:
      Set[str]: Module keys of every string-literal argument of every link.
  """
  targets: Set[str] = set()
  for statement in calls:
    for link in iter_chain_links(statement_call(statement), config):
      for arg in link.call.args:
        value = evaluated_string(arg.value)
        if value is not None:
          targets.add(module_key(value, config))
  return targets


def collect_import_bindings(
  statements: Iterable[cst.BaseStatement],
  config: HoistConfig,
  excluded_modules: AbstractSet[str] = frozenset(),
) -> Set[str]:
  """
  Collects names bound by the import lines of a list.

  Handle-module imports are skipped, as are bindings that come from (or are)
  one of the excluded modules.

  Args:
      statements: The statement list.
      config: Active configuration.
      excluded_modules: Module keys whose bindings must not be collected.

  Returns:
      Set[str]: Imported names.
  """
  bindings: Set[str] = set()
  for statement in statements:
    nodes = import_nodes(statement)
    if nodes is None or is_handle_import(statement, config):
      continue

    for node in nodes:
      if isinstance(node, cst.ImportFrom):
        if isinstance(node.names, cst.ImportStar):
          continue
        base = import_from_module(node)
        if base in excluded_modules:
          continue
        for alias in node.names:
          if _join_key(base, get_full_name(alias.name)) not in excluded_modules:
            bindings.add(alias_binding(alias, True))
      else:
        for alias in node.names:
          if get_full_name(alias.name) not in excluded_modules:
            bindings.add(alias_binding(alias, False))

  return bindings


def collect_hoisted_identifiers(
  calls: Iterable[cst.BaseStatement],
  declarations: Iterable[cst.BaseStatement],
  config: HoistConfig,
) -> Set[str]:
  """
  Collects the free identifiers needed by hoisted material.

  Args:
      calls: Hoisted registration statements (after argument rewriting).
      declarations: Hoisted supporting declarations.
      config: Active configuration.

  Returns:
      Set[str]: Identifiers referenced by any call argument or declaration.
  """
  ids: Set[str] = set()
  for statement in calls:
    for link in iter_chain_links(statement_call(statement), config):
      for arg in link.call.args:
        ids.update(collect_free_references(arg.value))

  for statement in declarations:
    ids.update(collect_free_references(statement))

  return ids


def extract_dependency_imports(
  statements: Sequence[cst.BaseStatement],
  identifiers: AbstractSet[str],
  config: HoistConfig,
) -> Tuple[List[cst.BaseStatement], List[cst.BaseStatement]]:
  """
  Splits out the import lines that bind a needed identifier.

  Args:
      statements: Statements not claimed by any other group, in order.
      identifiers: Identifiers needed by hoisted material.
      config: Active configuration.

  Returns:
      Tuple[List, List]: (dependency imports, remaining statements), both in
      original order.
  """
  dependency_imports: List[cst.BaseStatement] = []
  remaining: List[cst.BaseStatement] = []
  for statement in statements:
    if _binds_any(statement, identifiers, config):
      dependency_imports.append(statement)
    else:
      remaining.append(statement)
  return dependency_imports, remaining


def _binds_any(statement: cst.BaseStatement, identifiers: AbstractSet[str], config: HoistConfig) -> bool:
  nodes = import_nodes(statement)
  if nodes is None or is_handle_import(statement, config):
    return False
  for node in nodes:
    bound, _ = import_bindings(node)
    if bound & identifiers:
      return True
  return False
