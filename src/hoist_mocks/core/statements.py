"""
Statement Shape Utilities.

Static helpers that classify the statements of a single statement list:
docstrings, ``__future__`` imports, import lines and the names they bind,
constant-style declarations, and names that are rebound within the list.

A ``SimpleStatementLine`` carrying several ``;``-separated small statements is
always treated as one unit.
"""

from collections import Counter
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union

import libcst as cst

Assignment = Tuple[cst.BaseAssignTargetExpression, cst.BaseExpression]


def get_full_name(node: cst.BaseExpression) -> str:
  """
  Recursively resolves a CST Name or Attribute chain to a dot-separated string.

  Args:
    node: The CST node representing the identifier.

  Returns:
    str: The dotted representation (e.g., "pkg.globals"), or an empty string
    if the node is not a Name/Attribute chain.

  Example:
    >>> get_full_name(cst.Attribute(value=cst.Name("pkg"), attr=cst.Name("globals")))
    'pkg.globals'
  """
  if isinstance(node, cst.Name):
    return node.value
  if isinstance(node, cst.Attribute):
    base = get_full_name(node.value)
    return f"{base}.{node.attr.value}" if base else ""
  return ""


def is_docstring(node: cst.CSTNode, idx: int) -> bool:
  """
  Determines if a statement node represents a docstring.

  Args:
      node: The statement node from the list body.
      idx: The index of this statement in the body list.

  Returns:
      bool: True if it is a docstring (string expression at index 0).
  """
  if idx != 0:
    return False
  if isinstance(node, cst.SimpleStatementLine):
    if len(node.body) == 1 and isinstance(node.body[0], cst.Expr):
      expr = node.body[0].value
      if isinstance(expr, (cst.SimpleString, cst.ConcatenatedString)):
        return True
  return False


def is_future_import(node: cst.CSTNode) -> bool:
  """
  Determines if a statement is a `from __future__ import ...` directive.

  Args:
      node: The statement node.

  Returns:
      bool: True if it is a future import.
  """
  if isinstance(node, cst.SimpleStatementLine):
    for small_stmt in node.body:
      if isinstance(small_stmt, cst.ImportFrom):
        if small_stmt.module and isinstance(small_stmt.module, cst.Name):
          if small_stmt.module.value == "__future__":
            return True
  return False


def single_small_statement(statement: cst.BaseStatement) -> Optional[cst.BaseSmallStatement]:
  """Returns the only small statement of a line, or None."""
  if isinstance(statement, cst.SimpleStatementLine) and len(statement.body) == 1:
    return statement.body[0]
  return None


def import_nodes(statement: cst.BaseStatement) -> Optional[List[Union[cst.Import, cst.ImportFrom]]]:
  """
  Returns the import nodes of a line made only of imports.

  Args:
      statement: A statement of the list.

  Returns:
      Optional[List]: The Import/ImportFrom nodes, or None if the statement is
      not an import line.
  """
  if not isinstance(statement, cst.SimpleStatementLine) or not statement.body:
    return None
  if not all(isinstance(small, (cst.Import, cst.ImportFrom)) for small in statement.body):
    return None
  return list(statement.body)


def import_from_module(node: cst.ImportFrom) -> str:
  """
  Renders the module of a ``from`` import, keeping its relative dots.

  ``from ..pkg.mod import x`` -> ``"..pkg.mod"``.
  """
  dots = "." * len(node.relative)
  module = get_full_name(node.module) if node.module is not None else ""
  return f"{dots}{module}"


def alias_binding(alias: cst.ImportAlias, from_import: bool) -> str:
  """
  Returns the local name an import alias binds.

  ``import a.b`` binds ``a``; ``import a.b as c`` and ``from m import b as c`` bind ``c``.
  """
  if alias.asname is not None and isinstance(alias.asname.name, cst.Name):
    return alias.asname.name.value
  full = get_full_name(alias.name)
  return full if from_import else full.split(".")[0]


def import_bindings(node: Union[cst.Import, cst.ImportFrom]) -> Tuple[Set[str], bool]:
  """
  Collects the names bound by an import.

  Args:
      node: The Import or ImportFrom node.

  Returns:
      Tuple[Set[str], bool]: The bound names and whether the import is a star
      import (whose bindings are unknown).
  """
  if isinstance(node, cst.ImportFrom):
    if isinstance(node.names, cst.ImportStar):
      return set(), True
    return {alias_binding(alias, True) for alias in node.names}, False
  return {alias_binding(alias, False) for alias in node.names}, False


def iter_target_names(target: cst.BaseExpression) -> Iterator[cst.Name]:
  """
  Yields every Name bound by an assignment-like target, at any depth.

  Attribute and subscript targets bind nothing.
  """
  if isinstance(target, cst.Name):
    yield target
  elif isinstance(target, (cst.Tuple, cst.List)):
    for element in target.elements:
      yield from iter_target_names(element.value)
  elif isinstance(target, cst.StarredElement):
    yield from iter_target_names(target.value)


def destructured_names(target: cst.BaseExpression) -> Optional[List[str]]:
  """
  Returns the names bound by a simple or flat sequence-destructuring target.

  ``a`` -> ``["a"]``; ``a, *b`` -> ``["a", "b"]``. Nested, empty, attribute
  and subscript targets return None.
  """
  if isinstance(target, cst.Name):
    return [target.value]
  if not isinstance(target, (cst.Tuple, cst.List)):
    return None

  names: List[str] = []
  for element in target.elements:
    if not isinstance(element.value, cst.Name):
      return None
    names.append(element.value.value)

  return names or None


def statement_bindings(statement: cst.BaseStatement) -> List[str]:
  """
  Lists every name a statement binds at the level of its own list.

  Nested function and class bodies are not entered. Compound statements
  that do not open a new scope (``if``, ``for``, ``with``, ``try``) only
  contribute their own targets here; their bodies are separate lists.

  Args:
      statement: A statement of the list.

  Returns:
      List[str]: Bound names, with repetitions.
  """
  names: List[str] = []
  if isinstance(statement, cst.SimpleStatementLine):
    for small in statement.body:
      names.extend(_small_statement_bindings(small))
  elif isinstance(statement, (cst.FunctionDef, cst.ClassDef)):
    names.append(statement.name.value)
  elif isinstance(statement, cst.For):
    names.extend(n.value for n in iter_target_names(statement.target))
  elif isinstance(statement, cst.With):
    for item in statement.items:
      if item.asname is not None:
        names.extend(n.value for n in iter_target_names(item.asname.name))
  return names


def _small_statement_bindings(small: cst.BaseSmallStatement) -> List[str]:
  if isinstance(small, cst.Assign):
    return [n.value for t in small.targets for n in iter_target_names(t.target)]
  if isinstance(small, (cst.AnnAssign, cst.AugAssign)):
    return [n.value for n in iter_target_names(small.target)]
  if isinstance(small, cst.Del):
    return [n.value for n in iter_target_names(small.target)]
  if isinstance(small, (cst.Global, cst.Nonlocal)):
    return [item.name.value for item in small.names]
  if isinstance(small, (cst.Import, cst.ImportFrom)):
    bound, _ = import_bindings(small)
    return sorted(bound)
  return []


def collect_rebound_names(statements: Iterable[cst.BaseStatement]) -> Set[str]:
  """
  Finds names bound more than once in a statement list.

  Such names behave like mutable (``let``) bindings and are never treated as
  constants. ``global``/``nonlocal`` declarations and augmented assignments
  count as an extra binding.

  Args:
      statements: The statement list.

  Returns:
      Set[str]: Names that are not single-assignment in this list.
  """
  counts: Dict[str, int] = Counter()
  for statement in statements:
    counts.update(statement_bindings(statement))
  return {name for name, count in counts.items() if count > 1}


def constant_assignments(
  statement: cst.BaseStatement,
  statements: Sequence[cst.BaseStatement],
  reassigned: Optional[Set[str]] = None,
) -> Optional[List[Assignment]]:
  """
  Decomposes a constant-style declaration line into (target, value) pairs.

  A line qualifies when every small statement is an ``Assign`` with exactly
  one target or an ``AnnAssign`` with a value, and none of the bound names is
  bound again elsewhere in the same list.

  Args:
      statement: The candidate line.
      statements: The containing list, used to detect rebinding.
      reassigned: Precomputed result of ``collect_rebound_names``.

  Returns:
      Optional[List[Assignment]]: The declarations of the line, or None if the
      line is not constant-style.
  """
  if not isinstance(statement, cst.SimpleStatementLine) or not statement.body:
    return None

  if reassigned is None:
    reassigned = collect_rebound_names(statements)

  assignments: List[Assignment] = []
  for small in statement.body:
    if isinstance(small, cst.Assign) and len(small.targets) == 1:
      assignments.append((small.targets[0].target, small.value))
    elif isinstance(small, cst.AnnAssign) and small.value is not None:
      assignments.append((small.target, small.value))
    else:
      return None

  for target, _ in assignments:
    if any(name.value in reassigned for name in iter_target_names(target)):
      return None

  return assignments


def evaluated_string(node: cst.BaseExpression) -> Optional[str]:
  """
  Returns the value of a plain (non-bytes) string literal, or None.
  """
  if isinstance(node, cst.SimpleString):
    value = node.evaluated_value
    if isinstance(value, str):
      return value
  return None
