"""
Static Purity Analysis for Hoisting Eligibility.

This module decides whether an expression is statically side-effect free, in
the narrow syntactic sense needed to move a constant above imports and
registration calls. The grammar is closed: anything not listed is impure.

Pure forms:
1.  **Literals**: numbers, strings, bytes, ``True``/``False``/``None``, ``...``.
2.  **F-Strings**: when every interpolation (and nested format spec) is pure.
3.  **Operators**: unary, binary, boolean and comparison operators over pure operands.
4.  **Conditionals**: ``a if b else c`` when all three parts are pure.
5.  **Containers**: lists, tuples, sets and dicts of pure elements, including
    ``*x`` / ``**x`` spreads of pure sources.
6.  **Lambdas**: always pure; defining one creates a deferred closure.

No identifier is ever pure, not even one bound to a pure constant.
"""

from typing import Iterable, Optional, Set

import libcst as cst

from hoist_mocks.core.statements import constant_assignments

KEYWORD_CONSTANTS = frozenset({"True", "False", "None"})

_LITERAL_TYPES = (
  cst.Integer,
  cst.Float,
  cst.Imaginary,
  cst.SimpleString,
  cst.Ellipsis,
  cst.Lambda,
)


def is_pure_expression(node: cst.BaseExpression) -> bool:
  """
  Classifies an expression against the purity grammar.

  Args:
      node: The expression to classify.

  Returns:
      bool: True if evaluating the expression has no side effect and reads no
      mutable environment state.
  """
  if isinstance(node, _LITERAL_TYPES):
    return True

  if isinstance(node, cst.Name):
    return node.value in KEYWORD_CONSTANTS

  if isinstance(node, cst.ConcatenatedString):
    return is_pure_expression(node.left) and is_pure_expression(node.right)

  if isinstance(node, cst.FormattedString):
    return _is_pure_fstring_parts(node.parts)

  if isinstance(node, cst.UnaryOperation):
    return is_pure_expression(node.expression)

  if isinstance(node, (cst.BinaryOperation, cst.BooleanOperation)):
    return is_pure_expression(node.left) and is_pure_expression(node.right)

  if isinstance(node, cst.Comparison):
    return is_pure_expression(node.left) and all(is_pure_expression(c.comparator) for c in node.comparisons)

  if isinstance(node, cst.IfExp):
    return is_pure_expression(node.test) and is_pure_expression(node.body) and is_pure_expression(node.orelse)

  if isinstance(node, (cst.List, cst.Tuple, cst.Set)):
    return all(is_pure_expression(element.value) for element in node.elements)

  if isinstance(node, cst.Dict):
    return all(_is_pure_dict_element(element) for element in node.elements)

  return False


def _is_pure_dict_element(element: cst.BaseDictElement) -> bool:
  if isinstance(element, cst.DictElement):
    return is_pure_expression(element.key) and is_pure_expression(element.value)
  if isinstance(element, cst.StarredDictElement):
    return is_pure_expression(element.value)
  return False


def _is_pure_fstring_parts(parts: Iterable[cst.BaseFormattedStringContent]) -> bool:
  for part in parts:
    if isinstance(part, cst.FormattedStringExpression):
      if not is_pure_expression(part.expression):
        return False
      if part.format_spec is not None and not _is_pure_fstring_parts(part.format_spec):
        return False
  return True


def collect_pure_constants(
  statements: Iterable[cst.BaseStatement],
  reassigned: Optional[Set[str]] = None,
) -> Set[str]:
  """
  Collects names of constant-style declarations with pure initializers.

  A declaration line is treated as one unit: when any of its values is impure,
  or any of its targets is not a simple name, none of its names qualify.

  Args:
      statements: The statement list to scan.
      reassigned: Names bound more than once in the list. Computed if omitted.

  Returns:
      Set[str]: The PureConstant set for the list.
  """
  statements = list(statements)
  names: Set[str] = set()
  for statement in statements:
    assignments = constant_assignments(statement, statements, reassigned)
    if assignments is None:
      continue

    line_names = []
    for target, value in assignments:
      if not isinstance(target, cst.Name) or not is_pure_expression(value):
        break
      line_names.append(target.value)
    else:
      names.update(line_names)

  return names
