"""
Binding and Reference Walkers.

Two LibCST visitors computing, for any subtree (a lambda, a statement, a whole
block):

1.  **Local bindings**: every name declared anywhere inside: parameters,
    ``def``/``class`` names, assignment, loop, comprehension, ``with`` and
    walrus targets, ``except ... as`` names, imports and match captures.
    Names declared ``global``/``nonlocal`` are not local.
2.  **Free references**: every ``Name`` read in a value position that is not
    locally bound. Member names (``a.b``), keyword argument names, binding
    targets and type annotations are never references. ``True``/``False``/
    ``None`` are keywords, not identifiers.

The walk is deliberately flat: bindings of nested functions count as local for
the whole subtree, mirroring how factory closures are validated.
"""

from typing import Iterable, Optional, Set

import libcst as cst

from hoist_mocks.analysis.purity import KEYWORD_CONSTANTS
from hoist_mocks.core.statements import import_bindings, iter_target_names


class LocalBindingCollector(cst.CSTVisitor):
  """
  Collects the names declared inside a subtree.

  Attributes:
      bindings (Set[str]): Declared names.
      declared_outer (Set[str]): Names declared ``global`` or ``nonlocal``.
  """

  def __init__(self) -> None:
    self.bindings: Set[str] = set()
    self.declared_outer: Set[str] = set()

  def _bind_target(self, target: cst.BaseExpression) -> None:
    self.bindings.update(name.value for name in iter_target_names(target))

  def visit_Param(self, node: cst.Param) -> None:
    self.bindings.add(node.name.value)

  def visit_FunctionDef(self, node: cst.FunctionDef) -> None:
    self.bindings.add(node.name.value)

  def visit_ClassDef(self, node: cst.ClassDef) -> None:
    self.bindings.add(node.name.value)

  def visit_AssignTarget(self, node: cst.AssignTarget) -> None:
    self._bind_target(node.target)

  def visit_AnnAssign(self, node: cst.AnnAssign) -> None:
    self._bind_target(node.target)

  def visit_AugAssign(self, node: cst.AugAssign) -> None:
    self._bind_target(node.target)

  def visit_For(self, node: cst.For) -> None:
    self._bind_target(node.target)

  def visit_CompFor(self, node: cst.CompFor) -> None:
    self._bind_target(node.target)

  def visit_NamedExpr(self, node: cst.NamedExpr) -> None:
    self._bind_target(node.target)

  def visit_WithItem(self, node: cst.WithItem) -> None:
    if node.asname is not None:
      self._bind_target(node.asname.name)

  def visit_ExceptHandler(self, node: cst.ExceptHandler) -> None:
    if node.name is not None:
      self._bind_target(node.name.name)

  def visit_ExceptStarHandler(self, node: cst.ExceptStarHandler) -> None:
    if node.name is not None:
      self._bind_target(node.name.name)

  def visit_Import(self, node: cst.Import) -> Optional[bool]:
    bound, _ = import_bindings(node)
    self.bindings.update(bound)
    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> Optional[bool]:
    bound, _ = import_bindings(node)
    self.bindings.update(bound)
    return False

  def visit_MatchAs(self, node: cst.MatchAs) -> None:
    if node.name is not None:
      self.bindings.add(node.name.value)

  def visit_MatchStar(self, node: cst.MatchStar) -> None:
    if node.name is not None:
      self.bindings.add(node.name.value)

  def visit_MatchMapping(self, node: cst.MatchMapping) -> None:
    if node.rest is not None:
      self.bindings.add(node.rest.value)

  def visit_Global(self, node: cst.Global) -> Optional[bool]:
    self.declared_outer.update(item.name.value for item in node.names)
    return False

  def visit_Nonlocal(self, node: cst.Nonlocal) -> Optional[bool]:
    self.declared_outer.update(item.name.value for item in node.names)
    return False


class ReferenceCollector(cst.CSTVisitor):
  """
  Collects free identifier references in a subtree.

  Binding positions are skipped by visiting only the value-carrying children
  of the nodes that contain them.

  Attributes:
      local (Set[str]): Names to ignore because they are bound locally.
      references (Set[str]): Free names found so far.
  """

  def __init__(self, local: Iterable[str] = ()) -> None:
    """
    Initializes the collector.

    Args:
        local: Names bound inside the subtree being scanned.
    """
    self.local = set(local)
    self.references: Set[str] = set()

  def _visit_target(self, target: cst.BaseExpression) -> None:
    # Names in a binding target are declarations; attribute and subscript
    # targets still read their base object.
    if isinstance(target, cst.Name):
      return
    if isinstance(target, (cst.Tuple, cst.List)):
      for element in target.elements:
        self._visit_target(element.value)
    elif isinstance(target, cst.StarredElement):
      self._visit_target(target.value)
    else:
      target.visit(self)

  def _visit_all(self, *nodes: Optional[cst.CSTNode]) -> None:
    for node in nodes:
      if node is not None:
        node.visit(self)

  def visit_Name(self, node: cst.Name) -> None:
    if node.value in KEYWORD_CONSTANTS or node.value in self.local:
      return
    self.references.add(node.value)

  def visit_Attribute(self, node: cst.Attribute) -> Optional[bool]:
    node.value.visit(self)
    return False

  def visit_Arg(self, node: cst.Arg) -> Optional[bool]:
    node.value.visit(self)
    return False

  def visit_Param(self, node: cst.Param) -> Optional[bool]:
    self._visit_all(node.default)
    return False

  def visit_Annotation(self, node: cst.Annotation) -> Optional[bool]:
    return False

  def visit_TypeAlias(self, node: cst.CSTNode) -> Optional[bool]:
    return False

  def visit_FunctionDef(self, node: cst.FunctionDef) -> Optional[bool]:
    for decorator in node.decorators:
      decorator.visit(self)
    self._visit_all(node.params, node.body)
    return False

  def visit_ClassDef(self, node: cst.ClassDef) -> Optional[bool]:
    for decorator in node.decorators:
      decorator.visit(self)
    for arg in (*node.bases, *node.keywords):
      arg.visit(self)
    node.body.visit(self)
    return False

  def visit_Import(self, node: cst.Import) -> Optional[bool]:
    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> Optional[bool]:
    return False

  def visit_Global(self, node: cst.Global) -> Optional[bool]:
    return False

  def visit_Nonlocal(self, node: cst.Nonlocal) -> Optional[bool]:
    return False

  def visit_AssignTarget(self, node: cst.AssignTarget) -> Optional[bool]:
    self._visit_target(node.target)
    return False

  def visit_AnnAssign(self, node: cst.AnnAssign) -> Optional[bool]:
    self._visit_target(node.target)
    self._visit_all(node.value)
    return False

  def visit_For(self, node: cst.For) -> Optional[bool]:
    self._visit_target(node.target)
    self._visit_all(node.iter, node.body, node.orelse)
    return False

  def visit_CompFor(self, node: cst.CompFor) -> Optional[bool]:
    self._visit_target(node.target)
    self._visit_all(node.iter, *node.ifs, node.inner_for_in)
    return False

  def visit_NamedExpr(self, node: cst.NamedExpr) -> Optional[bool]:
    self._visit_target(node.target)
    node.value.visit(self)
    return False

  def visit_WithItem(self, node: cst.WithItem) -> Optional[bool]:
    node.item.visit(self)
    if node.asname is not None:
      self._visit_target(node.asname.name)
    return False

  def visit_ExceptHandler(self, node: cst.ExceptHandler) -> Optional[bool]:
    self._visit_all(node.type, node.body)
    return False

  def visit_ExceptStarHandler(self, node: cst.ExceptStarHandler) -> Optional[bool]:
    self._visit_all(node.type, node.body)
    return False

  def visit_MatchAs(self, node: cst.MatchAs) -> Optional[bool]:
    self._visit_all(node.pattern)
    return False

  def visit_MatchStar(self, node: cst.MatchStar) -> Optional[bool]:
    return False

  def visit_MatchMapping(self, node: cst.MatchMapping) -> Optional[bool]:
    for element in node.elements:
      element.visit(self)
    return False

  def visit_MatchKeywordElement(self, node: cst.MatchKeywordElement) -> Optional[bool]:
    node.pattern.visit(self)
    return False


def collect_local_bindings(node: cst.CSTNode) -> Set[str]:
  """
  Computes the LocalBindingSet of a subtree.

  Args:
      node: Root of the subtree (lambda, function, statement or block).

  Returns:
      Set[str]: Names declared inside the subtree.
  """
  collector = LocalBindingCollector()
  node.visit(collector)
  return collector.bindings - collector.declared_outer


def collect_free_references(node: cst.CSTNode, local: Optional[Iterable[str]] = None) -> Set[str]:
  """
  Computes the FreeReferenceSet of a subtree.

  Args:
      node: Root of the subtree.
      local: Names considered bound. Defaults to the subtree's own local bindings.

  Returns:
      Set[str]: Referenced names not bound inside the subtree.
  """
  if local is None:
    local = collect_local_bindings(node)
  collector = ReferenceCollector(local)
  node.visit(collector)
  return collector.references
