"""
Hoisting Engine.

Partitions one statement list into ordered groups and re-emits it so that
registration calls run before the code they intercept::

    preamble -> leading_import -> dependency_imports -> mock_prefixed_variables
             -> pure_constant_variables -> registration_calls -> remainder

Supporting declarations are hoisted by two independent rules:

1.  **Naming convention**: constant-style lines (or ``def``) binding only
    ``mock``-prefixed names, reached transitively from the names used by the
    registrations.
2.  **Purity**: constant-style lines with pure initializers whose names are
    referenced by a factory or passed directly to a registration.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

import libcst as cst

from hoist_mocks.analysis.bindings import collect_free_references
from hoist_mocks.analysis.purity import collect_pure_constants
from hoist_mocks.config import HoistConfig
from hoist_mocks.core.calls import is_registration_call, iter_chain_links, statement_call
from hoist_mocks.core.imports import (
  collect_hoisted_identifiers,
  collect_import_bindings,
  extract_dependency_imports,
  registration_targets,
)
from hoist_mocks.core.names import TrackedNames, is_handle_import
from hoist_mocks.core.paths import rewrite_registration_paths
from hoist_mocks.core.resolver import PathResolver
from hoist_mocks.core.statements import (
  collect_rebound_names,
  constant_assignments,
  destructured_names,
  is_docstring,
  is_future_import,
  iter_target_names,
  statement_bindings,
)
from hoist_mocks.core.validation import collect_factory_references, validate_factories
from hoist_mocks.errors import CodePosition

logger = logging.getLogger(__name__)


@dataclass
class HoistGroups:
  """
  Ordered partition of one statement list.
  """

  preamble: List[cst.BaseStatement] = field(default_factory=list)
  leading_import: List[cst.BaseStatement] = field(default_factory=list)
  dependency_imports: List[cst.BaseStatement] = field(default_factory=list)
  mock_prefixed_variables: List[cst.BaseStatement] = field(default_factory=list)
  pure_constant_variables: List[cst.BaseStatement] = field(default_factory=list)
  registration_calls: List[cst.BaseStatement] = field(default_factory=list)
  remainder: List[cst.BaseStatement] = field(default_factory=list)

  def emit(self) -> List[cst.BaseStatement]:
    """Concatenates the groups in emission order."""
    return [
      *self.preamble,
      *self.leading_import,
      *self.dependency_imports,
      *self.mock_prefixed_variables,
      *self.pure_constant_variables,
      *self.registration_calls,
      *self.remainder,
    ]


@dataclass(frozen=True)
class _Candidate:
  statement: cst.BaseStatement
  bound: Tuple[str, ...]
  references: Tuple[str, ...]


def split_preamble(statements: Sequence[cst.BaseStatement]) -> int:
  """
  Returns the length of the leading docstring / ``__future__`` prefix.

  Args:
      statements: The statement list.

  Returns:
      int: Number of statements that must stay first.
  """
  count = 0
  for idx, statement in enumerate(statements):
    if is_docstring(statement, idx) or is_future_import(statement):
      count += 1
    else:
      break
  return count


def collect_argument_names(calls: Sequence[cst.BaseStatement], config: HoistConfig) -> Set[str]:
  """
  Collects bare-name arguments of every link of every registration.

  Args:
      calls: Recognized registration statements.
      config: Active configuration.

  Returns:
      Set[str]: Names passed directly (``jest.mock(mock_path)`` -> ``mock_path``).
  """
  names: Set[str] = set()
  for statement in calls:
    for link in iter_chain_links(statement_call(statement), config):
      for arg in link.call.args:
        if isinstance(arg.value, cst.Name):
          names.add(arg.value.value)
  return names


def _mock_candidate(
  statement: cst.BaseStatement,
  statements: Sequence[cst.BaseStatement],
  reassigned: Set[str],
  config: HoistConfig,
) -> Optional[_Candidate]:
  if isinstance(statement, cst.FunctionDef):
    name = statement.name.value
    if not config.is_mock_name(name) or name in reassigned:
      return None
    refs = collect_free_references(statement)
    return _Candidate(statement, (name,), tuple(sorted(r for r in refs if config.is_mock_name(r))))

  assignments = constant_assignments(statement, statements, reassigned)
  if assignments is None:
    return None

  bound: List[str] = []
  refs: Set[str] = set()
  for target, value in assignments:
    names = destructured_names(target)
    if names is None or not all(config.is_mock_name(n) for n in names):
      return None
    bound.extend(names)
    refs.update(collect_free_references(value))

  return _Candidate(statement, tuple(bound), tuple(sorted(r for r in refs if config.is_mock_name(r))))


def close_mock_declarations(
  statements: Sequence[cst.BaseStatement],
  candidates_from: Sequence[cst.BaseStatement],
  seeds: Set[str],
  reassigned: Set[str],
  config: HoistConfig,
) -> List[cst.BaseStatement]:
  """
  Computes the transitive closure of mock-prefixed supporting declarations.

  Args:
      statements: The whole statement list (for rebinding checks).
      candidates_from: Statements still unclaimed, in order.
      seeds: Mock-prefixed names used by the registrations.
      reassigned: Names bound more than once in the list.
      config: Active configuration.

  Returns:
      List[cst.BaseStatement]: Hoisted declarations, in original order.
  """
  candidates = []
  for statement in candidates_from:
    candidate = _mock_candidate(statement, statements, reassigned, config)
    if candidate is not None:
      candidates.append(candidate)

  hoisted_names = set(seeds)
  claimed: Set[int] = set()
  changed = True
  while changed:
    changed = False
    for idx, candidate in enumerate(candidates):
      if idx in claimed or not hoisted_names.intersection(candidate.bound):
        continue
      claimed.add(idx)
      hoisted_names.update(candidate.references)
      changed = True

  return [candidate.statement for idx, candidate in enumerate(candidates) if idx in claimed]


def select_pure_constants(
  candidates_from: Sequence[cst.BaseStatement],
  statements: Sequence[cst.BaseStatement],
  pure_constants: Set[str],
  referenced: Set[str],
  reassigned: Set[str],
) -> List[cst.BaseStatement]:
  """
  Selects pure constant lines referenced by a factory or a call argument.

  Args:
      candidates_from: Statements still unclaimed, in order.
      statements: The whole statement list.
      pure_constants: PureConstant set of the list.
      referenced: Names referenced by factories or passed as arguments.
      reassigned: Names bound more than once in the list.

  Returns:
      List[cst.BaseStatement]: Hoisted constant lines, in original order.
  """
  selected = []
  for statement in candidates_from:
    assignments = constant_assignments(statement, statements, reassigned)
    if assignments is None:
      continue
    bound = [n.value for target, _ in assignments for n in iter_target_names(target)]
    if bound and all(n in pure_constants for n in bound) and any(n in referenced for n in bound):
      selected.append(statement)
  return selected


def partition_statements(
  statements: Sequence[cst.BaseStatement],
  names: TrackedNames,
  config: HoistConfig,
  resolver: Optional[PathResolver] = None,
  filename: Optional[str] = None,
  positions: Optional[Sequence[Optional[CodePosition]]] = None,
) -> Optional[HoistGroups]:
  """
  Partitions a statement list into hoist groups.

  Args:
      statements: The statement list.
      names: Effective tracked names of this list.
      config: Active configuration.
      resolver: Optional resolver for non-relative module paths.
      filename: File being transformed, for diagnostics and the resolver.
      positions: Source positions aligned with ``statements``.

  Returns:
      Optional[HoistGroups]: The groups, or None when the list holds no
      registration call.

  Raises:
      FactoryScopeError: If a factory references an out-of-scope name.
  """
  if not names:
    return None

  groups = HoistGroups()
  preamble_length = split_preamble(statements)
  groups.preamble = list(statements[:preamble_length])

  calls: List[cst.BaseStatement] = []
  call_positions: List[Optional[CodePosition]] = []
  rest: List[cst.BaseStatement] = []
  for idx in range(preamble_length, len(statements)):
    statement = statements[idx]
    if is_handle_import(statement, config):
      groups.leading_import.append(statement)
    elif is_registration_call(statement, names, config):
      calls.append(statement)
      call_positions.append(positions[idx] if positions is not None else None)
    else:
      rest.append(statement)

  if not calls:
    return None

  reassigned = collect_rebound_names(statements)
  pure_constants = collect_pure_constants(statements, reassigned)
  import_allowed = collect_import_bindings(statements, config, registration_targets(calls, config))
  # Rewriter globals only stand for the platform objects while the list leaves them unbound.
  bound = {name for statement in statements for name in statement_bindings(statement)}
  rewriter_globals = config.rewriter_globals - bound
  allowed = config.allowed_identifiers | names.roots | rewriter_globals | import_allowed

  for statement, position in zip(calls, call_positions):
    validate_factories(statement, config, allowed, pure_constants, position=position, filename=filename)

  factory_refs = collect_factory_references(calls, config)
  argument_names = collect_argument_names(calls, config)
  seeds = {n for n in factory_refs | argument_names if config.is_mock_name(n)}

  groups.mock_prefixed_variables = close_mock_declarations(statements, rest, seeds, reassigned, config)
  claimed = {id(s) for s in groups.mock_prefixed_variables}
  unclaimed = [s for s in rest if id(s) not in claimed]

  groups.pure_constant_variables = select_pure_constants(
    unclaimed, statements, pure_constants, factory_refs | argument_names, reassigned
  )
  claimed.update(id(s) for s in groups.pure_constant_variables)
  unclaimed = [s for s in unclaimed if id(s) not in claimed]

  groups.registration_calls = [
    rewrite_registration_paths(statement, names, config, resolver, filename) for statement in calls
  ]

  identifiers = collect_hoisted_identifiers(
    groups.registration_calls,
    groups.mock_prefixed_variables + groups.pure_constant_variables,
    config,
  )
  groups.dependency_imports, groups.remainder = extract_dependency_imports(unclaimed, identifiers, config)

  logger.debug(
    "Hoisting %d registration(s) with %d mock declaration(s), %d constant(s), %d dependency import(s)",
    len(groups.registration_calls),
    len(groups.mock_prefixed_variables),
    len(groups.pure_constant_variables),
    len(groups.dependency_imports),
  )
  return groups
