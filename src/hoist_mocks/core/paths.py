"""
Module Path Rewriting.

String-literal module paths passed to hoisted registrations are rewritten into
platform path expressions:

- ``"./a/b"`` -> ``script.Parent.a.b``
- ``"../x"`` -> ``script.Parent.Parent.x``
- ``"./my-mod"`` -> ``script.Parent["my-mod"]``
- ``"@pkg/lib"`` (via a resolver) ->
  ``cast("ModuleScript", game.GetService("ReplicatedStorage").FindFirstChild("lib"))``

Relative rewriting is purely syntactic. Non-relative rewriting goes through an
optional resolver and leaves the literal alone on any miss.
"""

import keyword
import logging
from typing import List, Optional, Sequence

import libcst as cst

from hoist_mocks.config import HoistConfig
from hoist_mocks.core.calls import is_actual_call, is_registration_receiver
from hoist_mocks.core.imports import strip_extension
from hoist_mocks.core.names import TrackedNames
from hoist_mocks.core.resolver import PathResolver, safe_resolve
from hoist_mocks.core.statements import evaluated_string

logger = logging.getLogger(__name__)


def string_literal(value: str) -> cst.SimpleString:
  """Builds a double-quoted string literal node."""
  escaped = value.replace("\\", "\\\\").replace('"', '\\"')
  return cst.SimpleString(f'"{escaped}"')


def is_member_segment(segment: str) -> bool:
  """Checks whether a path segment can be written as ``.segment``."""
  return segment.isidentifier() and not keyword.iskeyword(segment)


def _access(base: cst.BaseExpression, segment: str) -> cst.BaseExpression:
  if is_member_segment(segment):
    return cst.Attribute(value=base, attr=cst.Name(segment))
  return cst.Subscript(
    value=base,
    slice=[cst.SubscriptElement(slice=cst.Index(value=string_literal(segment)))],
  )


def rewrite_relative_path(specifier: str, config: HoistConfig) -> Optional[cst.BaseExpression]:
  """
  Converts a relative module specifier into an anchor-rooted member chain.

  Args:
      specifier: The literal's value; must start with ``.``.
      config: Active configuration.

  Returns:
      Optional[cst.BaseExpression]: The path expression, or None when the
      specifier is not relative or addresses no child at all (``"./index"``).
  """
  if not specifier.startswith("."):
    return None

  segments = strip_extension(specifier.rstrip("/"), config.strippable_extensions).split("/")

  base: cst.BaseExpression = cst.Attribute(value=cst.Name(config.anchor_name), attr=cst.Name(config.parent_name))
  index = 0
  while index < len(segments) and segments[index] in (".", ".."):
    if segments[index] == "..":
      base = cst.Attribute(value=base, attr=cst.Name(config.parent_name))
    index += 1

  rest = [segment for segment in segments[index:] if segment]
  if rest and rest[-1] in config.index_segments:
    rest = rest[:-1]
  if not rest:
    return None

  for segment in rest:
    base = _access(base, segment)
  return base


def platform_path_expression(segments: Sequence[str], config: HoistConfig) -> Optional[cst.BaseExpression]:
  """
  Builds a service lookup followed by one existence probe per extra segment.

  Args:
      segments: Platform path, service name first.
      config: Active configuration.

  Returns:
      Optional[cst.BaseExpression]: The (possibly cast-wrapped) chain, or None
      for an empty path.
  """
  if not segments:
    return None

  chain: cst.BaseExpression = cst.Call(
    func=cst.Attribute(value=cst.Name(config.service_root), attr=cst.Name(config.service_method)),
    args=[cst.Arg(string_literal(segments[0]))],
  )
  for segment in segments[1:]:
    chain = cst.Call(
      func=cst.Attribute(value=chain, attr=cst.Name(config.probe_method)),
      args=[cst.Arg(string_literal(segment))],
    )

  if len(segments) == 1:
    return chain
  return cst.Call(
    func=cst.Name(config.assertion_function),
    args=[cst.Arg(string_literal(config.assertion_type)), cst.Arg(chain)],
  )


def rewrite_path_argument(
  node: cst.BaseExpression,
  config: HoistConfig,
  resolver: Optional[PathResolver] = None,
  filename: Optional[str] = None,
) -> Optional[cst.BaseExpression]:
  """
  Rewrites one module-path argument.

  Args:
      node: The argument expression.
      config: Active configuration.
      resolver: Optional resolver for non-relative specifiers.
      filename: File containing the call, passed to the resolver.

  Returns:
      Optional[cst.BaseExpression]: The replacement, or None to keep ``node``.
  """
  specifier = evaluated_string(node)
  if specifier is None:
    return None
  if specifier.startswith("."):
    return rewrite_relative_path(specifier, config)

  segments = safe_resolve(resolver, specifier, filename, config)
  if segments is None:
    return None
  return platform_path_expression(segments, config)


class PathArgumentRewriter(cst.CSTTransformer):
  """
  Rewrites the first argument of registration links and actual-module calls.
  """

  def __init__(
    self,
    names: TrackedNames,
    config: HoistConfig,
    resolver: Optional[PathResolver] = None,
    filename: Optional[str] = None,
  ):
    super().__init__()
    self.names = names
    self.config = config
    self.resolver = resolver
    self.filename = filename
    self.rewritten: List[str] = []

  def _is_path_call(self, node: cst.Call) -> bool:
    if is_actual_call(node, self.names, self.config):
      return True
    return (
      isinstance(node.func, cst.Attribute)
      and node.func.attr.value in self.config.hoist_methods
      and is_registration_receiver(node.func.value, self.names, self.config)
    )

  def leave_Call(self, original_node: cst.Call, updated_node: cst.Call) -> cst.BaseExpression:
    if not updated_node.args or not self._is_path_call(original_node):
      return updated_node

    first = updated_node.args[0]
    if first.keyword is not None or first.star:
      return updated_node

    replacement = rewrite_path_argument(first.value, self.config, self.resolver, self.filename)
    if replacement is None:
      return updated_node

    self.rewritten.append(evaluated_string(first.value))
    return updated_node.with_changes(args=[first.with_changes(value=replacement), *updated_node.args[1:]])


def rewrite_registration_paths(
  statement: cst.BaseStatement,
  names: TrackedNames,
  config: HoistConfig,
  resolver: Optional[PathResolver] = None,
  filename: Optional[str] = None,
) -> cst.BaseStatement:
  """
  Applies path rewriting to a hoisted registration statement.

  Args:
      statement: A recognized registration statement.
      names: Tracked names of the containing list.
      config: Active configuration.
      resolver: Optional resolver for non-relative specifiers.
      filename: File being transformed.

  Returns:
      cst.BaseStatement: The rewritten statement (the same object if nothing
      was rewritten).
  """
  rewriter = PathArgumentRewriter(names, config, resolver, filename)
  result = statement.visit(rewriter)
  if not rewriter.rewritten:
    return statement
  logger.debug("Rewrote module paths: %s", ", ".join(rewriter.rewritten))
  return result
