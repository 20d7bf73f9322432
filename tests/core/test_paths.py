"""
Tests for Module Path Rewriting and Resolution.

Verifies:
1.  Relative specifiers become anchor-rooted member chains.
2.  Resolved package specifiers become service lookups with probes.
3.  Resolution is fail-open: misses and resolver errors keep the literal.
"""

import libcst as cst
import pytest

from hoist_mocks.config import HoistConfig
from hoist_mocks.core.names import TrackedNames
from hoist_mocks.core.paths import (
  platform_path_expression,
  rewrite_path_argument,
  rewrite_registration_paths,
  rewrite_relative_path,
)
from hoist_mocks.core.resolver import StaticPathResolver, safe_resolve

NAMES = TrackedNames(frozenset({"jest"}))


def render(node: cst.CSTNode) -> str:
  return cst.Module([]).code_for_node(node)


class ExplodingResolver:
  def resolve(self, specifier, containing_file):
    raise RuntimeError("boom")


@pytest.mark.parametrize(
  "specifier, expected",
  [
    ("./a/b/c", "script.Parent.a.b.c"),
    ("../x", "script.Parent.Parent.x"),
    ("../../x/y", "script.Parent.Parent.Parent.x.y"),
    ("./my-mod", 'script.Parent["my-mod"]'),
    ("./class", 'script.Parent["class"]'),
    ("./a/index", "script.Parent.a"),
    ("./a/__init__.py", "script.Parent.a"),
    ("./a/b.py", "script.Parent.a.b"),
    ("./util.luau", "script.Parent.util"),
    ("./a/", "script.Parent.a"),
    ("./2fa", 'script.Parent["2fa"]'),
  ],
)
def test_relative_rewrite(specifier, expected, config):
  assert render(rewrite_relative_path(specifier, config)) == expected


@pytest.mark.parametrize("specifier", ["./index", "./", "..", "pkg", "@scope/pkg"])
def test_relative_rewrite_leaves_literal(specifier, config):
  assert rewrite_relative_path(specifier, config) is None


def test_custom_anchor_names():
  config = HoistConfig(anchor_name="this_module", parent_name="parent")
  assert render(rewrite_relative_path("../x", config)) == "this_module.parent.parent.x"


def test_platform_path_expression(config):
  assert render(platform_path_expression(["ReplicatedStorage"], config)) == 'game.GetService("ReplicatedStorage")'
  assert render(platform_path_expression(["ReplicatedStorage", "Packages", "lib"], config)) == (
    'cast("ModuleScript", game.GetService("ReplicatedStorage").FindFirstChild("Packages").FindFirstChild("lib"))'
  )
  assert platform_path_expression([], config) is None


def test_static_resolver_longest_prefix():
  resolver = StaticPathResolver({"@pkg": ["ReplicatedStorage", "pkg"], "@pkg/lib/": ["ServerStorage", "lib"]})
  assert resolver.resolve("@pkg/lib/util", None) == ["ServerStorage", "lib", "util"]
  assert resolver.resolve("@pkg/other", None) == ["ReplicatedStorage", "pkg", "other"]
  assert resolver.resolve("@pkg", None) == ["ReplicatedStorage", "pkg"]
  assert resolver.resolve("@pkgs", None) is None


def test_static_resolver_from_config():
  assert StaticPathResolver.from_config(HoistConfig()) is None
  config = HoistConfig(package_paths={"@pkg": ["ReplicatedStorage"]})
  assert StaticPathResolver.from_config(config).resolve("@pkg", "test_service.py") == ["ReplicatedStorage"]


def test_safe_resolve_is_fail_open(config):
  assert safe_resolve(None, "@pkg", None, config) is None
  assert safe_resolve(ExplodingResolver(), "@pkg", None, config) is None


def test_safe_resolve_strips_index_segments(config):
  resolver = StaticPathResolver({"@pkg": ["ReplicatedStorage", "pkg", "init.lua"], "@x": ["index"]})
  assert safe_resolve(resolver, "@pkg", None, config) == ["ReplicatedStorage", "pkg"]
  assert safe_resolve(resolver, "@x", None, config) is None


def test_rewrite_path_argument_shapes(config):
  resolver = StaticPathResolver({"@pkg": ["ReplicatedStorage", "pkg"]})
  assert rewrite_path_argument(cst.parse_expression("path_var"), config, resolver) is None
  assert rewrite_path_argument(cst.parse_expression('f"./{x}"'), config, resolver) is None
  assert rewrite_path_argument(cst.parse_expression('"@other"'), config, resolver) is None
  assert rewrite_path_argument(cst.parse_expression('"@pkg"'), config, ExplodingResolver()) is None
  assert render(rewrite_path_argument(cst.parse_expression('"@pkg"'), config, resolver)) == (
    'cast("ModuleScript", game.GetService("ReplicatedStorage").FindFirstChild("pkg"))'
  )


def test_rewrite_registration_paths_covers_chain_and_actual_calls(config):
  statement = cst.parse_statement('jest.mock("./a", lambda: jest.require_actual("./a")).unmock("../b")\n')
  result = rewrite_registration_paths(statement, NAMES, config)
  assert render(result).strip() == (
    "jest.mock(script.Parent.a, lambda: jest.require_actual(script.Parent.a)).unmock(script.Parent.Parent.b)"
  )


def test_rewrite_registration_paths_keeps_unrelated_calls(config):
  statement = cst.parse_statement('jest.mock("./a", lambda: other.require_actual("./a"))\n')
  result = rewrite_registration_paths(statement, NAMES, config)
  assert 'other.require_actual("./a")' in render(result)


def test_rewrite_registration_paths_returns_same_node_without_literals(config):
  statement = cst.parse_statement("jest.mock(script.Parent.a)\n")
  assert rewrite_registration_paths(statement, NAMES, config) is statement
