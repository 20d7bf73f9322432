"""
Tests for Dependency Import Analysis.
"""

import libcst as cst
import pytest

from hoist_mocks.core.imports import (
  collect_hoisted_identifiers,
  collect_import_bindings,
  extract_dependency_imports,
  module_key,
  registration_targets,
)


def body(code: str):
  return cst.parse_module(code).body


@pytest.mark.parametrize(
  "specifier, expected",
  [
    ("./a/b.py", ".a.b"),
    ("./a/b", ".a.b"),
    ("../x", "..x"),
    ("./../x", "..x"),
    ("../../pkg/mod.luau", "...pkg.mod"),
    ("./a/index", ".a"),
    ("./pkg/__init__.py", ".pkg"),
    ("pkg.mod", "pkg.mod"),
    (".rel", ".rel"),
    ("@scope/lib", "@scope.lib"),
  ],
)
def test_module_key(specifier, expected, config):
  assert module_key(specifier, config) == expected


def test_registration_targets_cover_every_link(config):
  calls = body('jest.mock("./a").unmock("../b", "x")\n')
  assert registration_targets(calls, config) == {".a", "..b", "x"}


def test_collect_import_bindings_excludes_handle_and_mocked_modules(config):
  code = """
from jest_globals import jest, expect
from .service import fetch
from . import service as svc
from .helpers import make
import pkg.tools
import other as o
from star_module import *
"""
  bindings = collect_import_bindings(body(code), config, {".service"})
  assert bindings == {"make", "pkg", "o"}


def test_collect_hoisted_identifiers(config):
  calls = body('jest.mock(Svc.path, lambda x: helper(x))\n')
  declarations = body("mock_value = build(mock_seed)\n")
  assert collect_hoisted_identifiers(calls, declarations, config) == {"Svc", "helper", "build", "mock_seed"}


def test_extract_dependency_imports_preserves_order(config):
  statements = list(
    body(
      """
from jest_globals import jest
from pkg import Svc
import os
from .f import f
from tools import helper, other
from star import *
value = Svc
"""
    )
  )
  deps, remaining = extract_dependency_imports(statements, {"Svc", "helper", "jest", "value"}, config)
  assert deps == [statements[1], statements[4]]
  assert remaining == [statements[0], statements[2], statements[3], statements[5], statements[6]]
