"""
Tests for Registration Call Recognition.
"""

import libcst as cst
import pytest

from hoist_mocks.config import HoistConfig
from hoist_mocks.core.calls import (
  collect_factories,
  is_actual_call,
  is_registration_call,
  iter_chain_links,
  statement_call,
)
from hoist_mocks.core.names import TrackedNames

NAMES = TrackedNames(frozenset({"jest", "h"}), frozenset({"JG", "pkg.globals"}))


def statement(code: str) -> cst.BaseStatement:
  return cst.parse_statement(code + "\n")


@pytest.mark.parametrize(
  "code",
  [
    'jest.mock("./a")',
    'h.unmock("./a")',
    'JG.jest.mock("./a")',
    'pkg.globals.jest.mock("./a")',
    'jest.mock("./a").unmock("./b").mock("./c")',
    'jest.mock("./a", lambda: {})',
  ],
)
def test_recognized_registrations(code, config):
  assert is_registration_call(statement(code), NAMES, config)


@pytest.mark.parametrize(
  "code",
  [
    'other.mock("./a")',
    "jest.fn()",
    "jest.mock",
    'JG.other.mock("./a")',
    'result = jest.mock("./a")',
    'jest.mock("./a"); jest.mock("./b")',
    'jest.fn().mock("./a")',
    'jest.mock("./a").fn()',
  ],
)
def test_rejected_shapes(code, config):
  assert not is_registration_call(statement(code), NAMES, config)


def test_nothing_is_recognized_without_tracked_names(config):
  assert not is_registration_call(statement('jest.mock("./a")'), TrackedNames(), config)


def test_chain_links_run_outermost_first(config):
  call = statement_call(statement('jest.unmock("./a").mock("./b")'))
  links = list(iter_chain_links(call, config))
  assert [link.method for link in links] == ["mock", "unmock"]
  assert [link.path_argument.evaluated_value for link in links] == ["./b", "./a"]


def test_collect_factories_only_from_mock_links(config):
  stmt = statement('jest.mock("./a", lambda: mock_a).unmock("./b").mock(path, lambda: mock_c)')
  factories = collect_factories(stmt, config)
  assert [f.module_path for f in factories] == [None, "./a"]
  assert all(isinstance(f.factory, cst.Lambda) for f in factories)


def test_named_function_is_collected_as_factory(config):
  factories = collect_factories(statement('jest.mock("./a", mock_factory)'), config)
  assert [(f.factory.value, f.module_path) for f in factories] == [("mock_factory", "./a")]


def test_keyword_factory(config):
  factories = collect_factories(statement('jest.mock("./a", factory=lambda: mock_a)'), config)
  assert len(factories) == 1
  assert isinstance(factories[0].factory, cst.Lambda)
  assert factories[0].module_path == "./a"


def test_unrelated_keyword_is_not_a_factory(config):
  assert collect_factories(statement('jest.mock("./a", virtual=True)'), config) == []


def test_keyword_path_is_not_a_module_path(config):
  stmt = statement('jest.mock(name="./a", factory=lambda: mock_a)')
  (link,) = iter_chain_links(statement_call(stmt), config)
  assert link.path_argument is None
  assert collect_factories(stmt, config)[0].module_path is None


def test_actual_call_recognition(config):
  assert is_actual_call(cst.parse_expression('jest.require_actual("./a")'), NAMES, config)
  assert is_actual_call(cst.parse_expression('JG.jest.require_actual("./a")'), NAMES, config)
  assert not is_actual_call(cst.parse_expression('other.require_actual("./a")'), NAMES, config)


def test_custom_methods():
  config = HoistConfig(hoist_methods=("doMock",), factory_method="doMock")
  assert is_registration_call(statement('jest.doMock("./a")'), NAMES, config)
  assert not is_registration_call(statement('jest.mock("./a")'), NAMES, config)
