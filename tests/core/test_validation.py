"""
Tests for Module Factory Validation.

Verifies:
1.  Allowed identifiers, mock-prefixed and coverage names pass.
2.  Pure constants and import bindings of the list pass.
3.  Anything else raises FactoryScopeError with call-site details.
4.  Unmock links are never validated.
"""

import textwrap

import libcst as cst
import pytest

from hoist_mocks.config import HoistConfig
from hoist_mocks.core.engine import hoist_code
from hoist_mocks.core.validation import is_allowed_reference, validate_factories
from hoist_mocks.errors import CodePosition, FactoryScopeError


def hoist(code: str, **kwargs) -> str:
  return hoist_code(textwrap.dedent(code), **kwargs)


@pytest.mark.parametrize(
  "name",
  ["expect", "jest", "Ellipsis", "NotImplemented", "mock_thing", "MockThing", "MOCK", "cov_1a2b", "__cov_abc"],
)
def test_allowed_references(name, config):
  assert is_allowed_reference(name, config, config.allowed_identifiers, set())


@pytest.mark.parametrize("name", ["some_var", "_mock", "recover", "undefined"])
def test_disallowed_references(name, config):
  assert not is_allowed_reference(name, config, config.allowed_identifiers, set())


def test_pure_constant_reference_is_allowed(config):
  assert is_allowed_reference("VALUE", config, frozenset(), {"VALUE"})


def test_validate_factories_reports_details(config):
  statement = cst.parse_statement('jest.mock("./f", lambda: some_var)\n')
  with pytest.raises(FactoryScopeError) as exc:
    validate_factories(statement, config, config.allowed_identifiers, set(), CodePosition(4, 0), "test_service.py")

  err = exc.value
  assert err.invalid_name == "some_var"
  assert err.module_path == "./f"
  assert err.position == CodePosition(4, 0)
  assert "jest.mock(./f) at test_service.py:4" in str(err)
  assert "Invalid variable access: some_var" in str(err)


def test_first_invalid_name_is_reported_in_sorted_order(config):
  statement = cst.parse_statement('jest.mock("./f", lambda: zeta + alpha)\n')
  with pytest.raises(FactoryScopeError) as exc:
    validate_factories(statement, config, config.allowed_identifiers, set())
  assert exc.value.invalid_name == "alpha"


def test_validation_fires_through_transform():
  code = """
  from jest_globals import jest
  jest.mock("./f", lambda: some_var)
  """
  with pytest.raises(FactoryScopeError) as exc:
    hoist(code, filename="test_f.py")
  assert exc.value.invalid_name == "some_var"
  assert exc.value.filename == "test_f.py"
  assert exc.value.position.line == 3


def test_mock_prefixed_reference_passes():
  code = """
  from jest_globals import jest
  jest.mock("./f", lambda: mock_thing)
  """
  assert "lambda: mock_thing" in hoist(code)


def test_factory_locals_are_not_free():
  code = """
  from jest_globals import jest
  jest.mock("./f", lambda: {k: v for k, v in [("a", 1)]})
  """
  hoist(code)


def test_unmock_links_are_not_validated():
  code = """
  from jest_globals import jest
  jest.unmock("./f", lambda: some_var)
  """
  hoist(code)


def test_impure_constant_is_rejected():
  code = """
  from jest_globals import jest
  OTHER = load()
  jest.mock("./config", lambda: {"value": OTHER})
  """
  with pytest.raises(FactoryScopeError) as exc:
    hoist(code)
  assert exc.value.invalid_name == "OTHER"


def test_import_binding_of_unmocked_module_is_allowed():
  code = """
  from jest_globals import jest
  from .helpers import make_double
  jest.mock("./service", lambda: make_double())
  """
  hoist(code)


def test_import_binding_of_mocked_module_is_rejected():
  code = """
  from jest_globals import jest
  from .service import fetch
  jest.mock("./service", lambda: fetch)
  """
  with pytest.raises(FactoryScopeError) as exc:
    hoist(code)
  assert exc.value.invalid_name == "fetch"


def test_handle_module_bindings_are_not_import_allowed():
  code = """
  from jest_globals import jest, describe
  jest.mock("./service", lambda: describe)
  """
  with pytest.raises(FactoryScopeError):
    hoist(code)


def test_custom_allow_list():
  code = """
  from jest_globals import jest
  jest.mock("./f", lambda: helper)
  """
  config = HoistConfig(allowed_identifiers=frozenset({"jest", "helper"}))
  assert "lambda: helper" in hoist(code, config=config)


def test_validation_error_aborts_whole_file():
  code = """
  from jest_globals import jest
  from .a import a
  jest.mock("./a")

  def test_inner():
      jest.mock("./b", lambda: captured)
  """
  with pytest.raises(FactoryScopeError) as exc:
    hoist(code)
  assert exc.value.invalid_name == "captured"


def test_keyword_factory_is_validated():
  code = """
  from jest_globals import jest
  from .a import a
  some_var = make()
  jest.mock("./a", factory=lambda: some_var)
  """
  with pytest.raises(FactoryScopeError) as exc:
    hoist(code)
  assert exc.value.invalid_name == "some_var"
  assert exc.value.module_path == "./a"


def test_rewriter_global_bound_by_the_list_is_rejected():
  code = """
  from jest_globals import jest
  game = make_game()
  jest.mock("./a", lambda: game)
  """
  with pytest.raises(FactoryScopeError) as exc:
    hoist(code)
  assert exc.value.invalid_name == "game"


def test_unbound_rewriter_globals_pass():
  code = """
  from jest_globals import jest
  jest.mock("./a", lambda: game.GetService("Players"))
  """
  assert 'lambda: game.GetService("Players")' in hoist(code)


def test_named_factory_function_is_rejected():
  code = """
  from jest_globals import jest
  from .a import a
  def factory():
      return {}
  jest.mock("./a", factory)
  """
  with pytest.raises(FactoryScopeError) as exc:
    hoist(code)
  assert exc.value.invalid_name == "factory"


def test_built_factory_references_are_validated():
  code = """
  from jest_globals import jest
  jest.mock("./a", make_factory(mock_value))
  """
  with pytest.raises(FactoryScopeError) as exc:
    hoist(code)
  assert exc.value.invalid_name == "make_factory"
