"""
Runtime Configuration Store.

Holds every tunable of the hoisting pass as an immutable pydantic model.
The configuration is passed explicitly into each entry point; there is no
process-wide registry of allowed names or patterns.

Values can be declared in ``pyproject.toml``:

.. code-block:: toml

    [tool.hoist_mocks]
    handle_module = "jest_globals"
    allowed_identifiers = ["expect", "jest", "Ellipsis"]

    [tool.hoist_mocks.package_paths]
    "@pkg/lib" = ["ReplicatedStorage", "Packages", "lib"]
"""

import re
import tomllib
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Pattern, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hoist_mocks.errors import ConfigError

DEFAULT_ALLOWED_IDENTIFIERS: FrozenSet[str] = frozenset({"expect", "jest", "Ellipsis", "NotImplemented", "__debug__"})


class HoistConfig(BaseModel):
  """
  Configuration container for the hoisting pass.
  """

  model_config = ConfigDict(frozen=True)

  handle_module: str = Field("jest_globals", description="Module specifier that exports the test-framework handle.")
  handle_name: str = Field("jest", description="Conventional name of the handle exported by that module.")
  hoist_methods: Tuple[str, ...] = Field(("mock", "unmock"), description="Registration methods that get hoisted.")
  factory_method: str = Field("mock", description="The registration method whose second argument is a factory.")
  factory_keyword: str = Field("factory", description="Keyword under which a factory may be passed instead.")
  actual_method: str = Field("require_actual", description="Method that loads the real implementation of a module.")
  allowed_identifiers: FrozenSet[str] = Field(
    default=DEFAULT_ALLOWED_IDENTIFIERS,
    description="Free names a module factory may always reference.",
  )
  mock_prefix: str = Field("^mock", description="Case-insensitive pattern of names that may be hoisted with a mock.")
  coverage_pattern: str = Field(r"^(?:__)?cov", description="Names injected by coverage instrumentation.")

  strippable_extensions: Tuple[str, ...] = Field((".py", ".pyi", ".pyw", ".lua", ".luau"))
  index_segments: Tuple[str, ...] = Field(("index", "__init__"), description="Segments denoting the containing unit.")
  anchor_name: str = Field("script", description="Global naming the current module instance.")
  parent_name: str = Field("Parent", description="Member traversing to the parent container.")
  service_root: str = Field("game", description="Global used for service lookups.")
  service_method: str = Field("GetService")
  probe_method: str = Field("FindFirstChild")
  assertion_function: str = Field("cast", description="Function used as a type assertion around probe chains.")
  assertion_type: str = Field("ModuleScript")
  package_paths: Dict[str, List[str]] = Field(
    default_factory=dict,
    description="Static specifier prefix -> platform path segments mapping.",
  )

  @field_validator("mock_prefix", "coverage_pattern")
  @classmethod
  def validate_pattern(cls, v: str) -> str:
    """
    Ensures a pattern compiles.

    Args:
        v (str): The regular expression source.

    Returns:
        str: The unchanged pattern.

    Raises:
        ValueError: If the pattern is not a valid regular expression.
    """
    try:
      re.compile(v)
    except re.error as e:
      raise ValueError(f"Invalid pattern '{v}': {e}") from e
    return v

  @field_validator("hoist_methods")
  @classmethod
  def validate_methods(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
    """Rejects an empty set of registration methods."""
    if not v:
      raise ValueError("hoist_methods must name at least one method")
    return v

  @property
  def mock_prefix_re(self) -> Pattern[str]:
    """The compiled, case-insensitive mock prefix."""
    return re.compile(self.mock_prefix, re.IGNORECASE)

  @property
  def coverage_re(self) -> Pattern[str]:
    """The compiled coverage-instrumentation pattern."""
    return re.compile(self.coverage_pattern)

  @property
  def rewriter_globals(self) -> FrozenSet[str]:
    """Root names introduced into call arguments by the path rewriter."""
    return frozenset({self.anchor_name, self.service_root, self.assertion_function})

  def is_mock_name(self, name: str) -> bool:
    """
    Checks a name against the mock prefix.

    Args:
        name: Identifier to check.

    Returns:
        bool: True if the name may be hoisted along with a registration.
    """
    return self.mock_prefix_re.match(name) is not None

  @classmethod
  def load(cls, search_path: Optional[Path] = None, **overrides: Any) -> "HoistConfig":
    """
    Loads configuration from pyproject.toml and applies explicit overrides.

    Overrides whose value is None are ignored, so CLI flags can be passed through
    unconditionally.

    Args:
        search_path (Optional[Path]): Directory to start searching for TOML config.
        **overrides: Field values taking precedence over the TOML section.

    Returns:
        HoistConfig: The fully resolved configuration object.

    Raises:
        ConfigError: If the merged values fail validation.
    """
    toml_config, _ = _load_toml_settings(search_path or Path.cwd())
    merged = {**toml_config, **{k: v for k, v in overrides.items() if v is not None}}
    try:
      return cls.model_validate(merged)
    except ValidationError as e:
      raise ConfigError(f"Configuration validation failed: {e}") from e


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches the start path and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.

  Raises:
      ConfigError: If the nearest pyproject.toml is not valid TOML.
  """
  current = start_path.resolve()
  if current.is_file():
    current = current.parent

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Cannot parse {toml_path}: {e}") from e

      return data.get("tool", {}).get("hoist_mocks", {}), parent

  return {}, None
