"""
hoist-mocks Package.

A LibCST pass that moves test-double registrations (``jest.mock(...)`` /
``jest.unmock(...)``) ahead of the imports they intercept, together with the
mock-prefixed and constant declarations they depend on.

Usage
-----

Simple String Conversion
^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import hoist_mocks
    code = '''
    from jest_globals import jest
    from .service import fetch
    jest.mock("./service")
    '''
    print(hoist_mocks.hoist_code(code))
    # from jest_globals import jest
    # jest.mock(script.Parent.service)
    # from .service import fetch

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from hoist_mocks import HoistConfig, HoistEngine

    engine = HoistEngine(HoistConfig(handle_module="pkg.globals"))
    res = engine.run(code, filename="test_service.py")

    if res.success:
        print(res.code)
    else:
        print(f"Errors: {res.errors}")
"""

from hoist_mocks.config import HoistConfig
from hoist_mocks.core.engine import HoistEngine, HoistResult, hoist_code, transform
from hoist_mocks.core.resolver import PathResolver, StaticPathResolver
from hoist_mocks.errors import CodePosition, ConfigError, FactoryScopeError, HoistError

__version__ = "0.0.1"

__all__ = [
  "CodePosition",
  "ConfigError",
  "FactoryScopeError",
  "HoistConfig",
  "HoistEngine",
  "HoistError",
  "HoistResult",
  "PathResolver",
  "StaticPathResolver",
  "hoist_code",
  "transform",
  "__version__",
]
