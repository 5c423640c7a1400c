"""
modconfig - schema-validated configuration for plugin modules

Independently developed modules of a plugin-based application declare
typed configuration schemas; the host application, a deployment-provided
config file, and runtime overrides supply values. modconfig merges those
sources, validates each module's slice against its schema, and fills in
defaults before handing the config to the module.

modconfig provides:
  - Declarative nested-dict schemas with defaults and validator functions
  - Nested objects, arbitrary-keyed dictionaries and arrays of sub-schemas
  - Deep "last wins" merging of any number of config sources
  - Advisory validation: problems are logged, resolution keeps going
  - A one-shot, lazily loaded deployment config file (path or URL)
  - A small CLI for checking configs before deployment

Quick Start
-----------
    from modconfig import ConfigEngine

    engine = ConfigEngine()
    engine.declare_schema("foo-module", {"foo": {"default": "qux"}})
    engine.provide({"foo-module": {"foo": "bar"}})
    config = await engine.get_config("foo-module")  # {"foo": "bar"}

Package Structure
-----------------
engine : module
    ConfigEngine and the global-engine convenience functions.
schema : module
    Schema node variants and the declaration parser.
merge : module
    Deep merging of config sources.
validation : module
    Advisory validation of merged configs.
defaults : module
    Default interpolation.
loader : module
    External config source providers and the one-shot loader.
navigation : module
    Template interpolation for configurable links.
cli : module
    Command-line interface with argparse.

For more details, see the individual module docstrings.
"""

__version__ = "0.1.0"
__description__ = "Schema-validated configuration for plugin modules"

# Re-export commonly used names for convenience
from modconfig.engine import (
    ConfigEngine,
    clear_all,
    define_config_schema,
    get_config,
    get_devtools_config,
    get_global_engine,
    process_config,
    provide,
    set_global_engine,
)
from modconfig.exceptions import (
    ConfigError,
    ConfigSchemaError,
    ExternalLoadError,
    ModConfigError,
    SchemaNotDeclaredError,
)
from modconfig.loader import EnvironmentProvider, ImportMapProvider, NullProvider
from modconfig.navigation import interpolate_string, navigate
from modconfig.results import Diagnostic, ResolveResult

__all__ = [
    "__version__",
    "__description__",
    "ConfigEngine",
    "clear_all",
    "define_config_schema",
    "get_config",
    "get_devtools_config",
    "get_global_engine",
    "process_config",
    "provide",
    "set_global_engine",
    "ModConfigError",
    "ConfigError",
    "ConfigSchemaError",
    "ExternalLoadError",
    "SchemaNotDeclaredError",
    "EnvironmentProvider",
    "ImportMapProvider",
    "NullProvider",
    "interpolate_string",
    "navigate",
    "Diagnostic",
    "ResolveResult",
]
