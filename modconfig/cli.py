# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for modconfig.

This module provides the main CLI entry point for the modconfig tool, which
resolves plugin configuration the same way an application would and prints
the result. Useful for checking a deployment config file before shipping it.

Commands:

    resolve: Resolve and validate module configs, print them with diagnostics
    devtools: Print every module's config without validating

Example:
    Resolve every module a plugin declares, with a deployment file:
        ```bash
        $ modconfig resolve --plugin myapp.plugins.home \\
            --config-file deploy/config.yaml
        ```

    Resolve one module with local overrides:
        ```bash
        $ modconfig resolve --plugin myapp.plugins.home \\
            --source overrides.yaml --module home
        ```

Exit Codes:

- 0: Success
- 1: Error (undeclared module, strict-mode schema error, load failure)

Note:
    Plugins are imported by module path; importing them must declare their
    schemas on the global engine (modconfig.define_config_schema). The CLI
    replaces the global engine before importing them, and reloads plugins
    that were already imported. Plugin modules must be importable
    (installed, or on PYTHONPATH).

"""

from __future__ import annotations

import argparse
import asyncio
from importlib import import_module, reload
from importlib.metadata import PackageNotFoundError, version
import sys
from typing import Any

import yaml

from modconfig.engine import ConfigEngine, set_global_engine
from modconfig.exceptions import ConfigError, ExternalLoadError, ModConfigError
from modconfig.io import load_document
from modconfig.loader import (
    CONFIG_FILE_ENV,
    CONFIG_FILE_NAME,
    EnvironmentProvider,
    ImportMapProvider,
    SourceProvider,
)
from modconfig.logging import get_logger, set_global_logger
from modconfig.results import ResolveResult


def _cli_version() -> str:
    try:
        return version("modconfig")
    except PackageNotFoundError:
        from modconfig import __version__

        return __version__


def _build_engine(args: argparse.Namespace) -> ConfigEngine:
    """Create the global engine, import plugins and provide sources."""
    provider: SourceProvider
    if args.config_file:
        provider = ImportMapProvider({CONFIG_FILE_NAME: args.config_file})
    else:
        provider = EnvironmentProvider()

    engine = ConfigEngine(provider, strict=getattr(args, "strict", False))
    set_global_engine(engine)

    for plugin in args.plugin:
        try:
            # Reload already-imported plugins so they declare on the new engine
            if plugin in sys.modules:
                reload(sys.modules[plugin])
            else:
                import_module(plugin)
        except Exception as err:
            raise ConfigError(f"Cannot import plugin {plugin!r}: {err}") from err

    for source_path in args.source:
        try:
            source = load_document(source_path)
        except (OSError, yaml.YAMLError) as err:
            raise ConfigError(f"Cannot read source {source_path}: {err}") from err
        engine.provide(source if source is not None else {})

    return engine


async def _resolve_all(
    engine: ConfigEngine, module_ids: list[str]
) -> list[ResolveResult]:
    return list(await asyncio.gather(*(engine.resolve(m) for m in module_ids)))


def _print_yaml(data: Any) -> None:
    print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), end="")


def _print_error(err: Exception, args: argparse.Namespace) -> None:
    print(f"Error: {err}")
    if args.verbose or args.debug:
        import traceback

        traceback.print_exc()


def cmd_resolve(args: argparse.Namespace) -> int:
    """Handler for 'modconfig resolve' command.

    Imports the plugins, provides the sources, resolves the requested modules
    (all declared modules by default), and prints each config as YAML
    followed by a diagnostics summary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    try:
        logger.step(1, 2, "Loading plugins and sources...")
        engine = _build_engine(args)
        module_ids = args.module or engine.registry.module_ids()
        if not module_ids:
            print("Error: No config schemas declared. Did you pass --plugin?")
            return 1
        logger.step(2, 2, f"Resolving {len(module_ids)} module(s)...")
        results = asyncio.run(_resolve_all(engine, module_ids))
    except (ConfigError, ExternalLoadError) as err:
        _print_error(err, args)
        return 1
    except ModConfigError as err:
        # Catch any other modconfig errors we might have missed
        _print_error(err, args)
        return 1

    diagnostic_count = 0
    for result in results:
        print("=" * 70)
        print(f"MODULE: {result.module_id}")
        print("=" * 70)
        _print_yaml(result.config)
        if result.diagnostics:
            print()
            print(f"Diagnostics ({len(result.diagnostics)}):")
            for diagnostic in result.diagnostics:
                print(f"  [WARNING] {diagnostic.kind}: {diagnostic.message}")
        print()
        diagnostic_count += len(result.diagnostics)

    print("=" * 70)
    if diagnostic_count:
        print(
            f"[DONE] Resolved {len(results)} module(s) with "
            f"{diagnostic_count} diagnostic(s)."
        )
    else:
        print(f"[SUCCESS] Resolved {len(results)} module(s) cleanly!")
    return 0


def cmd_devtools(args: argparse.Namespace) -> int:
    """Handler for 'modconfig devtools' command.

    Prints the merged and defaulted config of every declared module without
    validating it.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    try:
        engine = _build_engine(args)
        configs = asyncio.run(engine.get_devtools_config())
    except ModConfigError as err:
        _print_error(err, args)
        return 1

    _print_yaml(configs)
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--plugin",
        action="append",
        default=[],
        help="Python module to import; it declares config schemas (repeatable)",
    )
    parser.add_argument(
        "--source",
        action="append",
        default=[],
        help="YAML/JSON config source file, later files win (repeatable)",
    )
    parser.add_argument(
        "--config-file",
        default=None,
        help=(
            "Deployment config file path or URL, loaded at lowest priority "
            f"(default: ${CONFIG_FILE_ENV})"
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the modconfig CLI.

    This function is registered as the 'modconfig' console script in
    pyproject.toml.
    """
    parser = argparse.ArgumentParser(
        prog="modconfig",
        description="modconfig - schema-validated configuration for plugin modules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"modconfig {_cli_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'resolve' command
    parser_resolve = subparsers.add_parser(
        "resolve",
        help="Resolve and validate module configs",
        description="Merge, validate and default the config of declared modules.",
    )
    _add_common_arguments(parser_resolve)
    parser_resolve.add_argument(
        "--module",
        action="append",
        default=[],
        help="Module id to resolve (repeatable; default: all declared modules)",
    )
    parser_resolve.add_argument(
        "--strict",
        action="store_true",
        help="Fail on config keys missing from a module's schema",
    )
    parser_resolve.set_defaults(func=cmd_resolve)

    # 'devtools' command
    parser_devtools = subparsers.add_parser(
        "devtools",
        help="Print every module's config without validating",
        description="Merge and default the config of every declared module.",
    )
    _add_common_arguments(parser_devtools)
    parser_devtools.set_defaults(func=cmd_devtools)

    # Parse and dispatch
    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
