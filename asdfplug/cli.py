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


"""Command-line interface for asdfplug.

Each command backs one script of an asdf plugin, so a plugin's bin/
scripts can be one-line shims:

    bin/list-all        ->  asdfplug --tool odin list-all
    bin/latest-stable   ->  asdfplug --tool odin latest-stable "$1"
    bin/download        ->  asdfplug --tool odin download
    bin/install         ->  asdfplug --tool odin install

Commands:

    list-all: Print every installable version, oldest first, on one line
    latest-stable: Print the newest version (optionally matching a prefix)
    resolve-latest: Print the tag the "latest release" redirect points at
    download: Clone and build a version into ASDF_DOWNLOAD_PATH
    install: Install a downloaded version into ASDF_INSTALL_PATH
    validate: Validate a recipe without network calls

Example:
    List versions of the bundled Odin recipe:
        ```bash
        $ asdfplug --tool odin list-all
        ```

    Use a recipe file instead of a bundled one:
        ```bash
        $ asdfplug --recipe recipes/zig.yaml latest-stable 0.12
        ```

    Enable debug output:
        ```bash
        $ asdfplug --tool odin download dev-2024-04 --debug
        ```

Exit Codes:

- 0: Success (including an empty list-all)
- 1: Any error; the message is printed to stderr as "asdf-<tool>: <message>"

Note:
    stdout carries only command data. Progress and diagnostics go to
    stderr through the global logger. Verbose mode shows full tracebacks
    on errors. Debug mode implies verbose mode and dumps the merged recipe.

"""

from __future__ import annotations

import argparse
from importlib.metadata import version
import os
from pathlib import Path
import sys
from typing import Any

from asdfplug.catalog import VersionCatalog
from asdfplug.config import (
    PluginSettings,
    bundled_recipe_path,
    load_effective_config,
    load_tool_config,
)
from asdfplug.exceptions import PluginError
from asdfplug.install import download_release, install_version
from asdfplug.logging import get_logger, set_global_logger
from asdfplug.validation import validate_recipe

DEFAULT_TOOL = "odin"


def _tool_name(args: argparse.Namespace) -> str:
    return args.tool or DEFAULT_TOOL


def _tool_label(args: argparse.Namespace) -> str:
    """Name used in "asdf-<label>:" error lines.

    Prefers the loaded recipe's tool.name, then the recipe file stem.
    """
    if args.loaded_name:
        return args.loaded_name
    if args.recipe:
        return Path(args.recipe).stem
    return _tool_name(args)


def _load_config(args: argparse.Namespace) -> dict[str, Any]:
    if args.recipe:
        config = load_effective_config(
            Path(args.recipe), verbose=args.verbose, debug=args.debug
        )
    else:
        config = load_tool_config(
            _tool_name(args), verbose=args.verbose, debug=args.debug
        )

    tool = config.get("tool")
    name = tool.get("name") if isinstance(tool, dict) else None
    if isinstance(name, str) and name.strip():
        args.loaded_name = name.strip()
    return config


def _recipe_path(args: argparse.Namespace) -> Path:
    if args.recipe:
        return Path(args.recipe).resolve()
    return bundled_recipe_path(_tool_name(args))


def _report_error(args: argparse.Namespace, label: str, err: Exception) -> int:
    print(f"asdf-{label}: {err}", file=sys.stderr)
    if args.verbose or args.debug:
        import traceback

        traceback.print_exc()
    return 1


def _catalog(args: argparse.Namespace) -> VersionCatalog:
    config = _load_config(args)
    return VersionCatalog.from_config(config, PluginSettings.from_environ(os.environ))


def cmd_list_all(args: argparse.Namespace) -> int:
    """Handler for 'asdfplug list-all'.

    Prints the sorted versions space-separated. An empty catalog prints
    nothing and still succeeds.
    """
    versions = _catalog(args).list_all()
    if versions:
        print(" ".join(versions))
    return 0


def cmd_latest_stable(args: argparse.Namespace) -> int:
    """Handler for 'asdfplug latest-stable [query]'."""
    print(_catalog(args).latest_stable(args.query))
    return 0


def cmd_resolve_latest(args: argparse.Namespace) -> int:
    """Handler for 'asdfplug resolve-latest'."""
    print(_catalog(args).resolve_latest())
    return 0


def cmd_download(args: argparse.Namespace) -> int:
    """Handler for 'asdfplug download [version]'.

    The version defaults to ASDF_INSTALL_VERSION. Requires
    ASDF_DOWNLOAD_PATH.
    """
    config = _load_config(args)
    settings = PluginSettings.from_environ(os.environ)
    result = download_release(config, settings, args.version)

    from asdfplug.logging import get_global_logger

    get_global_logger().info(f"{result.tool} {result.version} downloaded")
    return 0


def cmd_install(args: argparse.Namespace) -> int:
    """Handler for 'asdfplug install'.

    Reads ASDF_INSTALL_TYPE, ASDF_INSTALL_VERSION, ASDF_INSTALL_PATH and
    ASDF_DOWNLOAD_PATH.
    """
    config = _load_config(args)
    install_version(config, PluginSettings.from_environ(os.environ))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'asdfplug validate'.

    Validates recipe syntax and configuration without network calls and
    prints a report to stdout.

    Returns:
        Exit code (0 for valid recipe, 1 for invalid).
    """
    recipe_path = _recipe_path(args)
    result = validate_recipe(recipe_path)

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Recipe:      {result.recipe_path}")
    print(f"Status:      {result.status.upper()}")
    print(f"Tool:        {result.tool_name or '(unknown)'}")
    print()

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()

    print("=" * 70)

    if result.status == "valid":
        print()
        print("[SUCCESS] Recipe is valid!")
        return 0
    print()
    print(f"[FAILED] Recipe validation failed with {len(result.errors)} error(s).")
    return 1


def _add_output_flags(parser: argparse.ArgumentParser) -> None:
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


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asdfplug",
        description="asdfplug - asdf version manager plugin engine for source-built tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"asdfplug {version('asdfplug')}",
    )

    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "--tool",
        default=None,
        help=f"Bundled recipe to use (default: {DEFAULT_TOOL})",
    )
    target.add_argument(
        "--recipe",
        default=None,
        help="Path to a recipe YAML file (overrides --tool)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'list-all' command
    parser_list = subparsers.add_parser(
        "list-all",
        help="List installable versions, oldest first",
    )
    _add_output_flags(parser_list)
    parser_list.set_defaults(func=cmd_list_all)

    # 'latest-stable' command
    parser_latest = subparsers.add_parser(
        "latest-stable",
        help="Print the newest installable version",
    )
    parser_latest.add_argument(
        "query",
        nargs="?",
        default="",
        help="Only consider versions starting with this text",
    )
    _add_output_flags(parser_latest)
    parser_latest.set_defaults(func=cmd_latest_stable)

    # 'resolve-latest' command
    parser_resolve = subparsers.add_parser(
        "resolve-latest",
        help="Print the tag of the latest published release",
    )
    _add_output_flags(parser_resolve)
    parser_resolve.set_defaults(func=cmd_resolve_latest)

    # 'download' command
    parser_download = subparsers.add_parser(
        "download",
        help="Clone and build a version into ASDF_DOWNLOAD_PATH",
    )
    parser_download.add_argument(
        "version",
        nargs="?",
        default=None,
        help="Version or 'latest' (default: ASDF_INSTALL_VERSION)",
    )
    _add_output_flags(parser_download)
    parser_download.set_defaults(func=cmd_download)

    # 'install' command
    parser_install = subparsers.add_parser(
        "install",
        help="Install a downloaded version into ASDF_INSTALL_PATH",
    )
    _add_output_flags(parser_install)
    parser_install.set_defaults(func=cmd_install)

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate recipe syntax and configuration (no network calls)",
    )
    _add_output_flags(parser_validate)
    parser_validate.set_defaults(func=cmd_validate)

    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse argv, run the command and return its exit code."""
    args = build_parser().parse_args(argv)
    args.loaded_name = None

    # Configure global logger
    set_global_logger(get_logger(verbose=args.verbose, debug=args.debug))

    try:
        return args.func(args)
    except (PluginError, FileNotFoundError) as err:
        return _report_error(args, _tool_label(args), err)


def main() -> None:
    """Main entry point for the asdfplug CLI.

    This function is registered as the 'asdfplug' console script in
    pyproject.toml.
    """
    sys.exit(run())


if __name__ == "__main__":
    main()
