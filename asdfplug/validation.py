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


"""Recipe validation module.

Checks a tool recipe for syntax and configuration problems without making
network calls, cloning or building anything. Useful while writing a recipe
and in CI.

Validation Checks:

- YAML syntax is valid and the document is a mapping
- apiVersion is present and supported
- tool.name and tool.repo are present
- The tag source is registered
- The tag filter is registered and its options are valid
- The build strategy is registered
- The install section names a binary and lists directories

Omitted optional fields are checked with their built-in default values.

Example:
    Validate a recipe and handle results:
        ```python
        from pathlib import Path
        from asdfplug.validation import validate_recipe

        result = validate_recipe(Path("recipes/odin.yaml"))
        if result.status == "valid":
            print(f"Recipe for {result.tool_name} is valid")
        else:
            for error in result.errors:
                print(f"Error: {error}")
        ```

"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from asdfplug.build import get_builder
from asdfplug.config.loader import BUILTIN_DEFAULTS, _deep_merge_dicts, tool_section
from asdfplug.discovery import get_source
from asdfplug.exceptions import ConfigError
from asdfplug.install.wrapper import render_wrapper
from asdfplug.results import ValidationResult
from asdfplug.versioning import get_filter

__all__ = ["validate_recipe"]

SUPPORTED_API_VERSION = "asdfplug/v1"


def _invalid(errors: list[str], warnings: list[str], recipe_path: Path) -> ValidationResult:
    return ValidationResult(
        status="invalid",
        errors=errors,
        warnings=warnings,
        tool_name="",
        recipe_path=str(recipe_path),
    )


def _check_versions(versions: Any, errors: list[str]) -> None:
    if not isinstance(versions, dict):
        errors.append("tool.versions: Must be a dictionary")
        return

    try:
        get_source(str(versions.get("source")))
    except ConfigError as err:
        errors.append(f"tool.versions.source: {err}")

    filter_config = versions.get("filter")
    if not isinstance(filter_config, dict):
        errors.append("tool.versions.filter: Must be a dictionary")
        return
    try:
        tag_filter = get_filter(str(filter_config.get("type", "all")))
    except ConfigError as err:
        errors.append(f"tool.versions.filter.type: {err}")
        return
    for error in tag_filter.validate_config(filter_config):
        errors.append(f"tool.versions.filter: {error}")

    if not isinstance(versions.get("strip_prefix", ""), str):
        errors.append("tool.versions.strip_prefix: Must be a string")


def _check_install(tool: dict[str, Any], errors: list[str], warnings: list[str]) -> None:
    install = tool.get("install")
    if not isinstance(install, dict):
        errors.append("tool.install: Must be a dictionary")
        return

    binary = install.get("binary")
    if binary is None:
        warnings.append(f"tool.install.binary not set; using tool name {tool['name']!r}")
        binary = tool["name"]
    elif not isinstance(binary, str) or not binary:
        errors.append("tool.install.binary: Must be a non-empty string")
        return

    directories = install.get("directories", [])
    if not isinstance(directories, list) or not all(
        isinstance(d, str) and d for d in directories
    ):
        errors.append("tool.install.directories: Must be a list of directory names")

    wrapper = install.get("wrapper")
    if wrapper is not None:
        env_var = wrapper.get("env_var") if isinstance(wrapper, dict) else None
        try:
            render_wrapper(binary, str(env_var))
        except ConfigError as err:
            errors.append(f"tool.install.wrapper: {err}")


def validate_recipe(recipe_path: Path) -> ValidationResult:
    """Validate a recipe file without touching the network.

    Args:
        recipe_path: Path to the recipe YAML file to validate.

    Returns:
        ValidationResult with status "valid" or "invalid", the error and
        warning messages, and the recipe's tool name.
    """
    from asdfplug.logging import get_global_logger

    logger = get_global_logger()
    errors: list[str] = []
    warnings: list[str] = []

    logger.verbose("VALIDATION", f"Validating recipe: {recipe_path}")

    if not recipe_path.exists():
        return _invalid([f"Recipe file not found: {recipe_path}"], warnings, recipe_path)

    try:
        with open(recipe_path, encoding="utf-8") as f:
            recipe = yaml.safe_load(f)
    except yaml.YAMLError as err:
        return _invalid([f"Invalid YAML syntax: {err}"], warnings, recipe_path)
    except OSError as err:
        return _invalid([f"Failed to read recipe file: {err}"], warnings, recipe_path)

    logger.verbose("VALIDATION", "[OK] YAML syntax is valid")

    if not isinstance(recipe, dict):
        return _invalid(
            ["Recipe must be a YAML dictionary/mapping"], warnings, recipe_path
        )

    if "apiVersion" not in recipe:
        errors.append("Missing required field: apiVersion")
    else:
        api_version = recipe["apiVersion"]
        if not isinstance(api_version, str):
            errors.append("apiVersion must be a string")
        elif api_version != SUPPORTED_API_VERSION:
            warnings.append(
                f"apiVersion '{api_version}' may not be supported "
                f"(expected: {SUPPORTED_API_VERSION})"
            )

    tool = recipe.get("tool")
    if not isinstance(tool, dict):
        errors.append("Missing required field: tool")
        return _invalid(errors, warnings, recipe_path)

    for field in ("name", "repo"):
        value = tool.get(field)
        if not isinstance(value, str) or not value.strip():
            errors.append(f"tool: Missing required field: {field}")
    if errors:
        return _invalid(errors, warnings, recipe_path)

    effective = _deep_merge_dicts(BUILTIN_DEFAULTS, recipe)["tool"]
    logger.verbose("VALIDATION", f"[OK] Tool: {effective['name']}")

    shape_error = ""
    try:
        tool_section({"tool": effective})
    except ConfigError as err:
        shape_error = str(err)

    _check_versions(effective.get("versions"), errors)

    build = effective.get("build")
    if not isinstance(build, dict):
        errors.append("tool.build: Must be a dictionary")
    elif not shape_error:
        try:
            get_builder(str(build.get("strategy")), effective)
        except ConfigError as err:
            errors.append(f"tool.build.strategy: {err}")
        except (TypeError, ValueError) as err:
            errors.append(f"tool.build: {err}")

    _check_install(effective, errors, warnings)
    if shape_error and not errors:
        errors.append(shape_error)

    status = "valid" if not errors else "invalid"
    if status == "valid":
        logger.verbose("VALIDATION", "[OK] Recipe is valid!")
    else:
        logger.verbose("VALIDATION", f"[ERROR] Recipe has {len(errors)} error(s)")

    return ValidationResult(
        status=status,
        errors=errors,
        warnings=warnings,
        tool_name=effective["name"],
        recipe_path=str(recipe_path),
    )
