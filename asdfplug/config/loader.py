"""
Recipe loading and merging for asdfplug.

A tool is described by a YAML recipe. Recipes are layered so shared
settings live in one place:

Configuration Layers
--------------------
1. **Built-in defaults** (BUILTIN_DEFAULTS below)
   - Tag source, version prefix, filter and builder fallbacks
2. **Organization defaults** (defaults/org.yaml)
   - Optional; found by walking upward from the recipe file
3. **Tool recipe** (e.g., asdfplug/config/recipes/odin.yaml)
   - Always required; defines the tool itself

Merge Behavior
--------------
Deep merge with "last wins" semantics:
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

Bundled Recipes
---------------
Recipes shipped inside the package are addressed by tool name:

    >>> from asdfplug.config import load_tool_config
    >>> cfg = load_tool_config("odin")
    >>> cfg["tool"]["repo"]
    'https://github.com/odin-lang/Odin'

Any other recipe is loaded by path:

    >>> cfg = load_effective_config(Path("recipes/zig.yaml"))

Error Handling
--------------
- FileNotFoundError: Recipe file doesn't exist
- ConfigError: YAML parse errors, empty files, non-mapping documents,
  unknown bundled tool names
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from asdfplug.exceptions import ConfigError

RECIPES_DIR = Path(__file__).parent / "recipes"

BUILTIN_DEFAULTS: dict[str, Any] = {
    "tool": {
        "versions": {
            "source": "smart_http",
            "strip_prefix": "v",
            "filter": {"type": "all"},
            "latest": {"strip_prefix": ""},
        },
        "build": {"strategy": "make", "target": "release"},
        "install": {"directories": []},
    }
}

# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """
    Load a YAML file and return the parsed Python object.

    Raises:
      FileNotFoundError - when file does not exist
      ConfigError       - for invalid YAML (parse error) or an empty file
    """
    if not p.exists():
        raise FileNotFoundError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    Neither input is mutated.
    """
    result: dict[str, Any] = copy.deepcopy(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = copy.deepcopy(v)
    return result


def _find_defaults_root(start_dir: Path) -> Path | None:
    """
    Walk upward from 'start_dir' looking for 'defaults/org.yaml'.
    Returns the 'defaults' directory or None if not found.
    """
    for parent in [start_dir] + list(start_dir.parents):
        candidate = parent / "defaults" / "org.yaml"
        if candidate.exists():
            return parent / "defaults"
    return None


def _require_mapping(data: Any, path: Path) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigError(f"top-level YAML must be a mapping (dict): {path}")
    return data


def _dump_yaml(prefix: str, data: dict[str, Any]) -> None:
    """Send a YAML rendering of 'data' to the debug log."""
    from asdfplug.logging import get_global_logger

    logger = get_global_logger()
    yaml_str = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    for line in yaml_str.splitlines():
        if line.strip():
            logger.debug(prefix, f"  {line}")


# -------------------------------
# Public API
# -------------------------------


def load_effective_config(
    recipe_path: Path,
    *,
    verbose: bool = False,
    debug: bool = False,
) -> dict[str, Any]:
    """
    Load and merge the effective configuration for a tool recipe.

    Steps
      1) Read recipe YAML.
      2) Find a defaults root by scanning upwards for 'defaults/org.yaml'.
      3) Merge: built-in -> org -> recipe (dicts deep-merge, lists replace).

    Returns
      A merged configuration dict ready for the catalog and installer.

    Raises
      FileNotFoundError if the recipe file itself is missing,
      ConfigError on YAML parse errors or a non-mapping document.
    """
    from asdfplug.logging import get_global_logger

    logger = get_global_logger()
    recipe_path = Path(recipe_path).resolve()

    logger.verbose("CONFIG", f"Loading recipe: {recipe_path}")
    recipe_obj = _require_mapping(_load_yaml_file(recipe_path), recipe_path)

    merged = _deep_merge_dicts({}, BUILTIN_DEFAULTS)
    layers_merged = 1

    defaults_root = _find_defaults_root(recipe_path.parent)
    if defaults_root:
        org_path = defaults_root / "org.yaml"
        logger.verbose("CONFIG", f"Loading: {org_path}")
        org_defaults = _require_mapping(_load_yaml_file(org_path), org_path)
        if debug:
            logger.debug("CONFIG", "--- Content from org.yaml ---")
            _dump_yaml("CONFIG", org_defaults)
        merged = _deep_merge_dicts(merged, org_defaults)
        layers_merged += 1

    if debug:
        logger.debug("CONFIG", f"--- Content from {recipe_path.name} ---")
        _dump_yaml("CONFIG", recipe_obj)

    merged = _deep_merge_dicts(merged, recipe_obj)
    layers_merged += 1

    if verbose:
        logger.verbose("CONFIG", f"Deep merged {layers_merged} layer(s)")
    if debug:
        logger.debug("CONFIG", "--- Final Merged Configuration ---")
        _dump_yaml("CONFIG", merged)

    return merged


def available_tools() -> list[str]:
    """Names of the recipes bundled with asdfplug, sorted."""
    return sorted(p.stem for p in RECIPES_DIR.glob("*.yaml"))


def bundled_recipe_path(name: str) -> Path:
    """Path of a bundled recipe.

    Raises:
        ConfigError: If no recipe with that name is bundled.
    """
    path = RECIPES_DIR / f"{name}.yaml"
    if not path.exists():
        available = ", ".join(available_tools())
        raise ConfigError(
            f"No bundled recipe for tool {name!r}. Available: {available or '(none)'}"
        )
    return path


def load_tool_config(
    name: str, *, verbose: bool = False, debug: bool = False
) -> dict[str, Any]:
    """Load the merged configuration of a bundled tool recipe by name."""
    return load_effective_config(bundled_recipe_path(name), verbose=verbose, debug=debug)


# Optional fields and the type each must have when present
_FIELD_TYPES: tuple[tuple[str, type, str], ...] = (
    ("test_command", str, "a string"),
    ("versions", dict, "a mapping"),
    ("versions.source", str, "a string"),
    ("versions.strip_prefix", str, "a string"),
    ("versions.filter", dict, "a mapping"),
    ("versions.latest", dict, "a mapping"),
    ("versions.latest.strip_prefix", str, "a string"),
    ("build", dict, "a mapping"),
    ("build.strategy", str, "a string"),
    ("build.target", str, "a string"),
    ("build.llvm", dict, "a mapping"),
    ("build.packages", dict, "a mapping"),
    ("install", dict, "a mapping"),
    ("install.binary", str, "a string"),
    ("install.directories", list, "a list"),
    ("install.wrapper", dict, "a mapping"),
    ("install.wrapper.env_var", str, "a string"),
)


def _lookup(tool: dict[str, Any], dotted: str) -> Any:
    value: Any = tool
    for part in dotted.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def tool_section(config: dict[str, Any]) -> dict[str, Any]:
    """Return config["tool"], checking the fields every command needs.

    Required fields must be non-empty strings. Optional sections may be
    omitted (or null) but must have the right type when given.

    Raises:
        ConfigError: If tool, tool.name or tool.repo is missing, or an
            optional field has the wrong type.
    """
    tool = config.get("tool")
    if not isinstance(tool, dict):
        raise ConfigError("Recipe has no 'tool' mapping")
    for field in ("name", "repo"):
        value = tool.get(field)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"Recipe is missing required field 'tool.{field}'")
    for dotted, expected, description in _FIELD_TYPES:
        value = _lookup(tool, dotted)
        if value is not None and not isinstance(value, expected):
            raise ConfigError(
                f"Recipe field 'tool.{dotted}' must be {description}, "
                f"got {type(value).__name__}"
            )
    return tool
