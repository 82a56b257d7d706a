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

"""Configuration loading for asdfplug.

Two kinds of configuration exist:

  - Tool recipes (YAML): what a tool is, where its tags live, how to filter
    them, how to build it and what to install. Layered as built-in defaults,
    then defaults/org.yaml, then the recipe.
  - PluginSettings: per-invocation values the version manager passes in
    through the environment (install path, download path, token).

Public API:

- load_effective_config: Load and merge a recipe file
- load_tool_config: Load a bundled recipe by tool name
- available_tools: Names of bundled recipes
- tool_section: Validated access to config["tool"]
- PluginSettings: Explicit runtime settings

Example:
    Basic usage:

        import os
        from asdfplug.config import PluginSettings, load_tool_config

        config = load_tool_config("odin")
        settings = PluginSettings.from_environ(os.environ)

"""

from .loader import (
    available_tools,
    bundled_recipe_path,
    load_effective_config,
    load_tool_config,
    tool_section,
)
from .settings import PluginSettings

__all__ = [
    "PluginSettings",
    "available_tools",
    "bundled_recipe_path",
    "load_effective_config",
    "load_tool_config",
    "tool_section",
]
