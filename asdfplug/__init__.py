"""
asdfplug - asdf plugins for source-built tools

asdfplug implements the scripts an asdf version-manager plugin needs
(list-all, latest-stable, download, install) for tools that publish
versions as git tags and are built from source. A tool is described by a
YAML recipe; Odin ships as the bundled reference recipe.

Key Features
------------
  - Tag listing over Git smart-HTTP, or through `git ls-remote`
  - Deterministic version ordering (numeric fields, patch markers)
  - Pluggable tag filters (prefix, regex, pre-release exclusion)
  - "latest" resolution through the release redirect
  - Shallow clone plus make build with LLVM toolchain discovery
  - Relocatable installs with an environment-exporting launcher

Quick Start
-----------
List installable versions:

    $ asdfplug --tool odin list-all

Print the newest one:

    $ asdfplug --tool odin latest-stable

For full CLI documentation:

    $ asdfplug --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
catalog : module
    VersionCatalog: fetch, filter, sort and resolve versions.
config : package
    YAML recipe loading and runtime settings.
discovery : package
    Tag sources and latest-release resolution.
versioning : package
    Version ordering and tag filters.
build : package
    Source checkout and builders.
install : package
    Download and install pipelines.
io : package
    Shared HTTP session.

Public API
----------
The primary interface is the CLI, but key functions are exported for
programmatic use:

    from asdfplug.catalog import VersionCatalog
    from asdfplug.config import PluginSettings, load_tool_config
    from asdfplug.install import download_release, install_version
    from asdfplug.validation import validate_recipe
    from asdfplug.versioning import sort_versions

For more details, see the individual module docstrings.

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "asdf version-manager plugins for source-built tools"

# Re-export commonly used functions for convenience
from asdfplug.catalog import VersionCatalog
from asdfplug.config import PluginSettings, load_effective_config, load_tool_config
from asdfplug.install import download_release, install_version
from asdfplug.validation import validate_recipe
from asdfplug.versioning import compare_versions, sort_versions

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "PluginSettings",
    "VersionCatalog",
    "compare_versions",
    "download_release",
    "install_version",
    "load_effective_config",
    "load_tool_config",
    "sort_versions",
    "validate_recipe",
]
