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

"""Exception hierarchy for asdfplug.

Every failure in asdfplug is terminal for the current invocation: nothing is
retried and no partial result is returned. The hierarchy exists so callers
(mainly the CLI) can report what went wrong distinctly:

- ConfigError: Recipe problems (YAML parse, missing fields, unknown filter)
- FetchError: The remote tag listing, redirect or clone could not be completed
- ResolutionError: "latest" could not be mapped to a concrete tag
- EmptyCatalogError: The catalog is empty, so there is nothing installable
- BuildError: A build step or toolchain requirement failed
- InstallError: Copying artifacts into the install directory failed

All exceptions inherit from PluginError.

Example:
    Telling an empty catalog apart from a fetch failure:
        ```python
        from asdfplug.catalog import VersionCatalog
        from asdfplug.exceptions import EmptyCatalogError, FetchError

        try:
            version = catalog.latest_stable()
        except FetchError as e:
            print(f"Could not reach remote: {e}")
        except EmptyCatalogError as e:
            print(f"Nothing to install: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "PluginError",
    "ConfigError",
    "FetchError",
    "ResolutionError",
    "EmptyCatalogError",
    "BuildError",
    "InstallError",
]


class PluginError(Exception):
    """Base exception for all asdfplug errors."""

    pass


class ConfigError(PluginError):
    """Raised for recipe and configuration problems.

    This covers:

    - YAML parsing (syntax errors, empty files, non-mapping documents)
    - Missing or invalid tool fields
    - Unknown tag source, filter or builder names
    - Missing environment settings a command requires
    """

    pass


class FetchError(PluginError):
    """Raised when a remote request could not be completed.

    This covers network and DNS failures, non-2xx/3xx statuses on the
    refs listing or the latest-release request, `git ls-remote` failures,
    and failed clones.
    """

    pass


class ResolutionError(PluginError):
    """Raised when "latest" cannot be mapped to a concrete tag.

    The remote answered, but without a redirect, without a Location
    header, or with a Location that does not end in /tag/<identifier>.
    """

    pass


class EmptyCatalogError(PluginError):
    """Raised when a command needs a version but the catalog is empty.

    Listing an empty catalog is not an error; only commands that must pick
    a concrete version (such as latest-stable) raise this.
    """

    pass


class BuildError(PluginError):
    """Raised for build failures.

    This covers unsupported platforms, missing compilers that cannot be
    installed, failed package-manager commands, and non-zero exits from
    the build command itself.
    """

    pass


class InstallError(PluginError):
    """Raised when installing a downloaded version fails.

    The install directory is removed before this is raised.
    """

    pass
