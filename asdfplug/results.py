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

"""Public API return types for asdfplug.

Dataclasses returned by the download, install and validation entry points.
All of them are frozen so callers cannot mutate a result after the fact.

Example:
    Using result types:
        ```python
        from asdfplug.install import download_release
        from asdfplug.results import DownloadResult

        result: DownloadResult = download_release(config, settings, "latest")
        print(result.version)  # Attribute access, not dict access
        ```

Note:
    Domain types (VersionTag, BinaryArtifact) stay next to the logic that
    produces them. Only public API return types belong here.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DownloadResult:
    """Result from cloning and building one version.

    Attributes:
        tool: Tool name (e.g., "odin").
        version: Concrete version that was built ("latest" already resolved).
        download_path: Directory now holding the binary and support dirs.
        binary_path: Path to the built binary inside download_path.
        directories: Support directories copied next to the binary.
        status: Always "success" for a completed download.
    """

    tool: str
    version: str
    download_path: Path
    binary_path: Path
    directories: list[Path]
    status: str


@dataclass(frozen=True)
class InstallResult:
    """Result from installing a downloaded version.

    Attributes:
        tool: Tool name.
        version: Installed version.
        install_root: Root directory of the installation.
        wrapper_path: Path of the generated launcher script.
        binary_path: Path of the real binary (the ".bin" file).
        status: Always "success" for a completed install.
    """

    tool: str
    version: str
    install_root: Path
    wrapper_path: Path
    binary_path: Path
    status: str


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating a recipe.

    Attributes:
        status: Validation status ("valid" or "invalid").
        errors: List of error messages (empty if valid).
        warnings: List of warning messages.
        tool_name: Name declared by the recipe, or "" if missing.
        recipe_path: String path to the validated recipe file.
    """

    status: str
    errors: list[str]
    warnings: list[str]
    tool_name: str
    recipe_path: str
