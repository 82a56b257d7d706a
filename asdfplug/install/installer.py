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


"""Download and install pipelines.

These two functions back the version manager's "download" and "install"
hooks:

download_release
    1. Resolve "latest" to a concrete tag
    2. Shallow-clone the tag into <download_path>/<name>-source
    3. Build it with the recipe's builder
    4. Copy the binary and support directories into download_path
    5. Remove the source tree

install_version
    1. Copy the binary to <root>/bin/<binary>.bin
    2. Copy the support directories into <root>
    3. Write the launcher <root>/bin/<binary> exporting the root variable
    4. Check the test command's executable is executable

An install that fails part-way removes the install root.
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
from typing import Any

from asdfplug.build import BinaryArtifact, Builder, clone_tag, get_builder
from asdfplug.catalog import VersionCatalog
from asdfplug.config.loader import tool_section
from asdfplug.config.settings import PluginSettings
from asdfplug.exceptions import ConfigError, InstallError, PluginError
from asdfplug.results import DownloadResult, InstallResult

from .wrapper import BIN_SUFFIX, write_wrapper


def _requested_version(version: str | None, settings: PluginSettings) -> str:
    version = version or settings.install_version
    if not version:
        raise ConfigError("No version given and ASDF_INSTALL_VERSION is not set")
    return version


def _stage_artifact(
    artifact: BinaryArtifact, download_path: Path
) -> tuple[Path, list[Path]]:
    """Copy the built binary and its directories into download_path."""
    from asdfplug.logging import get_global_logger

    logger = get_global_logger()
    binary = download_path / artifact.binary.name
    shutil.copy2(artifact.binary, binary)
    logger.verbose("DOWNLOAD", f"Copied binary: {binary.name}")

    directories = []
    for source in artifact.directories:
        dest = download_path / source.name
        shutil.copytree(source, dest, dirs_exist_ok=True)
        logger.verbose("DOWNLOAD", f"  Copied directory: {source.name}/")
        directories.append(dest)
    return binary, directories


def download_release(
    config: dict[str, Any],
    settings: PluginSettings,
    version: str | None = None,
    builder: Builder | None = None,
) -> DownloadResult:
    """Clone, build and stage one version of a tool.

    Args:
        config: Merged recipe.
        settings: Runtime settings; download_path is required.
        version: Version to download, or "latest". Defaults to
            settings.install_version.
        builder: Builder to use instead of the recipe's build strategy.

    Returns:
        DownloadResult describing the staged files.

    Raises:
        ConfigError: Missing download path, version or invalid recipe.
        FetchError: Latest resolution or clone failed.
        ResolutionError: The latest-release redirect had no tag.
        BuildError: The build failed.
    """
    from asdfplug.logging import get_global_logger

    logger = get_global_logger()
    tool = tool_section(config)
    name = tool["name"]
    download_path = settings.require_download_path()
    requested = _requested_version(version, settings)

    logger.step(1, 4, f"Resolving {name} {requested}...")
    catalog = VersionCatalog.from_config(config, settings)
    resolved = catalog.resolve(requested)
    if resolved != requested:
        logger.info(f"Latest version resolved to: {resolved}")

    if builder is None:
        strategy = (tool.get("build", {}) or {}).get("strategy", "make")
        builder = get_builder(strategy, tool)

    download_path.mkdir(parents=True, exist_ok=True)
    source_dir = download_path / f"{name}-source"

    logger.step(2, 4, f"Downloading {name} source {resolved}...")
    try:
        clone_tag(
            tool["repo"],
            resolved,
            source_dir,
            token=settings.github_token,
            strip_prefix=catalog.strip_prefix,
        )

        logger.step(3, 4, f"Building {name} from source...")
        artifact = builder.build(source_dir)

        logger.step(4, 4, "Staging build outputs...")
        binary, directories = _stage_artifact(artifact, download_path)
    finally:
        shutil.rmtree(source_dir, ignore_errors=True)

    logger.verbose("DOWNLOAD", f"[OK] {name} {resolved} staged in {download_path}")
    return DownloadResult(
        tool=name,
        version=resolved,
        download_path=download_path,
        binary_path=binary,
        directories=directories,
        status="success",
    )


def install_root(install_path: Path) -> Path:
    """The install root: install_path with any trailing "bin" removed."""
    return install_path.parent if install_path.name == "bin" else install_path


def _check_executable(root: Path, test_command: str) -> None:
    command = test_command.split()[0] if test_command.strip() else ""
    if not command:
        return
    path = root / "bin" / command
    if not (path.is_file() and os.access(path, os.X_OK)):
        raise InstallError(f"Expected {path} to be executable.")


def install_version(
    config: dict[str, Any],
    settings: PluginSettings,
    version: str | None = None,
) -> InstallResult:
    """Install a downloaded version into settings.install_path.

    Args:
        config: Merged recipe.
        settings: Runtime settings; install_path and download_path are
            required, install_type must be "version".
        version: Version being installed. Defaults to settings.install_version.

    Returns:
        InstallResult with the wrapper and binary locations.

    Raises:
        InstallError: Unsupported install type, or any failure while copying
            files (the install root is removed first).
        ConfigError: Missing install or download path.
    """
    from asdfplug.logging import get_global_logger

    logger = get_global_logger()
    tool = tool_section(config)
    name = tool["name"]

    if settings.install_type != "version":
        raise InstallError(f"asdf-{name} supports release installs only")

    install = tool.get("install", {}) or {}
    binary_name = install.get("binary") or name
    env_var = (install.get("wrapper", {}) or {}).get("env_var")
    directories = list(install.get("directories", []) or [])

    root = install_root(settings.require_install_path())
    download_path = settings.require_download_path()
    version = version or settings.install_version or ""
    bin_dir = root / "bin"

    try:
        logger.step(1, 3, f"Installing {binary_name} into {bin_dir}...")
        bin_dir.mkdir(parents=True, exist_ok=True)
        source_binary = download_path / binary_name

        if env_var:
            binary_path = bin_dir / f"{binary_name}{BIN_SUFFIX}"
            shutil.copy2(source_binary, binary_path)
            wrapper_path = write_wrapper(bin_dir / binary_name, binary_name, env_var)
            logger.verbose("INSTALL", f"Wrote launcher for {env_var}: {wrapper_path}")
        else:
            binary_path = bin_dir / binary_name
            shutil.copy2(source_binary, binary_path)
            wrapper_path = binary_path

        logger.step(2, 3, "Copying support directories...")
        for directory in directories:
            shutil.copytree(
                download_path / directory, root / directory, dirs_exist_ok=True
            )
            logger.verbose("INSTALL", f"  Copied directory: {directory}/")

        logger.step(3, 3, "Verifying installation...")
        _check_executable(root, tool.get("test_command") or binary_name)
    except (OSError, PluginError) as err:
        shutil.rmtree(root, ignore_errors=True)
        raise InstallError(
            f"An error occurred while installing {name} {version}: {err}"
        ) from err

    logger.info(f"{name} {version} installation was successful!")
    return InstallResult(
        tool=name,
        version=version,
        install_root=root,
        wrapper_path=wrapper_path,
        binary_path=binary_path,
        status="success",
    )
