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


"""Native toolchain discovery for source builds.

Compiling tools such as Odin needs clang and an LLVM installation whose
major version the tool supports. This module finds (or installs) them:

macOS (Darwin):
    1. clang must exist (Xcode command line tools)
    2. Homebrew llvm@N, trying supported versions in preference order
    3. Homebrew unversioned llvm, when its major version is supported
    4. llvm-config on PATH
    5. brew install <formula>, or fail when Homebrew is absent

Linux:
    clang and llvm-config are installed with the first package manager
    found (apt-get, dnf, yum), through sudo when not running as root.

Any other platform raises BuildError.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import os
from pathlib import Path
import platform
import shutil
import subprocess

from asdfplug.exceptions import BuildError

DARWIN = "Darwin"
LINUX = "Linux"

PACKAGE_MANAGERS = ("apt-get", "dnf", "yum")
LINUX_REQUIREMENTS = ("clang", "llvm-config")


def detect_platform() -> str:
    """Return "Darwin" or "Linux".

    Raises:
        BuildError: On any other operating system.
    """
    system = platform.system()
    if system.startswith(DARWIN):
        return DARWIN
    if system.startswith(LINUX):
        return LINUX
    raise BuildError(
        f"Unsupported platform: {system}. Please build manually and submit a PR "
        "for this platform."
    )


def run_command(
    cmd: Sequence[str | Path],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess:
    """Run an external command, raising BuildError if it fails.

    Output is captured and replayed to the verbose log.
    """
    from asdfplug.logging import get_global_logger

    logger = get_global_logger()
    args = [str(part) for part in cmd]
    logger.verbose("BUILD", f"Running: {' '.join(args)}")

    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as err:
        error_msg = f"Command failed (exit code {err.returncode}): {' '.join(args)}"
        if err.stderr:
            error_msg += f"\n{err.stderr.strip()}"
        raise BuildError(error_msg) from err
    except OSError as err:
        raise BuildError(f"Could not run {args[0]}: {err}") from err

    if result.stdout:
        for line in result.stdout.strip().splitlines():
            logger.verbose("BUILD", f"  {line}")
    return result


# -------------------------------
# macOS
# -------------------------------


def brew_prefix(formula: str) -> Path | None:
    """Homebrew prefix of a formula, or None if brew or the formula is absent."""
    brew = shutil.which("brew")
    if brew is None:
        return None
    result = subprocess.run(
        [brew, "--prefix", formula], capture_output=True, text=True, check=False
    )
    prefix = result.stdout.strip()
    if result.returncode != 0 or not prefix:
        return None
    return Path(prefix)


def llvm_major_version(llvm_config: Path) -> int | None:
    """Major version reported by `llvm-config --version`, None if unreadable."""
    try:
        result = subprocess.run(
            [str(llvm_config), "--version"], capture_output=True, text=True, check=True
        )
    except (subprocess.CalledProcessError, OSError):
        return None
    major = result.stdout.strip().split(".", 1)[0]
    return int(major) if major.isdigit() else None


def _brew_llvm_config(formula: str) -> Path | None:
    prefix = brew_prefix(formula)
    if prefix is None:
        return None
    candidate = prefix / "bin" / "llvm-config"
    return candidate if candidate.is_file() else None


def find_llvm_config(supported_versions: Sequence[int], brew_formula: str) -> Path:
    """Locate a usable llvm-config on macOS, installing one if needed.

    Args:
        supported_versions: LLVM major versions, most preferred first.
        brew_formula: Formula to install when nothing usable is found
            (e.g., "llvm@20").

    Returns:
        Path to llvm-config.

    Raises:
        BuildError: If no LLVM is found and Homebrew cannot install one.
    """
    from asdfplug.logging import get_global_logger

    logger = get_global_logger()

    if shutil.which("brew"):
        for version in supported_versions:
            llvm_config = _brew_llvm_config(f"llvm@{version}")
            if llvm_config:
                logger.info(f"Using Homebrew LLVM@{version}: {llvm_config}")
                return llvm_config

        llvm_config = _brew_llvm_config("llvm")
        if llvm_config:
            major = llvm_major_version(llvm_config)
            if major in supported_versions:
                logger.info(f"Using Homebrew LLVM {major}: {llvm_config}")
                return llvm_config
            wanted = ", ".join(str(v) for v in sorted(supported_versions))
            logger.info(f"Found LLVM {major} but a version in ({wanted}) is required")

    system_llvm = shutil.which("llvm-config")
    if system_llvm:
        logger.info(f"Using system LLVM: {system_llvm}")
        return Path(system_llvm)

    if not shutil.which("brew"):
        raise BuildError(
            "LLVM is required but Homebrew is not installed. Please install "
            f"Homebrew and then run: brew install {brew_formula}"
        )

    logger.info(f"LLVM not found. Installing {brew_formula} via Homebrew...")
    run_command(["brew", "install", brew_formula])
    llvm_config = _brew_llvm_config(brew_formula)
    if llvm_config is None:
        raise BuildError(f"Installed {brew_formula} but llvm-config was not found")
    logger.info(f"Installed {brew_formula} via Homebrew: {llvm_config}")
    return llvm_config


def require_clang() -> None:
    """macOS only: clang comes with the Xcode command line tools."""
    if not shutil.which("clang"):
        raise BuildError(
            "XCode command line tools are required. Please run: xcode-select --install"
        )


# -------------------------------
# Linux
# -------------------------------


def find_package_manager() -> str | None:
    for manager in PACKAGE_MANAGERS:
        if shutil.which(manager):
            return manager
    return None


def _privileged(cmd: list[str]) -> list[str]:
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        return cmd
    return ["sudo", *cmd]


def install_packages(manager: str, packages: Sequence[str]) -> None:
    """Install system packages with the given package manager.

    apt-get indexes are refreshed first.
    """
    if manager == "apt-get":
        run_command(_privileged(["apt-get", "update"]))
    run_command(_privileged([manager, "install", "-y", *packages]))


def ensure_linux_toolchain(packages: Mapping[str, Mapping[str, Sequence[str]]]) -> None:
    """Make sure clang and llvm-config are on PATH, installing them if not.

    Args:
        packages: Package names per manager and requirement, as in the
            recipe's build.packages
            (e.g., {"apt-get": {"clang": ["clang"], "llvm-config": ["llvm-dev"]}}).

    Raises:
        BuildError: If a requirement is missing and cannot be installed.
    """
    from asdfplug.logging import get_global_logger

    logger = get_global_logger()
    manager: str | None = None

    for requirement in LINUX_REQUIREMENTS:
        if shutil.which(requirement):
            continue

        logger.info(f"{requirement} not found. Installing via package manager...")
        manager = manager or find_package_manager()
        names = list((packages.get(manager, {}) if manager else {}).get(requirement, []))
        if manager is None or not names:
            raise BuildError(
                f"{requirement} is required. Please install it with your system "
                "package manager (e.g., apt install clang llvm-dev)"
            )
        install_packages(manager, names)

    llvm_config = shutil.which("llvm-config")
    logger.info(f"Using system LLVM: {llvm_config}")
