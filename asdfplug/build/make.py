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


"""`make`-based builder.

Runs `make <target>` at the top of the source tree after preparing the
native toolchain, then checks that the binary and the support directories
named in the recipe exist.

Recipe Configuration:
    ```yaml
    tool:
      build:
        strategy: make
        target: release-native
        llvm:
          supported_versions: [20, 19, 18, 17, 14, 13, 12, 11]
          brew_formula: "llvm@20"
        packages:
          apt-get:
            clang: [clang]
            llvm-config: [llvm-dev]
      install:
        binary: odin
        directories: [base, core, vendor]
    ```

Configuration Fields:
    - **target** (str): make target. Default: "release".
    - **llvm.supported_versions** (list of int): LLVM majors in preference
        order. Used on macOS only.
    - **llvm.brew_formula** (str): Formula installed when no LLVM is found.
    - **packages** (dict): Linux package names per manager and requirement.

On macOS the chosen llvm-config is passed to make as LLVM_CONFIG.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from asdfplug.exceptions import BuildError

from . import toolchain
from .base import BinaryArtifact, register_builder

DEFAULT_LLVM_VERSIONS = [20, 19, 18, 17, 14, 13, 12, 11]


class MakeBuilder:
    """Builds a tool with make and the system LLVM toolchain."""

    def __init__(self, tool: dict[str, Any]) -> None:
        build = tool.get("build", {}) or {}
        install = tool.get("install", {}) or {}
        llvm = build.get("llvm", {}) or {}

        self.tool_name: str = tool.get("name", "")
        self.target: str = build.get("target", "release")
        self.supported_versions: list[int] = [
            int(v) for v in llvm.get("supported_versions", DEFAULT_LLVM_VERSIONS)
        ]
        default_formula = (
            f"llvm@{self.supported_versions[0]}" if self.supported_versions else "llvm"
        )
        self.brew_formula: str = llvm.get("brew_formula", default_formula)
        self.packages: dict[str, dict[str, list[str]]] = build.get("packages", {}) or {}
        self.binary: str = install.get("binary") or self.tool_name
        self.directories: list[str] = list(install.get("directories", []) or [])

    def build(self, source_dir: Path) -> BinaryArtifact:
        """Build the tree at source_dir and return the artifact.

        Raises:
            BuildError: Unsupported platform, missing toolchain, make failure,
                or missing outputs.
        """
        from asdfplug.logging import get_global_logger

        logger = get_global_logger()
        system = toolchain.detect_platform()
        logger.verbose("BUILD", f"Platform: {system}")

        env = dict(os.environ)
        if system == toolchain.DARWIN:
            toolchain.require_clang()
            llvm_config = toolchain.find_llvm_config(
                self.supported_versions, self.brew_formula
            )
            env["LLVM_CONFIG"] = str(llvm_config)
        else:
            toolchain.ensure_linux_toolchain(self.packages)

        try:
            toolchain.run_command(["make", self.target], cwd=source_dir, env=env)
        except BuildError as err:
            raise BuildError(
                f"Could not build {self.tool_name} for {system}: {err}"
            ) from err

        return self._collect(source_dir)

    def _collect(self, source_dir: Path) -> BinaryArtifact:
        binary = source_dir / self.binary
        if not binary.is_file():
            raise BuildError(f"Build finished but {binary} was not produced")

        directories = []
        for name in self.directories:
            path = source_dir / name
            if not path.is_dir():
                raise BuildError(f"Source tree has no {name!r} directory")
            directories.append(path)

        return BinaryArtifact(binary=binary, directories=tuple(directories))


register_builder("make", MakeBuilder)
