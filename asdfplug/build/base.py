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


"""Builder protocol and registry for asdfplug.

Tools that ship as source are compiled after cloning. A builder turns a
source tree into a BinaryArtifact: the executable plus the support
directories that must sit next to it at runtime.

Design Philosophy:
    - Builders are Protocol classes (structural subtyping, not inheritance)
    - Registration happens at module import time (builders self-register)
    - A builder is constructed from the recipe's "tool" mapping and is
      otherwise stateless
    - Every failed external command surfaces as BuildError

Example:
    Implementing a custom builder:
        ```python
        from asdfplug.build.base import BinaryArtifact, register_builder

        class PrebuiltBuilder:
            def __init__(self, tool):
                self.binary = tool["install"]["binary"]

            def build(self, source_dir):
                return BinaryArtifact(binary=source_dir / self.binary)

        register_builder("prebuilt", PrebuiltBuilder)
        ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from asdfplug.exceptions import ConfigError


@dataclass(frozen=True)
class BinaryArtifact:
    """Output of a build.

    Attributes:
        binary: Path to the built executable.
        directories: Source-tree directories that ship with the binary.
    """

    binary: Path
    directories: tuple[Path, ...] = field(default_factory=tuple)


class Builder(Protocol):
    """Protocol for source builders.

    Implementations take the recipe's "tool" mapping in __init__.
    """

    def build(self, source_dir: Path) -> BinaryArtifact:
        """Compile the tree at source_dir.

        Raises:
            BuildError: If the toolchain is missing or a command fails.
        """
        ...


# -------------------------------
# Builder Registry
# -------------------------------

_BUILDER_REGISTRY: dict[str, type] = {}


def register_builder(name: str, builder_class: type) -> None:
    """Register a builder class by name. Re-registering a name overwrites it."""
    _BUILDER_REGISTRY[name] = builder_class


def get_builder(name: str, tool: dict[str, Any]) -> Builder:
    """Instantiate the builder registered as 'name' for a tool.

    Raises:
        ConfigError: If the builder name is not registered. The message lists
            the available builders.
    """
    if name not in _BUILDER_REGISTRY:
        available = ", ".join(_BUILDER_REGISTRY.keys())
        raise ConfigError(
            f"Unknown build strategy: {name!r}. Available: {available or '(none)'}"
        )
    return _BUILDER_REGISTRY[name](tool)