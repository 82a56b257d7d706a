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


"""Source build support for asdfplug.

This package turns a tagged upstream checkout into a binary that can be
installed. It includes:
    - source: shallow git clone of a tag
    - toolchain: platform detection, LLVM discovery, package installation
    - make: the make-based builder (registered as "make")

Example:
    from pathlib import Path
    from asdfplug.build import clone_tag, get_builder

    source_dir = clone_tag(
        "https://github.com/odin-lang/Odin",
        "dev-2024-04",
        Path("/tmp/dl/odin-source"),
    )
    artifact = get_builder("make", config["tool"]).build(source_dir)

    print(f"Built: {artifact.binary}")
"""

# Import builder modules to trigger self-registration
from . import make  # noqa: F401
from .base import BinaryArtifact, Builder, get_builder, register_builder
from .source import clone_tag

__all__ = ["BinaryArtifact", "Builder", "clone_tag", "get_builder", "register_builder"]
