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

"""Tag source protocol and registry for asdfplug.

A tag source answers one question: which tags does this remote repository
publish? Sources differ only in how they ask:

- smart_http: GET <repo>/info/refs?service=git-upload-pack with requests
    and parse the pkt-line advertisement (no git binary needed)
- git_ls_remote: run `git ls-remote --tags --refs <repo>`

Design Philosophy:
    - Sources are Protocol classes (structural subtyping, not inheritance)
    - Registration happens at module import time (sources self-register)
    - Each source is stateless and instantiated on demand
    - list_tags() is a generator; tags come out in whatever order the
      remote sends them and must be sorted downstream

Example:
    Implementing a custom source:
        ```python
        from asdfplug.discovery.base import register_source

        class StaticSource:
            def list_tags(self, repo_url, token=None, timeout=30):
                yield from ["dev-2024-01", "dev-2024-02"]

        register_source("static", StaticSource)
        ```
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from asdfplug.exceptions import ConfigError

REFS_TAGS_PREFIX = "refs/tags/"
PEELED_SUFFIX = "^{}"


class TagSource(Protocol):
    """Protocol for remote tag listing."""

    def list_tags(
        self, repo_url: str, token: str | None = None, timeout: int = 30
    ) -> Iterator[str]:
        """Yield every tag name the remote publishes.

        Args:
            repo_url: Remote repository location
                (e.g., "https://github.com/odin-lang/Odin").
            token: Optional bearer credential.
            timeout: Per-request timeout in seconds, where applicable.

        Yields:
            Tag names with "refs/tags/" removed, peeled refs excluded.

        Raises:
            FetchError: On network, DNS, HTTP status or process failure.
        """
        ...


def tag_name_from_ref(ref: str) -> str | None:
    """Return the tag name for a tag ref, None for anything else.

    Example:
        >>> tag_name_from_ref("refs/tags/dev-2024-01")
        'dev-2024-01'
        >>> tag_name_from_ref("refs/heads/master") is None
        True
    """
    if not ref.startswith(REFS_TAGS_PREFIX) or ref.endswith(PEELED_SUFFIX):
        return None
    name = ref[len(REFS_TAGS_PREFIX) :]
    return name or None


# -------------------------------
# Source Registry
# -------------------------------

_SOURCE_REGISTRY: dict[str, type[TagSource]] = {}


def register_source(name: str, source_class: type[TagSource]) -> None:
    """Register a tag source by name. Re-registering a name overwrites it."""
    _SOURCE_REGISTRY[name] = source_class


def get_source(name: str) -> TagSource:
    """Get a new tag source instance by name.

    Raises:
        ConfigError: If the source name is not registered. The message lists
            the available sources.
    """
    if name not in _SOURCE_REGISTRY:
        available = ", ".join(_SOURCE_REGISTRY.keys())
        raise ConfigError(
            f"Unknown tag source: {name!r}. Available: {available or '(none)'}"
        )
    return _SOURCE_REGISTRY[name]()
