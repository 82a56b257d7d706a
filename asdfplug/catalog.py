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

"""Version catalog for asdfplug.

The catalog answers "which versions of this tool exist, in what order, and
which one is latest". It ties together the pieces configured by a recipe:

    TagSource  ->  filter_tags  ->  sort_versions
    (remote)       (relevance)      (ordering)

Every call recomputes from the remote. Nothing is cached between
invocations.

An empty catalog is a normal outcome: list_all() returns [] when the
remote has no matching tags. Only a failed fetch raises FetchError, and
only latest_stable() treats "nothing to choose from" as an error.

Example:
    ```python
    from asdfplug.catalog import VersionCatalog
    from asdfplug.config import PluginSettings, load_tool_config

    catalog = VersionCatalog.from_config(load_tool_config("odin"), PluginSettings())
    print(" ".join(catalog.list_all()))
    print(catalog.resolve("latest"))
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from asdfplug.config.loader import tool_section
from asdfplug.config.settings import PluginSettings
from asdfplug.discovery import get_source, resolve_latest
from asdfplug.exceptions import EmptyCatalogError
from asdfplug.versioning import VersionTag, filter_tags, sort_tags, sort_versions

LATEST = "latest"


class VersionCatalog:
    """Fetch, filter, sort and resolve the versions of one tool.

    Args:
        name: Tool name, used in messages.
        repo_url: Remote repository location.
        settings: Runtime settings (token, timeout).
        source: Registered TagSource name.
        filter_config: Filter mapping ({"type": ..., ...}).
        strip_prefix: Leading version marker removed from listed tags.
        latest_strip_prefix: Leading marker removed from the resolved
            latest tag.
    """

    def __init__(
        self,
        name: str,
        repo_url: str,
        settings: PluginSettings | None = None,
        *,
        source: str = "smart_http",
        filter_config: dict[str, Any] | None = None,
        strip_prefix: str = "v",
        latest_strip_prefix: str = "",
    ) -> None:
        self.name = name
        self.repo_url = repo_url
        self.settings = settings or PluginSettings()
        self.source = source
        self.filter_config = filter_config or {"type": "all"}
        self.strip_prefix = strip_prefix
        self.latest_strip_prefix = latest_strip_prefix

    @classmethod
    def from_config(
        cls, config: dict[str, Any], settings: PluginSettings | None = None
    ) -> VersionCatalog:
        """Build a catalog from a merged recipe."""
        tool = tool_section(config)
        versions = tool.get("versions", {}) or {}
        latest = versions.get("latest", {}) or {}
        return cls(
            tool["name"],
            tool["repo"],
            settings,
            source=versions.get("source", "smart_http"),
            filter_config=versions.get("filter"),
            strip_prefix=versions.get("strip_prefix", "v") or "",
            latest_strip_prefix=latest.get("strip_prefix", "") or "",
        )

    def list_tags(self) -> Iterator[str]:
        """All tag names of the remote, unordered and unfiltered."""
        tag_source = get_source(self.source)
        return tag_source.list_tags(
            self.repo_url,
            token=self.settings.github_token,
            timeout=self.settings.http_timeout,
        )

    def filter_relevant(self, tags: Iterable[str]) -> Iterator[str]:
        """Strip the version prefix and keep tags the recipe's filter accepts."""
        return filter_tags(tags, self.filter_config, self.strip_prefix)

    def sort_versions(self, tags: Iterable[str]) -> list[str]:
        return sort_versions(tags)

    def version_tags(self) -> list[VersionTag]:
        """Fetch, filter and sort into VersionTag objects, oldest first.

        Raises:
            FetchError: If the remote could not be listed.
            ConfigError: If the recipe's source or filter is invalid.
        """
        from asdfplug.logging import get_global_logger

        logger = get_global_logger()
        logger.verbose("CATALOG", f"Listing tags of {self.repo_url} via {self.source}")

        tags = sort_tags(VersionTag(t) for t in self.filter_relevant(self.list_tags()))

        logger.verbose("CATALOG", f"{len(tags)} version(s) of {self.name}")
        return tags

    def list_all(self) -> list[str]:
        """Version names, oldest first. Returns [] when nothing matches."""
        return [str(tag) for tag in self.version_tags()]

    def latest_stable(self, query: str = "") -> str:
        """Highest version starting with 'query'.

        Raises:
            EmptyCatalogError: If no version matches.
            FetchError: If the remote could not be listed.
        """
        candidates = [v for v in self.list_all() if v.startswith(query)]
        if not candidates:
            if query:
                raise EmptyCatalogError(
                    f"No installable versions of {self.name} match {query!r}"
                )
            raise EmptyCatalogError(f"No installable versions of {self.name} found")
        return candidates[-1]

    def resolve_latest(self) -> str:
        """Resolve the release redirect to a concrete tag."""
        return resolve_latest(
            self.repo_url,
            token=self.settings.github_token,
            strip_prefix=self.latest_strip_prefix,
            timeout=self.settings.http_timeout,
        )

    def resolve(self, version: str) -> str:
        """Map "latest" to a concrete tag; any other version is returned as is."""
        if version == LATEST:
            from asdfplug.logging import get_global_logger

            get_global_logger().info(f"Resolving latest version of {self.name}")
            return self.resolve_latest()
        return version
