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

"""Tag filters for asdfplug.

A tool's recipe decides which upstream tags count as installable versions.
That decision is configuration, not logic: each tool names a filter type
under tool.versions.filter and the filter is looked up in a registry.

Available Filters:
    all : AllTagsFilter
        Keep every tag.
    prefix : PrefixFilter
        Keep tags starting with a fixed literal (Odin: "dev-").
    regex : RegexFilter
        Keep tags matching a regular expression (re.search semantics).
    exclude_prerelease : ExcludePrereleaseFilter
        Drop tags carrying a prerelease marker (alpha, beta, rc, dev, ...).

Recipe Configuration:
    ```yaml
    tool:
      versions:
        strip_prefix: "v"
        filter:
          type: prefix
          prefix: "dev-"
    ```

Example:
    ```python
    from asdfplug.versioning.filters import filter_tags

    tags = ["dev-2024-01", "v1.0.0", "dev-2024-02"]
    list(filter_tags(tags, {"type": "prefix", "prefix": "dev-"}))
    # ['dev-2024-01', 'dev-2024-02']
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
import re
from typing import Any, Protocol

from asdfplug.exceptions import ConfigError


class TagFilter(Protocol):
    """Protocol for tag inclusion predicates."""

    def matches(self, tag: str, filter_config: dict[str, Any]) -> bool:
        """Return True if the tag should be listed."""
        ...

    def validate_config(self, filter_config: dict[str, Any]) -> list[str]:
        """Return human-readable problems with the filter config."""
        ...


# -------------------------------
# Filter Registry
# -------------------------------

_FILTER_REGISTRY: dict[str, type[TagFilter]] = {}


def register_filter(name: str, filter_class: type[TagFilter]) -> None:
    """Register a tag filter by name. Re-registering a name overwrites it."""
    _FILTER_REGISTRY[name] = filter_class


def get_filter(name: str) -> TagFilter:
    """Get a new filter instance by name.

    Raises:
        ConfigError: If the filter name is not registered.
    """
    if name not in _FILTER_REGISTRY:
        available = ", ".join(_FILTER_REGISTRY.keys())
        raise ConfigError(
            f"Unknown tag filter: {name!r}. Available: {available or '(none)'}"
        )
    return _FILTER_REGISTRY[name]()


# -------------------------------
# Built-in filters
# -------------------------------


class AllTagsFilter:
    """Keep every tag."""

    def matches(self, tag: str, filter_config: dict[str, Any]) -> bool:
        return True

    def validate_config(self, filter_config: dict[str, Any]) -> list[str]:
        return []


class PrefixFilter:
    """Keep tags that start with filter.prefix."""

    def matches(self, tag: str, filter_config: dict[str, Any]) -> bool:
        return tag.startswith(filter_config["prefix"])

    def validate_config(self, filter_config: dict[str, Any]) -> list[str]:
        prefix = filter_config.get("prefix")
        if prefix is None:
            return ["Missing required field: tool.versions.filter.prefix"]
        if not isinstance(prefix, str) or not prefix:
            return ["tool.versions.filter.prefix must be a non-empty string"]
        return []


class RegexFilter:
    """Keep tags where filter.pattern matches anywhere in the tag."""

    def matches(self, tag: str, filter_config: dict[str, Any]) -> bool:
        return re.search(filter_config["pattern"], tag) is not None

    def validate_config(self, filter_config: dict[str, Any]) -> list[str]:
        pattern = filter_config.get("pattern")
        if pattern is None:
            return ["Missing required field: tool.versions.filter.pattern"]
        if not isinstance(pattern, str):
            return ["tool.versions.filter.pattern must be a string"]
        try:
            re.compile(pattern)
        except re.error as err:
            return [f"Invalid tool.versions.filter.pattern regex: {err}"]
        return []


# Marker must stand alone between separators/digits so "abc-release" is kept
_PRERELEASE_MARKER = re.compile(
    r"(?i)(?:^|[.\-+_\d])(?:dev|alpha|a|beta|b|rc|pre|preview|ea|snapshot|nightly)"
    r"(?:[.\-+_\d]|$)"
)


class ExcludePrereleaseFilter:
    """Drop tags carrying a prerelease marker (1.0.0-rc1, 2.0b3, dev-...)."""

    def matches(self, tag: str, filter_config: dict[str, Any]) -> bool:
        return _PRERELEASE_MARKER.search(tag) is None

    def validate_config(self, filter_config: dict[str, Any]) -> list[str]:
        return []


register_filter("all", AllTagsFilter)
register_filter("prefix", PrefixFilter)
register_filter("regex", RegexFilter)
register_filter("exclude_prerelease", ExcludePrereleaseFilter)


# -------------------------------
# Pipeline helpers
# -------------------------------


def strip_version_prefix(tag: str, prefix: str) -> str:
    """Drop a single leading version-prefix marker ("v1.2" -> "1.2")."""
    if prefix and tag.startswith(prefix):
        return tag[len(prefix) :]
    return tag


def filter_tags(
    tags: Iterable[str],
    filter_config: dict[str, Any] | None,
    strip_prefix: str = "v",
) -> Iterator[str]:
    """Strip the version prefix from each tag, then keep the relevant ones.

    Relative order is preserved. The prefix is stripped before the
    predicate runs, so a "v" is never part of what a filter sees.

    Args:
        tags: Tag names (e.g., from a TagSource).
        filter_config: Mapping with a "type" key plus filter options.
            None means "all".
        strip_prefix: Leading marker to drop. Empty string disables.

    Yields:
        Tag names that pass the filter, prefix stripped.

    Raises:
        ConfigError: If the filter type is unknown or its config is invalid.
    """
    filter_config = filter_config or {"type": "all"}
    if not isinstance(filter_config, dict):
        raise ConfigError(
            f"Filter configuration must be a mapping, got {type(filter_config).__name__}"
        )
    tag_filter = get_filter(filter_config.get("type", "all"))
    errors = tag_filter.validate_config(filter_config)
    if errors:
        raise ConfigError("; ".join(errors))

    for tag in tags:
        name = strip_version_prefix(tag, strip_prefix)
        if tag_filter.matches(name, filter_config):
            yield name
