"""
Version ordering and filtering for asdfplug.

This package turns raw upstream tag names into the ordered list of
installable versions a version manager shows to users. It does no I/O:
tags come in from asdfplug.discovery, ordered names go out.

Modules
-------
keys : module
    VersionTag, VersionComparisonKey, sort_tags, sort_versions and
    compare_versions.
filters : module
    Registry of tag filters (all, prefix, regex, exclude_prerelease).

Ordering Rules
--------------
Tags are rewritten ("-"/"+" -> ".", ".p<digit>" -> ".z<digit>", trailing
".z"), split on "." and compared field by field:

1. Field 1 as raw text.
2. Fields 2-5 numerically, then lexically; absent fields sort lowest.
3. Remaining fields, then the raw text, only to break ties.

Examples
--------
    >>> from asdfplug.versioning import sort_versions
    >>> sort_versions(["1.3", "1.2.p1", "1.2"])
    ['1.2', '1.2.p1', '1.3']
    >>> sort_versions(["1.9", "1.10", "1.2"])
    ['1.2', '1.9', '1.10']

Notes
-----
- Sorting is stable and total: the same tags always sort the same way,
  whatever order they were fetched in.
- Field 1 is lexical: "10.0" sorts before "2.0".
"""

from .filters import filter_tags, get_filter, register_filter, strip_version_prefix
from .keys import (
    VersionComparisonKey,
    VersionTag,
    compare_versions,
    sort_key_text,
    sort_tags,
    sort_versions,
)

__all__ = [
    "VersionComparisonKey",
    "VersionTag",
    "compare_versions",
    "filter_tags",
    "get_filter",
    "register_filter",
    "sort_key_text",
    "sort_tags",
    "sort_versions",
    "strip_version_prefix",
]
