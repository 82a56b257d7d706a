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

"""Version ordering for asdfplug.

This module is format-agnostic: it does NOT fetch anything. It turns tag
names into comparison keys and sorts them with the ordering asdf plugins
have always used, so installed-version directories keep sorting the same
way for any tooling that parses them.

Key derivation (one tag at a time):

1. Every "-" or "+" becomes ".".
2. Every literal ".p<digit>" becomes ".z<digit>", so patch releases such as
   "1.2.p1" land after "1.2" and before "1.3".
3. A trailing ".z" sentinel segment is appended.
4. The result is split on "." into fields.

Field comparison:

- Field 1 is compared as raw text (code point order, which matches C-locale
  byte order for UTF-8).
- Fields 2-5 are compared numerically-then-lexically: an absent field sorts
  lowest, then fields with no leading digits (by text), then fields with
  leading digits (by integer value, then by the text after the digits).
- Fields beyond the fifth only break ties, using the same rule.
- The untouched tag text is the last tie-breaker, so the order is total and
  the output does not depend on input order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import re

COMPARED_FIELDS = 5
SENTINEL = "z"

_SEPARATORS = re.compile(r"[-+]")
_PATCH_MARKER = re.compile(r"\.p(\d)")
_LEADING_DIGITS = re.compile(r"(\d+)(.*)", re.DOTALL)

FieldKey = tuple[int, int, str]

# Field ranks: absent < alpha-led < digit-led
_ABSENT: FieldKey = (0, 0, "")
_ALPHA_RANK = 1
_NUMERIC_RANK = 2


def sort_key_text(tag: str) -> str:
    """Rewrite a tag into its dotted sort-key form.

    Example:
        >>> sort_key_text("1.2.p1")
        '1.2.z1.z'
        >>> sort_key_text("dev-2024-01")
        'dev.2024.01.z'
    """
    text = _SEPARATORS.sub(".", tag)
    text = _PATCH_MARKER.sub(rf".{SENTINEL}\1", text)
    return f"{text}.{SENTINEL}"


def _field_key(field: str | None) -> FieldKey:
    """Numeric-then-lexical key for one of fields 2 and up."""
    if field is None:
        return _ABSENT
    m = _LEADING_DIGITS.match(field)
    if m is None:
        return (_ALPHA_RANK, 0, field)
    return (_NUMERIC_RANK, int(m.group(1)), m.group(2))


@dataclass(frozen=True)
class VersionComparisonKey:
    """Comparison key derived from a tag.

    Attributes:
        text: The rewritten sort-key text (e.g., "1.2.z1.z").
        fields: text split on ".".

    Keys are ordered by fields 1-5 first; see the module docstring.
    """

    text: str
    fields: tuple[str, ...]

    @classmethod
    def from_tag(cls, tag: str) -> VersionComparisonKey:
        text = sort_key_text(tag)
        return cls(text=text, fields=tuple(text.split(".")))

    def primary(self) -> tuple:
        """The part of the key the five-field comparison looks at."""
        padded = self.fields + (None,) * (COMPARED_FIELDS - len(self.fields))
        head = padded[0]
        return (head,) + tuple(_field_key(f) for f in padded[1:COMPARED_FIELDS])

    def ordering(self) -> tuple:
        """Full ordering tuple: the five compared fields, then the rest."""
        extra = tuple(_field_key(f) for f in self.fields[COMPARED_FIELDS:])
        return self.primary() + (extra,)

    def __lt__(self, other: VersionComparisonKey) -> bool:
        if not isinstance(other, VersionComparisonKey):
            return NotImplemented
        return self.ordering() < other.ordering()


@dataclass(frozen=True)
class VersionTag:
    """A tag name as published upstream.

    Tags order by their comparison key, then by raw text, so any two
    distinct tags compare unequal.

    Attributes:
        raw: Tag text, unmodified (e.g., "dev-2024-04").
    """

    raw: str

    @property
    def key(self) -> VersionComparisonKey:
        return VersionComparisonKey.from_tag(self.raw)

    def ordering(self) -> tuple:
        return (self.key.ordering(), self.raw)

    def __lt__(self, other: VersionTag) -> bool:
        if not isinstance(other, VersionTag):
            return NotImplemented
        return self.ordering() < other.ordering()

    def __str__(self) -> str:
        return self.raw


def sort_tags(tags: Iterable[VersionTag]) -> list[VersionTag]:
    """Sort VersionTag objects ascending."""
    return sorted(tags, key=VersionTag.ordering)


def sort_versions(tags: Iterable[str]) -> list[str]:
    """Sort tags ascending, returning the original text of each.

    Args:
        tags: Tag names in any order (a generator is fine).

    Returns:
        A new list, oldest first.

    Example:
        >>> sort_versions(["1.3", "1.2.p1", "1.2"])
        ['1.2', '1.2.p1', '1.3']
        >>> sort_versions(["1.9", "1.10", "1.2"])
        ['1.2', '1.9', '1.10']
    """
    return [str(tag) for tag in sort_tags(VersionTag(t) for t in tags)]


def compare_versions(a: str, b: str) -> int:
    """Compare two tags. Returns -1 if a < b, 0 if equal, 1 if a > b."""
    ka, kb = VersionTag(a).ordering(), VersionTag(b).ordering()
    return (ka > kb) - (ka < kb)
