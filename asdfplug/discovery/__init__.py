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

"""Remote version discovery for asdfplug.

This package finds out which versions a remote repository publishes. It has
two independent parts:

Tag Sources (listing):
    smart_http : SmartHttpSource
        Reads <repo>/info/refs?service=git-upload-pack with requests and
        parses the pkt-line ref advertisement. Default.
    git_ls_remote : GitLsRemoteSource
        Runs `git ls-remote --tags --refs <repo>`.

Latest Resolution:
    resolve_latest : function
        Follows <repo>/releases/latest and reads the tag from the redirect.

The source registry allows dynamic lookup based on tool.versions.source in
the recipe.

Example:
    ```python
    from asdfplug.discovery import get_source, resolve_latest

    source = get_source("smart_http")
    tags = list(source.list_tags("https://github.com/odin-lang/Odin"))

    latest = resolve_latest("https://github.com/odin-lang/Odin")
    ```
"""

# Import source modules to trigger self-registration
from . import (
    ls_remote,  # noqa: F401
    smart_http,  # noqa: F401
)
from .base import TagSource, get_source, register_source
from .latest import resolve_latest, tag_from_location

__all__ = [
    "TagSource",
    "get_source",
    "register_source",
    "resolve_latest",
    "tag_from_location",
]
