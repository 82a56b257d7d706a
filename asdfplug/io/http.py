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

"""
HTTP session factory for asdfplug.

Every outbound request (refs listing, latest-release redirect) goes through
a session built here so headers stay consistent:

- A User-Agent identifying asdfplug.
- Authorization: Bearer <token>, only when a token is configured.

No retry adapter is mounted. A failed request surfaces immediately as a
FetchError in the caller and the command aborts.
"""

from __future__ import annotations

import requests

USER_AGENT = "asdfplug/0.1 (+https://github.com/RogerCibrian/asdfplug)"

DEFAULT_TIMEOUT = 30


def auth_headers(token: str | None) -> dict[str, str]:
    """Authorization header for an optional bearer credential."""
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def make_session(token: str | None = None) -> requests.Session:
    """Create a requests.Session carrying the User-Agent and optional token.

    Args:
        token: Bearer credential (e.g., GITHUB_API_TOKEN). None or empty
            means unauthenticated.

    Returns:
        A configured session. Use it as a context manager.
    """
    s = requests.Session()
    s.headers.update({"User-Agent": USER_AGENT})
    s.headers.update(auth_headers(token))
    return s
