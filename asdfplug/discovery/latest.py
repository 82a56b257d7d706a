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

"""Latest-release resolution for asdfplug.

Maps the symbolic version "latest" to a concrete tag by following the
hosting site's "latest release" indirection. On GitHub:

    HEAD https://github.com/odin-lang/Odin/releases/latest
    302 Location: https://github.com/odin-lang/Odin/releases/tag/dev-2024-04

The tag is whatever follows the last "/tag/" in the Location path.

Error Handling:

- FetchError: the request itself failed (connection, DNS, HTTP >= 400).
- ResolutionError: the remote answered without a redirect, without a
  Location header, or with a Location that has no "/tag/<identifier>".
"""

from __future__ import annotations

from urllib.parse import unquote, urlparse

import requests

from asdfplug.exceptions import FetchError, ResolutionError
from asdfplug.io import DEFAULT_TIMEOUT, make_session
from asdfplug.versioning.filters import strip_version_prefix

TAG_MARKER = "/tag/"
RELEASE_TAG_MARKER = "/releases/tag/"


def latest_release_url(repo_url: str) -> str:
    """URL that redirects to the latest release of a repository."""
    return f"{repo_url.rstrip('/')}/releases/latest"


def tag_from_location(location: str, strip_prefix: str = "") -> str:
    """Extract the tag from a release redirect Location.

    Args:
        location: Absolute or relative redirect target.
        strip_prefix: Version-prefix marker to drop (e.g., "v").

    Returns:
        The tag identifier.

    Raises:
        ResolutionError: If the path has no "/tag/<identifier>". Everything
            after the marker is the tag, slashes included.

    Example:
        >>> tag_from_location("https://example.com/releases/tag/v2.3.0", "v")
        '2.3.0'
    """
    path = unquote(urlparse(location.strip()).path)
    if TAG_MARKER not in path:
        raise ResolutionError(f"Cannot find a release tag in location {location!r}")

    marker = RELEASE_TAG_MARKER if RELEASE_TAG_MARKER in path else TAG_MARKER
    tag = path.split(marker, 1)[1].strip("/")
    if not tag:
        raise ResolutionError(f"Cannot find a release tag in location {location!r}")

    tag = strip_version_prefix(tag, strip_prefix)
    if not tag:
        raise ResolutionError(f"Release tag in {location!r} is empty after prefix strip")
    return tag


def resolve_latest(
    repo_url: str,
    *,
    token: str | None = None,
    strip_prefix: str = "",
    timeout: int = DEFAULT_TIMEOUT,
) -> str:
    """Resolve "latest" to a concrete tag through the release redirect.

    Args:
        repo_url: Repository location (e.g., "https://github.com/odin-lang/Odin").
        token: Optional bearer credential.
        strip_prefix: Version-prefix marker to drop from the tag.
        timeout: Request timeout in seconds.

    Returns:
        The tag identifier the redirect points to.

    Raises:
        FetchError: If the request could not be completed.
        ResolutionError: If the response cannot be mapped to a tag.
    """
    from asdfplug.logging import get_global_logger

    logger = get_global_logger()
    url = latest_release_url(repo_url)
    logger.debug("HTTP", f"HEAD {url}")

    try:
        with make_session(token) as session:
            response = session.head(url, allow_redirects=False, timeout=timeout)
    except requests.exceptions.RequestException as err:
        raise FetchError(f"Failed to query latest release of {repo_url}: {err}") from err

    status = response.status_code
    logger.debug("HTTP", f"Response: {status} {response.reason}")

    if status >= 400:
        raise FetchError(
            f"Latest release request for {repo_url} failed: HTTP {status} "
            f"{response.reason}"
        )
    if not 300 <= status < 400:
        raise ResolutionError(
            f"Expected a redirect from {url}, got HTTP {status}. "
            f"Does {repo_url} publish releases?"
        )

    location = response.headers.get("Location")
    if not location:
        raise ResolutionError(f"Redirect from {url} has no Location header")

    tag = tag_from_location(location, strip_prefix)
    logger.verbose("DISCOVERY", f"Latest release: {tag}")
    return tag
