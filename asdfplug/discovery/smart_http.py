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

"""Git smart-HTTP tag source for asdfplug.

Lists tags by asking the remote for its ref advertisement, the same request
`git ls-remote` makes over HTTPS, but without needing a git binary:

    GET <repo>/info/refs?service=git-upload-pack

The response body is a sequence of pkt-lines. Each pkt-line starts with a
4-digit hex length that counts the 4 length bytes themselves; "0000" is a
flush packet. A typical body:

    001e# service=git-upload-pack\\n
    0000
    00a1<sha> HEAD\\0<capabilities>\\n
    003f<sha> refs/heads/master\\n
    0047<sha> refs/tags/dev-2024-04\\n
    004a<sha> refs/tags/dev-2024-04^{}\\n
    0000

Only refs/tags/* entries are kept, and peeled (^{}) entries are dropped, which
matches `git ls-remote --tags --refs`.

Recipe Configuration:
    ```yaml
    tool:
      repo: "https://github.com/odin-lang/Odin"
      versions:
        source: smart_http
    ```

Error Handling:

- FetchError: connection/DNS failure, HTTP status >= 400, a server "ERR"
  packet, or a malformed advertisement.
- Errors are chained with 'from err' for better debugging.
"""

from __future__ import annotations

from collections.abc import Iterator

import requests

from asdfplug.exceptions import FetchError
from asdfplug.io import make_session

from .base import register_source, tag_name_from_ref

SERVICE = "git-upload-pack"
_FLUSH = None


def refs_url(repo_url: str) -> str:
    """Ref advertisement URL for a repository location."""
    return f"{repo_url.rstrip('/')}/info/refs?service={SERVICE}"


def iter_pkt_lines(data: bytes) -> Iterator[bytes | None]:
    """Split a pkt-line stream into payloads; yields None for flush packets.

    Raises:
        FetchError: On a bad length prefix or truncated packet.
    """
    pos = 0
    end = len(data)
    while pos < end:
        prefix = data[pos : pos + 4]
        if len(prefix) < 4:
            raise FetchError(f"Truncated pkt-line length at byte {pos}")
        try:
            length = int(prefix, 16)
        except ValueError as err:
            raise FetchError(
                f"Malformed pkt-line length {prefix!r} at byte {pos}"
            ) from err

        if length == 0:
            yield _FLUSH
            pos += 4
            continue
        if length < 4:
            raise FetchError(f"Invalid pkt-line length {length} at byte {pos}")

        payload = data[pos + 4 : pos + length]
        if len(payload) != length - 4:
            raise FetchError(f"Truncated pkt-line at byte {pos}")
        yield payload
        pos += length


def parse_advertisement(data: bytes) -> Iterator[tuple[str, str]]:
    """Yield (object id, ref name) pairs from a smart-HTTP ref advertisement.

    The "# service=" banner, flush packets and capability lists are skipped.

    Raises:
        FetchError: If the server sent an "ERR" packet or the stream is
            malformed.
    """
    for payload in iter_pkt_lines(data):
        if payload is _FLUSH:
            continue
        line = payload.rstrip(b"\n")
        if line.startswith(b"# service="):
            continue
        if line.startswith(b"ERR "):
            message = line[4:].decode("utf-8", "replace")
            raise FetchError(f"Remote refused ref listing: {message}")

        # Capabilities ride on the first ref line after a NUL byte
        line = line.split(b"\0", 1)[0]
        oid, sep, ref = line.partition(b" ")
        if not sep:
            raise FetchError(f"Malformed ref line: {line!r}")
        yield oid.decode("ascii"), ref.decode("utf-8", "replace")


class SmartHttpSource:
    """Tag source that reads the Git smart-HTTP ref advertisement."""

    def list_tags(
        self, repo_url: str, token: str | None = None, timeout: int = 30
    ) -> Iterator[str]:
        from asdfplug.logging import get_global_logger

        logger = get_global_logger()
        url = refs_url(repo_url)
        logger.verbose("DISCOVERY", "Source: smart_http")
        logger.debug("HTTP", f"GET {url}")

        try:
            with make_session(token) as session:
                response = session.get(url, timeout=timeout)
                response.raise_for_status()
        except requests.exceptions.HTTPError as err:
            status = err.response.status_code if err.response is not None else "?"
            if status in (401, 403):
                raise FetchError(
                    f"Access denied listing tags of {repo_url} (HTTP {status}). "
                    f"Check GITHUB_API_TOKEN."
                ) from err
            if status == 404:
                raise FetchError(f"Repository not found: {repo_url}") from err
            raise FetchError(
                f"Listing tags of {repo_url} failed: HTTP {status}"
            ) from err
        except requests.exceptions.RequestException as err:
            raise FetchError(f"Failed to list tags of {repo_url}: {err}") from err

        size = len(response.content)
        logger.debug("HTTP", f"Response: {response.status_code} ({size} bytes)")

        for _oid, ref in parse_advertisement(response.content):
            name = tag_name_from_ref(ref)
            if name is not None:
                yield name


# Register this source when the module is imported
register_source("smart_http", SmartHttpSource)
