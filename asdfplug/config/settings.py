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

"""Runtime settings for asdfplug.

The version manager hands a plugin its inputs through environment variables
(ASDF_INSTALL_PATH, ASDF_DOWNLOAD_PATH, ...). Library code never reads them
directly: the CLI builds a PluginSettings once with from_environ() and
passes it down, so tests construct settings without touching os.environ.

Environment Variables:

- GITHUB_API_TOKEN: Optional bearer credential for remote requests
- ASDF_INSTALL_TYPE: "version" or "ref"
- ASDF_INSTALL_VERSION: Version being downloaded/installed
- ASDF_INSTALL_PATH: Directory the version is installed into
- ASDF_DOWNLOAD_PATH: Directory build artifacts are staged in
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from asdfplug.exceptions import ConfigError
from asdfplug.io import DEFAULT_TIMEOUT


@dataclass(frozen=True)
class PluginSettings:
    """Explicit runtime configuration passed into catalog and installer.

    Attributes:
        github_token: Bearer credential, or None for anonymous requests.
        install_type: asdf install type ("version" or "ref").
        install_version: Version requested by the version manager.
        install_path: Install root for the version.
        download_path: Staging directory for downloaded/built artifacts.
        http_timeout: Per-request timeout in seconds.
    """

    github_token: str | None = None
    install_type: str = "version"
    install_version: str | None = None
    install_path: Path | None = None
    download_path: Path | None = None
    http_timeout: int = DEFAULT_TIMEOUT

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> PluginSettings:
        """Build settings from an environment mapping (usually os.environ)."""

        def _path(name: str) -> Path | None:
            value = environ.get(name, "").strip()
            return Path(value) if value else None

        return cls(
            github_token=environ.get("GITHUB_API_TOKEN", "").strip() or None,
            install_type=environ.get("ASDF_INSTALL_TYPE", "").strip() or "version",
            install_version=environ.get("ASDF_INSTALL_VERSION", "").strip() or None,
            install_path=_path("ASDF_INSTALL_PATH"),
            download_path=_path("ASDF_DOWNLOAD_PATH"),
        )

    def require_download_path(self) -> Path:
        if self.download_path is None:
            raise ConfigError("ASDF_DOWNLOAD_PATH is not set")
        return self.download_path

    def require_install_path(self) -> Path:
        if self.install_path is None:
            raise ConfigError("ASDF_INSTALL_PATH is not set")
        return self.install_path
