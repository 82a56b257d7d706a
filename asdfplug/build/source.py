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


"""Shallow checkout of a tagged source tree."""

from __future__ import annotations

from pathlib import Path
import shutil
import subprocess

from asdfplug.discovery.ls_remote import git_auth_args, git_env
from asdfplug.exceptions import FetchError


def candidate_refs(version: str, strip_prefix: str = "") -> list[str]:
    """Refs to try for a version, in order.

    Listed versions have their prefix stripped ("v1.2" is shown as "1.2"),
    so the prefixed form is tried second.
    """
    refs = [version]
    if strip_prefix and not version.startswith(strip_prefix):
        refs.append(f"{strip_prefix}{version}")
    return refs


def clone_tag(
    repo_url: str,
    version: str,
    dest: Path,
    *,
    token: str | None = None,
    strip_prefix: str = "",
) -> Path:
    """Clone 'version' of repo_url into dest with `git clone --depth 1 --branch`.

    Args:
        repo_url: Remote repository location.
        version: Tag to check out.
        dest: Target directory. Replaced if it already exists.
        token: Optional bearer credential.
        strip_prefix: Version prefix the catalog strips from tag names.

    Returns:
        dest

    Raises:
        FetchError: If git is missing or no candidate ref can be cloned.
    """
    from asdfplug.logging import get_global_logger

    logger = get_global_logger()
    git = shutil.which("git")
    if git is None:
        raise FetchError("git is required to download sources but was not found on PATH")

    stderr = ""
    for ref in candidate_refs(version, strip_prefix):
        if dest.exists():
            shutil.rmtree(dest)
        cmd = [
            git,
            *git_auth_args(token),
            "clone",
            "--depth",
            "1",
            "--branch",
            ref,
            repo_url,
            str(dest),
        ]
        logger.verbose("SOURCE", f"git clone --depth 1 --branch {ref} {repo_url}")
        try:
            subprocess.run(cmd, capture_output=True, text=True, check=True, env=git_env())
        except subprocess.CalledProcessError as err:
            stderr = (err.stderr or "").strip()
            logger.debug("SOURCE", f"Clone of {ref} failed (exit code {err.returncode})")
            continue
        except OSError as err:
            raise FetchError(f"Could not run git: {err}") from err
        return dest

    error_msg = f"Could not clone {repo_url} at version {version}"
    if stderr:
        error_msg += f"\n{stderr}"
    raise FetchError(error_msg)
