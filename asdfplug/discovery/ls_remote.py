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

"""`git ls-remote` tag source for asdfplug.

Runs the git client against the remote and parses its tab-separated output:

    <sha>\\trefs/tags/dev-2024-04

This works for any transport git understands (https, ssh, file), at the cost
of requiring git on PATH. A bearer token is passed to git as an
http.extraHeader so it never appears in the remote URL.

Recipe Configuration:
    ```yaml
    tool:
      versions:
        source: git_ls_remote
    ```
"""

from __future__ import annotations

from collections.abc import Iterator
import os
import shutil
import subprocess

from asdfplug.exceptions import FetchError
from asdfplug.io import auth_headers

from .base import register_source, tag_name_from_ref


def git_auth_args(token: str | None) -> list[str]:
    """`git -c` arguments that attach an optional bearer credential."""
    return [
        arg
        for name, value in auth_headers(token).items()
        for arg in ("-c", f"http.extraHeader={name}: {value}")
    ]


def git_env() -> dict[str, str]:
    """Environment for git subprocesses; credential prompts are disabled."""
    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


class GitLsRemoteSource:
    """Tag source that shells out to `git ls-remote --tags --refs`."""

    def list_tags(
        self, repo_url: str, token: str | None = None, timeout: int = 30
    ) -> Iterator[str]:
        from asdfplug.logging import get_global_logger

        logger = get_global_logger()
        git = shutil.which("git")
        if not git:
            raise FetchError("git is required to list tags but was not found on PATH")

        cmd = [git, *git_auth_args(token), "ls-remote", "--tags", "--refs", repo_url]
        logger.verbose("DISCOVERY", "Source: git_ls_remote")
        logger.debug("GIT", f"git ls-remote --tags --refs {repo_url}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                env=git_env(),
            )
        except subprocess.CalledProcessError as err:
            error_msg = f"git ls-remote failed for {repo_url} (exit code {err.returncode})"
            if err.stderr:
                error_msg += f"\n{err.stderr.strip()}"
            raise FetchError(error_msg) from err
        except OSError as err:
            raise FetchError(f"Could not run git ls-remote: {err}") from err

        for line in result.stdout.splitlines():
            _oid, sep, ref = line.partition("\t")
            if not sep:
                continue
            name = tag_name_from_ref(ref.strip())
            if name is not None:
                yield name


# Register this source when the module is imported
register_source("git_ls_remote", GitLsRemoteSource)
