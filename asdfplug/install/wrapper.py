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


"""Launcher script generation for installed tools.

Some tools locate their standard library through an environment variable
(Odin reads ODIN_ROOT). The installer renames the real binary to
"<binary>.bin" and puts a small bash launcher in its place that exports
the variable as the install root and execs the real binary.

The launcher finds the install root relative to its own location, so the
installation can be moved without regenerating it.

Example:
    from pathlib import Path
    from asdfplug.install.wrapper import write_wrapper

    write_wrapper(Path("/opt/odin/bin/odin"), binary="odin", env_var="ODIN_ROOT")
"""

from __future__ import annotations

from pathlib import Path
import re
import stat

from asdfplug.exceptions import ConfigError

BIN_SUFFIX = ".bin"

_ENV_VAR_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_TEMPLATE = """\
#!/usr/bin/env bash
# {binary} launcher: sets {env_var} to the install root
SCRIPT_DIR="$(cd "$(dirname "${{BASH_SOURCE[0]}}")" && pwd)"
{env_var}="$(dirname "$SCRIPT_DIR")"
export {env_var}
exec "${env_var}/bin/{binary}{suffix}" "$@"
"""


def render_wrapper(binary: str, env_var: str) -> str:
    """Return the launcher script text.

    Raises:
        ConfigError: If env_var is not a valid shell variable name or the
            binary name contains a path separator.
    """
    if not _ENV_VAR_NAME.match(env_var):
        raise ConfigError(f"Invalid wrapper environment variable name: {env_var!r}")
    if not binary or "/" in binary:
        raise ConfigError(f"Invalid binary name: {binary!r}")
    return _TEMPLATE.format(binary=binary, env_var=env_var, suffix=BIN_SUFFIX)


def write_wrapper(path: Path, binary: str, env_var: str) -> Path:
    """Write the launcher to path and mark it executable."""
    path.write_text(render_wrapper(binary, env_var), encoding="utf-8")
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path
