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


"""Download and install pipelines for asdfplug.

Public API:

download_release : function
    Clone, build and stage a version in the download directory.
install_version : function
    Install a staged version with its launcher script.
"""

from .installer import download_release, install_root, install_version
from .wrapper import render_wrapper, write_wrapper

__all__ = [
    "download_release",
    "install_root",
    "install_version",
    "render_wrapper",
    "write_wrapper",
]
