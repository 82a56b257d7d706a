"""
Pytest configuration and shared fixtures for asdfplug tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from asdfplug.config import PluginSettings
from asdfplug.logging import SilentLogger, set_global_logger

ODIN_REPO = "https://github.com/odin-lang/Odin"
ZERO_OID = "0" * 40


@pytest.fixture(autouse=True)
def reset_global_logger():
    """The CLI installs a global logger; put the silent one back afterwards."""
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def sample_recipe_data() -> dict[str, Any]:
    """
    Provide sample recipe configuration data.

    Returns a complete recipe structure for testing.
    """
    return {
        "apiVersion": "asdfplug/v1",
        "tool": {
            "name": "odin",
            "repo": ODIN_REPO,
            "test_command": "odin version",
            "versions": {
                "source": "smart_http",
                "strip_prefix": "v",
                "filter": {"type": "prefix", "prefix": "dev-"},
            },
            "build": {
                "strategy": "make",
                "target": "release-native",
                "llvm": {"supported_versions": [20, 19, 18], "brew_formula": "llvm@20"},
                "packages": {
                    "apt-get": {"clang": ["clang"], "llvm-config": ["llvm-dev"]},
                },
            },
            "install": {
                "binary": "odin",
                "directories": ["base", "core", "vendor"],
                "wrapper": {"env_var": "ODIN_ROOT"},
            },
        },
    }


@pytest.fixture
def sample_org_defaults() -> dict[str, Any]:
    """Provide sample organization defaults."""
    return {
        "tool": {
            "versions": {"source": "git_ls_remote"},
            "build": {"llvm": {"supported_versions": [18, 17]}},
        },
    }


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("test.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def make_settings(tmp_test_dir: Path):
    """
    Factory fixture for PluginSettings rooted in the temp directory.

    Usage:
        settings = make_settings(install_version="dev-2024-04")
    """

    def _create(**overrides: Any) -> PluginSettings:
        values: dict[str, Any] = {
            "install_path": tmp_test_dir / "install",
            "download_path": tmp_test_dir / "download",
        }
        values.update(overrides)
        return PluginSettings(**values)

    return _create


def pkt_line(payload: str | bytes) -> bytes:
    """Encode one pkt-line (4 hex length digits include themselves)."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return f"{len(payload) + 4:04x}".encode("ascii") + payload


def advertisement(refs: list[str], capabilities: str = "multi_ack side-band-64k") -> bytes:
    """Build a smart-HTTP ref advertisement body listing 'refs'."""
    body = pkt_line("# service=git-upload-pack\n") + b"0000"
    for index, ref in enumerate(refs):
        line = f"{ZERO_OID} {ref}"
        if index == 0:
            line += f"\0{capabilities}"
        body += pkt_line(line + "\n")
    return body + b"0000"


@pytest.fixture
def make_advertisement():
    """Factory fixture returning the advertisement() builder."""
    return advertisement


@pytest.fixture
def fake_download_dir(tmp_test_dir: Path) -> Path:
    """A download directory as left by a successful download."""
    download = tmp_test_dir / "download"
    download.mkdir()
    binary = download / "odin"
    binary.write_text("#!/bin/sh\necho odin\n")
    binary.chmod(0o755)
    for name in ("base", "core", "vendor"):
        (download / name).mkdir()
        (download / name / "README.md").write_text(name)
    return download
