"""
Tests for asdfplug.install package.

Tests the download and install pipelines including:
- Launcher script rendering
- download_release with a stub builder and mocked clone
- install_version layout, executability and cleanup on failure
"""

from __future__ import annotations

import io
import os
from pathlib import Path
import subprocess
from unittest.mock import patch

import pytest

from asdfplug.build import BinaryArtifact
from asdfplug.exceptions import BuildError, ConfigError, InstallError
from asdfplug.install import (
    download_release,
    install_root,
    install_version,
    render_wrapper,
    write_wrapper,
)
from asdfplug.logging import DefaultLogger, set_global_logger

pytestmark = pytest.mark.unit

REPO = "https://github.com/odin-lang/Odin"


class StubBuilder:
    """Builder that 'builds' by creating the expected outputs."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.built: list[Path] = []

    def build(self, source_dir: Path) -> BinaryArtifact:
        self.built.append(source_dir)
        if self.fail:
            raise BuildError("make failed")
        (source_dir / "odin").write_text("binary")
        dirs = []
        for name in ("base", "core", "vendor"):
            (source_dir / name).mkdir()
            (source_dir / name / "lib.odin").write_text(name)
            dirs.append(source_dir / name)
        return BinaryArtifact(binary=source_dir / "odin", directories=tuple(dirs))


def _fake_clone(repo_url, version, dest, **kwargs):
    dest.mkdir(parents=True)
    return dest


class TestWrapper:
    """Tests for the launcher script."""

    def test_render(self):
        script = render_wrapper("odin", "ODIN_ROOT")

        assert script.startswith("#!/usr/bin/env bash\n")
        assert 'SCRIPT_DIR="$(cd "$(dirname "${BASH_SOURCE[0]}")" && pwd)"' in script
        assert 'ODIN_ROOT="$(dirname "$SCRIPT_DIR")"' in script
        assert "export ODIN_ROOT" in script
        assert 'exec "$ODIN_ROOT/bin/odin.bin" "$@"' in script

    def test_invalid_env_var(self):
        with pytest.raises(ConfigError, match="environment variable"):
            render_wrapper("odin", "ODIN-ROOT")

    def test_invalid_binary(self):
        with pytest.raises(ConfigError, match="binary name"):
            render_wrapper("../odin", "ODIN_ROOT")

    def test_write_is_executable(self, tmp_test_dir):
        path = write_wrapper(tmp_test_dir / "odin", "odin", "ODIN_ROOT")
        assert os.access(path, os.X_OK)


class TestDownloadRelease:
    """Tests for download_release."""

    def test_stages_binary_and_directories(self, sample_recipe_data, make_settings):
        settings = make_settings()
        builder = StubBuilder()

        with patch("asdfplug.install.installer.clone_tag", side_effect=_fake_clone) as clone:
            result = download_release(sample_recipe_data, settings, "dev-2024-04", builder)

        download = settings.download_path
        assert result.version == "dev-2024-04"
        assert result.binary_path == download / "odin"
        assert (download / "odin").read_text() == "binary"
        for name in ("base", "core", "vendor"):
            assert (download / name / "lib.odin").exists()
        assert not (download / "odin-source").exists()
        assert clone.call_args[0][:3] == (REPO, "dev-2024-04", download / "odin-source")

    def test_reports_each_stage(self, sample_recipe_data, make_settings):
        """Test the four download stages are announced as numbered steps."""
        stream = io.StringIO()
        set_global_logger(DefaultLogger(stream=stream))

        with patch("asdfplug.install.installer.clone_tag", side_effect=_fake_clone):
            download_release(sample_recipe_data, make_settings(), "dev-2024-04", StubBuilder())

        steps = [line for line in stream.getvalue().splitlines() if line.startswith("[")]
        assert steps == [
            "[1/4] Resolving odin dev-2024-04...",
            "[2/4] Downloading odin source dev-2024-04...",
            "[3/4] Building odin from source...",
            "[4/4] Staging build outputs...",
        ]

    def test_version_defaults_to_settings(self, sample_recipe_data, make_settings):
        settings = make_settings(install_version="dev-2024-03")

        with patch("asdfplug.install.installer.clone_tag", side_effect=_fake_clone):
            result = download_release(sample_recipe_data, settings, builder=StubBuilder())

        assert result.version == "dev-2024-03"

    def test_latest_is_resolved(self, requests_mock, sample_recipe_data, make_settings):
        requests_mock.head(
            f"{REPO}/releases/latest",
            status_code=302,
            headers={"Location": f"{REPO}/releases/tag/dev-2024-04"},
        )

        with patch("asdfplug.install.installer.clone_tag", side_effect=_fake_clone) as clone:
            result = download_release(
                sample_recipe_data, make_settings(), "latest", StubBuilder()
            )

        assert result.version == "dev-2024-04"
        assert clone.call_args[0][1] == "dev-2024-04"

    def test_build_failure_removes_source(self, sample_recipe_data, make_settings):
        settings = make_settings()

        with patch("asdfplug.install.installer.clone_tag", side_effect=_fake_clone):
            with pytest.raises(BuildError):
                download_release(
                    sample_recipe_data, settings, "dev-2024-04", StubBuilder(fail=True)
                )

        assert not (settings.download_path / "odin-source").exists()

    def test_requires_download_path(self, sample_recipe_data):
        from asdfplug.config import PluginSettings

        with pytest.raises(ConfigError, match="ASDF_DOWNLOAD_PATH"):
            download_release(sample_recipe_data, PluginSettings(), "dev-2024-04")

    def test_requires_version(self, sample_recipe_data, make_settings):
        with pytest.raises(ConfigError, match="ASDF_INSTALL_VERSION"):
            download_release(sample_recipe_data, make_settings())

    def test_uses_recipe_builder(self, sample_recipe_data, make_settings):
        """Test the builder named by build.strategy is used when none is given."""
        stub = StubBuilder()

        with patch("asdfplug.install.installer.clone_tag", side_effect=_fake_clone):
            with patch(
                "asdfplug.install.installer.get_builder", return_value=stub
            ) as get_builder:
                download_release(sample_recipe_data, make_settings(), "dev-2024-04")

        assert get_builder.call_args[0][0] == "make"
        assert len(stub.built) == 1


class TestInstallVersion:
    """Tests for install_version."""

    def test_install_layout(self, sample_recipe_data, make_settings, fake_download_dir):
        settings = make_settings(install_version="dev-2024-04")

        result = install_version(sample_recipe_data, settings)

        root = settings.install_path
        assert result.install_root == root
        assert (root / "bin" / "odin.bin").read_text() == "#!/bin/sh\necho odin\n"
        assert os.access(root / "bin" / "odin", os.X_OK)
        assert "export ODIN_ROOT" in (root / "bin" / "odin").read_text()
        for name in ("base", "core", "vendor"):
            assert (root / name / "README.md").exists()

    def test_wrapper_runs_real_binary(
        self, sample_recipe_data, make_settings, fake_download_dir
    ):
        """Test the launcher exports the root and forwards to the .bin file."""
        settings = make_settings()
        (fake_download_dir / "odin").write_text('#!/bin/sh\necho "$ODIN_ROOT $1"\n')

        install_version(sample_recipe_data, settings, "dev-2024-04")

        result = subprocess.run(
            [str(settings.install_path / "bin" / "odin"), "version"],
            capture_output=True,
            text=True,
            check=True,
        )
        root = settings.install_path
        assert result.stdout.strip() == f"{root} version"

    def test_trailing_bin_stripped(
        self, sample_recipe_data, make_settings, tmp_test_dir, fake_download_dir
    ):
        settings = make_settings(install_path=tmp_test_dir / "install" / "bin")

        result = install_version(sample_recipe_data, settings, "dev-2024-04")

        assert result.install_root == tmp_test_dir / "install"
        assert (tmp_test_dir / "install" / "bin" / "odin.bin").exists()

    def test_install_root(self):
        assert install_root(Path("/x/1.0/bin")) == Path("/x/1.0")
        assert install_root(Path("/x/1.0")) == Path("/x/1.0")

    def test_ref_install_rejected(self, sample_recipe_data, make_settings):
        settings = make_settings(install_type="ref")

        with pytest.raises(InstallError, match="asdf-odin supports release installs only"):
            install_version(sample_recipe_data, settings, "master")

    def test_failure_cleans_up(self, sample_recipe_data, make_settings, fake_download_dir):
        """Test a missing support directory removes the partial install."""
        import shutil

        shutil.rmtree(fake_download_dir / "vendor")
        settings = make_settings()

        with pytest.raises(InstallError, match="An error occurred while installing odin"):
            install_version(sample_recipe_data, settings, "dev-2024-04")

        assert not settings.install_path.exists()

    def test_not_executable(self, sample_recipe_data, make_settings, fake_download_dir):
        sample_recipe_data["tool"]["install"].pop("wrapper")
        (fake_download_dir / "odin").chmod(0o644)
        settings = make_settings()

        with pytest.raises(InstallError, match="to be executable"):
            install_version(sample_recipe_data, settings, "dev-2024-04")

        assert not settings.install_path.exists()

    def test_without_wrapper(self, sample_recipe_data, make_settings, fake_download_dir):
        sample_recipe_data["tool"]["install"].pop("wrapper")
        settings = make_settings()

        result = install_version(sample_recipe_data, settings, "dev-2024-04")

        binary = settings.install_path / "bin" / "odin"
        assert result.wrapper_path == result.binary_path == binary
        assert not (settings.install_path / "bin" / "odin.bin").exists()
