"""
Tests for asdfplug.cli module.

Tests the command-line interface including:
- list-all / latest-stable / resolve-latest output on stdout
- Error formatting ("asdf-<tool>: <message>") and exit codes
- download and install wiring to the environment
- validate report
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from asdfplug.cli import run
from asdfplug.results import DownloadResult

pytestmark = pytest.mark.unit

REPO = "https://github.com/odin-lang/Odin"
REFS_URL = f"{REPO}/info/refs?service=git-upload-pack"

ODIN_REFS = [
    "HEAD",
    "refs/tags/dev-2024-02",
    "refs/tags/dev-2023-12",
    "refs/tags/v0.13.0",
]


@pytest.fixture(autouse=True)
def clean_asdf_env(monkeypatch):
    for name in (
        "GITHUB_API_TOKEN",
        "ASDF_INSTALL_TYPE",
        "ASDF_INSTALL_VERSION",
        "ASDF_INSTALL_PATH",
        "ASDF_DOWNLOAD_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


class TestListAll:
    """Tests for 'asdfplug list-all'."""

    def test_prints_sorted_versions(self, requests_mock, make_advertisement, capsys):
        requests_mock.get(REFS_URL, content=make_advertisement(ODIN_REFS))

        assert run(["--tool", "odin", "list-all"]) == 0

        out = capsys.readouterr().out
        assert out == "dev-2023-12 dev-2024-02\n"

    def test_empty_catalog_prints_nothing(self, requests_mock, make_advertisement, capsys):
        requests_mock.get(REFS_URL, content=make_advertisement(["HEAD"]))

        assert run(["list-all"]) == 0

        assert capsys.readouterr().out == ""

    def test_fetch_failure(self, requests_mock, capsys):
        requests_mock.get(REFS_URL, status_code=404)

        assert run(["list-all"]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.startswith("asdf-odin: Repository not found")

    def test_token_from_environment(
        self, requests_mock, make_advertisement, monkeypatch
    ):
        monkeypatch.setenv("GITHUB_API_TOKEN", "tok")
        requests_mock.get(REFS_URL, content=make_advertisement(ODIN_REFS))

        run(["list-all"])

        assert requests_mock.last_request.headers["Authorization"] == "Bearer tok"


class TestLatestStable:
    """Tests for 'asdfplug latest-stable'."""

    def test_prints_latest(self, requests_mock, make_advertisement, capsys):
        requests_mock.get(REFS_URL, content=make_advertisement(ODIN_REFS))

        assert run(["latest-stable"]) == 0

        assert capsys.readouterr().out == "dev-2024-02\n"

    def test_query(self, requests_mock, make_advertisement, capsys):
        requests_mock.get(REFS_URL, content=make_advertisement(ODIN_REFS))

        assert run(["latest-stable", "dev-2023"]) == 0

        assert capsys.readouterr().out == "dev-2023-12\n"

    def test_empty_catalog_message(self, requests_mock, make_advertisement, capsys):
        requests_mock.get(REFS_URL, content=make_advertisement(["HEAD"]))

        assert run(["latest-stable"]) == 1

        assert "asdf-odin: No installable versions of odin found" in capsys.readouterr().err


class TestResolveLatest:
    """Tests for 'asdfplug resolve-latest'."""

    def test_prints_tag(self, requests_mock, capsys):
        requests_mock.head(
            f"{REPO}/releases/latest",
            status_code=302,
            headers={"Location": f"{REPO}/releases/tag/dev-2024-04"},
        )

        assert run(["resolve-latest"]) == 0

        assert capsys.readouterr().out == "dev-2024-04\n"


class TestDownloadAndInstall:
    """Tests for 'asdfplug download' and 'asdfplug install'."""

    def test_download_requires_download_path(self, capsys):
        assert run(["download", "dev-2024-04"]) == 1

        assert "asdf-odin: ASDF_DOWNLOAD_PATH is not set" in capsys.readouterr().err

    def test_download_passes_settings(self, monkeypatch, tmp_test_dir):
        monkeypatch.setenv("ASDF_DOWNLOAD_PATH", str(tmp_test_dir))
        monkeypatch.setenv("ASDF_INSTALL_VERSION", "dev-2024-04")
        result = DownloadResult(
            tool="odin",
            version="dev-2024-04",
            download_path=tmp_test_dir,
            binary_path=tmp_test_dir / "odin",
            directories=[],
            status="success",
        )

        with patch("asdfplug.cli.download_release", return_value=result) as mock_download:
            assert run(["download"]) == 0

        config, settings, version = mock_download.call_args[0]
        assert config["tool"]["name"] == "odin"
        assert settings.download_path == tmp_test_dir
        assert settings.install_version == "dev-2024-04"
        assert version is None

    def test_install_end_to_end(self, monkeypatch, tmp_test_dir, fake_download_dir):
        monkeypatch.setenv("ASDF_INSTALL_TYPE", "version")
        monkeypatch.setenv("ASDF_INSTALL_VERSION", "dev-2024-04")
        monkeypatch.setenv("ASDF_INSTALL_PATH", str(tmp_test_dir / "install"))
        monkeypatch.setenv("ASDF_DOWNLOAD_PATH", str(fake_download_dir))

        assert run(["install"]) == 0

        assert (tmp_test_dir / "install" / "bin" / "odin.bin").exists()
        assert (tmp_test_dir / "install" / "core").is_dir()

    def test_install_ref_rejected(self, monkeypatch, tmp_test_dir, capsys):
        monkeypatch.setenv("ASDF_INSTALL_TYPE", "ref")
        monkeypatch.setenv("ASDF_INSTALL_PATH", str(tmp_test_dir / "install"))

        assert run(["install"]) == 1

        assert "asdf-odin: asdf-odin supports release installs only" in capsys.readouterr().err


class TestValidateAndErrors:
    """Tests for 'asdfplug validate' and general error handling."""

    def test_validate_bundled(self, capsys):
        assert run(["validate"]) == 0

        assert "[SUCCESS] Recipe is valid!" in capsys.readouterr().out

    def test_validate_invalid_recipe(self, tmp_test_dir, capsys):
        recipe = tmp_test_dir / "broken.yaml"
        recipe.write_text("tool:\n  name: broken\n")

        assert run(["--recipe", str(recipe), "validate"]) == 1

        assert "[FAILED]" in capsys.readouterr().out

    def test_unknown_tool(self, capsys):
        assert run(["--tool", "nope", "list-all"]) == 1

        assert capsys.readouterr().err.startswith("asdf-nope: No bundled recipe")

    def test_missing_recipe_file(self, tmp_test_dir, capsys):
        assert run(["--recipe", str(tmp_test_dir / "zig.yaml"), "list-all"]) == 1

        assert capsys.readouterr().err.startswith("asdf-zig: file not found")

    def test_verbose_prints_traceback(self, capsys):
        assert run(["--tool", "nope", "list-all", "--verbose"]) == 1

        assert "Traceback" in capsys.readouterr().err

    def test_recipe_and_tool_are_exclusive(self):
        with pytest.raises(SystemExit):
            run(["--tool", "odin", "--recipe", "x.yaml", "list-all"])

    def test_malformed_recipe_is_reported(self, tmp_test_dir, capsys):
        """Test a wrongly-typed recipe section gives an error line, not a traceback."""
        recipe = tmp_test_dir / "zig.yaml"
        recipe.write_text(
            "tool:\n"
            "  name: zig\n"
            "  repo: https://github.com/ziglang/zig\n"
            "  versions:\n"
            "    filter: dev-\n"
        )

        assert run(["--recipe", str(recipe), "list-all"]) == 1

        err = capsys.readouterr().err
        assert err.startswith("asdf-zig: Recipe field 'tool.versions.filter' must be a mapping")
        assert "Traceback" not in err

    def test_error_label_uses_recipe_tool_name(self, tmp_test_dir, capsys):
        recipe = tmp_test_dir / "zig-nightly.yaml"
        recipe.write_text(
            "tool:\n"
            "  name: zig\n"
            "  repo: https://github.com/ziglang/zig\n"
            "  build: make\n"
        )

        assert run(["--recipe", str(recipe), "list-all"]) == 1

        assert capsys.readouterr().err.startswith("asdf-zig: Recipe field 'tool.build'")
