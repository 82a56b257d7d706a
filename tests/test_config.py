"""
Tests for asdfplug.config package.

Tests configuration loading and merging including:
- YAML recipe loading
- Layered merging (built-in -> org -> recipe)
- Bundled recipes
- PluginSettings from the environment
- Error handling
"""

from __future__ import annotations

from pathlib import Path

import pytest

from asdfplug.config import (
    PluginSettings,
    available_tools,
    load_effective_config,
    load_tool_config,
    tool_section,
)
from asdfplug.config.loader import _deep_merge_dicts
from asdfplug.exceptions import ConfigError

pytestmark = pytest.mark.unit


class TestConfigLoading:
    """Tests for basic configuration loading."""

    def test_load_simple_recipe(self, create_yaml_file, sample_recipe_data):
        """Test loading a recipe without org defaults."""
        recipe_path = create_yaml_file("recipe.yaml", sample_recipe_data)

        config = load_effective_config(recipe_path)

        assert config["apiVersion"] == "asdfplug/v1"
        assert config["tool"]["name"] == "odin"
        assert config["tool"]["versions"]["filter"]["prefix"] == "dev-"

    def test_builtin_defaults_fill_gaps(self, create_yaml_file):
        """Test omitted fields come from the built-in defaults."""
        recipe_path = create_yaml_file(
            "minimal.yaml", {"tool": {"name": "zig", "repo": "https://x/zig"}}
        )

        config = load_effective_config(recipe_path)

        versions = config["tool"]["versions"]
        assert versions["source"] == "smart_http"
        assert versions["strip_prefix"] == "v"
        assert versions["filter"] == {"type": "all"}
        assert config["tool"]["build"]["strategy"] == "make"

    def test_load_recipe_with_org_defaults(
        self, create_yaml_file, sample_recipe_data, sample_org_defaults
    ):
        """Test defaults/org.yaml is found by walking up from the recipe."""
        create_yaml_file("defaults/org.yaml", sample_org_defaults)
        del sample_recipe_data["tool"]["versions"]["source"]
        del sample_recipe_data["tool"]["build"]["llvm"]
        recipe_path = create_yaml_file("recipes/deep/odin.yaml", sample_recipe_data)

        config = load_effective_config(recipe_path)

        assert config["tool"]["versions"]["source"] == "git_ls_remote"
        assert config["tool"]["build"]["llvm"]["supported_versions"] == [18, 17]
        assert config["tool"]["versions"]["filter"]["prefix"] == "dev-"

    def test_missing_recipe_file_raises(self, tmp_test_dir):
        with pytest.raises(FileNotFoundError):
            load_effective_config(tmp_test_dir / "nonexistent.yaml")

    def test_invalid_yaml_raises(self, tmp_test_dir):
        path = tmp_test_dir / "bad.yaml"
        path.write_text("tool: [unclosed\n")

        with pytest.raises(ConfigError, match="Error parsing YAML"):
            load_effective_config(path)

    def test_empty_yaml_raises(self, tmp_test_dir):
        path = tmp_test_dir / "empty.yaml"
        path.write_text("")

        with pytest.raises(ConfigError, match="empty"):
            load_effective_config(path)

    def test_non_mapping_raises(self, tmp_test_dir):
        path = tmp_test_dir / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_effective_config(path)


class TestConfigMerging:
    """Tests for merge semantics."""

    def test_dicts_merge_deeply(self):
        base = {"a": {"b": 1, "c": 2}}
        overlay = {"a": {"c": 3}}
        assert _deep_merge_dicts(base, overlay) == {"a": {"b": 1, "c": 3}}

    def test_lists_replace(self):
        base = {"dirs": ["base", "core"]}
        overlay = {"dirs": ["vendor"]}
        assert _deep_merge_dicts(base, overlay) == {"dirs": ["vendor"]}

    def test_inputs_not_mutated(self):
        base = {"a": {"b": 1}}
        overlay = {"a": {"b": 2}}
        _deep_merge_dicts(base, overlay)
        assert base == {"a": {"b": 1}}


class TestBundledRecipes:
    """Tests for recipes shipped with the package."""

    def test_odin_is_bundled(self):
        assert "odin" in available_tools()

    def test_load_odin(self):
        config = load_tool_config("odin")
        tool = tool_section(config)

        assert tool["repo"] == "https://github.com/odin-lang/Odin"
        assert tool["versions"]["filter"] == {"type": "prefix", "prefix": "dev-"}
        assert tool["build"]["target"] == "release-native"
        assert tool["install"]["directories"] == ["base", "core", "vendor"]
        assert tool["install"]["wrapper"]["env_var"] == "ODIN_ROOT"

    def test_unknown_tool(self):
        with pytest.raises(ConfigError, match="No bundled recipe"):
            load_tool_config("does-not-exist")

    def test_tool_section_requires_repo(self):
        with pytest.raises(ConfigError, match="tool.repo"):
            tool_section({"tool": {"name": "odin"}})

    def test_tool_section_requires_tool(self):
        with pytest.raises(ConfigError, match="no 'tool' mapping"):
            tool_section({})

    @pytest.mark.parametrize(
        "field, section",
        [
            ("versions.filter", {"versions": {"filter": "dev-"}}),
            ("versions.latest", {"versions": {"latest": "v"}}),
            ("build", {"build": "make"}),
            ("install", {"install": ["odin"]}),
            ("install.directories", {"install": {"directories": "base"}}),
        ],
    )
    def test_tool_section_rejects_wrong_types(self, field, section):
        tool = {"name": "odin", "repo": "https://github.com/odin-lang/Odin", **section}
        with pytest.raises(ConfigError, match=f"tool.{field}' must be"):
            tool_section({"tool": tool})

    def test_tool_section_allows_null_sections(self):
        tool = {"name": "odin", "repo": "https://github.com/odin-lang/Odin", "build": None}
        assert tool_section({"tool": tool}) is tool


class TestPluginSettings:
    """Tests for PluginSettings.from_environ."""

    def test_reads_environment(self):
        settings = PluginSettings.from_environ(
            {
                "GITHUB_API_TOKEN": "tok",
                "ASDF_INSTALL_TYPE": "ref",
                "ASDF_INSTALL_VERSION": "dev-2024-04",
                "ASDF_INSTALL_PATH": "/opt/odin",
                "ASDF_DOWNLOAD_PATH": "/tmp/odin",
            }
        )

        assert settings.github_token == "tok"
        assert settings.install_type == "ref"
        assert settings.install_version == "dev-2024-04"
        assert settings.install_path == Path("/opt/odin")
        assert settings.download_path == Path("/tmp/odin")

    def test_defaults(self):
        settings = PluginSettings.from_environ({})

        assert settings.github_token is None
        assert settings.install_type == "version"
        assert settings.install_path is None

    def test_blank_token_is_none(self):
        assert PluginSettings.from_environ({"GITHUB_API_TOKEN": "  "}).github_token is None

    def test_require_paths(self):
        settings = PluginSettings()

        with pytest.raises(ConfigError, match="ASDF_DOWNLOAD_PATH"):
            settings.require_download_path()
        with pytest.raises(ConfigError, match="ASDF_INSTALL_PATH"):
            settings.require_install_path()
