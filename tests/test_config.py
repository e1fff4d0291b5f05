"""Tests for run configuration."""

import pytest

from jstyle.config import JStyleConfig, discover_sources, load_config, locate_config_file
from jstyle.errors import ConfigError


class TestLoadConfig:
    """Reading jstyle.toml and pyproject.toml."""

    def test_defaults_without_file(self, tmp_path):
        config = load_config(tmp_path)
        assert config.line_budget == 100
        assert config.include == ["**/*.java"]
        assert config.exclude == []
        assert config.source is None

    def test_jstyle_toml(self, tmp_path):
        (tmp_path / "jstyle.toml").write_text(
            'line_budget = 120\nexclude = ["generated/**"]\nfail_on_warning = true\nworkers = 2\n'
        )
        config = load_config(tmp_path)
        assert config.line_budget == 120
        assert config.exclude == ["generated/**"]
        assert config.fail_on_warning is True
        assert config.workers == 2
        assert config.max_workers() == 2
        assert config.source == tmp_path.resolve() / "jstyle.toml"

    def test_jstyle_table_in_jstyle_toml(self, tmp_path):
        (tmp_path / "jstyle.toml").write_text("[jstyle]\nline_budget = 80\n")
        assert load_config(tmp_path).line_budget == 80

    def test_pyproject_tool_table(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[tool.jstyle]\ninclude = "src/**/*.java"\n')
        assert load_config(tmp_path).include == ["src/**/*.java"]

    def test_pyproject_without_table(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n')
        assert load_config(tmp_path) == JStyleConfig()

    def test_jstyle_toml_wins(self, tmp_path):
        (tmp_path / "jstyle.toml").write_text("line_budget = 90\n")
        (tmp_path / "pyproject.toml").write_text("[tool.jstyle]\nline_budget = 70\n")
        assert load_config(tmp_path).line_budget == 90

    def test_explicit_file(self, tmp_path):
        explicit = tmp_path / "custom.toml"
        explicit.write_text("line_budget = 60\n")
        assert load_config(tmp_path, explicit).line_budget == 60

    def test_explicit_file_missing(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            locate_config_file(tmp_path, tmp_path / "nope.toml")

    @pytest.mark.parametrize("body, message", [
        ("indent = 2\n", "Unknown option"),
        ("line_budget = 10\n", "line_budget"),
        ("line_budget = true\n", "line_budget"),
        ("workers = 0\n", "workers"),
        ("include = [1, 2]\n", "include"),
        ("line_budget = \n", "Invalid TOML"),
    ])
    def test_invalid_values(self, tmp_path, body, message):
        (tmp_path / "jstyle.toml").write_text(body)
        with pytest.raises(ConfigError, match=message) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == "CONFIG_ERROR"

    def test_style_options_are_rejected_with_hint(self, tmp_path):
        (tmp_path / "jstyle.toml").write_text("brace_style = \"allman\"\n")
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)
        assert "no style options" in exc_info.value.hint


class TestDiscoverSources:
    """Expanding paths into source files."""

    def test_directory_walk_is_sorted(self, write_java, tmp_path):
        write_java("src/b/B.java", "class B {}\n")
        write_java("src/a/A.java", "class A {}\n")
        write_java("src/a/notes.txt", "")
        found = discover_sources([tmp_path / "src"], JStyleConfig())
        assert found == [tmp_path / "src/a/A.java", tmp_path / "src/b/B.java"]

    def test_exclude_patterns(self, write_java, tmp_path):
        write_java("src/Main.java", "class Main {}\n")
        write_java("src/generated/Gen.java", "class Gen {}\n")
        config = JStyleConfig(exclude=["generated/*"])
        assert discover_sources([tmp_path / "src"], config) == [tmp_path / "src/Main.java"]

    def test_explicit_file_always_included(self, write_java):
        path = write_java("Script.txt", "class A {}\n")
        assert discover_sources([path], JStyleConfig()) == [path]

    def test_duplicates_removed(self, write_java, tmp_path):
        path = write_java("A.java", "class A {}\n")
        assert discover_sources([path, tmp_path], JStyleConfig()) == [path]
