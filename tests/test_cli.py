"""Tests for the jstyle command line."""

import json

import pytest

from jstyle.cli import build_parser, main
from jstyle.cli.errors import (
    CLIConfigError,
    CLIValidationError,
    format_cli_error,
    handle_cli_exception,
    verbose_requested,
)

from tests.conftest import CANONICAL_IMPORTS, UNSORTED_IMPORTS


@pytest.fixture
def project(tmp_path, monkeypatch, write_java):
    """A project directory holding one unformatted source, used as cwd."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("JSTYLE_LOG_LEVEL", raising=False)
    write_java("src/Foo.java", UNSORTED_IMPORTS)
    return tmp_path


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["check"])
        assert args.paths == ["."]
        assert args.output == "text"
        assert args.line_budget is None
        assert not args.diff

    def test_no_command(self, capsys):
        assert main([]) == 2
        assert "usage" in capsys.readouterr().out


class TestCheckCommand:
    """``jstyle check``."""

    def test_reports_unformatted_file(self, project, capsys):
        assert main(["check", "src"]) == 1
        out = capsys.readouterr().out
        assert "Foo.java: not formatted (first difference at offset 21)" in out
        assert "[missing-javadoc]" in out
        assert "1 file checked: 1 not formatted, 0 errors, 2 warnings" in out
        assert (project / "src/Foo.java").read_text() == UNSORTED_IMPORTS

    def test_formatted_tree_passes(self, project, capsys):
        (project / "src/Foo.java").write_text(CANONICAL_IMPORTS)
        assert main(["check", "src"]) == 0
        assert main(["check", "--fail-on-warning", "src"]) == 1

    def test_json_output(self, project, capsys):
        assert main(["check", "--output", "json", "src"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["mode"] == "check"
        assert data["files"] == 1
        assert data["unformatted"] == 1
        assert data["warnings"] == 2
        assert data["reports"][0]["first_mismatch"] == 21

    def test_diff(self, project, capsys):
        main(["check", "--diff", "src"])
        out = capsys.readouterr().out
        assert "+import java.util.ArrayList;" in out

    def test_narrow_budget_from_option(self, project, capsys):
        (project / "src/Foo.java").write_text(CANONICAL_IMPORTS)
        source = "class A {\n    void f() {\n        call(alpha, beta, gamma, delta, epsilon);\n    }\n}\n"
        (project / "src/A.java").write_text(source)
        assert main(["check", "--output", "json", "--line-budget", "40", "src/A.java"]) == 1
        assert json.loads(capsys.readouterr().out)["unformatted"] == 1


class TestApplyCommand:
    """``jstyle apply``."""

    def test_rewrites_file(self, project, capsys):
        assert main(["apply", "src"]) == 0
        out = capsys.readouterr().out
        assert "Foo.java: reformatted" in out
        assert "1 file processed: 1 reformatted, 0 errors, 2 warnings" in out
        assert (project / "src/Foo.java").read_text() == CANONICAL_IMPORTS

    def test_fail_on_warning(self, project):
        assert main(["apply", "--fail-on-warning", "src"]) == 1
        assert (project / "src/Foo.java").read_text() == CANONICAL_IMPORTS

    def test_configured_fail_on_warning(self, project):
        (project / "jstyle.toml").write_text("fail_on_warning = true\n")
        assert main(["apply", "src"]) == 1

    def test_parse_error_reported(self, project, write_java, capsys):
        write_java("src/Broken.java", "class {\n")
        assert main(["apply", "src"]) == 1
        out = capsys.readouterr().out
        assert "Broken.java" in out
        assert "1 failed" in out


class TestUsageErrors:
    """Problems that exit with status 2."""

    def test_missing_path(self, project, capsys):
        assert main(["check", "does-not-exist"]) == 2
        assert "Path not found: does-not-exist" in capsys.readouterr().err

    def test_budget_too_small(self, project, capsys):
        assert main(["check", "--line-budget", "10", "src"]) == 2
        assert "--line-budget must be at least 20" in capsys.readouterr().err

    def test_bad_workers(self, project):
        assert main(["apply", "--workers", "0", "src"]) == 2
        assert (project / "src/Foo.java").read_text() == UNSORTED_IMPORTS

    def test_bad_config_file(self, project, capsys):
        (project / "jstyle.toml").write_text("indent_style = \"tabs\"\n")
        assert main(["check", "src"]) == 2
        err = capsys.readouterr().err
        assert "CLI_CONFIG_ERROR" in err
        assert "indent_style" in err

    def test_missing_explicit_config(self, project, capsys):
        assert main(["--config", "nope.toml", "check", "src"]) == 2


class TestRulesCommand:
    def test_json(self, capsys):
        assert main(["rules", "--output", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["version"] == "1"
        assert [rule["rule_id"] for rule in data["rules"]] == [
            "missing-javadoc",
            "malformed-doc-tag",
            "block-edge-blank-line",
            "declaration-order",
        ]

    def test_text(self, capsys):
        assert main(["rules"]) == 0
        assert "registry version 1" in capsys.readouterr().out


class TestFormatCliError:
    def test_hint(self):
        message = format_cli_error(CLIValidationError("Path not found: src", hint="Check the path"))
        assert message == "Error [CLI_VALIDATION_ERROR]: Path not found: src\nHint: Check the path"

    def test_without_hint(self):
        assert format_cli_error(CLIConfigError("bad table")) == "Error [CLI_CONFIG_ERROR]: bad table"

    def test_core_error_uses_its_format(self):
        class Failure(Exception):
            def format(self):
                return "A.java:1:1: broken"

        assert format_cli_error(Failure()) == "Error: A.java:1:1: broken"

    def test_traceback_included_on_request(self):
        try:
            raise CLIValidationError("Path not found: src")
        except CLIValidationError as exc:
            message = format_cli_error(exc, include_traceback=True)
        assert message.startswith("Error [CLI_VALIDATION_ERROR]: Path not found: src\n\nTraceback")


class TestVerbose:
    def test_flag(self, monkeypatch):
        monkeypatch.delenv("JSTYLE_VERBOSE", raising=False)
        assert verbose_requested(True)
        assert not verbose_requested()

    @pytest.mark.parametrize("value, expected", [("1", True), ("Yes", True), ("0", False), ("", False)])
    def test_environment(self, monkeypatch, value, expected):
        monkeypatch.setenv("JSTYLE_VERBOSE", value)
        assert verbose_requested() is expected

    def test_handle_returns_exit_code(self, monkeypatch, capsys):
        monkeypatch.delenv("JSTYLE_VERBOSE", raising=False)
        assert handle_cli_exception(CLIValidationError("Path not found: src")) == 2
        assert handle_cli_exception(RuntimeError("boom")) == 1
        err = capsys.readouterr().err
        assert "Error [CLI_VALIDATION_ERROR]: Path not found: src" in err
        assert "Error: RuntimeError: boom" in err
