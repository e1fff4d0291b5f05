"""Tests for running the reconciler over many files."""

import logging

from jstyle.config import JStyleConfig
from jstyle.driver import Driver, RunSummary, run
from jstyle.errors import InternalInvariantError
from jstyle.lang import Span
from jstyle.linter import LintSeverity, Violation, default_registry
from jstyle.reconcile import FileReport, Mode

from tests.conftest import CANONICAL_IMPORTS, UNSORTED_IMPORTS


SPAN = Span(0, 1, 1, 1)


def violation(severity):
    return Violation("some-rule", severity, SPAN, "message")


class TestRunSummary:
    """Exit codes derived from reports."""

    def test_clean_run(self):
        summary = RunSummary(Mode.CHECK, [FileReport("A.java", formatted=True)])
        assert summary.exit_code() == 0

    def test_unformatted_fails_check(self):
        summary = RunSummary(Mode.CHECK, [FileReport("A.java", formatted=False, first_mismatch=3)])
        assert summary.exit_code() == 1

    def test_rewritten_file_passes_apply(self):
        summary = RunSummary(Mode.APPLY, [FileReport("A.java", formatted=False, changed=True)])
        assert summary.exit_code() == 0

    def test_failed_file(self):
        summary = RunSummary(Mode.APPLY, [FileReport("A.java", error="boom", error_code="IO_FAILURE")])
        assert summary.exit_code() == 1

    def test_error_violation(self):
        report = FileReport("A.java", formatted=True, violations=[violation(LintSeverity.ERROR)])
        assert RunSummary(Mode.APPLY, [report]).exit_code() == 1

    def test_warnings_only_fail_when_asked(self):
        report = FileReport("A.java", formatted=True, violations=[violation(LintSeverity.WARNING)])
        summary = RunSummary(Mode.CHECK, [report])
        assert summary.exit_code() == 0
        assert summary.exit_code(fail_on_warning=True) == 1

    def test_to_dict(self):
        reports = [
            FileReport("A.java", formatted=True, violations=[violation(LintSeverity.WARNING)]),
            FileReport("B.java", formatted=False, first_mismatch=0),
            FileReport("C.java", error="boom", error_code="PARSE_ERROR"),
        ]
        data = RunSummary(Mode.CHECK, reports).to_dict()
        assert data["mode"] == "check"
        assert data["files"] == 3
        assert data["unformatted"] == 1
        assert data["failed"] == 1
        assert data["warnings"] == 1
        assert data["errors"] == 0
        assert [r["path"] for r in data["reports"]] == ["A.java", "B.java", "C.java"]


class TestDriver:
    """Processing several files."""

    def test_reports_follow_input_order(self, write_java):
        paths = [
            write_java("b/Second.java", UNSORTED_IMPORTS),
            write_java("a/First.java", CANONICAL_IMPORTS),
            write_java("c/Broken.java", "class {"),
        ]
        summary = run(paths, Mode.CHECK, JStyleConfig(workers=3))
        assert [report.path for report in summary.reports] == [str(p) for p in paths]
        assert [report.formatted for report in summary.reports] == [False, True, False]
        assert summary.reports[2].error_code == "PARSE_ERROR"
        assert summary.exit_code() == 1

    def test_apply_rewrites_every_file(self, write_java, single_worker_config):
        paths = [write_java(f"F{i}.java", UNSORTED_IMPORTS) for i in range(3)]
        summary = Driver(single_worker_config).run(paths, Mode.APPLY)
        assert len(summary.changed) == 3
        assert all(path.read_text() == CANONICAL_IMPORTS for path in paths)

    def test_one_failure_does_not_stop_the_run(self, write_java):
        broken = write_java("Broken.java", "class A {")
        good = write_java("Good.java", UNSORTED_IMPORTS)
        summary = run([broken, good], Mode.APPLY)
        assert summary.reports[0].failed
        assert summary.reports[1].changed
        assert good.read_text() == CANONICAL_IMPORTS

    def test_no_files(self):
        summary = run([], Mode.CHECK)
        assert summary.files == 0
        assert summary.exit_code() == 0

    def test_internal_error_becomes_report(self, write_java, monkeypatch, caplog):
        path = write_java("Foo.java", UNSORTED_IMPORTS)

        def broken(*args, **kwargs):
            raise InternalInvariantError("Formatting is not idempotent")

        monkeypatch.setattr("jstyle.driver.reconcile_file", broken)
        with caplog.at_level(logging.ERROR, logger="jstyle"):
            summary = Driver(registry=default_registry()).run([path], Mode.APPLY)
        report = summary.reports[0]
        assert report.error_code == "INTERNAL_INVARIANT"
        assert "not idempotent" in report.error
        assert "Internal invariant failed" in caplog.text
        assert path.read_text() == UNSORTED_IMPORTS
        assert summary.exit_code() == 1
