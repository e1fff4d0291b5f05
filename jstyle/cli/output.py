"""
Output formatting for CLI operations.

Text reports go through a ``rich`` console; ``--output json`` prints plain
JSON for machines.
"""

import json
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from jstyle.driver import RunSummary
from jstyle.linter.core import LintSeverity, RuleRegistry
from jstyle.reconcile import Mode

_SEVERITY_STYLES = {
    LintSeverity.ERROR: "red",
    LintSeverity.WARNING: "yellow",
}


def make_console(stderr: bool = False) -> Console:
    return Console(stderr=stderr, soft_wrap=True, highlight=False)


def print_summary(summary: RunSummary, output: str = "text", console: Optional[Console] = None) -> None:
    """
    Print the reports of a run.

    Args:
        summary: Reports collected by the driver
        output: ``text`` or ``json``
        console: Console to print text reports on

    Examples:
        >>> print_summary(summary)  # doctest: +SKIP
        src/Foo.java: not formatted (first difference at offset 42)
        src/Foo.java:3:1: error [block-edge-blank-line] Blank line at the start of a block
        1 file checked: 1 not formatted, 1 error, 0 warnings
    """
    if output == "json":
        print(json.dumps(summary.to_dict(), indent=2))
        return

    console = console or make_console()
    for report in summary.reports:
        path = escape(report.path)
        if report.failed:
            console.print(f"[red]{path}: {escape(report.error or '')}[/red]")
            continue
        if report.changed:
            console.print(f"[green]{path}: reformatted[/green]")
        elif not report.formatted and summary.mode is Mode.CHECK:
            console.print(
                f"[yellow]{path}: not formatted[/yellow] (first difference at offset {report.first_mismatch})"
            )
        if report.diff:
            console.print(report.diff, markup=False, end="")
        for violation in report.violations:
            style = _SEVERITY_STYLES[violation.severity]
            console.print(
                f"{path}:{violation.line}:{violation.column}: "
                f"[{style}]{violation.severity.value}[/{style}] "
                f"\\[{violation.rule_id}] {escape(violation.message)}"
            )
    console.print(_summary_line(summary))


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _summary_line(summary: RunSummary) -> str:
    verb = "checked" if summary.mode is Mode.CHECK else "processed"
    parts = []
    if summary.mode is Mode.CHECK:
        parts.append(f"{len(summary.unformatted)} not formatted")
    else:
        parts.append(f"{len(summary.changed)} reformatted")
    if summary.failed:
        parts.append(f"{len(summary.failed)} failed")
    parts.append(_plural(summary.error_count(), "error"))
    parts.append(_plural(summary.warning_count(), "warning"))
    return f"{_plural(summary.files, 'file')} {verb}: {', '.join(parts)}"


def print_rules(registry: RuleRegistry, output: str = "text", console: Optional[Console] = None) -> None:
    """Print the rules of ``registry``."""
    if output == "json":
        data = {
            "version": registry.version,
            "rules": [
                {"rule_id": rule.rule_id, "severity": rule.severity.value, "description": rule.description}
                for rule in registry
            ],
        }
        print(json.dumps(data, indent=2))
        return

    console = console or make_console()
    table = Table(title=f"jstyle rules (registry version {registry.version})")
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Description")
    for rule in registry:
        style = _SEVERITY_STYLES[rule.severity]
        table.add_row(rule.rule_id, f"[{style}]{rule.severity.value}[/{style}]", rule.description)
    console.print(table)


__all__ = ["make_console", "print_summary", "print_rules"]
