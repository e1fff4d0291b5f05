"""Reconcile formatter output with files on disk.

``process_text`` is the file-level core: it formats one text and checks it
against the rules without touching the file system. ``reconcile_file`` adds
the read, the optional atomic write and the per-file report.
"""

from __future__ import annotations

import difflib
import logging
import os
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from jstyle.config import LINE_BUDGET
from jstyle.errors import IoFailure, ParseError
from jstyle.formatting.core import JavaFormatter
from jstyle.lang.parser import parse
from jstyle.linter.core import LintSeverity, RuleRegistry, StyleLinter, Violation

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Mode(Enum):
    """What to do with a file whose text is not canonical."""
    CHECK = "check"
    APPLY = "apply"


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of processing one text."""
    text: str
    formatted: bool
    first_mismatch: Optional[int]
    violations: Tuple[Violation, ...] = ()


def first_divergence(left: str, right: str) -> Optional[int]:
    """Offset of the first character where ``left`` and ``right`` differ."""
    if left == right:
        return None
    limit = min(len(left), len(right))
    for index in range(limit):
        if left[index] != right[index]:
            return index
    return limit


def process_text(
    text: str,
    mode: Mode = Mode.CHECK,
    budget: int = LINE_BUDGET,
    registry: Optional[RuleRegistry] = None,
    path: str = "",
) -> ProcessResult:
    """Format ``text`` and check it against the rules.

    In check mode the violations describe ``text``; in apply mode they
    describe the formatted output that would be written.

    Raises:
        ParseError: ``text`` is not valid Java.
        InternalInvariantError: the formatter broke one of its guarantees.
    """
    tree = parse(text, path)
    outcome = JavaFormatter(budget).format_tree(tree, path)
    linter = StyleLinter(registry)
    if mode is Mode.APPLY:
        violations = linter.lint(outcome.tree, outcome.text, path)
    else:
        violations = linter.lint(tree, text, path)
    mismatch = first_divergence(text, outcome.text)
    return ProcessResult(
        text=outcome.text,
        formatted=mismatch is None,
        first_mismatch=mismatch,
        violations=tuple(violations),
    )


def atomic_write(path: PathLike, text: str, encoding: str = "utf-8") -> None:
    """Replace ``path`` with ``text`` through a temporary file in the same directory."""
    target = Path(path)
    try:
        mode = target.stat().st_mode & 0o7777 if target.exists() else None
        fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    except OSError as exc:
        raise IoFailure(f"Cannot write file: {exc.strerror or exc}", path=str(target)) from exc
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        if mode is not None:
            os.chmod(temp_name, mode)
        os.replace(temp_name, target)
    except (OSError, UnicodeEncodeError) as exc:
        try:
            os.unlink(temp_name)
        except OSError:
            logger.debug("Could not remove temporary file %s", temp_name)
        raise IoFailure(f"Cannot write file: {exc}", path=str(target)) from exc


def read_source(path: PathLike, encoding: str = "utf-8") -> str:
    """Read a source file without newline translation."""
    try:
        with open(path, "r", encoding=encoding, newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise IoFailure(f"Cannot read file: {exc}", path=str(path)) from exc


def unified_diff(original: str, formatted: str, path: str) -> str:
    return "".join(
        difflib.unified_diff(
            original.splitlines(keepends=True),
            formatted.splitlines(keepends=True),
            fromfile=f"{path} (original)",
            tofile=f"{path} (formatted)",
        )
    )


@dataclass
class FileReport:
    """Per-file result of a check or apply run."""
    path: str
    formatted: bool = False
    first_mismatch: Optional[int] = None
    changed: bool = False
    violations: List[Violation] = field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[str] = None
    diff: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def error_count(self) -> int:
        return sum(1 for v in self.violations if v.severity is LintSeverity.ERROR)

    def warning_count(self) -> int:
        return sum(1 for v in self.violations if v.severity is LintSeverity.WARNING)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "path": self.path,
            "formatted": self.formatted,
            "first_mismatch": self.first_mismatch,
            "changed": self.changed,
            "violations": [violation.to_dict() for violation in self.violations],
            "error": self.error,
        }
        if self.error_code is not None:
            data["error_code"] = self.error_code
        if self.diff is not None:
            data["diff"] = self.diff
        return data


def reconcile_file(
    path: PathLike,
    mode: Mode = Mode.CHECK,
    budget: int = LINE_BUDGET,
    registry: Optional[RuleRegistry] = None,
    encoding: str = "utf-8",
    with_diff: bool = False,
) -> FileReport:
    """Check or rewrite one file.

    Parse and IO failures become error reports. ``InternalInvariantError``
    propagates and the file is never written.
    """
    display = str(path)
    report = FileReport(path=display)
    try:
        text = read_source(path, encoding)
        result = process_text(text, mode, budget, registry, display)
    except (ParseError, IoFailure) as exc:
        logger.info("Skipping %s: %s", display, exc.format())
        report.error = exc.format()
        report.error_code = exc.code
        return report

    report.formatted = result.formatted
    report.first_mismatch = result.first_mismatch
    report.violations = list(result.violations)
    if with_diff and not result.formatted:
        report.diff = unified_diff(text, result.text, display)

    if mode is Mode.APPLY and not result.formatted:
        try:
            atomic_write(path, result.text, encoding)
        except IoFailure as exc:
            report.error = exc.format()
            report.error_code = exc.code
            return report
        report.changed = True
        logger.info("Reformatted %s", display)
    return report


__all__ = [
    "Mode",
    "ProcessResult",
    "FileReport",
    "first_divergence",
    "process_text",
    "atomic_write",
    "read_source",
    "unified_diff",
    "reconcile_file",
]
