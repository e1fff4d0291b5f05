"""Run the reconciler over many files with a bounded worker pool."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from jstyle.config import JStyleConfig
from jstyle.errors import InternalInvariantError
from jstyle.linter.core import RuleRegistry, default_registry
from jstyle.reconcile import FileReport, Mode, reconcile_file

logger = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = "INTERNAL_INVARIANT"


@dataclass
class RunSummary:
    """Reports of one run, in input order."""

    mode: Mode
    reports: List[FileReport] = field(default_factory=list)

    @property
    def files(self) -> int:
        return len(self.reports)

    @property
    def unformatted(self) -> List[FileReport]:
        return [report for report in self.reports if not report.failed and not report.formatted]

    @property
    def changed(self) -> List[FileReport]:
        return [report for report in self.reports if report.changed]

    @property
    def failed(self) -> List[FileReport]:
        return [report for report in self.reports if report.failed]

    def error_count(self) -> int:
        return sum(report.error_count() for report in self.reports)

    def warning_count(self) -> int:
        return sum(report.warning_count() for report in self.reports)

    def exit_code(self, fail_on_warning: bool = False) -> int:
        """0 when the run is clean, 1 otherwise."""
        if self.failed or self.error_count():
            return 1
        if self.mode is Mode.CHECK and self.unformatted:
            return 1
        if fail_on_warning and self.warning_count():
            return 1
        return 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "files": self.files,
            "unformatted": len(self.unformatted),
            "changed": len(self.changed),
            "failed": len(self.failed),
            "errors": self.error_count(),
            "warnings": self.warning_count(),
            "reports": [report.to_dict() for report in self.reports],
        }


class Driver:
    """Process a list of files, one task per file."""

    def __init__(
        self,
        config: Optional[JStyleConfig] = None,
        registry: Optional[RuleRegistry] = None,
        with_diff: bool = False,
    ):
        self.config = config or JStyleConfig()
        self.registry = registry if registry is not None else default_registry()
        self.with_diff = with_diff

    def process(self, path: Path, mode: Mode) -> FileReport:
        try:
            return reconcile_file(
                path,
                mode,
                budget=self.config.line_budget,
                registry=self.registry,
                encoding=self.config.encoding,
                with_diff=self.with_diff,
            )
        except InternalInvariantError as exc:
            logger.error("Internal invariant failed while processing %s", path, exc_info=True)
            return FileReport(path=str(path), error=exc.format(), error_code=INTERNAL_ERROR_CODE)

    def run(self, paths: Sequence[Path], mode: Mode) -> RunSummary:
        summary = RunSummary(mode=mode)
        if not paths:
            return summary
        workers = min(self.config.max_workers(), len(paths))
        logger.debug("Processing %d file(s) with %d worker(s)", len(paths), workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="jstyle") as executor:
            summary.reports = list(executor.map(lambda path: self.process(path, mode), paths))
        return summary


def run(
    paths: Sequence[Path],
    mode: Mode,
    config: Optional[JStyleConfig] = None,
    registry: Optional[RuleRegistry] = None,
    with_diff: bool = False,
) -> RunSummary:
    """Check or apply the canonical style to ``paths``."""
    return Driver(config, registry, with_diff).run(paths, mode)


__all__ = ["Driver", "RunSummary", "run", "INTERNAL_ERROR_CODE"]
