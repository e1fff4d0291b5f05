"""Run configuration for the jstyle driver.

The style itself has no options. The only layout parameter is the line
budget; everything else here tells the driver which files to visit and how
to judge the results.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from jstyle.errors import ConfigError

LINE_BUDGET = 100
INDENT_WIDTH = 4
SOURCE_SUFFIX = ".java"


@dataclass
class JStyleConfig:
    """Resolved configuration for one jstyle run."""

    line_budget: int = LINE_BUDGET
    include: List[str] = field(default_factory=lambda: [f"**/*{SOURCE_SUFFIX}"])
    exclude: List[str] = field(default_factory=list)
    encoding: str = "utf-8"
    fail_on_warning: bool = False
    workers: Optional[int] = None
    source: Optional[Path] = None

    def max_workers(self) -> int:
        if self.workers:
            return self.workers
        return os.cpu_count() or 1


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML: {exc}", path=str(path)) from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration: {exc}", path=str(path)) from exc


def _string_list(value: Any, key: str, path: Path) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ConfigError(f"'{key}' must be a string or a list of strings", path=str(path))


def _parse_section(data: Dict[str, Any], path: Path) -> JStyleConfig:
    config = JStyleConfig(source=path)
    unknown = set(data) - {"line_budget", "include", "exclude", "encoding", "fail_on_warning", "workers"}
    if unknown:
        raise ConfigError(
            f"Unknown option(s): {', '.join(sorted(unknown))}",
            path=str(path),
            hint="jstyle has no style options; only run settings are accepted",
        )
    if "line_budget" in data:
        budget = data["line_budget"]
        if not isinstance(budget, int) or isinstance(budget, bool) or budget < 20:
            raise ConfigError("'line_budget' must be an integer >= 20", path=str(path))
        config.line_budget = budget
    if "include" in data:
        config.include = _string_list(data["include"], "include", path)
    if "exclude" in data:
        config.exclude = _string_list(data["exclude"], "exclude", path)
    if "encoding" in data:
        config.encoding = str(data["encoding"])
    if "fail_on_warning" in data:
        config.fail_on_warning = bool(data["fail_on_warning"])
    if "workers" in data:
        workers = data["workers"]
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
            raise ConfigError("'workers' must be a positive integer", path=str(path))
        config.workers = workers
    return config


def locate_config_file(root: Path, explicit: Optional[Path] = None) -> Optional[Path]:
    if explicit is not None:
        if not explicit.exists():
            raise ConfigError("Configuration file not found", path=str(explicit))
        return explicit
    for candidate in ("jstyle.toml", "pyproject.toml"):
        path = root / candidate
        if path.exists():
            return path
    return None


def load_config(root: Path, explicit: Optional[Path] = None) -> JStyleConfig:
    config_path = locate_config_file(root.resolve(), explicit)
    if config_path is None:
        return JStyleConfig()

    data = _read_toml(config_path)
    if config_path.name == "pyproject.toml":
        section = data.get("tool", {}).get("jstyle")
        if section is None:
            return JStyleConfig()
    else:
        section = data.get("jstyle", data)
    if not isinstance(section, dict):
        raise ConfigError("jstyle configuration must be a table", path=str(config_path))
    return _parse_section(section, config_path)


def discover_sources(paths: List[Path], config: JStyleConfig) -> List[Path]:
    """Expand files and directories into the sorted list of sources to visit."""
    found: Dict[Path, None] = {}
    for path in paths:
        if path.is_file():
            found[path] = None
            continue
        if not path.is_dir():
            continue
        for pattern in config.include:
            for candidate in sorted(path.glob(pattern)):
                if candidate.is_file() and not _excluded(candidate, path, config.exclude):
                    found[candidate] = None
    return list(found)


def _excluded(candidate: Path, root: Path, patterns: List[str]) -> bool:
    relative = candidate.relative_to(root)
    return any(relative.match(pattern) or candidate.match(pattern) for pattern in patterns)


__all__ = [
    "LINE_BUDGET",
    "INDENT_WIDTH",
    "SOURCE_SUFFIX",
    "JStyleConfig",
    "load_config",
    "locate_config_file",
    "discover_sources",
]
