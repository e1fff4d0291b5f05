"""
Command handlers for the jstyle CLI.

Each handler receives the parsed arguments and returns the process exit code.
"""

import argparse
import logging
from pathlib import Path
from typing import List

from jstyle.config import JStyleConfig, discover_sources, load_config
from jstyle.driver import run
from jstyle.errors import ConfigError
from jstyle.linter.core import default_registry
from jstyle.reconcile import Mode

from .errors import CLIConfigError, CLIValidationError
from .output import print_rules, print_summary

logger = logging.getLogger(__name__)


def resolve_config(args: argparse.Namespace) -> JStyleConfig:
    """Load the configuration file and apply command-line overrides."""
    explicit = Path(args.config) if getattr(args, "config", None) else None
    try:
        config = load_config(Path.cwd(), explicit)
    except ConfigError as exc:
        raise CLIConfigError(exc.format(), hint=exc.hint) from exc

    budget = getattr(args, "line_budget", None)
    if budget is not None:
        if budget < 20:
            raise CLIValidationError("--line-budget must be at least 20")
        config.line_budget = budget
    workers = getattr(args, "workers", None)
    if workers is not None:
        if workers < 1:
            raise CLIValidationError("--workers must be a positive integer")
        config.workers = workers
    if getattr(args, "fail_on_warning", False):
        config.fail_on_warning = True
    if config.source is not None:
        logger.debug("Using configuration from %s", config.source)
    return config


def resolve_sources(args: argparse.Namespace, config: JStyleConfig) -> List[Path]:
    paths = [Path(item) for item in args.paths]
    missing = [str(path) for path in paths if not path.exists()]
    if missing:
        raise CLIValidationError(
            f"Path not found: {', '.join(missing)}",
            hint="Pass existing .java files or directories",
        )
    return discover_sources(paths, config)


def _run(args: argparse.Namespace, mode: Mode) -> int:
    config = resolve_config(args)
    sources = resolve_sources(args, config)
    if not sources:
        logger.warning("No Java sources found under %s", ", ".join(args.paths))
    summary = run(sources, mode, config, with_diff=getattr(args, "diff", False))
    print_summary(summary, args.output)
    return summary.exit_code(config.fail_on_warning)


def cmd_check(args: argparse.Namespace) -> int:
    """
    Handle the 'check' subcommand.

    Reports files that are not in canonical form and rule violations of the
    input, without writing anything.
    """
    return _run(args, Mode.CHECK)


def cmd_apply(args: argparse.Namespace) -> int:
    """
    Handle the 'apply' subcommand.

    Rewrites files that are not in canonical form and reports the rule
    violations left in the formatted output.
    """
    return _run(args, Mode.APPLY)


def cmd_rules(args: argparse.Namespace) -> int:
    """Handle the 'rules' subcommand: list the built-in rules."""
    print_rules(default_registry(), args.output)
    return 0


__all__ = ["cmd_check", "cmd_apply", "cmd_rules", "resolve_config", "resolve_sources"]
