"""
jstyle CLI entry point.

This module builds the argument parser and dispatches to the command
handlers in ``jstyle.cli.commands``.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from jstyle import __version__
from jstyle.config import LINE_BUDGET
from jstyle.errors import InternalInvariantError

from .commands import cmd_apply, cmd_check, cmd_rules
from .errors import CLIError, EXIT_FAILURE, handle_cli_exception


def _configure_runtime_logging(args) -> None:
    """Configure the ``jstyle`` logger from --log-level or JSTYLE_LOG_LEVEL."""
    log_level = (
        getattr(args, 'log_level', None) or
        os.getenv('JSTYLE_LOG_LEVEL', 'warning')
    ).lower()

    level_map = {
        'debug': logging.DEBUG,
        'info': logging.INFO,
        'warn': logging.WARNING,
        'warning': logging.WARNING,
        'error': logging.ERROR,
    }
    numeric_level = level_map.get(log_level, logging.WARNING)

    package_logger = logging.getLogger('jstyle')
    package_logger.setLevel(numeric_level)

    if not package_logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
        package_logger.propagate = False


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        'paths',
        nargs='*',
        default=['.'],
        help='Java files or directories to process (default: current directory)'
    )
    parser.add_argument(
        '--line-budget',
        type=int,
        default=None,
        help=f'Maximum line width (default: {LINE_BUDGET} or the configured value)'
    )
    parser.add_argument(
        '--fail-on-warning',
        action='store_true',
        help='Exit with status 1 when warnings are reported'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=None,
        help='Number of files processed in parallel (default: CPU count)'
    )
    parser.add_argument(
        '--output',
        choices=['text', 'json'],
        default='text',
        help='Report format (default: text)'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="jstyle - format Java sources in one canonical style and check style rules",
        prog="jstyle"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        '--config',
        default=None,
        help='Path to a jstyle.toml or pyproject.toml file'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'warning', 'error'],
        default=None,
        help='Set logging level (or set JSTYLE_LOG_LEVEL)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Print tracebacks with CLI errors (or set JSTYLE_VERBOSE=1)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    check_parser = subparsers.add_parser(
        'check',
        help='Report unformatted files and rule violations without writing'
    )
    _add_run_options(check_parser)
    check_parser.add_argument(
        '--diff',
        action='store_true',
        help='Show a unified diff for every file that is not formatted'
    )
    check_parser.set_defaults(func=cmd_check)

    apply_parser = subparsers.add_parser(
        'apply',
        help='Rewrite files into the canonical style and report rule violations'
    )
    _add_run_options(apply_parser)
    apply_parser.set_defaults(func=cmd_apply)

    rules_parser = subparsers.add_parser(
        'rules',
        help='List the built-in rules'
    )
    rules_parser.add_argument(
        '--output',
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text)'
    )
    rules_parser.set_defaults(func=cmd_rules)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entrypoint with subcommand support.

    Args:
        argv: Command-line arguments (None uses sys.argv[1:])

    Returns:
        Process exit code: 0 clean, 1 findings or failures, 2 usage errors

    Examples:
        Check a source tree:
        >>> main(['check', 'src/main/java'])  # doctest: +SKIP

        Rewrite files in place:
        >>> main(['apply', 'src/main/java'])  # doctest: +SKIP
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, 'func'):
        parser.print_help()
        return 2

    _configure_runtime_logging(args)

    try:
        return args.func(args)
    except (CLIError, InternalInvariantError) as exc:
        return handle_cli_exception(exc, verbose=args.verbose)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_FAILURE


__all__ = ["main", "build_parser"]
