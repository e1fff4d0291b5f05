"""
Errors raised by the jstyle command line and how they are reported.

Every CLI error carries a code, an optional hint and the exit status the
process ends with. Errors from the core (``JStyleError``) are printed through
their own ``format()``.
"""

import os
import sys
import traceback
from typing import Optional

EXIT_FAILURE = 1
EXIT_USAGE = 2

# Longest traceback excerpt printed with --verbose.
TRACEBACK_LIMIT = 4000


class CLIError(Exception):
    """
    Base exception for command line failures.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code
        hint: Optional suggestion for resolving the error
        exit_code: Process exit status for this error
    """

    exit_code = EXIT_FAILURE

    def __init__(self, message: str, *, code: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.hint = hint

    def __str__(self) -> str:
        return self.message


class CLIConfigError(CLIError):
    """A ``jstyle.toml`` or ``[tool.jstyle]`` table that cannot be used."""

    exit_code = EXIT_USAGE

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, code="CLI_CONFIG_ERROR", hint=hint)


class CLIValidationError(CLIError):
    """A missing path or an option value out of range."""

    exit_code = EXIT_USAGE

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, code="CLI_VALIDATION_ERROR", hint=hint)


def format_cli_error(exc: BaseException, *, include_traceback: bool = False) -> str:
    """
    Render ``exc`` for stderr.

    Examples:
        >>> print(format_cli_error(CLIValidationError("Path not found: src", hint="Check the path")))
        Error [CLI_VALIDATION_ERROR]: Path not found: src
        Hint: Check the path
    """
    if isinstance(exc, CLIError):
        lines = [f"Error [{exc.code}]: {exc.message}"]
        if exc.hint:
            lines.append(f"Hint: {exc.hint}")
    else:
        formatter = getattr(exc, "format", None)
        detail = formatter() if callable(formatter) else f"{exc.__class__.__name__}: {exc}"
        lines = [f"Error: {detail}"]

    if include_traceback:
        trace = traceback.format_exc().strip()
        if len(trace) > TRACEBACK_LIMIT:
            trace = f"{trace[:TRACEBACK_LIMIT - 3]}..."
        lines.append("")
        lines.append(trace)
    return "\n".join(lines)


def verbose_requested(flag: bool = False) -> bool:
    """True for ``--verbose`` or a truthy ``JSTYLE_VERBOSE``."""
    if flag:
        return True
    return os.getenv("JSTYLE_VERBOSE", "").strip().lower() in {"1", "true", "yes", "on"}


def handle_cli_exception(exc: BaseException, *, verbose: bool = False) -> int:
    """Print ``exc`` on stderr and return the exit status it maps to."""
    print(format_cli_error(exc, include_traceback=verbose_requested(verbose)), file=sys.stderr)
    return getattr(exc, "exit_code", EXIT_FAILURE)


__all__ = [
    "CLIError",
    "CLIConfigError",
    "CLIValidationError",
    "EXIT_FAILURE",
    "EXIT_USAGE",
    "format_cli_error",
    "handle_cli_exception",
    "verbose_requested",
]
