"""Unified error model for jstyle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from jstyle.lang.cst import Span


@dataclass
class ErrorLocation:
    path: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    def describe(self) -> str:
        if self.path and self.line is not None and self.column is not None:
            return f"{self.path}:{self.line}:{self.column}"
        if self.path and self.line is not None:
            return f"{self.path}:{self.line}"
        if self.path:
            return self.path
        if self.line is not None and self.column is not None:
            return f"{self.line}:{self.column}"
        return "unknown location"


class JStyleError(Exception):
    """Base class for all errors surfaced by the formatter and rule checker."""

    code: Optional[str] = None
    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.location = ErrorLocation(path=path, line=line, column=column)
        self.path = path
        self.line = line
        self.column = column
        if code is not None:
            self.code = code
        if hint is not None:
            self.hint = hint

    def format(self) -> str:
        components = [self.message]
        meta_parts = []
        location_desc = self.location.describe()
        if location_desc != "unknown location":
            meta_parts.append(location_desc)
        if self.code:
            meta_parts.append(self.code)
        if meta_parts:
            components[-1] = f"{components[-1]} ({'; '.join(meta_parts)})"
        if self.hint:
            components.append(f"Hint: {self.hint}")
        return " ".join(part for part in components if part)


class ParseError(JStyleError):
    """Raised when source text is not syntactically valid Java."""

    code = "PARSE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        span: Optional["Span"] = None,
        path: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            path=path,
            line=span.line if span is not None else None,
            column=span.column if span is not None else None,
            hint=hint,
        )
        self.span = span


class InternalInvariantError(JStyleError):
    """Raised when a lossless-parse, round-trip or idempotence invariant breaks.

    This always indicates a bug in jstyle itself; callers must never turn it
    into a silent success because the formatter could otherwise corrupt
    source files.
    """

    code = "INTERNAL_INVARIANT"


class IoFailure(JStyleError):
    """Raised when a file cannot be read or written."""

    code = "IO_FAILURE"


class ConfigError(JStyleError):
    """Raised when a configuration file is malformed."""

    code = "CONFIG_ERROR"


__all__ = [
    "JStyleError",
    "ParseError",
    "InternalInvariantError",
    "IoFailure",
    "ConfigError",
    "ErrorLocation",
]
