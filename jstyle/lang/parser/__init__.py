"""Parser for the supported Java grammar."""

from .parse import JavaParser, parse

__all__ = ["JavaParser", "parse"]
