"""
jstyle: one canonical style for Java sources.

The package is organised into several modules:

* ``lang`` - lexer, lossless concrete syntax tree and recursive-descent
  parser for Java.  Re-serializing a tree reproduces its input byte for
  byte.
* ``formatting`` - structural passes (import order, brace placement,
  blank lines) and the width-aware printer that lays the canonical tree
  out within the line budget.
* ``linter`` - a fixed, versioned registry of style rules that read the
  tree and report violations formatting cannot fix.
* ``reconcile`` and ``driver`` - check or apply the style to files,
  with atomic writes and per-file reports.
* ``cli`` - the ``jstyle`` command line interface.
"""

from importlib import metadata as _metadata

try:  # pragma: no cover - metadata lookup for installed copies
    __version__ = _metadata.version("jstyle")
except _metadata.PackageNotFoundError:  # pragma: no cover - source tree
    __version__ = "0.1.0"

__all__ = ["__version__"]
