"""Layout document IR and its width-aware renderer.

The printer describes output as a tree of layout commands instead of text.
Groups are laid out flat when their content up to the next line break fits
the remaining width, otherwise every line directly inside them breaks.
Newlines never stack: a break requested at the start of a line only moves the
indentation, and ``BLANK_LINE`` guarantees exactly one empty line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Tuple, Union

from jstyle.config import INDENT_WIDTH


@dataclass(frozen=True)
class Doc:
    """Base class of every layout command."""

    @property
    def hard(self) -> bool:
        """True when the command always produces a line break."""
        return False


@dataclass(frozen=True)
class Text(Doc):
    text: str


@dataclass(frozen=True)
class Concat(Doc):
    parts: Tuple[Doc, ...]
    forced: bool = field(default=False, compare=False)

    @property
    def hard(self) -> bool:
        return self.forced


@dataclass(frozen=True)
class Line(Doc):
    """A space (or nothing when ``soft``) in flat mode, a newline when broken."""

    soft: bool = False
    forced: bool = False

    @property
    def hard(self) -> bool:
        return self.forced


@dataclass(frozen=True)
class BlankLine(Doc):
    @property
    def hard(self) -> bool:
        return True


@dataclass(frozen=True)
class Group(Doc):
    contents: Doc

    @property
    def hard(self) -> bool:
        return self.contents.hard


@dataclass(frozen=True)
class Indent(Doc):
    contents: Doc

    @property
    def hard(self) -> bool:
        return self.contents.hard


@dataclass(frozen=True)
class IfBreak(Doc):
    broken: Doc
    flat: Doc

    @property
    def hard(self) -> bool:
        return self.broken.hard


@dataclass(frozen=True)
class ConditionalGroup(Doc):
    """Choose between a flat, a hugged and a fully expanded layout.

    ``expanded`` is tried flat first. If it cannot be flat, ``hugged`` is
    used when its first line fits; otherwise ``expanded`` breaks. Forced
    breaks inside do not propagate to enclosing groups.

    With ``head_only`` the hugged layout is measured only up to its first
    possible line break and is laid out in break mode, so the groups inside
    it decide for themselves whether to break.
    """

    expanded: Doc
    hugged: Doc
    head_only: bool = False


NIL = Text("")
SPACE = Text(" ")
LINE = Line()
SOFTLINE = Line(soft=True)
HARDLINE = Line(forced=True)
BLANK_LINE = BlankLine()

Part = Union[Doc, str, None]


def concat(*parts: Part) -> Doc:
    items: List[Doc] = []
    for part in parts:
        if part is None:
            continue
        if isinstance(part, str):
            if part:
                items.append(Text(part))
            continue
        if isinstance(part, Concat):
            items.extend(part.parts)
        elif part != NIL:
            items.append(part)
    if len(items) == 1:
        return items[0]
    return Concat(tuple(items), any(item.hard for item in items))


def group(*parts: Part) -> Doc:
    return Group(concat(*parts))


def indent(*parts: Part) -> Doc:
    return Indent(concat(*parts))


def join(separator: Part, docs: Sequence[Doc]) -> Doc:
    parts: List[Part] = []
    for index, doc in enumerate(docs):
        if index:
            parts.append(separator)
        parts.append(doc)
    return concat(*parts)


class Mode(Enum):
    BREAK = "break"
    FLAT = "flat"


Command = Tuple[int, Mode, Doc]


class Renderer:
    """Render a layout document into text with a fixed line width."""

    def __init__(self, width: int):
        self.width = width
        self.lines: List[str] = []
        self.current: List[str] = []
        self.column = 0
        self.at_line_start = True
        self.pending_indent = 0
        self.remeasure = False

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def newline(self, depth: int) -> None:
        self.pending_indent = depth
        if self.at_line_start:
            return
        self.lines.append("".join(self.current).rstrip())
        self.current = []
        self.column = 0
        self.at_line_start = True

    def blank_line(self, depth: int) -> None:
        self.newline(depth)
        if self.lines and self.lines[-1] != "":
            self.lines.append("")

    def write(self, text: str) -> None:
        if not text:
            return
        if self.at_line_start:
            if not text.strip():
                return
            prefix = " " * (INDENT_WIDTH * self.pending_indent)
            self.current = [prefix]
            self.column = len(prefix)
            self.at_line_start = False
        pieces = text.split("\n")
        for piece in pieces[:-1]:
            self.current.append(piece)
            self.lines.append("".join(self.current))
            self.current = []
        self.current.append(pieces[-1])
        self.column = len(pieces[-1]) if len(pieces) > 1 else self.column + len(pieces[-1])

    def start_column(self) -> int:
        if self.at_line_start:
            return INDENT_WIDTH * self.pending_indent
        return self.column

    def result(self) -> str:
        self.newline(0)
        while self.lines and self.lines[-1] == "":
            self.lines.pop()
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def fits(self, command: Command, rest: List[Command]) -> bool:
        remaining = self.width - self.start_column()
        stack: List[Command] = [command]
        rest_index = len(rest)
        while remaining >= 0:
            if not stack:
                if rest_index == 0:
                    return True
                rest_index -= 1
                stack.append(rest[rest_index])
                continue
            depth, mode, doc = stack.pop()
            if isinstance(doc, Text):
                first, newline, _ = doc.text.partition("\n")
                remaining -= len(first)
                if newline:
                    return remaining >= 0
            elif isinstance(doc, Concat):
                stack.extend((depth, mode, part) for part in reversed(doc.parts))
            elif isinstance(doc, Indent):
                stack.append((depth + 1, mode, doc.contents))
            elif isinstance(doc, Group):
                stack.append((depth, Mode.BREAK if doc.hard else mode, doc.contents))
            elif isinstance(doc, ConditionalGroup):
                stack.append((depth, Mode.BREAK if doc.expanded.hard else mode, doc.expanded))
            elif isinstance(doc, IfBreak):
                stack.append((depth, mode, doc.broken if mode is Mode.BREAK else doc.flat))
            elif isinstance(doc, (Line, BlankLine)):
                if mode is Mode.BREAK or doc.hard:
                    return True
                if not doc.soft:
                    remaining -= 1
        return False

    def render(self, doc: Doc) -> str:
        stack: List[Command] = [(0, Mode.BREAK, doc)]
        while stack:
            depth, mode, doc = stack.pop()
            if isinstance(doc, Text):
                self.write(doc.text)
            elif isinstance(doc, Concat):
                stack.extend((depth, mode, part) for part in reversed(doc.parts))
            elif isinstance(doc, Indent):
                stack.append((depth + 1, mode, doc.contents))
            elif isinstance(doc, Group):
                if mode is Mode.FLAT and not self.remeasure and not doc.hard:
                    stack.append((depth, Mode.FLAT, doc.contents))
                    continue
                self.remeasure = False
                flat = (depth, Mode.FLAT, doc.contents)
                if not doc.hard and self.fits(flat, stack):
                    stack.append(flat)
                else:
                    stack.append((depth, Mode.BREAK, doc.contents))
            elif isinstance(doc, ConditionalGroup):
                self.remeasure = False
                flat = (depth, Mode.FLAT, doc.expanded)
                hugged = (depth, Mode.BREAK if doc.head_only else Mode.FLAT, doc.hugged)
                if not doc.expanded.hard and self.fits(flat, stack):
                    stack.append(flat)
                elif self.fits(hugged, stack):
                    stack.append(hugged)
                else:
                    stack.append((depth, Mode.BREAK, doc.expanded))
            elif isinstance(doc, IfBreak):
                stack.append((depth, mode, doc.broken if mode is Mode.BREAK else doc.flat))
            elif isinstance(doc, Line):
                if mode is Mode.FLAT and not doc.hard:
                    if not doc.soft:
                        self.write(" ")
                    continue
                if mode is Mode.FLAT:
                    self.remeasure = True
                self.newline(depth)
            elif isinstance(doc, BlankLine):
                if mode is Mode.FLAT:
                    self.remeasure = True
                self.blank_line(depth)
        return self.result()


def render(doc: Doc, width: int) -> str:
    """Lay out ``doc`` within ``width`` columns."""
    return Renderer(width).render(doc)


__all__ = [
    "Doc",
    "Text",
    "Concat",
    "Line",
    "BlankLine",
    "Group",
    "Indent",
    "IfBreak",
    "ConditionalGroup",
    "NIL",
    "SPACE",
    "LINE",
    "SOFTLINE",
    "HARDLINE",
    "BLANK_LINE",
    "concat",
    "group",
    "indent",
    "join",
    "Renderer",
    "render",
]
