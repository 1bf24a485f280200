"""Core type definitions for pi-sdif."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

OpKind = Literal["a", "d", "c"]

DiffFormat = Literal["normal", "context", "unified"]

MarkPosition = Literal["left", "right", "none"]

RowKind = Literal["same", "change", "header"]

FieldName = Literal[
    "OCOMMAND",
    "NCOMMAND",
    "OFILE",
    "NFILE",
    "OMARK",
    "NMARK",
    "UMARK",
    "OLINE",
    "NLINE",
    "ULINE",
    "OTEXT",
    "NTEXT",
    "UTEXT",
]

FIELD_NAMES: tuple[FieldName, ...] = (
    "OCOMMAND",
    "NCOMMAND",
    "OFILE",
    "NFILE",
    "OMARK",
    "NMARK",
    "UMARK",
    "OLINE",
    "NLINE",
    "ULINE",
    "OTEXT",
    "NTEXT",
    "UTEXT",
)

# Markers that denote an unchanged line in the unified and context grammars.
CONTEXT_MARKS = frozenset({" ", "  "})


@dataclass
class RawLine:
    """One body line of a diff: its marker and the text with the marker stripped."""

    mark: str
    text: str

    @property
    def changed(self) -> bool:
        return self.mark not in CONTEXT_MARKS

    @property
    def raw(self) -> str:
        return self.mark + self.text


@dataclass
class Range:
    """Inclusive line range; an empty range has ``end == start - 1``."""

    start: int
    end: int

    @property
    def count(self) -> int:
        return self.end - self.start + 1


@dataclass
class Triple:
    """One aligned display block: unchanged lines, then old and new lines."""

    same: list[RawLine] = field(default_factory=list)
    old: list[RawLine] = field(default_factory=list)
    new: list[RawLine] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.same or self.old or self.new)


@dataclass
class Hunk:
    kind: OpKind
    fmt: DiffFormat
    old: Range
    new: Range
    old_lines: list[RawLine] = field(default_factory=list)
    new_lines: list[RawLine] = field(default_factory=list)
    triples: list[Triple] = field(default_factory=list)
    # Header text shown above the hunk in the old and new columns.
    headers: tuple[str, str] = ("", "")


@dataclass
class Unparsed:
    """Lines that were not recognized as a hunk, passed through verbatim."""

    lines: list[str]


@dataclass
class RenderCell:
    rendered: str
    remainder: str
    width: int


@dataclass
class Cell:
    text: str
    lineno: int | None = None
    changed: bool = False


@dataclass
class Row:
    kind: RowKind
    old: Cell | None = None
    new: Cell | None = None
    # View mode rows carry no change marks.
    marked: bool = True
