"""Interpret diff output (normal, context, unified) as a stream of hunks.

Each grammar has its own entry point taking the header line already
read.  Every entry point returns either a ``Hunk`` or an ``Unparsed``
holding all lines it consumed, so malformed input is passed through
verbatim instead of aborting the run.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Union

from pi.sdif.align import VALID_MARKS, align
from pi.sdif.session import RenderSession
from pi.sdif.source import LineReader, LineSource
from pi.sdif.types import Hunk, OpKind, Range, RawLine, Triple, Unparsed

logger = logging.getLogger(__name__)

ParseResult = Union[Hunk, Unparsed]

NORMAL_RE = re.compile(r"^(\d+)(?:,(\d+))?([acd])(\d+)(?:,(\d+))?$")
CONTEXT_OLD_RE = re.compile(r"^\*\*\* (\d+)(?:,(\d+))? \*\*\*\*\s*$")
CONTEXT_NEW_RE = re.compile(r"^--- (\d+)(?:,(\d+))? ----\s*$")
UNIFIED_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

def _is_annotation(line: str) -> bool:
    """``\\ No newline at end of file`` and the like."""
    return line.startswith("\\")


def _skip_annotations(reader: LineReader, consumed: list[str]) -> None:
    while True:
        line = reader.readline()
        if line is None:
            return
        if not _is_annotation(line):
            reader.unread(line)
            return
        consumed.append(line)


def _kind_of(old_lines: list[RawLine], new_lines: list[RawLine]) -> OpKind:
    has_old = any(line.changed for line in old_lines)
    has_new = any(line.changed for line in new_lines)
    if has_old and has_new:
        return "c"
    if has_old:
        return "d"
    return "a"


# ---------------------------------------------------------------------------
# Normal diff
# ---------------------------------------------------------------------------


def _normal_range(start: str, end: str | None, empty: bool) -> Range:
    first = int(start)
    if empty:
        # "5a6,7": the old side is the empty range after line 5.
        return Range(first + 1, first)
    return Range(first, int(end) if end else first)


def _read_normal_body(
    reader: LineReader, count: int, prefix: str, consumed: list[str]
) -> list[RawLine] | None:
    lines: list[RawLine] = []
    while len(lines) < count:
        line = reader.readline()
        if line is None:
            return None
        if _is_annotation(line):
            consumed.append(line)
            continue
        if line != prefix and not line.startswith(prefix + " "):
            reader.unread(line)
            return None
        consumed.append(line)
        lines.append(RawLine(prefix, line[2:]))
    _skip_annotations(reader, consumed)
    return lines


def parse_normal(header: str, reader: LineReader, session: RenderSession) -> ParseResult:
    """Parse a normal diff hunk (``N[,M]{a,c,d}N[,M]``)."""
    m = NORMAL_RE.match(header)
    if m is None:
        return Unparsed([header])

    kind: OpKind = m.group(3)  # type: ignore[assignment]
    old = _normal_range(m.group(1), m.group(2), empty=kind == "a")
    new = _normal_range(m.group(4), m.group(5), empty=kind == "d")
    session.seek(old.start, new.start)

    consumed = [header]
    old_lines: list[RawLine] = []
    new_lines: list[RawLine] = []

    if kind in ("d", "c"):
        body = _read_normal_body(reader, old.count, "<", consumed)
        if body is None:
            logger.debug("normal hunk %r: short or malformed old body", header)
            return Unparsed(consumed)
        old_lines = body

    if kind == "c":
        line = reader.readline()
        if line != "---":
            if line is not None:
                reader.unread(line)
            logger.debug("normal hunk %r: missing separator", header)
            return Unparsed(consumed)
        consumed.append(line)

    if kind in ("a", "c"):
        body = _read_normal_body(reader, new.count, ">", consumed)
        if body is None:
            logger.debug("normal hunk %r: short or malformed new body", header)
            return Unparsed(consumed)
        new_lines = body

    return Hunk(
        kind=kind,
        fmt="normal",
        old=old,
        new=new,
        old_lines=old_lines,
        new_lines=new_lines,
        triples=[Triple(old=list(old_lines), new=list(new_lines))],
        headers=(header, header),
    )


# ---------------------------------------------------------------------------
# Context diff
# ---------------------------------------------------------------------------


def _context_range(start: str, end: str | None) -> tuple[Range, bool]:
    """Return the header range and whether it was a single ambiguous number."""
    first = int(start)
    if end is not None:
        return Range(first, int(end)), False
    if first == 0:
        return Range(1, 0), True
    return Range(first, first), True


def _read_context_body(
    reader: LineReader, count: int, consumed: list[str]
) -> list[RawLine] | None:
    lines: list[RawLine] = []
    while len(lines) < count:
        line = reader.readline()
        if line is None:
            return None
        consumed.append(line)
        if _is_annotation(line):
            continue
        lines.append(RawLine(line[:2], line[2:]))
    _skip_annotations(reader, consumed)
    return lines


def _valid_context_body(lines: list[RawLine]) -> bool:
    return all(line.mark in VALID_MARKS for line in lines)


def _synthesized_range(header: Range, lines: list[RawLine]) -> Range:
    if lines:
        return Range(header.start, header.start + len(lines) - 1)
    return Range(header.end + 1, header.end)


def parse_context(header: str, reader: LineReader, session: RenderSession) -> ParseResult:
    """Parse a context diff hunk (``*** N,M ****`` / ``--- N,M ----``)."""
    m = CONTEXT_OLD_RE.match(header)
    if m is None:
        return Unparsed([header])
    old, _ = _context_range(m.group(1), m.group(2))
    session.seek(old.start, old.start)

    consumed = [header]
    line = reader.readline()
    if line is None:
        return Unparsed(consumed)

    old_lines: list[RawLine] | None = None
    m2 = CONTEXT_NEW_RE.match(line)
    if m2 is None:
        reader.unread(line)
        old_lines = _read_context_body(reader, old.count, consumed)
        if old_lines is None:
            return Unparsed(consumed)
        line = reader.readline()
        m2 = CONTEXT_NEW_RE.match(line) if line is not None else None
        if m2 is None:
            if line is not None:
                reader.unread(line)
            logger.debug("context hunk %r: second header not found", header)
            return Unparsed(consumed)
        if not _valid_context_body(old_lines):
            consumed.append(line)
            logger.debug("context hunk %r: invalid old body marker", header)
            return Unparsed(consumed)
    new_header = line
    consumed.append(new_header)
    new, new_single = _context_range(m2.group(1), m2.group(2))
    session.seek(old.start, new.start)

    new_lines: list[RawLine] | None = None
    if old_lines:
        deleted = sum(1 for line in old_lines if line.mark == "- ")
        modified = any(line.mark == "! " for line in old_lines)
        remaining = len(old_lines) - deleted
        shortcut = not modified and (
            remaining == new.count or (new_single and remaining == 0)
        )
    else:
        shortcut = False
    if not shortcut:
        new_lines = _read_context_body(reader, new.count, consumed)
        if new_lines is None:
            return Unparsed(consumed)
        if not _valid_context_body(new_lines):
            logger.debug("context hunk %r: invalid new body marker", header)
            return Unparsed(consumed)

    # diff(1) omits a body with no changes; rebuild it from the other side.
    if old_lines is None:
        old_lines = [line for line in new_lines or [] if line.mark == "  "]
        old = _synthesized_range(old, old_lines)
    if new_lines is None:
        new_lines = [line for line in old_lines if line.mark == "  "]
        new = _synthesized_range(new, new_lines)

    return Hunk(
        kind=_kind_of(old_lines, new_lines),
        fmt="context",
        old=old,
        new=new,
        old_lines=old_lines,
        new_lines=new_lines,
        triples=align(old_lines, new_lines),
        headers=(header, new_header),
    )


# ---------------------------------------------------------------------------
# Unified diff
# ---------------------------------------------------------------------------

_SLOTS = {" ": 0, "-": 1, "+": 2}


def _unified_range(start: str, count: str | None) -> Range:
    first = int(start)
    n = 1 if count is None else int(count)
    if n == 0:
        # "-5,0": the empty range after line 5.
        return Range(first + 1, first)
    return Range(first, first + n - 1)


def parse_unified(header: str, reader: LineReader, session: RenderSession) -> ParseResult:
    """Parse a unified diff hunk (``@@ -o[,oc] +n[,nc] @@``).

    Body lines go into slots by a rotating index: it only moves forward,
    to the next position whose ``index % 3`` matches the line's slot, so
    a ``+`` after ``-`` stays in the same Triple while a ``-`` after
    ``+`` (or a context line after a change) starts the next one.
    """
    m = UNIFIED_RE.match(header)
    if m is None:
        return Unparsed([header])
    old = _unified_range(m.group(1), m.group(2))
    new = _unified_range(m.group(3), m.group(4))
    session.seek(old.start, new.start)

    old_budget, new_budget = old.count, new.count
    triples = [Triple()]
    old_lines: list[RawLine] = []
    new_lines: list[RawLine] = []
    index = 0
    while old_budget > 0 or new_budget > 0:
        line = reader.readline()
        if line is None:
            logger.warning("unified hunk %r: unexpected end of input", header)
            break
        if UNIFIED_RE.match(line):
            reader.unread(line)
            logger.warning("unified hunk %r: body shorter than its header", header)
            break
        if line == "":
            line = " "
        slot = _SLOTS.get(line[0])
        if slot is None:
            continue
        while index % 3 != slot:
            index += 1
        while len(triples) <= index // 3:
            triples.append(Triple())

        raw = RawLine(line[0], line[1:])
        triple = triples[index // 3]
        if slot == 0:
            triple.same.append(raw)
            old_lines.append(raw)
            new_lines.append(raw)
            old_budget -= 1
            new_budget -= 1
        elif slot == 1:
            triple.old.append(raw)
            old_lines.append(raw)
            old_budget -= 1
        else:
            triple.new.append(raw)
            new_lines.append(raw)
            new_budget -= 1
    _skip_annotations(reader, [])

    return Hunk(
        kind=_kind_of(old_lines, new_lines),
        fmt="unified",
        old=old,
        new=new,
        old_lines=old_lines,
        new_lines=new_lines,
        triples=[t for t in triples if not t.is_empty()],
        headers=(header, header),
    )


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


class DiffParser:
    """Iterate over a LineSource, yielding ``Hunk`` and ``Unparsed`` items."""

    def __init__(self, source: LineSource, session: RenderSession) -> None:
        self._reader = LineReader(source)
        self._session = session
        self.hunks = 0

    @property
    def exit_status(self) -> int | None:
        return self._reader.exit_status

    def __iter__(self) -> Iterator[ParseResult]:
        reader = self._reader
        while True:
            line = reader.readline()
            if line is None:
                return
            if NORMAL_RE.match(line):
                result = parse_normal(line, reader, self._session)
            elif CONTEXT_OLD_RE.match(line):
                result = parse_context(line, reader, self._session)
            elif UNIFIED_RE.match(line):
                result = parse_unified(line, reader, self._session)
            else:
                result = Unparsed([line])
            if isinstance(result, Hunk):
                self.hunks += 1
            yield result
