"""Turn aligned Triples into display rows."""

from __future__ import annotations

from typing import Iterable, Iterator

from pi.sdif.session import RenderSession
from pi.sdif.types import Cell, RawLine, Row, Triple


def view_triples(triples: list[Triple]) -> list[Triple]:
    """Merge a hunk's Triples for view mode.

    The leading unchanged lines of the first Triple and a trailing
    unchanged-only Triple stay aligned across both columns.  Every other
    unchanged run is appended to both the old and the new column, so
    each column reads as a contiguous excerpt of its file.
    """
    if not triples:
        return []

    first = triples[0]
    acc = Triple(same=list(first.same), old=list(first.old), new=list(first.new))
    rest = triples[1:]
    tail: list[RawLine] = []
    if rest and not rest[-1].old and not rest[-1].new:
        tail = rest[-1].same
        rest = rest[:-1]

    for t in rest:
        acc.old.extend(t.same)
        acc.old.extend(t.old)
        acc.new.extend(t.same)
        acc.new.extend(t.new)

    result = [acc]
    if tail:
        result.append(Triple(same=list(tail)))
    return result


def emit_rows(
    triples: Iterable[Triple], session: RenderSession, view: bool = False
) -> Iterator[Row]:
    """Yield one Row per displayed line pair, numbering from *session*.

    Unchanged lines fill both sides.  Old and new lines of a block are
    paired by position; the shorter side gets an empty (``None``) cell.
    """
    if view:
        triples = view_triples(list(triples))

    for t in triples:
        for line in t.same:
            yield Row(
                "same",
                Cell(line.text, session.old_lineno),
                Cell(line.text, session.new_lineno),
            )
            session.advance(old=1, new=1)

        for i in range(max(len(t.old), len(t.new))):
            old = new = None
            if i < len(t.old):
                line = t.old[i]
                old = Cell(line.text, session.old_lineno, line.changed)
                session.advance(old=1)
            if i < len(t.new):
                line = t.new[i]
                new = Cell(line.text, session.new_lineno, line.changed)
                session.advance(new=1)
            yield Row("change", old, new, marked=not view)


def unchanged_rows(
    pairs: Iterable[tuple[str | None, str | None]], old_lineno: int, new_lineno: int
) -> Iterator[Row]:
    """Rows for lines copied straight from the original files."""
    for old_text, new_text in pairs:
        old = new = None
        if old_text is not None:
            old = Cell(old_text, old_lineno)
            old_lineno += 1
        if new_text is not None:
            new = Cell(new_text, new_lineno)
            new_lineno += 1
        yield Row("same", old, new)
