"""Align the old and new bodies of a context-diff hunk into Triples.

diff(1) groups a change block as deletions, then insertions, then the
paired ``!`` modifications, with unchanged lines between blocks.  The
aligner walks both bodies greedily in that order; it never reorders
lines and does not search for a better alignment.
"""

from __future__ import annotations

from pi.sdif.errors import AlignmentError
from pi.sdif.types import RawLine, Triple

SAME = "  "
DELETE = "- "
INSERT = "+ "
MODIFY = "! "

VALID_MARKS = frozenset({SAME, DELETE, INSERT, MODIFY})


def _run(lines: list[RawLine], pos: int, mark: str) -> int:
    """Return the end of the run of *mark* lines starting at *pos*."""
    while pos < len(lines) and lines[pos].mark == mark:
        pos += 1
    return pos


def align(old: list[RawLine], new: list[RawLine]) -> list[Triple]:
    """Split a context hunk into ordered (same, old, new) blocks.

    Concatenating the blocks slot by slot gives back *old* (same + old)
    and *new* (same + new) unchanged.  Raises ``AlignmentError`` on a
    marker outside the four context-diff markers, or when the bodies
    cannot be walked in diff(1) order.
    """
    for line in (*old, *new):
        if line.mark not in VALID_MARKS:
            raise AlignmentError(f"invalid context diff marker {line.mark!r}")

    triples: list[Triple] = []
    o = n = 0
    while o < len(old) or n < len(new):
        t = Triple()
        start = (o, n)

        while (
            o < len(old) and n < len(new)
            and old[o].mark == SAME and new[n].mark == SAME
        ):
            t.same.append(old[o])
            o += 1
            n += 1

        end = _run(old, o, DELETE)
        if end > o:
            t.old.extend(old[o:end])
            o = end
            triples.append(t)
            continue

        end = _run(new, n, INSERT)
        if end > n:
            t.new.extend(new[n:end])
            n = end
            triples.append(t)
            continue

        end = _run(old, o, MODIFY)
        t.old.extend(old[o:end])
        o = end
        end = _run(new, n, MODIFY)
        t.new.extend(new[n:end])
        n = end

        if (o, n) == start:
            raise AlignmentError(
                f"cannot align context hunk at old line {o + 1}, new line {n + 1}"
            )
        triples.append(t)

    return triples
