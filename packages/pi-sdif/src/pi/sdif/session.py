"""Per-run mutable render state."""

from __future__ import annotations

from dataclasses import dataclass, field

from pi.sdif.types import FieldName


@dataclass
class RenderSession:
    """Line counters and compiled colors shared by every stage of one run.

    ``old_lineno`` and ``new_lineno`` hold the number of the next line to
    be shown on each side.  Each hunk header seeks them to its own start
    lines, so in a diff covering several files numbering restarts with
    every file instead of only ever increasing.
    """

    old_lineno: int = 1
    new_lineno: int = 1
    colors: dict[FieldName, tuple[str, str]] = field(default_factory=dict)

    def seek(self, old_lineno: int, new_lineno: int) -> None:
        self.old_lineno = old_lineno
        self.new_lineno = new_lineno

    def advance(self, old: int = 0, new: int = 0) -> None:
        self.old_lineno += old
        self.new_lineno += new
