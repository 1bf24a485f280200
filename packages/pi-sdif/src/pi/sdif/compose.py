"""Compose display rows into printed two-column terminal lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pi.sdif.colors import Colorizer
from pi.sdif.config import Config
from pi.sdif.fold import fold
from pi.sdif.types import Cell, FieldName, MarkPosition, Row
from pi.sdif.width import expand_tabs, visible_width

Side = Literal["old", "new"]

GUTTER = " "

_FILE_PREFIXES = ("--- ", "*** ", "+++ ")
_COMMAND_PREFIXES = ("diff ", "Only in ", "Binary files ", "Index: ", "Common subdirectories: ")


@dataclass
class _Fields:
    mark: FieldName
    line: FieldName
    text: FieldName


_CHANGED = {
    "old": _Fields("OMARK", "OLINE", "OTEXT"),
    "new": _Fields("NMARK", "NLINE", "NTEXT"),
}
_UNCHANGED = _Fields("UMARK", "ULINE", "UTEXT")
_HEADER = {"old": "OCOMMAND", "new": "NCOMMAND"}


class ColumnComposer:
    """Lay out rows as ``old | new`` columns of fixed width.

    Each side is ``[mark][number]text`` or ``[number]text[mark]``
    depending on its mark position.  A line wider than its cell continues
    on following printed lines with the continuation mark and no number.
    """

    def __init__(self, config: Config, colorizer: Colorizer) -> None:
        self._config = config
        self._colors = colorizer
        self._positions: dict[Side, MarkPosition] = dict(
            zip(("old", "new"), config.mark_positions())
        )
        self.total_width = config.resolved_width()
        if self.total_width <= 0:
            raise ValueError(f"width must be positive, got {self.total_width}")

        self._mark_width = max(
            visible_width(m)
            for m in (config.old_mark, config.new_mark, config.same_mark, config.continue_mark)
        )
        self._number_width = config.digit + 1 if config.number else 0
        self.side_width = (self.total_width - len(GUTTER)) // 2
        self.text_width = {
            side: self.side_width
            - self._number_width
            - (0 if self._positions[side] == "none" else self._mark_width)
            for side in ("old", "new")
        }
        narrowest = min(self.text_width.values())
        if narrowest <= 0:
            raise ValueError(
                f"width {self.total_width} leaves no room for text "
                f"(marks and line numbers need {self.side_width - narrowest + 1} columns per side)"
            )

    # -- pieces -------------------------------------------------------------

    def _glyph(self, glyph: str) -> str:
        return glyph + " " * (self._mark_width - visible_width(glyph))

    def _mark(self, side: Side, row: Row, cell: Cell | None, first: bool, active: bool) -> str:
        if cell is None or not active or row.kind == "header":
            return self._glyph("")
        fields = _CHANGED[side] if cell.changed else _UNCHANGED
        if not first:
            glyph = self._config.continue_mark
        elif row.kind == "change" and row.marked and cell.changed:
            glyph = self._config.old_mark if side == "old" else self._config.new_mark
        else:
            glyph = self._config.same_mark
        if not glyph.strip():
            return self._glyph(glyph)
        return self._colors.apply(fields.mark, self._glyph(glyph))

    def _number(self, side: Side, row: Row, cell: Cell | None, first: bool) -> str:
        if not self._number_width:
            return ""
        if cell is None or cell.lineno is None or not first or row.kind == "header":
            return " " * self._number_width
        fields = _CHANGED[side] if cell.changed else _UNCHANGED
        number = f"{cell.lineno:>{self._config.digit}}"
        return self._colors.apply(fields.line, number) + " "

    def _text(self, side: Side, row: Row, cell: Cell | None, text: str, active: bool) -> tuple[str, str]:
        width = self.text_width[side]
        if cell is None or not active:
            return " " * width, ""
        if row.kind == "header":
            field: FieldName = _HEADER[side]  # type: ignore[assignment]
        else:
            field = (_CHANGED[side] if cell.changed else _UNCHANGED).text
        result = fold(text, width, onword=self._config.onword, pad=self._colors.expand(field))
        colored = self._colors.apply(field, result.rendered)
        if result.width < width:
            colored += " " * (width - result.width)
        return colored, result.remainder

    def _side(
        self, side: Side, row: Row, cell: Cell | None, text: str, first: bool
    ) -> tuple[str, str]:
        active = cell is not None and (first or bool(text))
        mark = self._mark(side, row, cell, first, active)
        number = self._number(side, row, cell, first and active)
        body, rest = self._text(side, row, cell, text, active)
        position = self._positions[side]
        if position == "left":
            return mark + number + body, rest
        if position == "right":
            return number + body + mark, rest
        return number + body, rest

    # -- public -------------------------------------------------------------

    def render(self, row: Row) -> list[str]:
        """Return the printed lines for one row."""
        tabstop = self._config.tabstop
        old_text = expand_tabs(row.old.text, tabstop) if row.old else ""
        new_text = expand_tabs(row.new.text, tabstop) if row.new else ""

        lines: list[str] = []
        first = True
        while True:
            old_part, old_text = self._side("old", row, row.old, old_text, first)
            new_part, new_text = self._side("new", row, row.new, new_text, first)
            lines.append((old_part + GUTTER + new_part).rstrip(" "))
            if self._config.truncate or (not old_text and not new_text):
                break
            first = False
        return lines

    def passthrough(self, line: str) -> str:
        """Color a line the interpreter did not recognize; its text is unchanged."""
        if line.startswith(_FILE_PREFIXES) and not line.startswith("****"):
            field: FieldName = "NFILE" if line.startswith("+++ ") else "OFILE"
            return self._colors.apply(field, line)
        if line.startswith(_COMMAND_PREFIXES):
            return self._colors.apply("OCOMMAND", line)
        return line
