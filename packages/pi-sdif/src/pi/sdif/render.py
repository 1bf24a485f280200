"""Drive the whole pipeline: parse, align, emit rows, compose, write."""

from __future__ import annotations

import itertools
import logging
from typing import Iterable, Iterator, TextIO

from pi.sdif.colors import Colorizer
from pi.sdif.compose import ColumnComposer
from pi.sdif.config import Config
from pi.sdif.errors import DiffSyncError
from pi.sdif.parser import DiffParser
from pi.sdif.rows import emit_rows, unchanged_rows
from pi.sdif.session import RenderSession
from pi.sdif.source import LineSource, chomp
from pi.sdif.types import Cell, Hunk, Row, Unparsed

logger = logging.getLogger(__name__)

EXIT_SAME = 0
EXIT_DIFFER = 1
EXIT_TROUBLE = 2


class FileSync:
    """Read the two original files in step with the hunks of their diff.

    Lines between hunks are unchanged; their count must agree on both
    sides, otherwise the diff does not describe these files.
    """

    def __init__(self, old: Iterable[str], new: Iterable[str]) -> None:
        self._old: Iterator[str] = iter(old)
        self._new: Iterator[str] = iter(new)
        self.old_lineno = 1
        self.new_lineno = 1

    @staticmethod
    def _take(lines: Iterator[str], count: int, side: str, lineno: int) -> list[str]:
        taken = [chomp(line) for line in itertools.islice(lines, count)]
        if len(taken) < count:
            raise DiffSyncError(
                f"{side} file ended at line {lineno + len(taken)}, "
                f"expected at least {lineno + count - 1} lines"
            )
        return taken

    def until(self, hunk: Hunk) -> list[Row]:
        """Return the unchanged rows before *hunk* and skip over its lines."""
        old_gap = hunk.old.start - self.old_lineno
        new_gap = hunk.new.start - self.new_lineno
        if old_gap != new_gap or old_gap < 0:
            raise DiffSyncError(
                f"diff out of sync with files: {old_gap} unchanged old lines "
                f"before old line {hunk.old.start}, {new_gap} before new line {hunk.new.start}"
            )
        old_lines = self._take(self._old, old_gap, "old", self.old_lineno)
        new_lines = self._take(self._new, new_gap, "new", self.new_lineno)
        rows = list(unchanged_rows(zip(old_lines, new_lines), self.old_lineno, self.new_lineno))

        self._take(self._old, hunk.old.count, "old", hunk.old.start)
        self._take(self._new, hunk.new.count, "new", hunk.new.start)
        self.old_lineno = hunk.old.start + hunk.old.count
        self.new_lineno = hunk.new.start + hunk.new.count
        return rows

    def rest(self) -> list[Row]:
        pairs = itertools.zip_longest(
            (chomp(line) for line in self._old), (chomp(line) for line in self._new)
        )
        return list(unchanged_rows(pairs, self.old_lineno, self.new_lineno))


class SideBySide:
    """Render diff output as two columns on *out*."""

    def __init__(
        self, config: Config, out: TextIO, session: RenderSession | None = None
    ) -> None:
        self.config = config
        self.session = session or RenderSession()
        self.colorizer = Colorizer(
            self.session,
            overrides=config.colormap,
            enabled=config.color,
            color256=config.color256,
        )
        self.composer = ColumnComposer(config, self.colorizer)
        self._out = out

    def _write_rows(self, rows: Iterable[Row]) -> None:
        for row in rows:
            for line in self.composer.render(row):
                self._out.write(line + "\n")

    def run(
        self,
        source: LineSource,
        old_file: Iterable[str] | None = None,
        new_file: Iterable[str] | None = None,
    ) -> int:
        """Render everything *source* produces and return the exit status.

        With both original files given (and ``hunks_only`` off), the
        unchanged lines between hunks are shown too.
        """
        sync = None
        if old_file is not None and new_file is not None and not self.config.hunks_only:
            sync = FileSync(old_file, new_file)

        parser = DiffParser(source, self.session)
        for item in parser:
            if isinstance(item, Unparsed):
                for line in item.lines:
                    self._out.write(self.composer.passthrough(line) + "\n")
                continue
            if sync is not None:
                self._write_rows(sync.until(item))
            else:
                old_header, new_header = item.headers
                self._write_rows([Row("header", Cell(old_header), Cell(new_header))])
            self._write_rows(emit_rows(item.triples, self.session, view=self.config.view))

        status = parser.exit_status
        if status is None:
            status = EXIT_DIFFER if parser.hunks else EXIT_SAME
        elif not EXIT_SAME <= status <= EXIT_TROUBLE:
            status = EXIT_TROUBLE
        logger.debug("rendered %d hunks, exit status %d", parser.hunks, status)

        if sync is not None and status < EXIT_TROUBLE:
            self._write_rows(sync.rest())
        return status
