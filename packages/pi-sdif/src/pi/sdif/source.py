"""Line sources feeding the diff interpreter."""

from __future__ import annotations

from typing import Iterable, Iterator, Protocol


class LineSource(Protocol):
    """A blocking, sequential source of diff output lines.

    ``readline`` returns the next line without its line terminator, or
    ``None`` at end of input.  ``exit_status`` is the backend's status
    (0 identical, 1 different, 2 trouble) once known, else ``None``.
    """

    def readline(self) -> str | None: ...

    @property
    def exit_status(self) -> int | None: ...


def chomp(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line


class IterLineSource:
    """LineSource over any iterable of lines (a list, an open file, stdin)."""

    def __init__(self, lines: Iterable[str], exit_status: int | None = None) -> None:
        self._lines: Iterator[str] = iter(lines)
        self._exit_status = exit_status

    @classmethod
    def from_text(cls, text: str, exit_status: int | None = None) -> IterLineSource:
        return cls(text.splitlines(), exit_status)

    def readline(self) -> str | None:
        line = next(self._lines, None)
        if line is None:
            return None
        return chomp(line)

    @property
    def exit_status(self) -> int | None:
        return self._exit_status


class LineReader:
    """Wrap a LineSource with pushback so a line can be re-tested."""

    def __init__(self, source: LineSource) -> None:
        self._source = source
        self._pending: list[str] = []

    def readline(self) -> str | None:
        if self._pending:
            return self._pending.pop()
        return self._source.readline()

    def unread(self, line: str) -> None:
        self._pending.append(line)

    @property
    def exit_status(self) -> int | None:
        return self._source.exit_status
