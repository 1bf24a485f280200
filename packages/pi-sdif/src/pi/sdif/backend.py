"""Run the diff command and read its output as a LineSource."""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from pi.sdif.errors import SdifError
from pi.sdif.source import chomp

logger = logging.getLogger(__name__)


class DiffProcess:
    """LineSource reading from ``<command> <options> <old> <new>``.

    The exit status becomes available once the output has been read to
    the end.
    """

    def __init__(
        self,
        old_path: str,
        new_path: str,
        command: str = "diff",
        options: Sequence[str] = (),
        encoding: str = "utf-8",
    ) -> None:
        argv = [*command.split(), *options, old_path, new_path]
        logger.debug("starting backend: %s", argv)
        try:
            self._proc = subprocess.Popen(
                argv,
                stdout=subprocess.PIPE,
                text=True,
                encoding=encoding,
                errors="replace",
            )
        except FileNotFoundError as e:
            raise SdifError(f"diff command not found: {argv[0]}") from e
        self._status: int | None = None

    def readline(self) -> str | None:
        if self._status is not None:
            return None
        assert self._proc.stdout is not None
        line = self._proc.stdout.readline()
        if line:
            return chomp(line)
        self._proc.stdout.close()
        self._status = self._proc.wait()
        logger.debug("backend exited with status %d", self._status)
        return None

    @property
    def exit_status(self) -> int | None:
        return self._status

    def close(self) -> None:
        if self._status is None:
            self._proc.kill()
            self._status = self._proc.wait()

    def __enter__(self) -> DiffProcess:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
