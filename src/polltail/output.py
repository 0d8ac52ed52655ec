from __future__ import annotations

import re
import sys
from datetime import datetime
from typing import BinaryIO, Callable, Optional, TextIO, Union

import typer

# 0x08 (BS), 0x09 (TAB) e 0x0A (LF) passano invariati
_CONTROL_RE = re.compile(rb"[\x00-\x07\x0b-\x1f\x7f]")

TIME_FMT = "%Y-%m-%d %H:%M:%S"


def escape_control(data: bytes) -> bytes:
    """Replace control bytes with a bracketed hex token, e.g. b"\\x01" -> b"[01]".

    Works on raw bytes, so text in any encoding passes through untouched.
    """
    return _CONTROL_RE.sub(lambda m: b"[%02x]" % m.group()[0], data)


class OutputSink:
    """
    Shared writer for every followed file.

    Tracks which file wrote last, so a `==> path <==` header appears only when
    the source changes, and whether the stream sits at the start of a line, so
    a header never splits a partial line.

    Everything is written as bytes: a text stream must expose a binary
    `buffer` (sys.stdout does), or a binary stream can be passed directly.
    """

    def __init__(
        self,
        stream: Optional[Union[TextIO, BinaryIO]] = None,
        *,
        show_time: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.show_time = bool(show_time)
        self._clock = clock
        self.last_path: Optional[str] = None
        self.at_line_start = True

    def header(self, path: str) -> str:
        h = f"==> {path} <=="
        if self.show_time:
            return f"{self._clock().strftime(TIME_FMT)} {h}"
        return h

    def _write(self, data: bytes) -> None:
        # click manda i bytes al buffer binario e fa flush
        typer.echo(data, nl=False, file=self.stream)

    def _write_text(self, text: str) -> None:
        # surrogateescape: nomi file non UTF-8 tornano ai byte originali
        self._write(text.encode("utf-8", errors="surrogateescape"))

    def _fresh_line(self) -> None:
        if not self.at_line_start:
            self._write(b"\n")
            self.at_line_start = True

    def notice(self, path: str, message: str) -> None:
        """Lifecycle line (found/removed/shrinked) for `path`."""
        self._fresh_line()
        self._write_text(f"{self.header(path)} {message}\n")
        self.at_line_start = True
        # il prossimo output() ristampa l'header
        self.last_path = None

    def output(self, path: str, data: bytes) -> None:
        if not data:
            return

        if path != self.last_path:
            self._fresh_line()
            self._write_text(self.header(path) + "\n")
            self.last_path = path

        escaped = escape_control(data)
        self._write(escaped)
        self.at_line_start = escaped.endswith(b"\n")
