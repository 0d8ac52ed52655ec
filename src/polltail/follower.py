from __future__ import annotations

import logging
import os
from typing import BinaryIO, Iterable, Optional

from polltail.collectors.files import handle_size, open_if_present, same_file
from polltail.collectors.lastlines import read_last_lines, split_lines
from polltail.config import DEFAULT_CONFIG, FollowConfig
from polltail.output import OutputSink

logger = logging.getLogger(__name__)

NOTICE_FOUND = "found"
NOTICE_REMOVED = "removed"
NOTICE_SHRINKED = "shrinked"

# letture a pezzi: un burst grande non finisce tutto in memoria
READ_CHUNK = 64 * 1024


class FollowedFile:
    """
    One watched path.

    States:
      - UNOPENED: handle is None (not created yet, or just removed)
      - OPEN: handle held, cursor = handle position

    check() is called once per poll cycle and moves the file between states,
    writing content and notices through the shared sink. Content goes out as
    raw bytes, only control characters are escaped.
    """

    def __init__(self, path: str, sink: OutputSink, config: FollowConfig = DEFAULT_CONFIG) -> None:
        self.path = path
        self.sink = sink
        self.config = config
        self.handle: Optional[BinaryIO] = None
        self.is_first_check = True

    def __repr__(self) -> str:
        state = "OPEN" if self.is_open else "UNOPENED"
        return f"FollowedFile({self.path!r}, {state})"

    @property
    def is_open(self) -> bool:
        return self.handle is not None

    @property
    def cursor(self) -> int:
        return self.handle.tell() if self.handle is not None else 0

    def check(self) -> None:
        try:
            if self.handle is not None:
                if not same_file(self.handle, self.path):
                    self._on_removed(self.handle)
                elif handle_size(self.handle) < self.handle.tell():
                    self._on_shrinked(self.handle)

            if self.handle is None:
                self.handle = open_if_present(self.path)
                if self.handle is None:
                    return
                logger.debug("opened %s", self.path)
                self.sink.notice(self.path, NOTICE_FOUND)
                if self.is_first_check:
                    self._seed(self.handle)

            self._catch_up(self.handle)
        finally:
            self.is_first_check = False

    def close(self) -> None:
        if self.handle is not None:
            self.handle.close()
            self.handle = None

    def _emit(self, lines: Iterable[bytes]) -> None:
        for line in lines:
            self.sink.output(self.path, line)

    def _catch_up(self, handle: BinaryIO) -> None:
        for chunk in iter(lambda: handle.read(READ_CHUNK), b""):
            self._emit(split_lines(chunk))

    def _seed(self, handle: BinaryIO) -> None:
        self._emit(read_last_lines(handle, self.config.first_lines))

    def _on_removed(self, handle: BinaryIO) -> None:
        # svuota quello che resta del vecchio file prima di chiuderlo
        self._catch_up(handle)
        logger.info("%s removed or replaced", self.path)
        self.close()
        self.sink.notice(self.path, NOTICE_REMOVED)

    def _on_shrinked(self, handle: BinaryIO) -> None:
        logger.info("%s truncated at offset %d", self.path, handle.tell())
        handle.seek(0, os.SEEK_SET)
        self.sink.notice(self.path, NOTICE_SHRINKED)
