from __future__ import annotations

import io
import logging
from datetime import datetime

import pytest

from polltail.config import FollowConfig
from polltail.output import OutputSink


@pytest.fixture
def stream():
    return io.BytesIO()


@pytest.fixture
def sink(stream):
    return OutputSink(stream)


@pytest.fixture
def timed_sink(stream):
    return OutputSink(stream, show_time=True, clock=lambda: datetime(2024, 1, 2, 3, 4, 5))


@pytest.fixture
def cfg():
    return FollowConfig(first_lines=10, interval_s=0.01)


class Drain:
    """Returns only what was written to the sink since the previous call."""

    def __init__(self, stream: io.BytesIO) -> None:
        self.stream = stream
        self.pos = 0

    def raw(self) -> bytes:
        value = self.stream.getvalue()
        out = value[self.pos:]
        self.pos = len(value)
        return out

    def __call__(self) -> str:
        return self.raw().decode("utf-8", errors="surrogateescape")


@pytest.fixture
def new_output(stream):
    return Drain(stream)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    # cli.setup_logging() reconfigures the root logger
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
