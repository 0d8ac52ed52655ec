from __future__ import annotations

import os
from typing import BinaryIO, List

BLOCK_SIZE = 4096


def split_lines(data: bytes) -> List[bytes]:
    """Split on b"\\n" keeping terminators; a trailing partial line is kept as is.

    Unlike bytes.splitlines() a lone \\r is not a line break.
    """
    if not data:
        return []
    lines = [ln + b"\n" for ln in data.split(b"\n")]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        lines.pop()
    return lines


def seed_offset(handle: BinaryIO, n: int, block_size: int = BLOCK_SIZE) -> int:
    """
    Offset di un blocco che contiene almeno le ultime `n` righe.
    Legge all'indietro a blocchi finche' i newline contati superano `n`
    o si arriva all'inizio del file.
    """
    end = handle.seek(0, os.SEEK_END)
    pos = end
    newlines = 0
    while pos > 0:
        start = max(0, pos - block_size)
        handle.seek(start)
        newlines += handle.read(pos - start).count(b"\n")
        pos = start
        if newlines > n:
            break
    return pos


def read_last_lines(handle: BinaryIO, n: int, block_size: int = BLOCK_SIZE) -> List[bytes]:
    """Last `n` lines of the file; leaves the handle positioned at EOF."""
    if n <= 0:
        handle.seek(0, os.SEEK_END)
        return []

    offset = seed_offset(handle, n, block_size)
    handle.seek(offset)
    if offset > 0:
        # prima riga del blocco quasi sempre parziale
        handle.readline()

    lines = split_lines(handle.read())
    return lines[-n:]
