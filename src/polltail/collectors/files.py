from __future__ import annotations

import os
import stat as stat_mod
from glob import glob
from typing import BinaryIO, List, Optional, Tuple

# Errori che per noi significano "il file non c'è (ancora)".
_ABSENT_ERRORS = (FileNotFoundError, NotADirectoryError, PermissionError, IsADirectoryError)


def safe_stat(path: str) -> Optional[os.stat_result]:
    """os.stat() that returns None when the path is absent or unreadable."""
    try:
        return os.stat(path)
    except _ABSENT_ERRORS:
        return None


def open_if_present(path: str) -> Optional[BinaryIO]:
    """
    Apre il file in lettura binaria.
    None = assente (non ancora creato, rimosso, permessi), non e' un errore.
    Solo file regolari: open() su una FIFO o un device bloccherebbe il polling.
    """
    st = safe_stat(path)
    if st is None or not stat_mod.S_ISREG(st.st_mode):
        return None
    try:
        return open(path, "rb")
    except _ABSENT_ERRORS:
        return None


def file_identity(st: os.stat_result) -> Tuple[int, int]:
    return (st.st_dev, st.st_ino)


def same_file(handle: BinaryIO, path: str) -> bool:
    """True if `path` still resolves to the file behind `handle`.

    A rotated log keeps its name but gets a new inode, so the path string
    alone says nothing.
    """
    st = safe_stat(path)
    if st is None:
        return False
    return file_identity(os.fstat(handle.fileno())) == file_identity(st)


def handle_size(handle: BinaryIO) -> int:
    return os.fstat(handle.fileno()).st_size


def expand_pattern(pattern: str) -> List[str]:
    """Regular files matching a glob pattern, sorted. Bad patterns match nothing."""
    try:
        matches = glob(pattern, recursive=True)
    except (OSError, ValueError):
        return []
    return sorted(p for p in matches if os.path.isfile(p))
