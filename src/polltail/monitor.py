from __future__ import annotations

import logging
import threading
from typing import List, Optional, Sequence

from polltail.collectors.files import expand_pattern, safe_stat
from polltail.config import DEFAULT_CONFIG, FollowConfig
from polltail.follower import FollowedFile
from polltail.output import OutputSink

logger = logging.getLogger(__name__)


def _uniq(xs):
    seen = set()
    out = []
    for x in xs:
        if x not in seen:
            out.append(x)
            seen.add(x)
    return out


def discover(patterns: Sequence[str], glob_mode: bool = False) -> List[str]:
    """
    Paths to follow.
    - plain mode: the arguments themselves, missing files included
    - glob mode: regular files matching each pattern, in pattern order
    """
    if not glob_mode:
        return _uniq(patterns)

    found: List[str] = []
    for pattern in patterns:
        found.extend(expand_pattern(pattern))
    return _uniq(found)


def order_paths(paths: Sequence[str]) -> List[str]:
    """Oldest mtime first; paths that don't exist go last. Ties keep input order."""

    def key(item):
        idx, path = item
        st = safe_stat(path)
        if st is None:
            return (1, 0.0, idx)
        return (0, st.st_mtime, idx)

    return [p for _, p in sorted(enumerate(paths), key=key)]


class FollowMonitor:
    """
    Poll loop over every followed file.

    Files are checked in a fixed order (initial order, then newly discovered
    ones appended), so one file's output within a cycle is never interleaved
    with another's. The list only grows.
    """

    def __init__(
        self,
        patterns: Sequence[str],
        config: FollowConfig = DEFAULT_CONFIG,
        sink: Optional[OutputSink] = None,
    ) -> None:
        self.patterns = list(patterns)
        self.config = config
        self.sink = sink if sink is not None else OutputSink(show_time=config.show_time)
        self.followers: List[FollowedFile] = [
            self._new_follower(p) for p in order_paths(discover(self.patterns, config.glob_mode))
        ]

    def _new_follower(self, path: str) -> FollowedFile:
        return FollowedFile(path, self.sink, self.config)

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.followers]

    def poll_once(self) -> None:
        for f in self.followers:
            try:
                f.check()
            except OSError as e:
                # un file rotto non deve fermare gli altri
                logger.warning("check failed for %s: %s", f.path, e)

    def rescan(self) -> List[str]:
        """Glob mode only: start following newly matching paths. Returns them."""
        if not self.config.glob_mode:
            return []

        tracked = set(self.paths)
        added: List[str] = []
        for path in discover(self.patterns, glob_mode=True):
            if path in tracked:
                continue
            self.followers.append(self._new_follower(path))
            tracked.add(path)
            added.append(path)

        if added:
            logger.debug("rescan: now following %s", ", ".join(added))
        return added

    def run(self, stop: Optional[threading.Event] = None) -> None:
        """Poll until `stop` is set (forever if no event is given)."""
        stop = stop if stop is not None else threading.Event()
        while not stop.is_set():
            self.poll_once()
            if stop.wait(self.config.interval_s):
                break
            self.rescan()

    def close(self) -> None:
        for f in self.followers:
            f.close()


def run_follow(patterns: Sequence[str], config: FollowConfig = DEFAULT_CONFIG) -> None:
    """Foreground follow loop, used by the CLI. CTRL+C is left to the caller."""
    mon = FollowMonitor(patterns, config)
    logger.debug("following %d file(s): %s", len(mon.followers), ", ".join(mon.paths))
    try:
        mon.run()
    finally:
        mon.close()
