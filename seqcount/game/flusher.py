"""Periodic best-effort persistence of the game counters.

A daemon thread wakes up every ``interval`` seconds and rewrites the stats
file from a fresh snapshot. A failed write is logged and retried on the next
tick; at most one interval of counters is lost on a crash.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Mapping

from seqcount.game.stats import save_stats

logger = logging.getLogger(__name__)


class StatsFlusher:
    def __init__(
        self,
        snapshot: Callable[[], Mapping[str, Any]],
        path: str | Path,
        interval: float,
    ) -> None:
        self._snapshot = snapshot
        self._path = Path(path)
        self._interval = float(interval)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def flush(self) -> bool:
        """Write one snapshot. Returns False (and logs) on failure."""

        try:
            save_stats(self._path, self._snapshot())
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to flush stats to %s; retrying in %.0fs", self._path, self._interval)
            return False
        return True

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="seqcount_stats_flush", daemon=True)
        self._thread.start()

    def stop(self, *, final_flush: bool = True) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=max(self._interval, 1.0))
            self._thread = None
        if final_flush:
            self.flush()

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.flush()
