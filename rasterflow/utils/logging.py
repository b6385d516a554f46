# rasterflow/utils/logging.py
"""
Run monitoring: wall-clock timing, resident memory and progress lines.

Reports go to stdout. The batch tracer owns one Timer per run and prints
its description in verbose mode; progress is a single rewritten line.
"""

from __future__ import annotations
from typing import Any, Optional, Protocol
import time

import psutil


class ProgressCallback(Protocol):
    """Called as callback(done, total) after each seed of a batch."""
    def __call__(self, step: int, total: int, **kwargs: Any) -> None:
        ...


def memory_info() -> float:
    """Resident set size of this process in MB."""
    return psutil.Process().memory_info().rss / (1024 * 1024)


class Timer:
    """
    Wall-clock timer for one tracing run, optionally sampling resident memory
    at start and stop.

    Parameters
    ----------
    name : str
        Label used by describe()
    track_memory : bool
        Record RSS at start() and stop()
    """

    def __init__(self, name: str = "Timer", track_memory: bool = False):
        self.name = name
        self.track_memory = track_memory
        self._t0: Optional[float] = None
        self._t1: Optional[float] = None
        self._rss0: Optional[float] = None
        self._rss1: Optional[float] = None

    def start(self) -> "Timer":
        self._t0 = time.perf_counter()
        self._t1 = None
        if self.track_memory:
            self._rss0 = memory_info()
        return self

    def stop(self) -> float:
        """Stop and return the elapsed seconds."""
        if self._t0 is None:
            raise RuntimeError("Timer not started")
        self._t1 = time.perf_counter()
        if self.track_memory:
            self._rss1 = memory_info()
        return self.elapsed

    @property
    def elapsed(self) -> float:
        if self._t0 is None:
            return 0.0
        return (self._t1 if self._t1 is not None else time.perf_counter()) - self._t0

    @property
    def memory_delta_mb(self) -> Optional[float]:
        """RSS growth between start and stop in MB, None unless tracked."""
        if self._rss0 is None or self._rss1 is None:
            return None
        return self._rss1 - self._rss0

    def describe(self) -> str:
        text = f"{self.name}: {self.elapsed:.3f}s"
        delta = self.memory_delta_mb
        if delta is not None:
            text += f", memory {delta:+.1f} MB (rss {self._rss1:.1f} MB)"
        return text

    def __enter__(self) -> "Timer":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()


def create_progress_callback(
    name: str = "Progress",
    update_every: int = 100,
    show_rate: bool = True,
) -> ProgressCallback:
    """
    Build a callback printing `name: done/total (pct%)` on one line.

    Parameters
    ----------
    name : str
        Prefix of the progress line
    update_every : int
        Print every N seeds; the last seed is always printed
    show_rate : bool
        Append seeds per second
    """
    t0 = time.perf_counter()
    every = max(1, int(update_every))

    def callback(step: int, total: int, **kwargs: Any) -> None:
        if step % every and step != total:
            return
        line = f"{name}: {step}/{total} ({100.0 * step / max(1, total):.1f}%)"
        elapsed = time.perf_counter() - t0
        if show_rate and elapsed > 0:
            line += f", {step / elapsed:.1f} seeds/s"
        for key, value in kwargs.items():
            line += f", {key}={value}"
        print("\r" + line, end="\n" if step == total else "", flush=True)

    return callback
