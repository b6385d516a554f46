# rasterflow/io/adapters.py
"""
Output adapters: where closed flowlines go.

The tracer only calls `write(flowline)`. Persistence format, filtering of
degenerate lines and write serialisation are the adapter's business.
"""

from __future__ import annotations
import threading
from typing import Any, Iterator, List, Protocol


class OutputAdapter(Protocol):
    """Receives each closed flowline, in tracing order."""

    def write(self, flowline) -> None:
        ...


class FlowlineCollector:
    """
    In-memory output adapter.

    Writes are serialised with a lock so one collector can be shared by
    tracers running on several threads.

    Parameters
    ----------
    skip_degenerate : bool
        Drop flowlines that hold only their seed point
    """

    def __init__(self, skip_degenerate: bool = False):
        self.skip_degenerate = skip_degenerate
        self._flowlines: List[Any] = []
        self._skipped = 0
        self._lock = threading.Lock()

    def write(self, flowline) -> None:
        with self._lock:
            if self.skip_degenerate and flowline.n_points < 2:
                self._skipped += 1
                return
            self._flowlines.append(flowline)

    def __len__(self) -> int:
        with self._lock:
            return len(self._flowlines)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.flowlines)

    @property
    def flowlines(self) -> List[Any]:
        with self._lock:
            return list(self._flowlines)

    @property
    def skipped(self) -> int:
        """Number of degenerate flowlines dropped."""
        with self._lock:
            return self._skipped

    def categories(self) -> List[Any]:
        return [fl.category for fl in self.flowlines]

    def clear(self) -> None:
        with self._lock:
            self._flowlines.clear()
            self._skipped = 0
