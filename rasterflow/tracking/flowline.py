# rasterflow/tracking/flowline.py
"""
Flowline data model.

A Seed is an immutable starting position plus an opaque category. A Flowline
is the append-only point sequence traced from one seed in one direction; it
is closed when the tracer sets a terminal state and never changes afterwards.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Tuple, Union
import numpy as np

from ..fields.base import _ensure_position
from ..integrators.base import FlowDirection


class TraceState(Enum):
    """Tracer state; every state except RUNNING is terminal."""
    RUNNING = "running"
    DONE_STALLED = "done_stalled"
    DONE_OUT_OF_DOMAIN = "done_out_of_domain"
    DONE_MAX_STEPS = "done_max_steps"
    DONE_MAX_LENGTH = "done_max_length"

    @property
    def is_terminal(self) -> bool:
        return self is not TraceState.RUNNING


@dataclass(frozen=True)
class Seed:
    """
    Starting point of a flowline.

    Attributes
    ----------
    position : tuple of float
        World coordinates (x, y, z)
    category : Any
        Carried unchanged to the output flowline
    """
    position: Tuple[float, float, float]
    category: Any

    def __post_init__(self):
        object.__setattr__(self, "position", tuple(float(v) for v in _ensure_position(self.position)))

    @property
    def position_array(self) -> np.ndarray:
        return np.asarray(self.position, dtype=np.float64)


SeedLike = Union[Seed, Tuple[Any, Any]]


def as_seeds(seeds: Iterable[SeedLike]) -> List[Seed]:
    """Normalise Seed objects and (position, category) pairs into Seeds."""
    result = []
    for item in seeds:
        if isinstance(item, Seed):
            result.append(item)
        else:
            position, category = item
            result.append(Seed(position, category))
    return result


@dataclass
class Flowline:
    """
    Polyline traced from one seed.

    Attributes
    ----------
    category : Any
        Category of the originating seed
    direction : FlowDirection
        Direction the flowline was traced in
    state : TraceState
        RUNNING while tracing, a DONE_* state once closed
    length : float
        Accumulated path length (sum of step lengths)
    n_steps : int
        Number of successful steps
    """
    category: Any
    direction: FlowDirection = FlowDirection.FORWARD
    state: TraceState = TraceState.RUNNING
    length: float = 0.0
    n_steps: int = 0
    _points: List[np.ndarray] = field(default_factory=list, repr=False)

    def __len__(self) -> int:
        return len(self._points)

    @property
    def closed(self) -> bool:
        return self.state.is_terminal

    @property
    def n_points(self) -> int:
        return len(self._points)

    @property
    def is_degenerate(self) -> bool:
        """A flowline holding only its seed point."""
        return len(self._points) < 2

    @property
    def points(self) -> np.ndarray:
        """Recorded points as an (n, 3) float64 array (a copy)."""
        if not self._points:
            return np.empty((0, 3), dtype=np.float64)
        return np.stack(self._points, axis=0)

    @property
    def start(self) -> np.ndarray:
        return self._points[0].copy()

    @property
    def end(self) -> np.ndarray:
        return self._points[-1].copy()

    def append(self, point) -> None:
        """Record the next point; only allowed while RUNNING."""
        if self.closed:
            raise RuntimeError(f"Cannot append to a closed flowline ({self.state.value})")
        self._points.append(_ensure_position(point).copy())

    def close(self, state: TraceState) -> None:
        """Set the terminal state; a flowline is closed exactly once."""
        if not state.is_terminal:
            raise ValueError("Flowline must be closed with a terminal state")
        if self.closed:
            raise RuntimeError(f"Flowline already closed ({self.state.value})")
        self.state = state

    def segment_lengths(self) -> np.ndarray:
        """Euclidean length of each segment, shape (n-1,)."""
        pts = self.points
        if len(pts) < 2:
            return np.empty(0, dtype=np.float64)
        return np.linalg.norm(np.diff(pts, axis=0), axis=1)
