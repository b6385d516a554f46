# rasterflow/integrators/base.py

from __future__ import annotations
from enum import Enum
from typing import Callable, NamedTuple, Tuple
import numpy as np

from ..errors import InvalidConfiguration

# Velocity magnitude below which flow is considered stalled
VELOCITY_EPSILON = 1e-8


class StepStatus(Enum):
    """Outcome of one integration step."""
    OK = "ok"
    STALLED = "stalled"
    OUT_OF_DOMAIN = "out_of_domain"


class IntegrationScheme(str, Enum):
    """Closed set of stepping schemes, chosen once per integrator."""
    EULER = "euler"
    RK4 = "rk4"

    @classmethod
    def parse(cls, value) -> "IntegrationScheme":
        if isinstance(value, cls):
            return value
        name = str(value).lower().replace("-", "").replace("_", "")
        aliases = {"euler": cls.EULER, "rk4": cls.RK4, "rungekutta4": cls.RK4}
        if name not in aliases:
            raise InvalidConfiguration(
                f"Unknown integration scheme: {value}. Available: {[s.value for s in cls]}"
            )
        return aliases[name]


class FlowDirection(str, Enum):
    """Sign applied to the sampled velocity before integration."""
    FORWARD = "forward"
    BACKWARD = "backward"

    @classmethod
    def parse(cls, value) -> "FlowDirection":
        try:
            return cls(value.value if isinstance(value, Enum) else str(value).lower())
        except ValueError:
            raise InvalidConfiguration(
                f"Unknown flow direction: {value}. Available: {[d.value for d in cls]}"
            ) from None

    @property
    def sign(self) -> float:
        return 1.0 if self is FlowDirection.FORWARD else -1.0


class StepResult(NamedTuple):
    """
    Result of Integrator.step.

    position : (3,) next position, or the input position when status is not OK
    velocity : (3,) signed velocity sampled at the input position (NaN if unavailable)
    status   : StepStatus
    """
    position: np.ndarray
    velocity: np.ndarray
    status: StepStatus


# Direction function: position (3,) -> (unit direction (3,), status)
DirectionFn = Callable[[np.ndarray], Tuple[np.ndarray, StepStatus]]
"""
Direction field protocol.

Parameters
----------
position : np.ndarray
    World position, shape (3,), float64

Returns
-------
direction : np.ndarray
    Unit flow direction, shape (3,); meaningless unless status is OK
status : StepStatus
    OUT_OF_DOMAIN or STALLED when no direction is available
"""

StepFn = Callable[[np.ndarray, float, DirectionFn], Tuple[np.ndarray, StepStatus]]
"""Stepping scheme: (x, h, direction_fn) -> (x_next, status)."""


def unit_direction(velocity: np.ndarray, sign: float = 1.0) -> Tuple[np.ndarray, StepStatus]:
    """
    Normalise a sampled velocity into a signed unit direction.

    Returns STALLED (and a zero vector) when the magnitude is below
    VELOCITY_EPSILON, so the division is always safe.
    """
    norm = float(np.sqrt(np.dot(velocity, velocity)))
    if norm < VELOCITY_EPSILON:
        return np.zeros(3), StepStatus.STALLED
    return (sign / norm) * velocity, StepStatus.OK
