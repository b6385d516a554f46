# rasterflow/integrators/rk4.py

from __future__ import annotations
from typing import Tuple
import numpy as np

from .base import DirectionFn, StepStatus


def rk4_step(
    x: np.ndarray,
    h: float,
    direction_fn: DirectionFn,
) -> Tuple[np.ndarray, StepStatus]:
    """
    Runge-Kutta 4 step over arc length h.

    Parameters
    ----------
    x : (3,) position
    h : step length in world units
    direction_fn : callable(position) -> (unit direction, status)

    Returns
    -------
    x_next, status : the input position is returned unchanged when any of
        the four stage samples fails; the failing stage's status is reported
    """
    h_half = 0.5 * h

    k1, status = direction_fn(x)
    if status is not StepStatus.OK:
        return x, status

    k2, status = direction_fn(x + h_half * k1)
    if status is not StepStatus.OK:
        return x, status

    k3, status = direction_fn(x + h_half * k2)
    if status is not StepStatus.OK:
        return x, status

    k4, status = direction_fn(x + h * k3)
    if status is not StepStatus.OK:
        return x, status

    return x + h * (k1 + 2.0 * k2 + 2.0 * k3 + k4) / 6.0, StepStatus.OK
