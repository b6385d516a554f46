# rasterflow/integrators/euler.py
"""
Forward Euler stepping along a unit direction field.

First-order scheme: a single direction sample per step. Lower fidelity than
RK4 but needs no intermediate samples.
"""

from __future__ import annotations
from typing import Tuple
import numpy as np

from .base import DirectionFn, StepStatus


def euler_step(
    x: np.ndarray,
    h: float,
    direction_fn: DirectionFn,
) -> Tuple[np.ndarray, StepStatus]:
    """
    Forward Euler step over arc length h: x_{n+1} = x_n + h * d(x_n).

    Parameters
    ----------
    x : np.ndarray
        Current position, shape (3,)
    h : float
        Step length in world units
    direction_fn : DirectionFn
        Unit direction field

    Returns
    -------
    (np.ndarray, StepStatus)
        Next position and OK, or the input position and the failure status
    """
    d, status = direction_fn(x)
    if status is not StepStatus.OK:
        return x, status
    return x + h * d, StepStatus.OK
