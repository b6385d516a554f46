"""
rasterflow integrators

Fixed-length stepping along the unit direction of a velocity field. Each
scheme follows the signature:

    new_x, status = step(x, h, direction_fn)

where:
- x: (3,) position, float64
- h: arc length of the step in world units
- direction_fn: callable x -> (unit direction (3,), StepStatus)

`Integrator` binds a scheme to a velocity field and a flow direction.
"""

from .base import (
    VELOCITY_EPSILON,
    DirectionFn,
    FlowDirection,
    IntegrationScheme,
    StepResult,
    StepStatus,
    unit_direction,
)
from .euler import euler_step
from .rk4 import rk4_step
from .integrator import INTEGRATORS, Integrator

__all__ = [
    "VELOCITY_EPSILON",
    "DirectionFn",
    "FlowDirection",
    "IntegrationScheme",
    "StepResult",
    "StepStatus",
    "unit_direction",
    "euler_step",
    "rk4_step",
    "INTEGRATORS",
    "Integrator",
]
