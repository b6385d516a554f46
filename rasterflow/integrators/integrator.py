# rasterflow/integrators/integrator.py
"""
Integrator: one stepping scheme bound to one velocity field and direction.

The scheme is fixed at construction; a flowline traced with one Integrator
never mixes Euler and RK4 steps.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Tuple
import numpy as np

from ..errors import InvalidConfiguration
from ..fields.base import Field, _ensure_position
from .base import (
    FlowDirection,
    IntegrationScheme,
    StepFn,
    StepResult,
    StepStatus,
    unit_direction,
)
from .euler import euler_step
from .rk4 import rk4_step

INTEGRATORS: Dict[IntegrationScheme, StepFn] = {
    IntegrationScheme.EULER: euler_step,
    IntegrationScheme.RK4: rk4_step,
}


@dataclass
class Integrator:
    """
    Advance a position along a velocity field by a fixed arc length.

    Attributes
    ----------
    velocity_field : Field
        Velocity field with sample(position) -> (velocity, ok)
    scheme : IntegrationScheme or str
        'euler' | 'rk4'
    direction : FlowDirection or str
        'forward' follows the velocity, 'backward' its negation
    """
    velocity_field: Field
    scheme: IntegrationScheme = IntegrationScheme.RK4
    direction: FlowDirection = FlowDirection.FORWARD

    _step_fn: StepFn = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if not callable(getattr(self.velocity_field, "sample", None)):
            raise InvalidConfiguration("velocity_field must provide sample(position) -> (velocity, ok)")
        self.scheme = IntegrationScheme.parse(self.scheme)
        self.direction = FlowDirection.parse(self.direction)
        self._step_fn = INTEGRATORS[self.scheme]

    @property
    def sign(self) -> float:
        return self.direction.sign

    def direction_at(self, position: np.ndarray) -> Tuple[np.ndarray, StepStatus]:
        """Signed unit flow direction at a position, or the reason there is none."""
        velocity, ok = self.velocity_field.sample(position)
        if not ok:
            return np.zeros(3), StepStatus.OUT_OF_DOMAIN
        return unit_direction(np.asarray(velocity, dtype=np.float64), self.sign)

    def step(self, position, step_length: float) -> StepResult:
        """
        Advance one step.

        Parameters
        ----------
        position : array-like, shape (3,)
            Current world position
        step_length : float
            Arc length of the step in world units, > 0

        Returns
        -------
        StepResult
            (next position, signed velocity at `position`, status)
        """
        if not step_length > 0:
            raise InvalidConfiguration(f"step_length must be positive, got {step_length}")
        x = _ensure_position(position)

        velocity, ok = self.velocity_field.sample(x)
        if not ok:
            return StepResult(x, np.full(3, np.nan), StepStatus.OUT_OF_DOMAIN)
        velocity = self.sign * np.asarray(velocity, dtype=np.float64)

        _, status = unit_direction(velocity)
        if status is not StepStatus.OK:
            return StepResult(x, velocity, status)

        x_next, status = self._step_fn(x, float(step_length), self.direction_at)
        if status is not StepStatus.OK:
            return StepResult(x, velocity, status)
        return StepResult(x_next, velocity, StepStatus.OK)
