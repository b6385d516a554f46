"""
Integration scheme tests: Euler and RK4 stepping, status reporting and the
Integrator binding of scheme, field and direction.
"""

import numpy as np
import pytest

from rasterflow import (
    VELOCITY_EPSILON,
    FlowDirection,
    IntegrationScheme,
    InvalidConfiguration,
    Integrator,
    Region,
    StepStatus,
    create_field_from_function,
    create_uniform_field,
    euler_step,
    rk4_step,
)
from rasterflow.integrators import unit_direction


def uniform_x_field():
    region = Region((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), (5, 3, 3))
    return create_uniform_field(region, (1.0, 0.0, 0.0))


def rotation_field():
    """Solid body rotation about the z axis: v = (-y, x, 0)."""
    region = Region((-2.0, -2.0, -1.0), (0.5, 0.5, 0.5), (9, 9, 5))
    return create_field_from_function(region, lambda X, Y, Z: (-Y, X, np.zeros_like(Z)))


def constant_direction(d):
    d = np.asarray(d, dtype=np.float64)
    return lambda x: (d, StepStatus.OK)


# ------------------------- step functions -------------------------

def test_unit_direction_normalises_and_applies_sign():
    d, status = unit_direction(np.array([3.0, 0.0, 4.0]), sign=-1.0)
    assert status is StepStatus.OK
    np.testing.assert_allclose(d, [-0.6, 0.0, -0.8])


def test_unit_direction_stalls_below_epsilon():
    d, status = unit_direction(np.array([VELOCITY_EPSILON / 10, 0.0, 0.0]))
    assert status is StepStatus.STALLED
    np.testing.assert_array_equal(d, np.zeros(3))


def test_velocity_epsilon_value():
    assert VELOCITY_EPSILON == 1e-8


def test_euler_step_constant_direction():
    x, status = euler_step(np.zeros(3), 0.25, constant_direction([0.0, 1.0, 0.0]))
    assert status is StepStatus.OK
    np.testing.assert_allclose(x, [0.0, 0.25, 0.0])


def test_rk4_step_constant_direction():
    x, status = rk4_step(np.ones(3), 0.5, constant_direction([1.0, 0.0, 0.0]))
    assert status is StepStatus.OK
    np.testing.assert_array_equal(x, [1.5, 1.0, 1.0])


def test_rk4_aborts_on_failed_intermediate_stage():
    calls = []

    def direction_fn(x):
        calls.append(x.copy())
        if len(calls) == 3:
            return np.zeros(3), StepStatus.OUT_OF_DOMAIN
        return np.array([1.0, 0.0, 0.0]), StepStatus.OK

    x0 = np.array([1.0, 2.0, 3.0])
    x, status = rk4_step(x0, 1.0, direction_fn)
    assert status is StepStatus.OUT_OF_DOMAIN
    np.testing.assert_array_equal(x, x0)
    assert len(calls) == 3


def test_euler_propagates_stall():
    x0 = np.zeros(3)
    x, status = euler_step(x0, 1.0, lambda x: (np.zeros(3), StepStatus.STALLED))
    assert status is StepStatus.STALLED
    np.testing.assert_array_equal(x, x0)


# ------------------------- Integrator -------------------------

def test_integrator_forward_step():
    result = Integrator(uniform_x_field()).step((1.0, 1.0, 1.0), 0.5)
    assert result.status is StepStatus.OK
    np.testing.assert_allclose(result.position, [1.5, 1.0, 1.0])
    np.testing.assert_allclose(result.velocity, [1.0, 0.0, 0.0])


def test_integrator_backward_negates_velocity():
    integrator = Integrator(uniform_x_field(), direction="backward")
    result = integrator.step((2.0, 1.0, 1.0), 0.5)
    assert integrator.direction is FlowDirection.BACKWARD
    assert result.status is StepStatus.OK
    np.testing.assert_allclose(result.position, [1.5, 1.0, 1.0])
    np.testing.assert_allclose(result.velocity, [-1.0, 0.0, 0.0])


def test_integrator_step_length_independent_of_speed():
    region = Region((0, 0, 0), (1, 1, 1), (5, 3, 3))
    slow = create_uniform_field(region, (1e-3, 0.0, 0.0))
    result = Integrator(slow).step((1.0, 1.0, 1.0), 0.5)
    np.testing.assert_allclose(result.position, [1.5, 1.0, 1.0])


def test_integrator_stalls_on_zero_velocity():
    region = Region((0, 0, 0), (1, 1, 1), (3, 3, 3))
    field = create_uniform_field(region, (0.0, 0.0, 0.0))
    result = Integrator(field).step((1.0, 1.0, 1.0), 0.5)
    assert result.status is StepStatus.STALLED
    np.testing.assert_array_equal(result.position, [1.0, 1.0, 1.0])


def test_integrator_out_of_domain_at_start():
    result = Integrator(uniform_x_field()).step((-1.0, 1.0, 1.0), 0.5)
    assert result.status is StepStatus.OUT_OF_DOMAIN
    assert np.all(np.isnan(result.velocity))
    np.testing.assert_array_equal(result.position, [-1.0, 1.0, 1.0])


def test_rk4_midpoint_outside_domain_aborts_but_euler_steps():
    field = uniform_x_field()
    start = (3.8, 1.0, 1.0)

    rk4 = Integrator(field, scheme="rk4").step(start, 0.5)
    euler = Integrator(field, scheme="euler").step(start, 0.5)

    assert rk4.status is StepStatus.OUT_OF_DOMAIN
    np.testing.assert_array_equal(rk4.position, start)
    assert euler.status is StepStatus.OK
    np.testing.assert_allclose(euler.position, [4.3, 1.0, 1.0])


def test_rk4_more_accurate_than_euler_on_rotation():
    field = rotation_field()
    start = np.array([1.0, 0.0, 0.0])

    def radius_error(scheme):
        integrator = Integrator(field, scheme=scheme)
        x = start
        for _ in range(10):
            result = integrator.step(x, 0.1)
            assert result.status is StepStatus.OK
            x = result.position
        return abs(np.hypot(x[0], x[1]) - 1.0)

    rk4_error = radius_error("rk4")
    euler_error = radius_error("euler")
    assert rk4_error < 1e-5
    assert rk4_error < euler_error


@pytest.mark.parametrize("name, expected", [
    ("euler", IntegrationScheme.EULER),
    ("rk4", IntegrationScheme.RK4),
    ("runge-kutta-4", IntegrationScheme.RK4),
    (IntegrationScheme.RK4, IntegrationScheme.RK4),
])
def test_scheme_parsing(name, expected):
    assert IntegrationScheme.parse(name) is expected


def test_unknown_scheme_rejected():
    with pytest.raises(InvalidConfiguration):
        Integrator(uniform_x_field(), scheme="rk2")


def test_unknown_direction_rejected():
    with pytest.raises(InvalidConfiguration):
        Integrator(uniform_x_field(), direction="up")


def test_non_positive_step_rejected():
    with pytest.raises(InvalidConfiguration):
        Integrator(uniform_x_field()).step((1.0, 1.0, 1.0), 0.0)


def test_field_without_sample_rejected():
    with pytest.raises(InvalidConfiguration):
        Integrator(object())
