"""
Gradient-derived velocity field tests.
"""

import numpy as np
import pytest

from rasterflow import MalformedField, Region, Seed, TraceState, create_gradient_field, create_tracer
from rasterflow.fields import scalar_gradient


def plane_scalar(region):
    xs, ys, zs = region.node_coordinates()
    X, Y, Z = np.meshgrid(xs, ys, zs, indexing="ij")
    return 2.0 * X + 3.0 * Y - Z


def test_gradient_of_linear_scalar_is_constant():
    region = Region((0, 0, 0), (0.5, 1.0, 2.0), (5, 5, 5))
    field = create_gradient_field(region, plane_scalar(region))

    np.testing.assert_allclose(field.vx, 2.0)
    np.testing.assert_allclose(field.vy, 3.0)
    np.testing.assert_allclose(field.vz, -1.0)
    result = field.sample((1.1, 2.3, 4.7))
    assert result.ok
    np.testing.assert_allclose(result.velocity, [2.0, 3.0, -1.0])


def test_nodata_poisons_difference_stencil():
    region = Region((0, 0, 0), (1, 1, 1), (5, 5, 5))
    scalar = plane_scalar(region)
    scalar[2, 2, 2] = np.nan
    field = create_gradient_field(region, scalar)

    assert not field.valid_mask[2, 2, 2]
    assert not field.valid_mask[1, 2, 2]
    assert not field.valid_mask[3, 2, 2]
    assert not field.valid_mask[2, 1, 2]
    assert field.valid_mask[0, 0, 0]
    assert field.valid_mask[0, 2, 2]


def test_nodata_sentinel_in_scalar():
    region = Region((0, 0, 0), (1, 1, 1), (4, 4, 4))
    scalar = plane_scalar(region)
    scalar[0, 0, 0] = -1.0e30
    gx, gy, gz = scalar_gradient(scalar, region, nodata=-1.0e30)
    assert np.isnan(gx[0, 0, 0])
    assert np.isnan(gx[1, 0, 0])
    assert np.isfinite(gx[3, 3, 3])


def test_single_layer_axis_has_zero_gradient():
    region = Region((0, 0, 0), (1, 1, 1), (4, 4, 1))
    gx, gy, gz = scalar_gradient(plane_scalar(region), region)
    np.testing.assert_allclose(gz, 0.0)
    np.testing.assert_allclose(gx, 2.0)


def test_scalar_shape_must_match_region():
    region = Region((0, 0, 0), (1, 1, 1), (4, 4, 4))
    with pytest.raises(MalformedField):
        create_gradient_field(region, np.zeros((4, 4, 3)))


def test_backward_trace_descends_potential():
    region = Region((0, 0, 0), (1, 1, 1), (11, 11, 3))
    xs, ys, zs = region.node_coordinates()
    X, Y, Z = np.meshgrid(xs, ys, zs, indexing="ij")
    field = create_gradient_field(region, X)

    tracer = create_tracer(field, step_length=0.5, direction="backward", max_steps=100)
    flowline = tracer.trace(Seed((5.0, 5.0, 1.0), category=1))

    assert flowline.state is TraceState.DONE_OUT_OF_DOMAIN
    np.testing.assert_allclose(flowline.end, [0.0, 5.0, 1.0], atol=1e-9)
    assert np.all(np.diff(flowline.points[:, 0]) < 0)
