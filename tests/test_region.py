"""
Region geometry and coordinate conversion tests.
"""

import numpy as np
import pytest

from rasterflow import InvalidConfiguration, Region


def test_region_normalises_values():
    region = Region(origin=[0, 1, 2], resolution=np.array([1.0, 0.5, 2.0]), shape=(4, 6, 2))
    assert region.origin == (0.0, 1.0, 2.0)
    assert region.resolution == (1.0, 0.5, 2.0)
    assert region.shape == (4, 6, 2)
    assert isinstance(region.shape[0], int)
    assert region.cell_size == 0.5
    assert region.n_cells == 48


def test_region_bounds():
    region = Region((10.0, 20.0, -5.0), (2.0, 1.0, 0.5), (5, 4, 10))
    lo, hi = region.bounds
    np.testing.assert_allclose(lo, [10.0, 20.0, -5.0])
    np.testing.assert_allclose(hi, [20.0, 24.0, 0.0])


def test_region_from_bounds():
    region = Region.from_bounds((0, 0, 0), (10, 5, 2), (10, 10, 4))
    assert region.resolution == (1.0, 0.5, 0.5)


@pytest.mark.parametrize("kwargs", [
    dict(origin=(0, 0, 0), resolution=(0, 1, 1), shape=(2, 2, 2)),
    dict(origin=(0, 0, 0), resolution=(1, -1, 1), shape=(2, 2, 2)),
    dict(origin=(0, 0, 0), resolution=(1, 1, 1), shape=(2, 0, 2)),
    dict(origin=(0, 0), resolution=(1, 1, 1), shape=(2, 2, 2)),
    dict(origin=(0, np.nan, 0), resolution=(1, 1, 1), shape=(2, 2, 2)),
])
def test_region_rejects_degenerate_geometry(kwargs):
    with pytest.raises(InvalidConfiguration):
        Region(**kwargs)


def test_world_to_grid_registrations():
    region = Region((1.0, 2.0, 3.0), (0.5, 1.0, 2.0), (4, 4, 4))
    point = np.array([2.0, 4.0, 7.0])

    node = region.world_to_grid(point, "node")
    cell = region.world_to_grid(point, "cell")

    np.testing.assert_allclose(node, [[2.0, 2.0, 2.0]])
    np.testing.assert_allclose(cell, [[1.5, 1.5, 1.5]])
    np.testing.assert_allclose(region.grid_to_world(cell, "cell"), [point])


def test_unknown_registration_rejected():
    region = Region((0, 0, 0), (1, 1, 1), (2, 2, 2))
    with pytest.raises(InvalidConfiguration):
        region.world_to_grid([0, 0, 0], "corner")


def test_contains_is_inclusive():
    region = Region((0, 0, 0), (1, 1, 1), (2, 2, 2))
    mask = region.contains([[0, 0, 0], [2, 2, 2], [2.01, 1, 1], [-1, 1, 1]])
    assert mask.tolist() == [True, True, False, False]


def test_node_coordinates():
    region = Region((0, 0, 0), (1, 2, 1), (3, 2, 1))
    xs, ys, zs = region.node_coordinates("cell")
    np.testing.assert_allclose(xs, [0.5, 1.5, 2.5])
    np.testing.assert_allclose(ys, [1.0, 3.0])
    np.testing.assert_allclose(zs, [0.5])
