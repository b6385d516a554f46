# rasterflow/fields/base.py
"""
Base protocols and utilities for raster velocity fields.

Defines the Region (volumetric grid metadata), the tagged SampleResult,
the Field protocol and coordinate conversion helpers.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import NamedTuple, Protocol, Tuple
import numpy as np

from ..errors import InvalidConfiguration

REGISTRATIONS = ("node", "cell")


def _ensure_float64(data) -> np.ndarray:
    """Convert data to float64; stepping is done in double precision."""
    return np.asarray(data, dtype=np.float64)


def _ensure_position(position) -> np.ndarray:
    """Ensure a single position is a float64 array of shape (3,)."""
    pos = _ensure_float64(position).reshape(-1)
    if pos.shape != (3,):
        raise ValueError(f"Position must have 3 coordinates, got shape {np.shape(position)}")
    return pos


def _ensure_positions_shape(positions) -> np.ndarray:
    """Ensure positions have shape (N, 3) with float64 dtype."""
    pos = _ensure_float64(positions)
    if pos.ndim == 1:
        pos = pos.reshape(1, -1)
    if pos.ndim != 2 or pos.shape[1] != 3:
        raise ValueError(f"Positions must have shape (N,3), got {pos.shape}")
    return pos


def _check_registration(registration: str) -> str:
    if registration not in REGISTRATIONS:
        raise InvalidConfiguration(
            f"registration must be one of {REGISTRATIONS}, got '{registration}'"
        )
    return registration


@dataclass(frozen=True)
class Region:
    """
    Volumetric raster region.

    Attributes
    ----------
    origin : tuple of float
        Minimum corner (west, south, bottom) in world coordinates
    resolution : tuple of float
        Cell size along x, y, z; strictly positive
    shape : tuple of int
        Number of cells along x, y, z; strictly positive
    """
    origin: Tuple[float, float, float]
    resolution: Tuple[float, float, float]
    shape: Tuple[int, int, int]

    def __post_init__(self):
        origin = tuple(float(v) for v in np.ravel(self.origin))
        resolution = tuple(float(v) for v in np.ravel(self.resolution))
        shape = tuple(int(v) for v in np.ravel(self.shape))

        if len(origin) != 3 or len(resolution) != 3 or len(shape) != 3:
            raise InvalidConfiguration("Region origin, resolution and shape need 3 values each")
        if not all(np.isfinite(origin)):
            raise InvalidConfiguration(f"Region origin must be finite, got {origin}")
        if not all(np.isfinite(r) and r > 0 for r in resolution):
            raise InvalidConfiguration(f"Region resolution must be positive, got {resolution}")
        if not all(n > 0 for n in shape):
            raise InvalidConfiguration(f"Region shape must be positive, got {shape}")

        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "resolution", resolution)
        object.__setattr__(self, "shape", shape)

    @classmethod
    def from_bounds(cls, bounds_min, bounds_max, shape) -> "Region":
        """Build a region from its corners and cell counts."""
        lo = _ensure_float64(bounds_min)
        hi = _ensure_float64(bounds_max)
        counts = np.asarray(shape, dtype=np.int64)
        if np.any(counts <= 0):
            raise InvalidConfiguration(f"Region shape must be positive, got {tuple(shape)}")
        return cls(origin=tuple(lo), resolution=tuple((hi - lo) / counts), shape=tuple(counts))

    @property
    def origin_array(self) -> np.ndarray:
        return np.asarray(self.origin, dtype=np.float64)

    @property
    def resolution_array(self) -> np.ndarray:
        return np.asarray(self.resolution, dtype=np.float64)

    @property
    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """(min corner, max corner), each shape (3,)."""
        lo = self.origin_array
        return lo, lo + self.resolution_array * np.asarray(self.shape, dtype=np.float64)

    @property
    def cell_size(self) -> float:
        """Smallest resolution, the length of one 'cell' step."""
        return float(min(self.resolution))

    @property
    def n_cells(self) -> int:
        nx, ny, nz = self.shape
        return nx * ny * nz

    def contains(self, positions) -> np.ndarray:
        """Boolean mask of positions inside the region bounds (inclusive)."""
        pos = _ensure_positions_shape(positions)
        lo, hi = self.bounds
        return np.all((pos >= lo) & (pos <= hi), axis=1)

    def world_to_grid(self, positions, registration: str = "node") -> np.ndarray:
        """
        Convert world coordinates to fractional grid coordinates.

        With 'node' registration grid value [i, j, k] sits at
        origin + (i, j, k) * resolution; with 'cell' registration it sits
        at the cell centre, half a cell further.
        """
        _check_registration(registration)
        pos = _ensure_positions_shape(positions)
        frac = (pos - self.origin_array) / self.resolution_array
        if registration == "cell":
            frac = frac - 0.5
        return frac

    def grid_to_world(self, indices, registration: str = "node") -> np.ndarray:
        """Inverse of world_to_grid."""
        _check_registration(registration)
        idx = _ensure_positions_shape(indices)
        if registration == "cell":
            idx = idx + 0.5
        return self.origin_array + idx * self.resolution_array

    def node_coordinates(self, registration: str = "node") -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """World coordinates of the grid values along each axis."""
        _check_registration(registration)
        offset = 0.5 if registration == "cell" else 0.0
        return tuple(
            o + (np.arange(n, dtype=np.float64) + offset) * r
            for o, r, n in zip(self.origin, self.resolution, self.shape)
        )


class SampleResult(NamedTuple):
    """
    Tagged result of a velocity sample.

    `ok` is False when the position lies outside the interpolation support
    or touches a no-data cell; `velocity` is then all NaN and must not be used.
    """
    velocity: np.ndarray  # (3,)
    ok: bool


class Field(Protocol):
    """
    Protocol for static velocity fields.

    Anything that can be sampled at a single world position and knows its
    region can drive the integrators.
    """

    region: Region

    def sample(self, position) -> SampleResult:
        """
        Sample the field at one position.

        Parameters
        ----------
        position : array-like, shape (3,)

        Returns
        -------
        SampleResult
            (velocity (3,), ok)
        """
        ...

    def get_spatial_bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return (bounds_min, bounds_max) of the field domain."""
        ...
