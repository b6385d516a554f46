# rasterflow/fields/structured.py
"""
Raster velocity field sampling with trilinear interpolation.

The field is stored as three scalar grids (vx, vy, vz), one per component,
aligned to a Region. Sampling converts a world position to fractional grid
coordinates and blends the eight surrounding grid values per component.

Void policy:
- positions outside the interpolation support [0, n-1] on any axis fail
- any contributing corner (non-zero weight) that is no-data fails
- a failed sample is reported with ok=False and a NaN velocity, never as
  a zero velocity

Backends:
- 'numpy' : plain NumPy kernel (default)
- 'jax'   : the same kernel compiled with jax.jit, 64-bit enabled
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple
import warnings
import numpy as np

from ..errors import InvalidConfiguration, MalformedField
from ..utils.config import get_config
from ..utils.jax_utils import array_module, enable_x64, maybe_jit, to_numpy
from .base import (
    Region,
    SampleResult,
    _check_registration,
    _ensure_float64,
    _ensure_position,
    _ensure_positions_shape,
)

_BACKENDS = ("numpy", "jax")

# Corner offsets of the interpolation cube, in (di, dj, dk) order
_CORNERS = tuple((di, dj, dk) for dk in (0, 1) for dj in (0, 1) for di in (0, 1))


# ------------------------- Internal helpers -------------------------

def _make_trilinear_kernel(xp, components, shape: Tuple[int, int, int]) -> Callable:
    """
    Build a trilinear interpolation kernel over fractional grid coordinates.

    Parameters
    ----------
    xp : module
        numpy or jax.numpy
    components : tuple of arrays
        (vx, vy, vz), each of `shape`, NaN marking no-data
    shape : tuple of int
        Grid dimensions (nx, ny, nz)

    Returns
    -------
    callable
        kernel(frac (N,3)) -> (velocities (N,3), ok (N,))
    """
    vx, vy, vz = (xp.asarray(c) for c in components)
    upper = tuple(float(n - 1) for n in shape)
    top_lo = tuple(max(n - 2, 0) for n in shape)

    def kernel(frac):
        frac = xp.asarray(frac)
        inside = xp.ones(frac.shape[0], dtype=bool)
        lo, hi, w = [], [], []
        for axis in range(3):
            f = frac[:, axis]
            inside = inside & (f >= 0.0) & (f <= upper[axis])
            # Clamp so gathers stay in range; out-of-support and non-finite rows
            # are already excluded by `inside`
            fc = xp.clip(xp.where(xp.isfinite(f), f, 0.0), 0.0, upper[axis])
            i0 = xp.clip(xp.floor(fc), 0, top_lo[axis]).astype(xp.int64)
            i1 = xp.minimum(i0 + 1, shape[axis] - 1)
            lo.append(i0)
            hi.append(i1)
            w.append(fc - i0.astype(fc.dtype))

        acc = [xp.zeros_like(frac[:, 0]) for _ in range(3)]
        void = xp.zeros(frac.shape[0], dtype=bool)
        for di, dj, dk in _CORNERS:
            i = hi[0] if di else lo[0]
            j = hi[1] if dj else lo[1]
            k = hi[2] if dk else lo[2]
            weight = ((w[0] if di else 1.0 - w[0])
                      * (w[1] if dj else 1.0 - w[1])
                      * (w[2] if dk else 1.0 - w[2]))
            contributes = weight > 0.0
            for c, grid in enumerate((vx, vy, vz)):
                value = grid[i, j, k]
                missing = xp.isnan(value)
                void = void | (missing & contributes)
                acc[c] = acc[c] + xp.where(missing, 0.0, value) * weight

        ok = inside & ~void
        vel = xp.stack(acc, axis=1)
        vel = xp.where(ok[:, None], vel, xp.nan)
        return vel, ok

    return kernel


# ------------------------- Main class -------------------------

@dataclass
class VelocityField:
    """
    Velocity field on a regular raster with trilinear interpolation.

    Attributes
    ----------
    vx, vy, vz : np.ndarray
        Component grids, shape Region.shape, indexed [i, j, k] along x, y, z
    region : Region
        Grid geometry the components are aligned to
    nodata : float, optional
        Sentinel marking void cells, converted to NaN (NaN is always void)
    registration : str
        'node' (values at grid nodes) | 'cell' (values at cell centres)
    backend : str, optional
        'numpy' | 'jax'; defaults to the package configuration
    """
    vx: np.ndarray
    vy: np.ndarray
    vz: np.ndarray
    region: Region
    nodata: Optional[float] = None
    registration: str = "node"
    backend: Optional[str] = None

    _kernel: Optional[Callable] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        _check_registration(self.registration)
        if self.backend is None:
            self.backend = get_config().backend
        if self.backend not in _BACKENDS:
            raise InvalidConfiguration(f"backend must be one of {_BACKENDS}, got '{self.backend}'")
        if not isinstance(self.region, Region):
            raise InvalidConfiguration(f"region must be a Region, got {type(self.region).__name__}")

        grids = []
        for name in ("vx", "vy", "vz"):
            arr = np.array(getattr(self, name), dtype=np.float64, copy=True)
            if arr.ndim != 3:
                raise MalformedField(f"{name} must be a 3D grid, got shape {arr.shape}")
            grids.append(arr)

        shapes = {g.shape for g in grids}
        if len(shapes) != 1:
            raise MalformedField(
                f"Velocity components have mismatched shapes: "
                f"vx={grids[0].shape}, vy={grids[1].shape}, vz={grids[2].shape}"
            )
        if grids[0].shape != self.region.shape:
            raise MalformedField(
                f"Velocity grid shape {grids[0].shape} doesn't match region shape {self.region.shape}"
            )

        for arr in grids:
            if self.nodata is not None:
                arr[arr == self.nodata] = np.nan
            arr[~np.isfinite(arr)] = np.nan
            arr.flags.writeable = False
        self.vx, self.vy, self.vz = grids

        self._valid = np.isfinite(self.vx) & np.isfinite(self.vy) & np.isfinite(self.vz)
        self._valid.flags.writeable = False
        if not self._valid.any():
            warnings.warn("Velocity field has no valid cells; every sample will fail")

        if self.backend == "jax":
            enable_x64()
            xp = array_module("jax")
            self._kernel = maybe_jit(_make_trilinear_kernel(xp, grids, self.region.shape))
        else:
            self._kernel = _make_trilinear_kernel(np, grids, self.region.shape)

    # ------------------------- Public API -------------------------

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.region.shape

    @property
    def velocity_data(self) -> np.ndarray:
        """Components stacked as (nx, ny, nz, 3)."""
        return np.stack([self.vx, self.vy, self.vz], axis=-1)

    @property
    def valid_mask(self) -> np.ndarray:
        """Boolean grid, True where all three components hold data."""
        return self._valid

    def sample_many(self, positions) -> Tuple[np.ndarray, np.ndarray]:
        """
        Sample the velocity field at many positions.

        Parameters
        ----------
        positions : array-like, shape (N, 3)
            World coordinates.

        Returns
        -------
        velocities : np.ndarray
            Shape (N, 3), float64; NaN rows where sampling failed
        ok : np.ndarray
            Shape (N,), bool
        """
        frac = self.region.world_to_grid(_ensure_positions_shape(positions), self.registration)
        vel, ok = self._kernel(frac)
        return to_numpy(vel, np.float64), to_numpy(ok, bool)

    def sample(self, position) -> SampleResult:
        """
        Sample the velocity at one world position.

        Returns
        -------
        SampleResult
            (velocity (3,), ok). ok is False out of domain or on no-data.
        """
        vel, ok = self.sample_many(_ensure_position(position)[None, :])
        return SampleResult(vel[0], bool(ok[0]))

    def get_spatial_bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        World bounds of the interpolation support as (min, max), each shape (3,).

        This is the span of the grid values, which for 'cell' registration is
        half a cell inside the region bounds.
        """
        n = np.asarray(self.shape, dtype=np.float64)
        lo = self.region.grid_to_world(np.zeros(3), self.registration)[0]
        hi = self.region.grid_to_world(n - 1.0, self.registration)[0]
        return lo, hi

    def contains(self, positions) -> np.ndarray:
        """Boolean mask of positions inside the interpolation support."""
        frac = self.region.world_to_grid(positions, self.registration)
        upper = np.asarray(self.shape, dtype=np.float64) - 1.0
        return np.all((frac >= 0.0) & (frac <= upper), axis=1)

    def valid_fraction(self) -> float:
        """Fraction of grid cells holding data in all three components."""
        return float(self._valid.mean())

    def magnitude(self) -> np.ndarray:
        """Velocity magnitude per grid value, NaN on no-data."""
        return np.sqrt(self.vx**2 + self.vy**2 + self.vz**2)


# ------------------------- Factory functions -------------------------

def create_velocity_field(
    region: Region,
    velocity_data: np.ndarray,
    **kwargs
) -> VelocityField:
    """
    Create a velocity field from a stacked array.

    Parameters
    ----------
    region : Region
        Grid geometry
    velocity_data : np.ndarray
        Velocity grid, shape (nx, ny, nz, 3)
    **kwargs
        Additional VelocityField arguments (nodata, registration, backend)

    Returns
    -------
    VelocityField
    """
    data = _ensure_float64(velocity_data)
    if data.ndim != 4 or data.shape[-1] != 3:
        raise MalformedField(f"velocity_data must have shape (nx,ny,nz,3), got {data.shape}")
    return VelocityField(
        vx=data[..., 0],
        vy=data[..., 1],
        vz=data[..., 2],
        region=region,
        **kwargs
    )


def create_uniform_field(
    region: Region,
    velocity=(1.0, 0.0, 0.0),
    **kwargs
) -> VelocityField:
    """
    Create a constant velocity field over a region.

    Parameters
    ----------
    region : Region
        Grid geometry
    velocity : tuple
        Constant velocity vector (vx, vy, vz)
    """
    vel = _ensure_position(velocity)
    shape = region.shape
    return VelocityField(
        vx=np.full(shape, vel[0]),
        vy=np.full(shape, vel[1]),
        vz=np.full(shape, vel[2]),
        region=region,
        **kwargs
    )


def create_field_from_function(
    region: Region,
    velocity_function: Callable,
    registration: str = "node",
    **kwargs
) -> VelocityField:
    """
    Evaluate an analytical velocity function at the grid values of a region.

    Parameters
    ----------
    region : Region
        Grid geometry
    velocity_function : callable
        Function(X, Y, Z) -> (u, v, w) on broadcast coordinate arrays
    registration : str
        Where the values are placed, 'node' or 'cell'
    **kwargs
        Additional VelocityField arguments

    Returns
    -------
    VelocityField
    """
    xs, ys, zs = region.node_coordinates(registration)
    X, Y, Z = np.meshgrid(xs, ys, zs, indexing='ij')
    u, v, w = velocity_function(X, Y, Z)
    shape = region.shape
    return VelocityField(
        vx=np.broadcast_to(_ensure_float64(u), shape),
        vy=np.broadcast_to(_ensure_float64(v), shape),
        vz=np.broadcast_to(_ensure_float64(w), shape),
        region=region,
        registration=registration,
        **kwargs
    )
