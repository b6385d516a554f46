# rasterflow/fields/gradient.py
"""
Velocity fields derived from the gradient of a scalar raster.

Flowlines of a potential (hydraulic head, temperature, ...) follow its
gradient. The gradient is taken with central differences inside the grid and
one-sided differences on the borders, using the Region's resolution as the
spacing. Gradients whose stencil touches a no-data value are no-data.
"""

from __future__ import annotations
from typing import Optional
import numpy as np

from ..errors import MalformedField
from .base import Region, _ensure_float64
from .structured import VelocityField


def scalar_gradient(scalar: np.ndarray, region: Region, nodata: Optional[float] = None):
    """
    Gradient of a scalar grid.

    Parameters
    ----------
    scalar : np.ndarray
        Scalar values, shape Region.shape
    region : Region
        Grid geometry; its resolution is the finite-difference spacing
    nodata : float, optional
        Sentinel marking void cells (NaN is always void)

    Returns
    -------
    tuple of np.ndarray
        (gx, gy, gz), each shape Region.shape, NaN where undefined
    """
    values = np.array(scalar, dtype=np.float64, copy=True)
    if values.ndim != 3:
        raise MalformedField(f"Scalar grid must be 3D, got shape {values.shape}")
    if values.shape != region.shape:
        raise MalformedField(
            f"Scalar grid shape {values.shape} doesn't match region shape {region.shape}"
        )
    if nodata is not None:
        values[values == nodata] = np.nan
    void = ~np.isfinite(values)
    values[void] = np.nan

    components = []
    for axis, (n, spacing) in enumerate(zip(region.shape, region.resolution)):
        if n < 2:
            # No extent along this axis: no flow across it
            comp = np.zeros_like(values)
        else:
            # NaN neighbours propagate through the difference stencil
            comp = np.gradient(values, spacing, axis=axis)
        comp[void] = np.nan
        components.append(comp)
    return tuple(components)


def create_gradient_field(
    region: Region,
    scalar: np.ndarray,
    nodata: Optional[float] = None,
    **kwargs
) -> VelocityField:
    """
    Create a velocity field equal to the gradient of a scalar raster.

    Forward tracing on this field climbs the scalar; backward tracing descends.

    Parameters
    ----------
    region : Region
        Grid geometry
    scalar : np.ndarray
        Scalar values, shape Region.shape
    nodata : float, optional
        Sentinel marking void cells
    **kwargs
        Additional VelocityField arguments (registration, backend)
    """
    gx, gy, gz = scalar_gradient(_ensure_float64(scalar), region, nodata=nodata)
    return VelocityField(vx=gx, vy=gy, vz=gz, region=region, **kwargs)
