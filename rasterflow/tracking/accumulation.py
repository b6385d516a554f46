# rasterflow/tracking/accumulation.py
"""
Flow accumulation: how many flowlines pass through each cell of a region.

Each polyline segment is clipped to the region bounds and walked cell by cell
with the Amanatides-Woo voxel traversal. A cell is counted at most once per
flowline, however many of its segments cross it.
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Set, Tuple
import numpy as np

from ..fields.base import Region, _ensure_position

Cell = Tuple[int, int, int]


def _clip_segment(p0: np.ndarray, p1: np.ndarray, lo: np.ndarray, hi: np.ndarray):
    """Clip segment p0-p1 to an axis-aligned box (Liang-Barsky); None if it misses."""
    d = p1 - p0
    t0, t1 = 0.0, 1.0
    for axis in range(3):
        if d[axis] == 0.0:
            if p0[axis] < lo[axis] or p0[axis] > hi[axis]:
                return None
            continue
        ta = (lo[axis] - p0[axis]) / d[axis]
        tb = (hi[axis] - p0[axis]) / d[axis]
        if ta > tb:
            ta, tb = tb, ta
        t0 = max(t0, ta)
        t1 = min(t1, tb)
        if t0 > t1:
            return None
    return p0 + t0 * d, p0 + t1 * d


def _cell_of(point: np.ndarray, region: Region) -> np.ndarray:
    shape = np.asarray(region.shape)
    idx = np.floor((point - region.origin_array) / region.resolution_array).astype(np.int64)
    return np.clip(idx, 0, shape - 1)


def _first_cell(g: np.ndarray, d: np.ndarray, shape: np.ndarray) -> np.ndarray:
    """Cell a segment starting at grid point g enters when moving along d."""
    idx = np.where(d < 0, np.ceil(g) - 1, np.floor(g))
    return np.clip(idx, 0, shape - 1).astype(np.int64)


def _last_cell(g: np.ndarray, d: np.ndarray, shape: np.ndarray) -> np.ndarray:
    """Cell a segment ending at grid point g arrives from when moving along d."""
    idx = np.where(d > 0, np.ceil(g) - 1, np.floor(g))
    return np.clip(idx, 0, shape - 1).astype(np.int64)


def traverse_cells(region: Region, p0, p1) -> List[Cell]:
    """
    Cells of `region` crossed by the segment p0-p1, in traversal order.

    A segment ending on a cell face does not enter the cell beyond it, and
    one starting on a face counts only the cell it moves into.

    Parameters
    ----------
    region : Region
        Cell grid
    p0, p1 : array-like, shape (3,)
        Segment end points in world coordinates

    Returns
    -------
    list of (i, j, k)
        Empty when the segment lies outside the region
    """
    lo, hi = region.bounds
    clipped = _clip_segment(_ensure_position(p0), _ensure_position(p1), lo, hi)
    if clipped is None:
        return []

    # Walk in grid units, where cell faces sit on integers
    shape = np.asarray(region.shape)
    a, b = ((p - region.origin_array) / region.resolution_array for p in clipped)
    d = b - a

    cell = _first_cell(a, d, shape)
    last = _last_cell(b, d, shape)
    step = np.sign(d).astype(np.int64)
    t_max = np.full(3, np.inf)
    t_delta = np.full(3, np.inf)
    for axis in range(3):
        if step[axis] != 0:
            face = cell[axis] + (step[axis] > 0)
            t_max[axis] = (face - a[axis]) / d[axis]
            t_delta[axis] = 1.0 / abs(d[axis])

    cells = [tuple(int(c) for c in cell)]
    # Manhattan distance bounds the walk even when faces tie
    for _ in range(int(np.abs(last - cell).sum())):
        axis = int(np.argmin(t_max))
        cell[axis] += step[axis]
        t_max[axis] += t_delta[axis]
        if cell[axis] < 0 or cell[axis] >= shape[axis]:
            break
        cells.append(tuple(int(c) for c in cell))
    return cells


class FlowAccumulation:
    """
    Per-cell flowline counts over a region.

    Parameters
    ----------
    region : Region
        Cell grid the counts are defined on

    Attributes
    ----------
    counts : np.ndarray
        int64 array of region.shape
    """

    def __init__(self, region: Region):
        self.region = region
        self.counts = np.zeros(region.shape, dtype=np.int64)
        self.n_flowlines = 0

    def cells_for(self, points) -> Set[Cell]:
        """Distinct cells touched by a polyline."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        visited: Set[Cell] = set()
        if len(pts) == 1:
            # Single point: its own cell, if inside
            if self.region.contains(pts)[0]:
                visited.add(tuple(int(c) for c in _cell_of(pts[0], self.region)))
            return visited
        for p0, p1 in zip(pts[:-1], pts[1:]):
            visited.update(traverse_cells(self.region, p0, p1))
        return visited

    def add(self, flowline) -> None:
        """Count one flowline (anything with a `points` array, or an (n,3) array)."""
        points = getattr(flowline, "points", flowline)
        cells = self.cells_for(points)
        if cells:
            idx = tuple(np.asarray(sorted(cells)).T)
            self.counts[idx] += 1
        self.n_flowlines += 1

    def add_all(self, flowlines: Iterable) -> None:
        for flowline in flowlines:
            self.add(flowline)

    def reset(self) -> None:
        self.counts[...] = 0
        self.n_flowlines = 0

    def max_count(self) -> int:
        return int(self.counts.max()) if self.counts.size else 0

    def to_masked(self, min_count: Optional[int] = 1) -> np.ma.MaskedArray:
        """Counts with cells below `min_count` masked, for export as a sparse raster."""
        return np.ma.masked_less(self.counts, min_count)
