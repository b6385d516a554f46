# rasterflow/io/vtk_writer.py
"""
VTK writer for flowlines.

Exports flowlines as VTK PolyData (.vtp): one polyline cell per flowline with
its category, direction and termination state, viewable in ParaView.
"""

from __future__ import annotations
from pathlib import Path
import threading
from typing import List, Optional, Union
import numpy as np

try:
    import vtk
    from vtk.util.numpy_support import numpy_to_vtk
    VTK_AVAILABLE = True
except ImportError:
    VTK_AVAILABLE = False


def _string_array(name: str, values) -> "vtk.vtkStringArray":
    arr = vtk.vtkStringArray()
    arr.SetName(name)
    for value in values:
        arr.InsertNextValue(str(value))
    return arr


class VTKFlowlineWriter:
    """
    Output adapter that writes flowlines to a VTK PolyData file.

    Flowlines are buffered by `write` and saved by `save`. Writes are
    serialised with a lock, as in FlowlineCollector.

    Parameters
    ----------
    filename : str or Path
        Output path, should end with .vtp
    skip_degenerate : bool
        Drop flowlines that hold only their seed point
    """

    def __init__(self, filename: Union[str, Path], skip_degenerate: bool = True):
        if not VTK_AVAILABLE:
            raise ImportError("VTK not available - cannot write VTK files; install rasterflow[vtk]")

        self.filename = Path(filename)
        self.skip_degenerate = skip_degenerate
        self._flowlines: List = []
        self._lock = threading.Lock()

    def write(self, flowline) -> None:
        if self.skip_degenerate and flowline.n_points < 2:
            return
        with self._lock:
            self._flowlines.append(flowline)

    def __len__(self) -> int:
        with self._lock:
            return len(self._flowlines)

    def build_polydata(self) -> "vtk.vtkPolyData":
        """Assemble the buffered flowlines into a vtkPolyData."""
        with self._lock:
            flowlines = list(self._flowlines)
        poly_data = vtk.vtkPolyData()

        if flowlines:
            all_points = np.concatenate([fl.points for fl in flowlines], axis=0)
        else:
            all_points = np.empty((0, 3), dtype=np.float64)
        vtk_points = vtk.vtkPoints()
        vtk_points.SetData(numpy_to_vtk(np.ascontiguousarray(all_points), deep=True))
        poly_data.SetPoints(vtk_points)

        lines = vtk.vtkCellArray()
        step_index = np.empty(len(all_points), dtype=np.int64)
        offset = 0
        for fl in flowlines:
            n = fl.n_points
            line = vtk.vtkPolyLine()
            line.GetPointIds().SetNumberOfIds(n)
            for i in range(n):
                line.GetPointIds().SetId(i, offset + i)
            lines.InsertNextCell(line)
            step_index[offset:offset + n] = np.arange(n)
            offset += n
        poly_data.SetLines(lines)

        step_vtk = numpy_to_vtk(step_index, deep=True)
        step_vtk.SetName("step_index")
        poly_data.GetPointData().AddArray(step_vtk)

        categories = [fl.category for fl in flowlines]
        if all(isinstance(c, (int, np.integer)) for c in categories):
            cat_vtk = numpy_to_vtk(np.asarray(categories, dtype=np.int64), deep=True)
            cat_vtk.SetName("category")
        else:
            cat_vtk = _string_array("category", categories)
        poly_data.GetCellData().AddArray(cat_vtk)

        poly_data.GetCellData().AddArray(
            _string_array("direction", [fl.direction.value for fl in flowlines])
        )
        poly_data.GetCellData().AddArray(
            _string_array("termination", [fl.state.value for fl in flowlines])
        )

        length_vtk = numpy_to_vtk(
            np.asarray([fl.length for fl in flowlines], dtype=np.float64), deep=True
        )
        length_vtk.SetName("length")
        poly_data.GetCellData().AddArray(length_vtk)
        return poly_data

    def save(self, filename: Optional[Union[str, Path]] = None) -> Path:
        """Write the buffered flowlines; returns the path written."""
        path = Path(filename) if filename is not None else self.filename
        path.parent.mkdir(parents=True, exist_ok=True)

        writer = vtk.vtkXMLPolyDataWriter()
        writer.SetFileName(str(path))
        writer.SetInputData(self.build_polydata())
        if writer.Write() != 1:
            raise IOError(f"Failed to write VTK file: {path}")
        return path
