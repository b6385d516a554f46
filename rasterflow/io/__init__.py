"""
Output adapters for traced flowlines.

- FlowlineCollector: in-memory, thread-safe
- VTKFlowlineWriter: VTK PolyData (.vtp) polylines, requires vtk
"""

from .adapters import OutputAdapter, FlowlineCollector
from .vtk_writer import VTK_AVAILABLE, VTKFlowlineWriter

__all__ = [
    "OutputAdapter",
    "FlowlineCollector",
    "VTK_AVAILABLE",
    "VTKFlowlineWriter",
]
