# rasterflow/errors.py
"""
Exceptions raised by rasterflow.

Per-flowline outcomes (out of domain, stalled) are never raised; they are
reported through ``StepStatus`` and ``TraceState``. Only structural problems
that must stop a run before any tracing starts are exceptions.
"""


class RasterFlowError(Exception):
    """Base class for rasterflow errors."""


class InvalidConfiguration(RasterFlowError, ValueError):
    """Non-positive step length, resolution or caps, or an unknown option value."""


class MalformedField(RasterFlowError, ValueError):
    """Velocity component grids that do not share the Region's shape."""


__all__ = ["RasterFlowError", "InvalidConfiguration", "MalformedField"]
