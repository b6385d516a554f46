"""
rasterflow: flowline tracing through steady 3D raster velocity fields.

Traces the path a massless particle follows through a velocity field stored
as three raster grids, with:
- No-data aware trilinear interpolation on regular grids
- Euler and RK4 fixed-length stepping along the flow direction
- Deterministic termination (stall, domain exit, step and length caps)
- Flow accumulation rasters and VTK polyline export

Core workflow:
1. Describe the grid → Region
2. Wrap the component grids → VelocityField (or a gradient field)
3. Configure and run → FlowlineTracer.trace_seeds
4. Persist → FlowlineCollector / VTKFlowlineWriter
"""

from __future__ import annotations

# Version info
__version__ = "0.1.0"
__author__ = "rasterflow Contributors"

from .errors import RasterFlowError, InvalidConfiguration, MalformedField

from .utils.jax_utils import JAX_AVAILABLE
from .utils.config import configure, get_config, reset_config

from .fields import (
    Region,
    SampleResult,
    VelocityField,
    create_velocity_field,
    create_uniform_field,
    create_field_from_function,
    create_gradient_field,
)

from .integrators import (
    VELOCITY_EPSILON,
    FlowDirection,
    IntegrationScheme,
    Integrator,
    StepResult,
    StepStatus,
    euler_step,
    rk4_step,
)

from .tracking import (
    Seed,
    Flowline,
    TraceState,
    TracerOptions,
    FlowlineTracer,
    create_tracer,
    trace_flowlines,
    FlowAccumulation,
    summarize_flowlines,
)

from .io import OutputAdapter, FlowlineCollector, VTKFlowlineWriter

__all__ = [
    # Version
    "__version__",
    # Errors
    "RasterFlowError",
    "InvalidConfiguration",
    "MalformedField",
    # Configuration
    "JAX_AVAILABLE",
    "configure",
    "get_config",
    "reset_config",
    # Fields
    "Region",
    "SampleResult",
    "VelocityField",
    "create_velocity_field",
    "create_uniform_field",
    "create_field_from_function",
    "create_gradient_field",
    # Integrators
    "VELOCITY_EPSILON",
    "FlowDirection",
    "IntegrationScheme",
    "Integrator",
    "StepResult",
    "StepStatus",
    "euler_step",
    "rk4_step",
    # Tracking
    "Seed",
    "Flowline",
    "TraceState",
    "TracerOptions",
    "FlowlineTracer",
    "create_tracer",
    "trace_flowlines",
    "FlowAccumulation",
    "summarize_flowlines",
    # Output
    "OutputAdapter",
    "FlowlineCollector",
    "VTKFlowlineWriter",
]
