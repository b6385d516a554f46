# rasterflow/tracking/__init__.py
"""
Flowline tracking.

Main Components:
- Seed / Flowline / TraceState: data model of one traced line
- FlowlineTracer: termination state machine and sequential batch driver
- FlowAccumulation: per-cell flowline counts
- summarize_flowlines: run statistics
"""

from .flowline import (
    Seed,
    Flowline,
    TraceState,
    as_seeds,
)

from .tracer import (
    TracerOptions,
    FlowlineTracer,
    create_tracer,
    trace_flowlines,
)

from .accumulation import (
    FlowAccumulation,
    traverse_cells,
)

from .analysis import (
    summarize_flowlines,
)

__all__ = [
    'Seed',
    'Flowline',
    'TraceState',
    'as_seeds',
    'TracerOptions',
    'FlowlineTracer',
    'create_tracer',
    'trace_flowlines',
    'FlowAccumulation',
    'traverse_cells',
    'summarize_flowlines',
]
