# rasterflow/tracking/tracer.py
"""
Flowline tracer: drive an Integrator from a seed until termination.

- Fixed step length, in world units or in cells of the region
- Termination on stall, domain exit, step cap or length cap
- Sequential batch driver handing each closed flowline to an output adapter
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any, Callable, Dict, Iterable, List, Optional
import numpy as np

from ..errors import InvalidConfiguration
from ..fields.base import Field
from ..integrators.base import FlowDirection, IntegrationScheme, StepStatus
from ..integrators.integrator import Integrator
from ..utils.config import get_config
from ..utils.logging import Timer, create_progress_callback
from .analysis import summarize_flowlines
from .flowline import Flowline, Seed, SeedLike, TraceState, as_seeds

_DIRECTIONS = ("forward", "backward", "both")
_STEP_UNITS = ("length", "cell")

# Relative tolerance of the length cap against accumulated step lengths
_LENGTH_RTOL = 1e-9


def _reached(length: float, cap: float) -> bool:
    return length >= cap or math.isclose(length, cap, rel_tol=_LENGTH_RTOL)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

@dataclass
class TracerOptions:
    """
    Configuration of a tracing run.

    Validated once, before any seed is traced.
    """
    scheme: str = "rk4"                   # 'euler' | 'rk4'
    step_length: float = 1.0              # > 0, in `step_unit`
    step_unit: str = "length"             # 'length' (world units) | 'cell'
    direction: str = "forward"            # 'forward' | 'backward' | 'both'
    max_steps: int = 2000                 # > 0
    max_length: Optional[float] = None    # > 0, None = unbounded

    def validate(self) -> "TracerOptions":
        """Check every value; raise InvalidConfiguration on the first bad one."""
        self.scheme = IntegrationScheme.parse(self.scheme).value

        direction = str(getattr(self.direction, "value", self.direction)).lower()
        if direction not in _DIRECTIONS:
            raise InvalidConfiguration(f"direction must be one of {_DIRECTIONS}, got '{self.direction}'")
        self.direction = direction

        if self.step_unit not in _STEP_UNITS:
            raise InvalidConfiguration(f"step_unit must be one of {_STEP_UNITS}, got '{self.step_unit}'")

        try:
            step_length = float(self.step_length)
        except (TypeError, ValueError):
            raise InvalidConfiguration(f"step_length must be a number, got {self.step_length!r}") from None
        if not (np.isfinite(step_length) and step_length > 0):
            raise InvalidConfiguration(f"step_length must be positive, got {self.step_length}")
        self.step_length = step_length

        if not isinstance(self.max_steps, (int, np.integer)) or isinstance(self.max_steps, bool) \
                or self.max_steps <= 0:
            raise InvalidConfiguration(f"max_steps must be a positive integer, got {self.max_steps!r}")
        self.max_steps = int(self.max_steps)

        if self.max_length is not None:
            try:
                max_length = float(self.max_length)
            except (TypeError, ValueError):
                raise InvalidConfiguration(f"max_length must be a number, got {self.max_length!r}") from None
            if not (max_length > 0):
                raise InvalidConfiguration(f"max_length must be positive, got {self.max_length}")
            self.max_length = max_length
        return self

    @property
    def directions(self) -> List[FlowDirection]:
        """Directions traced per seed; 'both' traces backward then forward."""
        if self.direction == "both":
            return [FlowDirection.BACKWARD, FlowDirection.FORWARD]
        return [FlowDirection(self.direction)]

    def world_step_length(self, cell_size: float) -> float:
        """Step length in world units."""
        if self.step_unit == "cell":
            return self.step_length * cell_size
        return self.step_length

# ---------------------------------------------------------------------------
# Flowline tracer
# ---------------------------------------------------------------------------

@dataclass
class FlowlineTracer:
    """
    Trace flowlines through a steady velocity field.

    One Integrator per direction is built at construction, so the scheme
    cannot change within a run. The tracer holds no per-flowline state and
    can be shared between threads.
    """
    velocity_field: Field
    options: TracerOptions = field(default_factory=TracerOptions)

    _integrators: Dict[FlowDirection, Integrator] = field(default_factory=dict, init=False, repr=False)
    _step: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self):
        self.options.validate()
        region = getattr(self.velocity_field, "region", None)
        if self.options.step_unit == "cell" and region is None:
            raise InvalidConfiguration("step_unit='cell' needs a field with a region")
        cell_size = region.cell_size if region is not None else 1.0
        self._step = self.options.world_step_length(cell_size)
        self._integrators = {
            d: Integrator(self.velocity_field, scheme=self.options.scheme, direction=d)
            for d in FlowDirection
        }

    @property
    def step_length(self) -> float:
        """Step length in world units."""
        return self._step

    # ------------------------ Single flowline ------------------------

    def trace(self, seed: SeedLike, direction=None) -> Flowline:
        """
        Trace one flowline from a seed.

        Parameters
        ----------
        seed : Seed or (position, category)
        direction : 'forward' | 'backward', optional
            Overrides the options for this call; required when the options
            say 'both'

        Returns
        -------
        Flowline
            Closed flowline; its first point is the seed position
        """
        if not isinstance(seed, Seed):
            seed = as_seeds([seed])[0]
        if direction is None:
            if self.options.direction == "both":
                raise InvalidConfiguration("direction='both' yields two flowlines; use trace_seed()")
            direction = self.options.direction
        direction = FlowDirection.parse(direction)
        integrator = self._integrators[direction]

        max_steps = self.options.max_steps
        max_length = self.options.max_length
        h = self._step

        flowline = Flowline(category=seed.category, direction=direction)
        position = seed.position_array
        flowline.append(position)

        state = TraceState.RUNNING
        while state is TraceState.RUNNING:
            result = integrator.step(position, h)

            if result.status is StepStatus.OUT_OF_DOMAIN:
                state = TraceState.DONE_OUT_OF_DOMAIN
            elif result.status is StepStatus.STALLED:
                # The stalling point is already the last recorded point
                state = TraceState.DONE_STALLED
            else:
                position = result.position
                flowline.append(position)
                flowline.n_steps += 1
                flowline.length = flowline.n_steps * h
                if flowline.n_steps >= max_steps:
                    state = TraceState.DONE_MAX_STEPS
                elif max_length is not None and _reached(flowline.length, max_length):
                    state = TraceState.DONE_MAX_LENGTH

        flowline.close(state)
        return flowline

    def trace_seed(self, seed: SeedLike) -> List[Flowline]:
        """Trace every configured direction from one seed."""
        return [self.trace(seed, direction=d) for d in self.options.directions]

    # ------------------------ Batch driver ------------------------

    def trace_seeds(
        self,
        seeds: Iterable[SeedLike],
        adapter=None,
        accumulation=None,
        progress_callback: Optional[Callable] = None,
        verbose: Optional[bool] = None,
    ) -> List[Flowline]:
        """
        Trace all seeds in order.

        Parameters
        ----------
        seeds : iterable of Seed or (position, category)
        adapter : OutputAdapter, optional
            Receives every closed flowline via write(flowline)
        accumulation : FlowAccumulation, optional
            Receives every closed flowline via add(flowline)
        progress_callback : callable(step, total), optional
            Defaults to a printing callback when show_progress is configured
        verbose : bool, optional
            Print a run summary; defaults to the package configuration

        Returns
        -------
        list of Flowline
            In seed order, directions per seed as in TracerOptions.directions
        """
        config = get_config()
        if verbose is None:
            verbose = config.verbose
        seeds = as_seeds(seeds)
        total = len(seeds)

        if progress_callback is None and config.show_progress:
            progress_callback = create_progress_callback(
                "Tracing", update_every=config.progress_update_every
            )

        flowlines: List[Flowline] = []
        timer = Timer("Tracing", track_memory=config.track_memory).start()
        for i, seed in enumerate(seeds, start=1):
            for flowline in self.trace_seed(seed):
                if adapter is not None:
                    adapter.write(flowline)
                if accumulation is not None:
                    accumulation.add(flowline)
                flowlines.append(flowline)
            if progress_callback is not None:
                progress_callback(i, total)
        timer.stop()

        if verbose:
            print(f"Traced {len(flowlines)} flowlines from {total} seeds")
            print(timer.describe())
            summarize_flowlines(flowlines, verbose=True)
        return flowlines

# ---------------------------------------------------------------------------
# Convenience
# ---------------------------------------------------------------------------

def create_tracer(velocity_field: Field, **options: Any) -> FlowlineTracer:
    """
    Create a FlowlineTracer from keyword options.

    velocity_field: VelocityField or any object with sample(position) and region
    options: TracerOptions fields (scheme, step_length, step_unit, direction,
             max_steps, max_length)
    """
    return FlowlineTracer(velocity_field, TracerOptions(**options))


def trace_flowlines(
    velocity_field: Field,
    seeds: Iterable[SeedLike],
    adapter=None,
    **options: Any
) -> List[Flowline]:
    """
    One-shot helper: build a tracer and trace all seeds.
    """
    return create_tracer(velocity_field, **options).trace_seeds(seeds, adapter=adapter)


__all__ = [
    'TracerOptions',
    'FlowlineTracer',
    'create_tracer',
    'trace_flowlines',
]
