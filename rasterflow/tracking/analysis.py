"""
Flowline analysis utilities for rasterflow.

Summarizes a tracing run: how flowlines terminated and how long they got.
"""

import numpy as np
from typing import Any, Dict, Iterable

from .flowline import TraceState


def _stats(values: np.ndarray) -> Dict[str, float]:
    if values.size == 0:
        return {'mean': 0.0, 'min': 0.0, 'max': 0.0}
    return {
        'mean': float(np.mean(values)),
        'min': float(np.min(values)),
        'max': float(np.max(values)),
    }


def summarize_flowlines(flowlines: Iterable, verbose: bool = False) -> Dict[str, Any]:
    """
    Summarize tracing results.

    Parameters
    ----------
    flowlines : iterable of Flowline
        Closed flowlines
    verbose : bool, default False
        Whether to print the summary

    Returns
    -------
    dict
        'total', 'by_state' (TraceState value -> count), 'degenerate',
        'length' and 'points' statistics (mean, min, max)
    """
    flowlines = list(flowlines)
    by_state = {state.value: 0 for state in TraceState if state.is_terminal}
    for fl in flowlines:
        by_state[fl.state.value] = by_state.get(fl.state.value, 0) + 1

    lengths = np.asarray([fl.length for fl in flowlines], dtype=np.float64)
    n_points = np.asarray([fl.n_points for fl in flowlines], dtype=np.float64)

    summary = {
        'total': len(flowlines),
        'by_state': by_state,
        'degenerate': int(sum(1 for fl in flowlines if fl.is_degenerate)),
        'length': _stats(lengths),
        'points': _stats(n_points),
    }

    if verbose:
        print(f"\n📊 Flowline summary: {summary['total']} flowlines")
        for state, count in by_state.items():
            if count:
                print(f"   {state}: {count}")
        print(f"   Single-point flowlines: {summary['degenerate']}")
        print(f"   Length: mean {summary['length']['mean']:.3f}, "
              f"min {summary['length']['min']:.3f}, max {summary['length']['max']:.3f}")
        print(f"   Points: mean {summary['points']['mean']:.1f}, max {int(summary['points']['max'])}")

    return summary
