"""Posterior summaries and fit diagnostics for agent-model traces.

Posterior samples (one trace per independent `infer` run) are collected
into an `arviz.InferenceData` with a single chain, so the usual arviz
summaries and plots apply.
"""

from typing import Dict, Sequence

import arviz as az
import numpy as np

from .agent_model import agent_locations
from .scene_config import Point
from .trace_export import export_trace
from .tracing import Trace

POSTERIOR_VAR_NAMES = ("dest_x", "dest_y", "speed")


def posterior_to_inference_data(
    traces: Sequence[Trace],
    var_names: Sequence[str] = POSTERIOR_VAR_NAMES,
) -> az.InferenceData:
    """Collect scalar choices from posterior traces into InferenceData.

    Parameters
    ----------
    traces : sequence of Trace
        Posterior samples
    var_names : sequence of str
        Scalar addresses to collect

    Returns
    -------
    idata : az.InferenceData
        Posterior group with dims (chain=1, draw=len(traces))
    """
    if len(traces) == 0:
        raise ValueError("Need at least one trace")

    posterior = {
        name: np.array([[trace[name] for trace in traces]], dtype=float)
        for name in var_names
    }
    return az.from_dict(posterior=posterior)


def summarize_posterior(
    traces: Sequence[Trace],
    var_names: Sequence[str] = POSTERIOR_VAR_NAMES,
):
    """Mean, sd and HDI of each variable (pandas DataFrame from arviz)."""
    idata = posterior_to_inference_data(traces, var_names)
    return az.summary(idata, kind="stats")


def posterior_mean_destination(traces: Sequence[Trace]) -> Point:
    """Mean of (dest_x, dest_y) over posterior samples."""
    if len(traces) == 0:
        raise ValueError("Need at least one trace")
    dest = np.array([[t["dest_x"], t["dest_y"]] for t in traces])
    mx, my = dest.mean(axis=0)
    return Point(float(mx), float(my))


def measurement_rmse(trace: Trace) -> float:
    """Root-mean-square distance between measurements and replayed locations.

    Locations are recomputed from the trace's path and speed, so this is the
    residual of the measurement noise model for that trace.
    """
    export = export_trace(trace)
    _, dt, num_ticks, _ = trace.args
    if num_ticks == 0:
        return 0.0

    locations = agent_locations(
        export.start, trace.retval.path, trace["speed"], dt, num_ticks
    )
    diff = np.asarray(export.measurements) - np.asarray(locations)
    return float(np.sqrt(np.mean(np.sum(diff**2, axis=1))))


def compute_planning_metrics(traces: Sequence[Trace]) -> Dict[str, float]:
    """Planning failure rate and mean path length over a set of traces.

    Returns
    -------
    metrics : dict
        num_traces, planning_failure_rate, mean_path_length (NaN if no
        trace has a path)
    """
    failed = [t.retval.planning_failed for t in traces]
    lengths = [t.retval.path.length() for t in traces if t.retval.path is not None]
    return {
        "num_traces": len(traces),
        "planning_failure_rate": float(np.mean(failed)) if failed else 0.0,
        "mean_path_length": float(np.mean(lengths)) if lengths else float("nan"),
    }
