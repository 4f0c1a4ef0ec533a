"""
Smoke tests for trace figures: files are written and nothing raises.
"""

import matplotlib

matplotlib.use("Agg")

import pytest

from trajinfer.agent_model import agent_model
from trajinfer.path_planner import PlannerParams
from trajinfer.scene_config import DEMO_SCENE, Point, Scene, make_square
from trajinfer.trace_export import export_trace
from trajinfer.tracing import generate, simulate
from trajinfer.viz_trace import plot_posterior_paths, plot_trace

PARAMS = PlannerParams(iterations=500, step_size=0.1, refine_iterations=20, refine_std=0.05)


def test_plot_trace(tmp_path):
    """A single trace over the demo scene is saved to disk."""
    trace = simulate(agent_model, (DEMO_SCENE, 0.1, 5, PARAMS), rng=0)
    output = tmp_path / "trace.png"
    plot_trace(export_trace(trace), output, title="Prior sample")
    assert output.exists() and output.stat().st_size > 0


def test_plot_trace_planning_failed(tmp_path):
    """A trace without a path still plots."""
    scene = Scene(xmin=0.0, xmax=1.0, ymin=0.0, ymax=1.0)
    scene.add_obstacle(make_square(Point(0.7, 0.7), 0.2))
    trace, _ = generate(
        agent_model,
        (scene, 0.1, 3, PARAMS),
        {"start_x": 0.1, "start_y": 0.1, "dest_x": 0.7, "dest_y": 0.7},
        rng=0,
    )
    output = tmp_path / "failed.png"
    plot_trace(export_trace(trace), output)
    assert output.exists()


def test_plot_posterior_paths(tmp_path):
    """Many traces overlay on one figure."""
    exports = [
        export_trace(simulate(agent_model, (DEMO_SCENE, 0.1, 5, PARAMS), rng=seed))
        for seed in range(5)
    ]
    output = tmp_path / "posterior.png"
    plot_posterior_paths(exports, output)
    assert output.exists() and output.stat().st_size > 0


def test_plot_posterior_paths_empty(tmp_path):
    """An empty trace list is an error."""
    with pytest.raises(ValueError, match="at least one trace"):
        plot_posterior_paths([], tmp_path / "empty.png")
