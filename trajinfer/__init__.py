"""trajinfer: inferring an agent's destination and speed from noisy positions.

This package simulates an agent navigating a bounded 2-D scene with
polygonal obstacles and conditions that simulation on observed positions.

Pipeline
========

**Stage 1: Scene and geometry** (`scene_config`, `geometry`)
    Points, polygonal obstacles, scene bounds and segment collision tests.

**Stage 2: Path planning and motion** (`path_planner`, `motion`)
    RRT with goal bias, shortcutting and stochastic refinement; constant
    speed replay of a path at regular ticks.

**Stage 3: Generative agent model** (`agent_model`, `tracing`)
    Uniform priors on start, destination and speed, an opaque planner call,
    and Gaussian measurements, executed by a small tracing engine.

**Stage 4: Inference** (`inference`)
    Importance sampling with resampling conditioned on observations.

Quick Start
-----------
>>> from trajinfer import agent_model, infer, Observations, export_trace
>>> from trajinfer import DEMO_SCENE
>>> from trajinfer.synthetic_data import (
...     DEMO_DT, DEMO_MEASUREMENTS, DEMO_PLANNER_PARAMS, DEMO_START,
... )
>>>
>>> obs = Observations.from_measurements(DEMO_MEASUREMENTS, start=DEMO_START)
>>> args = (DEMO_SCENE, DEMO_DT, len(DEMO_MEASUREMENTS), DEMO_PLANNER_PARAMS)
>>> trace = infer(agent_model, args, obs, num_particles=1000, rng=0)
>>> print(trace["dest_x"], trace["dest_y"])

See Also
--------
examples/run_agent_inference_demo.py : End-to-end example with figures
"""

# Scene and geometry
from .scene_config import (
    DEMO_SCENE,
    SIMPLE_SCENE,
    Obstacle,
    Point,
    Scene,
    make_line,
    make_square,
    validate_scene,
)
from .geometry import segment_intersects_obstacle, segment_is_free

# Planning and motion
from .path_planner import Path, PlannerParams, plan_path
from .motion import walk_path

# Model and engine
from .choice_map import ChoiceMap, Observations, meas_address
from .tracing import ChoiceRecorder, Trace, generate, simulate
from .agent_model import MEASUREMENT_NOISE, AgentResult, agent_model

# Inference
from .inference import (
    ImportanceResult,
    InferenceFailure,
    WeightedParticle,
    importance_sampling,
    infer,
    sample_posterior,
)

# Export
from .trace_export import TraceExport, export_trace

__all__ = [
    # Scene and geometry
    "DEMO_SCENE",
    "SIMPLE_SCENE",
    "Obstacle",
    "Point",
    "Scene",
    "make_line",
    "make_square",
    "validate_scene",
    "segment_intersects_obstacle",
    "segment_is_free",
    # Planning and motion
    "Path",
    "PlannerParams",
    "plan_path",
    "walk_path",
    # Model and engine
    "ChoiceMap",
    "Observations",
    "meas_address",
    "ChoiceRecorder",
    "Trace",
    "generate",
    "simulate",
    "MEASUREMENT_NOISE",
    "AgentResult",
    "agent_model",
    # Inference
    "ImportanceResult",
    "InferenceFailure",
    "WeightedParticle",
    "importance_sampling",
    "infer",
    "sample_posterior",
    # Export
    "TraceExport",
    "export_trace",
]
