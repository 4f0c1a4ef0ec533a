"""Synthetic data generation utilities for trajinfer testing and demos.

This module provides demo constants (timing, planner settings and a recorded
set of measurements) and a function that runs the agent model with a known
start, destination and speed to produce ground truth for testing inference.
"""

import numpy as np
from typing import NamedTuple, Optional

from .agent_model import agent_locations, agent_model
from .path_planner import Path, PlannerParams
from .scene_config import Point, Scene
from .trace_export import export_trace
from .tracing import Trace, generate

# Demo timing: 10 ticks, 0.1 time units apart
DEMO_DT = 0.1
DEMO_NUM_TICKS = 10

# Large steps relative to the unit-square scene; heavy refinement
DEMO_PLANNER_PARAMS = PlannerParams(
    iterations=300,
    step_size=3.0,
    refine_iterations=2000,
    refine_std=1.0,
)

DEMO_START = Point(0.1, 0.1)

# Ten measurements of an agent moving roughly straight up from DEMO_START
DEMO_MEASUREMENTS = [
    Point(0.0980245, 0.104775),
    Point(0.113734, 0.150773),
    Point(0.100412, 0.195499),
    Point(0.114794, 0.237386),
    Point(0.0957668, 0.277711),
    Point(0.140181, 0.31694),
    Point(0.124861, 0.348185),
    Point(0.101934, 0.387013),
    Point(0.10208, 0.451123),
    Point(0.125499, 0.502371),
]


class SyntheticDataConfig(NamedTuple):
    """Configuration for synthetic data generation.

    Attributes
    ----------
    start : Point
        True start position
    dest : Point
        True destination
    speed : float
        True speed
    dt : float
        Time between ticks
    num_ticks : int
        Number of measurements
    random_seed : int | None
        Random seed for reproducibility (None = no seeding)
    """

    start: Point = DEMO_START
    dest: Point = Point(0.15, 0.85)
    speed: float = 0.45
    dt: float = DEMO_DT
    num_ticks: int = DEMO_NUM_TICKS
    random_seed: Optional[int] = 42


class SyntheticAgentData(NamedTuple):
    """Generated synthetic agent data.

    Attributes
    ----------
    trace : Trace
        Full model trace
    path : Path | None
        Path the agent followed (None if planning failed)
    locations : list[Point]
        True positions, length num_ticks
    measurements : tuple[Point, ...]
        Noisy measurements, length num_ticks
    config : SyntheticDataConfig
        Configuration parameters used for generation
    """

    trace: Trace
    path: Optional[Path]
    locations: list
    measurements: tuple
    config: SyntheticDataConfig


def generate_demo_sequence(
    scene: Scene,
    planner_params: PlannerParams = DEMO_PLANNER_PARAMS,
    config: Optional[SyntheticDataConfig] = None,
) -> SyntheticAgentData:
    """Generate a ground-truth agent run with noisy measurements.

    The agent model is run with start, destination and speed forced to the
    configured values; the path and measurement noise are drawn as usual.

    Parameters
    ----------
    scene : Scene
        Scene to simulate in
    planner_params : PlannerParams
        Planner configuration
    config : SyntheticDataConfig, optional
        Generation parameters (uses defaults if None)

    Returns
    -------
    data : SyntheticAgentData

    Examples
    --------
    >>> from trajinfer.scene_config import DEMO_SCENE
    >>> data = generate_demo_sequence(DEMO_SCENE)
    >>> print(f"Generated {len(data.measurements)} measurements")
    """
    if config is None:
        config = SyntheticDataConfig()

    rng = np.random.default_rng(config.random_seed)

    constraints = {
        "start_x": config.start[0],
        "start_y": config.start[1],
        "dest_x": config.dest[0],
        "dest_y": config.dest[1],
        "speed": config.speed,
    }
    args = (scene, config.dt, config.num_ticks, planner_params)
    trace, _ = generate(agent_model, args, constraints, rng)

    path = trace.retval.path
    start = Point(float(config.start[0]), float(config.start[1]))
    locations = agent_locations(start, path, config.speed, config.dt, config.num_ticks)

    return SyntheticAgentData(
        trace=trace,
        path=path,
        locations=locations,
        measurements=export_trace(trace).measurements,
        config=config,
    )
