"""Generative model of an agent walking a planned path.

The agent picks a start point, a destination and a speed uniformly at
random, plans a route with the RRT planner, walks it at constant speed, and
emits one noisy (x, y) measurement per tick.

Traced choices (see `trajinfer.choice_map` for the address scheme):

    start_x, start_y ~ Uniform(0, 1)
    dest_x, dest_y   ~ Uniform(0, 1)
    speed            ~ Uniform(0, 1)
    ("meas", i, "x") ~ Normal(location_i.x, MEASUREMENT_NOISE)   i = 1..num_ticks
    ("meas", i, "y") ~ Normal(location_i.y, MEASUREMENT_NOISE)

The planner call is not a traced choice. It draws from `recorder.rng` and
is re-run on every execution; its only visible effect is through the
locations that the measurements are centred on. When planning fails the
agent stays at its start point for every tick.
"""

from typing import NamedTuple, Optional

from .distributions import Normal, Uniform
from .motion import walk_path
from .path_planner import Path, PlannerParams, plan_path
from .scene_config import Point, Scene
from .tracing import ChoiceRecorder

# Standard deviation of each measurement coordinate
MEASUREMENT_NOISE = 0.01


class AgentResult(NamedTuple):
    """Return value of `agent_model`.

    Attributes
    ----------
    planning_failed : bool
        True if the planner found no path
    path : Path | None
        The planned path, None if planning failed
    """

    planning_failed: bool
    path: Optional[Path]


def agent_locations(
    start: Point,
    path: Optional[Path],
    speed: float,
    dt: float,
    num_ticks: int,
) -> list[Point]:
    """Agent positions at each tick; stationary at `start` if `path` is None."""
    if num_ticks < 0:
        raise ValueError(f"num_ticks must be >= 0, got {num_ticks}")
    if path is None:
        return [start] * num_ticks
    return walk_path(path, speed, dt, num_ticks)


def agent_model(
    recorder: ChoiceRecorder,
    scene: Scene,
    dt: float,
    num_ticks: int,
    planner_params: PlannerParams,
) -> AgentResult:
    """Agent model program.

    Run it through `trajinfer.tracing.simulate` / `generate` or
    `trajinfer.inference.infer` rather than calling it directly.

    Parameters
    ----------
    recorder : ChoiceRecorder
        Execution handle supplied by the engine
    scene : Scene
        Scene the agent moves in (read-only)
    dt : float
        Time between ticks
    num_ticks : int
        Number of measurements
    planner_params : PlannerParams
        Configuration for the planner call

    Returns
    -------
    result : AgentResult
    """
    start = Point(
        recorder.sample("start_x", Uniform(0.0, 1.0)),
        recorder.sample("start_y", Uniform(0.0, 1.0)),
    )
    dest = Point(
        recorder.sample("dest_x", Uniform(0.0, 1.0)),
        recorder.sample("dest_y", Uniform(0.0, 1.0)),
    )

    path = plan_path(start, dest, scene, planner_params, rng=recorder.rng)
    planning_failed = path is None

    speed = recorder.sample("speed", Uniform(0.0, 1.0))

    locations = agent_locations(start, path, speed, dt, num_ticks)
    for i, loc in enumerate(locations, start=1):
        recorder.sample(("meas", i, "x"), Normal(loc.x, MEASUREMENT_NOISE))
        recorder.sample(("meas", i, "y"), Normal(loc.y, MEASUREMENT_NOISE))

    return AgentResult(planning_failed=planning_failed, path=path)
