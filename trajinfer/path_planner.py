"""Sampling-based path planning for trajinfer.

This module provides:

- `rrt`: a Rapidly-exploring Random Tree with goal biasing that grows a
  collision-free tree from the start point until it can see the destination.
- `simplify_path`: greedy shortcutting of redundant waypoints.
- `refine_path`: stochastic local smoothing of interior waypoints.
- `plan_path`: the three stages above composed into one call.

All randomness comes from the numpy Generator handed in by the caller. The
planner is an opaque stochastic function: calling it twice with the same
arguments and different generator states may return different paths, and
none of its internal draws are visible to an enclosing trace.

Planning failure is an ordinary outcome and is reported by returning None.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

import numpy as np

from .geometry import segment_is_free
from .scene_config import Point, Scene


@dataclass(frozen=True)
class PlannerParams:
    """Configuration for `plan_path`.

    Attributes
    ----------
    iterations : int
        Maximum number of RRT growth rounds (search budget), > 0
    step_size : float
        Maximum distance of one tree extension, > 0
    refine_iterations : int
        Number of refinement proposals, >= 0
    refine_std : float
        Standard deviation of refinement perturbations, > 0
    goal_bias : float
        Probability of sampling the destination as the growth target
    simplify : bool
        Shortcut redundant waypoints before refinement
    refine_shortening : bool
        Only accept refinement moves that do not lengthen the path locally.
        When False any collision-free perturbation is accepted.
    """

    iterations: int
    step_size: float
    refine_iterations: int
    refine_std: float
    goal_bias: float = 0.05
    simplify: bool = True
    refine_shortening: bool = True

    def __post_init__(self) -> None:
        if int(self.iterations) != self.iterations or self.iterations < 1:
            raise ValueError(f"iterations must be a positive int, got {self.iterations}")
        if not self.step_size > 0:
            raise ValueError(f"step_size must be > 0, got {self.step_size}")
        if int(self.refine_iterations) != self.refine_iterations or self.refine_iterations < 0:
            raise ValueError(
                f"refine_iterations must be a non-negative int, got {self.refine_iterations}"
            )
        if not self.refine_std > 0:
            raise ValueError(f"refine_std must be > 0, got {self.refine_std}")
        if not 0.0 <= self.goal_bias <= 1.0:
            raise ValueError(f"goal_bias must be in [0, 1], got {self.goal_bias}")


@dataclass(frozen=True)
class Path:
    """Collision-free polyline from a start point to a destination.

    Attributes
    ----------
    points : tuple[Point, ...]
        Waypoints, length >= 2. points[0] is the start, points[-1] the
        destination.
    """

    points: tuple[Point, ...]

    def __post_init__(self) -> None:
        points = tuple(Point(float(p[0]), float(p[1])) for p in self.points)
        if len(points) < 2:
            raise ValueError(f"Path needs at least 2 points, got {len(points)}")
        object.__setattr__(self, "points", points)

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def dest(self) -> Point:
        return self.points[-1]

    def length(self) -> float:
        """Total arc length."""
        return path_length(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def __getitem__(self, index):
        return self.points[index]


def path_length(points: Sequence[Point]) -> float:
    """Arc length of the polyline through `points`."""
    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    if pts.shape[0] < 2:
        return 0.0
    return float(np.sum(np.linalg.norm(np.diff(pts, axis=0), axis=1)))


# -----------------------------------------------------------------------------
# RRT
# -----------------------------------------------------------------------------


class _RRTTree:
    """Search tree stored as flat arrays of node positions and parent indices."""

    def __init__(self, root: Point, capacity: int):
        self.points = np.empty((capacity, 2), dtype=float)
        self.parents = np.full(capacity, -1, dtype=int)
        self.points[0] = root
        self.size = 1

    def add(self, point: Point, parent_idx: int) -> int:
        idx = self.size
        self.points[idx] = point
        self.parents[idx] = parent_idx
        self.size += 1
        return idx

    def point(self, idx: int) -> Point:
        x, y = self.points[idx]
        return Point(float(x), float(y))

    def nearest_index(self, query: Point) -> int:
        d2 = np.sum((self.points[: self.size] - np.asarray(query)) ** 2, axis=1)
        return int(np.argmin(d2))

    def trace_to_root(self, idx: int) -> list[Point]:
        chain = []
        while idx != -1:
            chain.append(self.point(idx))
            idx = int(self.parents[idx])
        return chain


def _steer(from_pt: Point, to_pt: Point, step_size: float) -> Point:
    """Move from `from_pt` toward `to_pt` by at most `step_size`."""
    dist = math.dist(from_pt, to_pt)
    if dist <= step_size:
        return Point(float(to_pt[0]), float(to_pt[1]))
    scale = step_size / dist
    return Point(
        from_pt[0] + (to_pt[0] - from_pt[0]) * scale,
        from_pt[1] + (to_pt[1] - from_pt[1]) * scale,
    )


def rrt(
    start: Point,
    dest: Point,
    scene: Scene,
    params: PlannerParams,
    rng: np.random.Generator,
) -> Optional[list[Point]]:
    """Grow an RRT from `start` until `dest` is reached.

    Parameters
    ----------
    start, dest : Point
        Endpoints of the query
    scene : Scene
        Scene providing bounds and obstacles
    params : PlannerParams
        Uses `iterations`, `step_size` and `goal_bias`
    rng : np.random.Generator
        Source of target samples

    Returns
    -------
    points : list[Point] or None
        Waypoints from start to dest, or None if the budget ran out
    """
    tree = _RRTTree(start, params.iterations + 2)

    for _ in range(params.iterations):
        if rng.random() < params.goal_bias:
            target = dest
        else:
            target = Point(
                float(rng.uniform(scene.xmin, scene.xmax)),
                float(rng.uniform(scene.ymin, scene.ymax)),
            )

        near_idx = tree.nearest_index(target)
        near = tree.point(near_idx)
        new = _steer(near, target, params.step_size)
        if not segment_is_free(near, new, scene):
            continue
        new_idx = tree.add(new, near_idx)

        if math.dist(new, dest) <= params.step_size and segment_is_free(new, dest, scene):
            if new != dest:
                new_idx = tree.add(dest, new_idx)
            return tree.trace_to_root(new_idx)[::-1]

    return None


# -----------------------------------------------------------------------------
# Post-processing
# -----------------------------------------------------------------------------


def simplify_path(points: Sequence[Point], scene: Scene) -> list[Point]:
    """Drop waypoints that can be skipped by a direct collision-free segment.

    Greedy: from each kept waypoint, jump to the furthest later waypoint that
    is directly visible. Consecutive waypoints of a valid path are always
    visible, so the result is still a valid path with the same endpoints.
    """
    points = list(points)
    n = len(points)
    simplified = [points[0]]
    i = 0
    while i < n - 1:
        j = n - 1
        while j > i + 1 and not segment_is_free(points[i], points[j], scene):
            j -= 1
        simplified.append(points[j])
        i = j
    return simplified


def refine_path(
    points: Sequence[Point],
    scene: Scene,
    iterations: int,
    std: float,
    rng: np.random.Generator,
    shortening: bool = True,
) -> list[Point]:
    """Stochastic local smoothing of interior waypoints.

    Interior waypoints are visited round robin. Each visit proposes the
    waypoint plus isotropic Gaussian noise and keeps the proposal only if
    both adjacent segments remain collision-free (and, with `shortening`,
    the two adjacent segments do not get longer). Endpoints never move.

    Parameters
    ----------
    points : sequence of Point
        Valid path waypoints
    scene : Scene
        Scene for collision checks
    iterations : int
        Number of proposals
    std : float
        Perturbation standard deviation per axis
    rng : np.random.Generator
        Source of perturbations
    shortening : bool
        Require proposals not to lengthen the path locally

    Returns
    -------
    refined : list[Point]
        New waypoint list; the input is not modified
    """
    refined = list(points)
    n_interior = len(refined) - 2
    if n_interior <= 0 or iterations == 0:
        return refined

    noise = rng.normal(0.0, std, size=(iterations, 2))

    for i in range(iterations):
        idx = 1 + (i % n_interior)
        prev_pt, pt, next_pt = refined[idx - 1], refined[idx], refined[idx + 1]
        adjusted = Point(pt[0] + float(noise[i, 0]), pt[1] + float(noise[i, 1]))

        if shortening:
            cur_dist = math.dist(prev_pt, pt) + math.dist(pt, next_pt)
            new_dist = math.dist(prev_pt, adjusted) + math.dist(adjusted, next_pt)
            if new_dist >= cur_dist:
                continue

        if segment_is_free(prev_pt, adjusted, scene) and segment_is_free(
            adjusted, next_pt, scene
        ):
            refined[idx] = adjusted

    return refined


def plan_path(
    start: Point,
    dest: Point,
    scene: Scene,
    params: PlannerParams,
    rng: Optional[np.random.Generator] = None,
) -> Optional[Path]:
    """Plan a collision-free path from `start` to `dest`.

    Parameters
    ----------
    start, dest : Point
        Query endpoints
    scene : Scene
        Scene to plan in
    params : PlannerParams
        Planner configuration
    rng : np.random.Generator, optional
        Random number generator (default: creates new one)

    Returns
    -------
    path : Path or None
        Planned path, or None if either endpoint is out of bounds or the
        search budget was exhausted

    Examples
    --------
    >>> from trajinfer.scene_config import SIMPLE_SCENE, Point
    >>> params = PlannerParams(300, 3.0, 2000, 1.0)
    >>> path = plan_path(Point(0.1, 0.1), Point(0.5, 0.5), SIMPLE_SCENE, params)
    """
    if rng is None:
        rng = np.random.default_rng()

    start = Point(float(start[0]), float(start[1]))
    dest = Point(float(dest[0]), float(dest[1]))
    if not (scene.contains(start) and scene.contains(dest)):
        return None

    points = rrt(start, dest, scene, params, rng)
    if points is None:
        return None

    if params.simplify:
        points = simplify_path(points, scene)

    points = refine_path(
        points,
        scene,
        params.refine_iterations,
        params.refine_std,
        rng,
        shortening=params.refine_shortening,
    )
    return Path(tuple(points))
