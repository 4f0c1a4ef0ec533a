"""Constant-speed motion replay along a planned path."""

from typing import Sequence

import numpy as np

from .scene_config import Point


def walk_path(
    path: Sequence[Point], speed: float, dt: float, num_ticks: int
) -> list[Point]:
    """Sample an agent's position at regular ticks along a path.

    The agent leaves `path[0]` at tick 0 and moves at constant `speed` along
    the polyline. At tick i it has travelled `speed * dt * i`; the position is
    linearly interpolated within the segment containing that arc length.
    Once the travelled distance reaches the path length the agent stays at
    the final point.

    Parameters
    ----------
    path : sequence of Point
        Waypoints (a `Path` or any sequence of >= 1 points)
    speed : float
        Distance per unit time. Non-positive speeds keep the agent at the
        first point.
    dt : float
        Time between ticks
    num_ticks : int
        Number of positions to return, >= 0

    Returns
    -------
    locations : list[Point]
        Exactly `num_ticks` positions
    """
    if num_ticks < 0:
        raise ValueError(f"num_ticks must be >= 0, got {num_ticks}")

    points = list(path)
    if not points:
        raise ValueError("path must contain at least one point")
    pts = np.asarray(points, dtype=float).reshape(-1, 2)

    seg_lengths = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    cum_lengths = np.concatenate([[0.0], np.cumsum(seg_lengths)])
    total = cum_lengths[-1]

    locations = []
    for i in range(num_ticks):
        distance = speed * dt * i
        if distance >= total:
            locations.append(Point(float(pts[-1, 0]), float(pts[-1, 1])))
            continue
        if distance <= 0.0:
            locations.append(Point(float(pts[0, 0]), float(pts[0, 1])))
            continue

        # cum_lengths[k] <= distance < cum_lengths[k + 1], so segment k is non-empty
        k = int(np.searchsorted(cum_lengths, distance, side="right")) - 1
        frac = (distance - cum_lengths[k]) / seg_lengths[k]
        x, y = pts[k] + frac * (pts[k + 1] - pts[k])
        locations.append(Point(float(x), float(y)))

    return locations
