"""
Test suite for constant-speed path replay.
"""

import numpy as np
import pytest

from trajinfer.motion import walk_path
from trajinfer.path_planner import Path
from trajinfer.scene_config import Point


def test_returns_exactly_num_ticks():
    """One location per tick, starting at the first point."""
    locs = walk_path([Point(0, 0), Point(1, 0)], speed=1.0, dt=0.1, num_ticks=7)
    assert len(locs) == 7
    assert locs[0] == Point(0.0, 0.0)


def test_zero_ticks():
    """Zero ticks yields an empty list."""
    assert walk_path([Point(0, 0), Point(1, 0)], 1.0, 0.1, 0) == []


def test_negative_ticks_rejected():
    """Negative tick counts are an error."""
    with pytest.raises(ValueError, match="num_ticks"):
        walk_path([Point(0, 0), Point(1, 0)], 1.0, 0.1, -1)


def test_empty_path_rejected():
    """A path needs at least one point."""
    with pytest.raises(ValueError, match="at least one point"):
        walk_path([], 1.0, 0.1, 3)


def test_straight_line_interpolation():
    """On a single segment positions advance by speed * dt each tick."""
    locs = walk_path([Point(0, 0), Point(1, 0)], speed=2.0, dt=0.1, num_ticks=5)
    xs = [p.x for p in locs]
    np.testing.assert_allclose(xs, [0.0, 0.2, 0.4, 0.6, 0.8], atol=1e-12)
    assert all(p.y == 0.0 for p in locs)


def test_clamps_to_exact_final_point():
    """Past the end of the path the agent sits exactly on the destination."""
    dest = Point(0.3, 0.7)
    locs = walk_path([Point(0.1, 0.1), dest], speed=10.0, dt=0.1, num_ticks=5)
    assert locs[-1] == dest, f"Final location {locs[-1]} != {dest}"
    assert locs[2] == dest


def test_corner_interpolation():
    """Arc length carries over from one segment into the next."""
    path = Path((Point(0, 0), Point(1, 0), Point(1, 1)))
    locs = walk_path(path, speed=1.5, dt=1.0, num_ticks=2)
    np.testing.assert_allclose(locs[1], (1.0, 0.5), atol=1e-12)


def test_monotone_arc_length():
    """Travelled arc length never decreases along the replay."""
    points = [Point(0, 0), Point(0.5, 0.0), Point(0.5, 0.5), Point(0.0, 0.5)]
    locs = walk_path(points, speed=0.3, dt=0.25, num_ticks=25)

    seg = np.asarray(points)
    cum = np.concatenate([[0.0], np.cumsum(np.linalg.norm(np.diff(seg, axis=0), axis=1))])

    def arc_length(p):
        # Project onto the closest segment and add its offset
        best = None
        for k in range(len(points) - 1):
            a, b = seg[k], seg[k + 1]
            t = np.clip(np.dot(p - a, b - a) / np.dot(b - a, b - a), 0.0, 1.0)
            d = np.linalg.norm(a + t * (b - a) - p)
            if best is None or d < best[0] - 1e-12:
                best = (d, cum[k] + t * np.linalg.norm(b - a))
        return best[1]

    arcs = [arc_length(np.asarray(p)) for p in locs]
    assert np.all(np.diff(arcs) >= -1e-9), f"Arc length decreased: {arcs}"
    assert np.isclose(arcs[-1], cum[-1])


def test_zero_speed_stays_at_start():
    """With zero speed the agent never leaves the start."""
    locs = walk_path([Point(0.2, 0.2), Point(0.8, 0.8)], speed=0.0, dt=0.1, num_ticks=4)
    assert locs == [Point(0.2, 0.2)] * 4


def test_zero_length_segments():
    """Repeated waypoints do not break interpolation."""
    points = [Point(0, 0), Point(0, 0), Point(1, 0), Point(1, 0), Point(1, 1)]
    locs = walk_path(points, speed=0.5, dt=1.0, num_ticks=6)
    expected = [(0, 0), (0.5, 0), (1, 0), (1, 0.5), (1, 1), (1, 1)]
    np.testing.assert_allclose(np.asarray(locs), expected, atol=1e-12)


def test_single_point_path():
    """A one-point path keeps the agent at that point."""
    locs = walk_path([Point(0.4, 0.6)], speed=1.0, dt=0.1, num_ticks=3)
    assert locs == [Point(0.4, 0.6)] * 3
