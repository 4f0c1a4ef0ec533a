"""Scene configuration definitions for trajinfer.

This module defines the 2-D scenes used throughout trajinfer: points,
polygonal obstacles, and the axis-aligned bounds that contain them.

Note: Obstacles are assumed to be simple (non-self-intersecting) polygons.
This is not validated; a self-intersecting polygon is still treated as a
closed chain of edges by the collision test, and its interior follows the
even-odd rule of `matplotlib.path.Path`.
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import NamedTuple

import numpy as np
from matplotlib.path import Path as PolygonPath


class Point(NamedTuple):
    """Immutable 2-D point."""

    x: float
    y: float


@dataclass(frozen=True)
class Obstacle:
    """Closed polygonal obstacle.

    Attributes
    ----------
    vertices : tuple[Point, ...]
        Polygon boundary in order, length >= 3. The edge between the last
        and first vertex is implicit.
    """

    vertices: tuple[Point, ...]

    def __post_init__(self) -> None:
        vertices = tuple(Point(float(v[0]), float(v[1])) for v in self.vertices)
        if len(vertices) < 3:
            raise ValueError(
                f"Obstacle needs at least 3 vertices, got {len(vertices)}"
            )
        if not np.all(np.isfinite(np.asarray(vertices))):
            raise ValueError("Obstacle vertices must be finite")
        object.__setattr__(self, "vertices", vertices)

    def edges(self) -> np.ndarray:
        """Return polygon edges as an array of shape (N, 4): [x0, y0, x1, y1]."""
        pts = np.asarray(self.vertices, dtype=float)
        return np.hstack([pts, np.roll(pts, shift=-1, axis=0)])

    @cached_property
    def bbox(self) -> np.ndarray:
        """Axis-aligned bounding box [xmin, ymin, xmax, ymax]."""
        pts = np.asarray(self.vertices, dtype=float)
        return np.concatenate([pts.min(axis=0), pts.max(axis=0)])

    @cached_property
    def outline(self) -> PolygonPath:
        return PolygonPath(np.asarray(self.vertices, dtype=float), closed=False)

    def contains_points(self, points: np.ndarray) -> np.ndarray:
        """Interior test for an (N, 2) array of points.

        Only meaningful for points off the boundary; points on an edge may
        be reported either way.
        """
        points = np.asarray(points, dtype=float).reshape(-1, 2)
        return self.outline.contains_points(points)


@dataclass
class Scene:
    """Bounded 2-D scene with polygonal obstacles.

    A scene is built once (bounds plus a sequence of `add_obstacle` calls)
    and is then shared read-only by the planner and the agent model.

    Attributes
    ----------
    xmin, xmax, ymin, ymax : float
        Axis-aligned bounds, with xmin < xmax and ymin < ymax
    obstacles : tuple[Obstacle, ...]
        Obstacles in insertion order. Immutable; extend with `add_obstacle`.
    """

    xmin: float
    xmax: float
    ymin: float
    ymax: float
    obstacles: tuple[Obstacle, ...] = ()
    _edge_cache: tuple = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.obstacles = tuple(self.obstacles)
        validate_scene(self)
        self._edge_cache = (self.obstacles, _stack_edges(self.obstacles))

    def add_obstacle(self, obstacle: Obstacle) -> None:
        """Append an obstacle (setup only)."""
        if not isinstance(obstacle, Obstacle):
            obstacle = Obstacle(tuple(obstacle))
        self.obstacles = self.obstacles + (obstacle,)

    @property
    def edges(self) -> np.ndarray:
        """All obstacle edges, shape (M, 4), rebuilt whenever `obstacles` is replaced."""
        cached_for, edges = self._edge_cache
        if cached_for is not self.obstacles:
            obstacles = tuple(self.obstacles)
            validate_scene(self)
            edges = _stack_edges(obstacles)
            self.obstacles = obstacles
            self._edge_cache = (obstacles, edges)
        return edges

    def contains(self, point: Point) -> bool:
        """True if `point` lies within the closed scene bounds."""
        return (
            self.xmin <= point[0] <= self.xmax and self.ymin <= point[1] <= self.ymax
        )


def _stack_edges(obstacles: tuple[Obstacle, ...]) -> np.ndarray:
    if not obstacles:
        return np.zeros((0, 4))
    return np.vstack([ob.edges() for ob in obstacles])


def make_square(center: Point, size: float) -> Obstacle:
    """Axis-aligned square obstacle of side `size` centred at `center`."""
    cx, cy = center
    half = size / 2.0
    return Obstacle(
        (
            Point(cx - half, cy - half),
            Point(cx + half, cy - half),
            Point(cx + half, cy + half),
            Point(cx - half, cy + half),
        )
    )


def make_line(vertical: bool, start: Point, length: float, thickness: float) -> Obstacle:
    """Thin rectangular wall starting at `start` (its lower-left corner).

    Parameters
    ----------
    vertical : bool
        If True the wall extends `length` along +y, otherwise along +x
    start : Point
        Lower-left corner of the wall
    length : float
        Extent along the wall direction
    thickness : float
        Extent across the wall direction

    Returns
    -------
    obstacle : Obstacle
        Four-vertex rectangle
    """
    x, y = start
    if vertical:
        dx, dy = thickness, length
    else:
        dx, dy = length, thickness
    return Obstacle(
        (Point(x, y), Point(x + dx, y), Point(x + dx, y + dy), Point(x, y + dy))
    )


def validate_scene(scene: Scene) -> None:
    """Validate that a scene is well-formed.

    Parameters
    ----------
    scene : Scene
        Scene to validate

    Raises
    ------
    ValueError
        If bounds are non-finite or empty, or an obstacle is not an Obstacle
    """
    bounds = np.array([scene.xmin, scene.xmax, scene.ymin, scene.ymax], dtype=float)
    if not np.all(np.isfinite(bounds)):
        raise ValueError(f"Scene bounds must be finite, got {bounds.tolist()}")
    if not scene.xmin < scene.xmax:
        raise ValueError(f"xmin ({scene.xmin}) must be < xmax ({scene.xmax})")
    if not scene.ymin < scene.ymax:
        raise ValueError(f"ymin ({scene.ymin}) must be < ymax ({scene.ymax})")

    for k, ob in enumerate(scene.obstacles):
        if not isinstance(ob, Obstacle):
            raise ValueError(f"Obstacle {k} has type {type(ob).__name__}")


# Single square obstacle in the unit square
SIMPLE_SCENE = Scene(xmin=0.0, xmax=1.0, ymin=0.0, ymax=1.0)
SIMPLE_SCENE.add_obstacle(make_square(Point(0.30, 0.20), 0.1))


# Demo scene: three squares plus a walled room
# Layout (unit square):
#   - squares at (0.30, 0.20), (0.83, 0.80), (0.80, 0.40)
#   - room walls from y=0.40 to y=0.82 between x=0.20 and x=0.62,
#     with a doorway in the top wall between x=0.35 and x=0.45
WALL_THICKNESS = 0.02

DEMO_SCENE = Scene(xmin=0.0, xmax=1.0, ymin=0.0, ymax=1.0)
DEMO_SCENE.add_obstacle(make_square(Point(0.30, 0.20), 0.1))
DEMO_SCENE.add_obstacle(make_square(Point(0.83, 0.80), 0.1))
DEMO_SCENE.add_obstacle(make_square(Point(0.80, 0.40), 0.1))
DEMO_SCENE.add_obstacle(make_line(False, Point(0.20, 0.40), 0.40, WALL_THICKNESS))
DEMO_SCENE.add_obstacle(make_line(True, Point(0.60, 0.40), 0.40, WALL_THICKNESS))
DEMO_SCENE.add_obstacle(
    make_line(False, Point(0.60 - 0.15, 0.80), 0.15 + WALL_THICKNESS, WALL_THICKNESS)
)
DEMO_SCENE.add_obstacle(make_line(False, Point(0.20, 0.80), 0.15, WALL_THICKNESS))
DEMO_SCENE.add_obstacle(make_line(True, Point(0.20, 0.40), 0.40, WALL_THICKNESS))


# Validate the demo scenes on import
validate_scene(SIMPLE_SCENE)
validate_scene(DEMO_SCENE)
