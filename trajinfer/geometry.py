"""Segment/obstacle collision predicates.

All tests use 2-D orientation (cross-product) signs, vectorised over
obstacle edges with numpy.

Tie-breaks
----------
- A proper crossing (each segment strictly separates the other's endpoints)
  is an intersection.
- Collinear overlap of positive length is an intersection.
- Contact at a single point (shared endpoints, an endpoint resting on an
  edge, a segment grazing a vertex) is NOT an intersection of the two
  segments.

Edge tests alone miss a segment that slips into a polygon through a vertex
and leaves through another (or stops inside it). Obstacle-level predicates
therefore also split the segment at every contact with an edge and reject it
if any piece runs through the obstacle's interior.
"""

import numpy as np

from .scene_config import Obstacle, Point, Scene

# Orientation values within EPS of zero are treated as collinear
EPS = 1e-12
# Pieces shorter than this (as a fraction of the segment) are ignored
PARAM_EPS = 1e-9


def orientation(a: Point, b: Point, c: Point) -> float:
    """Signed area of triangle (a, b, c): > 0 counter-clockwise, < 0 clockwise."""
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def segment_crosses_edges(
    p0: Point, p1: Point, edges: np.ndarray, eps: float = EPS
) -> np.ndarray:
    """Test segment p0-p1 against every edge.

    Parameters
    ----------
    p0, p1 : Point
        Segment endpoints
    edges : np.ndarray, shape (M, 4)
        Edges as rows [x0, y0, x1, y1]
    eps : float
        Tolerance on orientation values

    Returns
    -------
    hits : np.ndarray, shape (M,), dtype bool
        True where the segment intersects the edge (see module tie-breaks)
    """
    edges = np.asarray(edges, dtype=float).reshape(-1, 4)
    px, py = float(p0[0]), float(p0[1])
    qx, qy = float(p1[0]), float(p1[1])
    rx, ry = qx - px, qy - py

    ax, ay = edges[:, 0], edges[:, 1]
    sx, sy = edges[:, 2] - ax, edges[:, 3] - ay

    # Sides of p0, p1 relative to each edge
    d1 = sx * (py - ay) - sy * (px - ax)
    d2 = sx * (qy - ay) - sy * (qx - ax)
    # Sides of each edge's endpoints relative to the segment
    d3 = rx * (ay - py) - ry * (ax - px)
    d4 = rx * (ay + sy - py) - ry * (ax + sx - px)

    straddle_edge = ((d1 > eps) & (d2 < -eps)) | ((d1 < -eps) & (d2 > eps))
    straddle_seg = ((d3 > eps) & (d4 < -eps)) | ((d3 < -eps) & (d4 > eps))
    proper = straddle_edge & straddle_seg

    # Collinear case: project the segment onto the edge and measure overlap
    collinear = (np.abs(d1) <= eps) & (np.abs(d2) <= eps)
    edge_len2 = sx * sx + sy * sy
    with np.errstate(divide="ignore", invalid="ignore"):
        t0 = ((px - ax) * sx + (py - ay) * sy) / edge_len2
        t1 = ((qx - ax) * sx + (qy - ay) * sy) / edge_len2
        lo = np.maximum(np.minimum(t0, t1), 0.0)
        hi = np.minimum(np.maximum(t0, t1), 1.0)
        overlap = (hi - lo) * np.sqrt(edge_len2) > eps
    overlap = collinear & (edge_len2 > 0.0) & overlap

    return proper | overlap


def segments_intersect(p0: Point, p1: Point, q0: Point, q1: Point) -> bool:
    """True if segment p0-p1 intersects segment q0-q1."""
    edge = np.array([[q0[0], q0[1], q1[0], q1[1]]], dtype=float)
    return bool(segment_crosses_edges(p0, p1, edge)[0])


def contact_params(
    p0: Point, p1: Point, edges: np.ndarray, eps: float = PARAM_EPS
) -> np.ndarray:
    """Positions t in [0, 1] where p0 + t (p1 - p0) touches a non-parallel edge.

    Includes touches at edge endpoints. Parallel edges are skipped; a
    collinear touch happens at a vertex that a neighbouring edge also meets.
    """
    edges = np.asarray(edges, dtype=float).reshape(-1, 4)
    px, py = float(p0[0]), float(p0[1])
    rx, ry = float(p1[0]) - px, float(p1[1]) - py

    ax, ay = edges[:, 0], edges[:, 1]
    sx, sy = edges[:, 2] - ax, edges[:, 3] - ay
    qx, qy = ax - px, ay - py

    denom = rx * sy - ry * sx
    scale = np.sqrt((rx * rx + ry * ry) * (sx * sx + sy * sy))
    nonparallel = np.abs(denom) > EPS * np.maximum(scale, EPS)
    with np.errstate(divide="ignore", invalid="ignore"):
        t = (qx * sy - qy * sx) / denom
        u = (qx * ry - qy * rx) / denom
    hit = nonparallel & (t >= -eps) & (t <= 1 + eps) & (u >= -eps) & (u <= 1 + eps)
    return np.clip(t[hit], 0.0, 1.0)


def _piece_midpoints(p0: Point, p1: Point, edges: np.ndarray) -> np.ndarray:
    """Midpoints of the pieces p0-p1 is cut into by its edge contacts, shape (K, 2)."""
    ts = np.unique(np.concatenate([[0.0, 1.0], contact_params(p0, p1, edges)]))
    lo, hi = ts[:-1], ts[1:]
    keep = (hi - lo) > PARAM_EPS
    mids = (lo[keep] + hi[keep]) / 2.0 if np.any(keep) else np.array([0.5])

    a = np.asarray(p0, dtype=float)
    b = np.asarray(p1, dtype=float)
    return a + mids[:, None] * (b - a)


def _bbox_overlaps(p0: Point, p1: Point, bbox: np.ndarray) -> bool:
    return not (
        max(p0[0], p1[0]) < bbox[0]
        or min(p0[0], p1[0]) > bbox[2]
        or max(p0[1], p1[1]) < bbox[1]
        or min(p0[1], p1[1]) > bbox[3]
    )


def segment_enters_interior(
    p0: Point, p1: Point, obstacles, edges: np.ndarray
) -> bool:
    """True if some piece of p0-p1 between edge contacts lies inside an obstacle.

    Parameters
    ----------
    p0, p1 : Point
        Segment endpoints
    obstacles : sequence of Obstacle
        Obstacles whose interiors are tested
    edges : np.ndarray, shape (M, 4)
        Edges of those obstacles, used to cut the segment into pieces

    Notes
    -----
    Assumes the segment makes no proper crossing or collinear overlap with
    `edges`, so every piece lies either strictly inside or strictly outside
    each obstacle and its midpoint decides which.
    """
    candidates = [ob for ob in obstacles if _bbox_overlaps(p0, p1, ob.bbox)]
    if not candidates:
        return False
    mids = _piece_midpoints(p0, p1, edges)
    return any(bool(np.any(ob.contains_points(mids))) for ob in candidates)


def segment_intersects_obstacle(p0: Point, p1: Point, obstacle: Obstacle) -> bool:
    """True iff the open segment p0-p1 crosses into `obstacle`.

    That is, it properly crosses or runs along an edge, or it passes through
    the interior after touching the boundary at a vertex (or lies inside).
    """
    edges = obstacle.edges()
    if np.any(segment_crosses_edges(p0, p1, edges)):
        return True
    return segment_enters_interior(p0, p1, (obstacle,), edges)


def segment_in_bounds(p0: Point, p1: Point, scene: Scene) -> bool:
    """True if both endpoints (hence the whole segment) lie within scene bounds."""
    return scene.contains(p0) and scene.contains(p1)


def segment_is_free(p0: Point, p1: Point, scene: Scene) -> bool:
    """True iff p0-p1 stays within bounds and does not enter any obstacle.

    Touching an obstacle's boundary at a point (ending on an edge, grazing a
    vertex) is allowed; crossing an edge, sliding along one, or passing
    through the interior is not.
    """
    if not segment_in_bounds(p0, p1, scene):
        return False
    edges = scene.edges
    if edges.shape[0] == 0:
        return True
    if np.any(segment_crosses_edges(p0, p1, edges)):
        return False
    return not segment_enters_interior(p0, p1, scene.obstacles, edges)
