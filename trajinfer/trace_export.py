"""Trace export for external consumers (e.g. a visualization service).

`TraceExport` is the only data shape consumers may depend on. It carries
plain Points and the scene, never the model's internal address scheme.
"""

from typing import NamedTuple

from .choice_map import MEAS
from .scene_config import Point, Scene
from .tracing import Trace


class TraceExport(NamedTuple):
    """Consumer-facing view of one agent-model trace.

    Attributes
    ----------
    scene : Scene
        Scene the trace was generated in
    path : tuple[Point, ...]
        Planned path, empty if planning failed
    start : Point
        Start position
    dest : Point
        Destination
    measurements : tuple[Point, ...]
        Noisy measurements in tick order
    """

    scene: Scene
    path: tuple
    start: Point
    dest: Point
    measurements: tuple


def export_trace(trace: Trace) -> TraceExport:
    """Build the export view of an agent-model trace."""
    scene = trace.args[0]
    result = trace.retval

    path = () if result.planning_failed or result.path is None else result.path.points
    measurements = tuple(
        Point(trace[(MEAS, i, "x")], trace[(MEAS, i, "y")])
        for i in trace.choices.measurement_ticks()
    )

    return TraceExport(
        scene=scene,
        path=tuple(path),
        start=Point(trace["start_x"], trace["start_y"]),
        dest=Point(trace["dest_x"], trace["dest_y"]),
        measurements=measurements,
    )
