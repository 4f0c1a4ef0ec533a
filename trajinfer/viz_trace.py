"""Static figures of scenes, planned paths and measurements."""

from pathlib import Path
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Polygon

from .scene_config import Scene
from .trace_export import TraceExport


def draw_scene(ax, scene: Scene) -> None:
    """Draw obstacles and set axis limits to the scene bounds."""
    for obstacle in scene.obstacles:
        ax.add_patch(
            Polygon(
                np.asarray(obstacle.vertices),
                closed=True,
                facecolor="lightgray",
                edgecolor="black",
                linewidth=1,
            )
        )
    ax.set_xlim(scene.xmin, scene.xmax)
    ax.set_ylim(scene.ymin, scene.ymax)
    ax.set_aspect("equal")
    ax.set_xlabel("x")
    ax.set_ylabel("y")


def draw_trace(
    ax,
    export: TraceExport,
    color: str = "tab:blue",
    alpha: float = 1.0,
    show_measurements: bool = True,
) -> None:
    """Draw one exported trace: path, start, destination, measurements."""
    if export.path:
        path = np.asarray(export.path)
        ax.plot(path[:, 0], path[:, 1], color=color, alpha=alpha, linewidth=2)

    ax.scatter(*export.start, c="green", marker="o", s=60, edgecolors="black", zorder=5)
    ax.scatter(*export.dest, c="red", marker="*", s=120, alpha=alpha, zorder=5)

    if show_measurements and export.measurements:
        meas = np.asarray(export.measurements)
        ax.scatter(meas[:, 0], meas[:, 1], c="black", marker="x", s=20, zorder=6)


def plot_trace(
    export: TraceExport,
    output_path: Path,
    title: Optional[str] = None,
) -> None:
    """Plot a single trace over its scene and save to `output_path`.

    Parameters
    ----------
    export : TraceExport
        Exported trace
    output_path : Path
        Output file path
    title : str, optional
        Figure title
    """
    fig, ax = plt.subplots(figsize=(6, 6))
    draw_scene(ax, export.scene)
    draw_trace(ax, export)
    if export.path == ():
        ax.text(0.02, 0.02, "planning failed", transform=ax.transAxes, color="red")

    if title:
        ax.set_title(title)
    ax.grid(True, alpha=0.2)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)


def plot_posterior_paths(
    exports: Sequence[TraceExport],
    output_path: Path,
    title: Optional[str] = "Posterior samples",
) -> None:
    """Overlay many posterior traces on one scene and save to `output_path`.

    The scene is taken from the first export; measurements are drawn once,
    also from the first export (posterior traces share observed values).
    """
    if len(exports) == 0:
        raise ValueError("Need at least one trace to plot")

    fig, ax = plt.subplots(figsize=(6, 6))
    draw_scene(ax, exports[0].scene)

    alpha = max(0.05, min(1.0, 5.0 / len(exports)))
    for k, export in enumerate(exports):
        draw_trace(ax, export, color="tab:blue", alpha=alpha, show_measurements=(k == 0))

    if title:
        ax.set_title(f"{title} (n={len(exports)})")
    ax.grid(True, alpha=0.2)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
