"""Visualization utilities for synthesized travel moves.

This module provides functions to visualize the path, speed and retraction of
a move train, and the curve it was generated from.
"""

from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np

from spline_travel.bezier import BezierCurve
from spline_travel.move import GeometricMove


def _calculate_cumulative_time(moves: List[GeometricMove]) -> np.ndarray:
    """Calculate the start time of each move.

    Args:
        moves: List of moves

    Returns:
        Array of cumulative times at the start of each move
    """
    durations = np.array([move.duration for move in moves])
    return np.concatenate(([0.0], np.cumsum(durations)[:-1]))


def _path_points(moves: List[GeometricMove]) -> np.ndarray:
    points = [moves[0].start.as_tuple()] + [move.end.as_tuple() for move in moves]
    return np.array(points)


def plot_move_train(
    moves: List[GeometricMove],
    title: Optional[str] = None,
    speed_limit: Optional[float] = None,
    show: bool = True,
    save_path: Optional[str] = None,
) -> plt.Figure:
    """Plot the path, speed and retraction of a move train.

    Creates a multi-panel visualization showing:
    - XY path with one marker per move boundary
    - Nozzle speed over time with an optional speed limit line
    - Cumulative retraction over time

    Args:
        moves: Moves in execution order
        title: Optional custom title (default: auto-generated)
        speed_limit: Optional speed ceiling (mm/s) to draw
        show: Whether to display the plot (default: True)
        save_path: Optional path to save the figure

    Returns:
        matplotlib Figure object

    Example:
        >>> curve, move_time = generator.fit_curve()
        >>> moves = generator.generate_move_train(curve, move_time)
        >>> plot_move_train(moves, speed_limit=200.0)
    """
    if not moves:
        raise ValueError("Cannot plot empty move train")

    times = _calculate_cumulative_time(moves)
    points = _path_points(moves)
    speeds = np.array([move.speed for move in moves])
    retraction = -np.cumsum([move.filament_delta for move in moves])
    end_times = times + np.array([move.duration for move in moves])

    fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(10, 12))

    if title is None:
        total_time = float(end_times[-1])
        title = f"Travel Move Train\n{len(moves)} moves, {total_time * 1000:.1f} ms"
    fig.suptitle(title, fontsize=14, fontweight="bold")

    # Plot 1: Path
    ax1.plot(points[:, 0], points[:, 1], marker=".", linewidth=1.5, label="Path")
    ax1.plot(points[0, 0], points[0, 1], "go", label="Start")
    ax1.plot(points[-1, 0], points[-1, 1], "rs", label="End")
    ax1.set_xlabel("X (mm)")
    ax1.set_ylabel("Y (mm)")
    ax1.set_title("Nozzle Path")
    ax1.set_aspect("equal", adjustable="datalim")
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    # Plot 2: Speed
    ax2.step(times, speeds, where="post", linewidth=2, label="Speed")
    if speed_limit is not None:
        ax2.axhline(
            speed_limit,
            color="red",
            linestyle="--",
            linewidth=2,
            label=f"Speed Limit ({speed_limit:.0f} mm/s)",
        )
    ax2.set_ylabel("Speed (mm/s)")
    ax2.set_title("Nozzle Speed")
    ax2.legend()
    ax2.grid(True, alpha=0.3)

    # Plot 3: Retraction
    ax3.plot(
        np.concatenate(([0.0], end_times)),
        np.concatenate(([0.0], retraction)),
        color="purple",
        linewidth=2,
        label="Retraction",
    )
    ax3.set_ylabel("Retraction (mm)")
    ax3.set_xlabel("Time (seconds)")
    ax3.set_title("Filament Retraction")
    ax3.legend()
    ax3.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    if show:
        plt.show()

    return fig


def plot_curve(
    curve: BezierCurve,
    moves: Optional[List[GeometricMove]] = None,
    samples: int = 100,
    title: str = "Travel Curve",
    show: bool = True,
    save_path: Optional[str] = None,
) -> plt.Figure:
    """Plot a curve in XY with its control polygon (single panel).

    Args:
        curve: Curve to draw
        moves: Optional move train to overlay
        samples: Number of points sampled along the curve
        title: Plot title
        show: Whether to display the plot
        save_path: Optional path to save the figure

    Returns:
        matplotlib Figure object
    """
    if samples < 2:
        raise ValueError(f"samples must be >= 2, got {samples}")

    ts = np.linspace(0.0, 1.0, samples)
    sampled = np.array([curve.value(float(t)).as_tuple() for t in ts])
    poles = np.array([pole.as_tuple() for pole in curve.poles])

    fig, ax = plt.subplots(figsize=(8, 8))
    ax.plot(sampled[:, 0], sampled[:, 1], linewidth=2, label="Curve")
    ax.plot(poles[:, 0], poles[:, 1], "o--", color="gray", alpha=0.7, label="Control Polygon")
    if moves:
        points = _path_points(moves)
        ax.plot(points[:, 0], points[:, 1], "x", color="orange", label="Move Boundaries")
    ax.set_xlabel("X (mm)")
    ax.set_ylabel("Y (mm)")
    ax.set_title(title)
    ax.set_aspect("equal", adjustable="datalim")
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    if show:
        plt.show()

    return fig
