"""Helper functions for creating matplotlib plots in examples."""

import os
from typing import List, Optional

from spline_travel.move import GeometricMove
from spline_travel.visualize import plot_move_train


def save_move_train_plot(
    moves: List[GeometricMove],
    filename: str,
    title: Optional[str] = None,
    speed_limit: Optional[float] = None,
) -> None:
    """Save a move train plot to file.

    Args:
        moves: Generated travel moves
        filename: Output filename (e.g., "my_plot.png")
        title: Optional custom title
        speed_limit: Optional speed ceiling to draw (mm/s)
    """
    if not filename.endswith((".png", ".jpg", ".pdf")):
        filename += ".png"

    plot_move_train(
        moves,
        title=title,
        speed_limit=speed_limit,
        show=False,
        save_path=filename,
    )
    print(f"  Plot saved: {filename}")


def generate_example_plot(
    name: str,
    moves: List[GeometricMove],
    speed_limit: Optional[float] = None,
    output_dir: Optional[str] = None,
) -> None:
    """Generate and save a plot with automatic naming.

    Args:
        name: Base name for the plot (e.g., "basic_usage")
        moves: Generated travel moves
        speed_limit: Optional speed ceiling to draw (mm/s)
        output_dir: Optional output directory (defaults to caller's directory)
    """
    if output_dir is None:
        import inspect

        caller_frame = inspect.stack()[1]
        caller_file = caller_frame.filename
        output_dir = os.path.dirname(os.path.abspath(caller_file))

    filename = os.path.join(output_dir, f"{name}_plot.png")
    title = f"{name.replace('_', ' ').title()}: {len(moves)} moves"

    save_move_train_plot(moves, filename=filename, title=title, speed_limit=speed_limit)
