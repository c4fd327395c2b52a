"""Machine motion state snapshot."""

from dataclasses import dataclass, replace

from spline_travel.models.vector import Vector3

SECONDS_PER_MINUTE = 60.0


@dataclass(frozen=True)
class MotionState:
    """State of the machine at one point of the command stream.

    Instances are immutable; use ``replace()`` to derive a modified copy, so
    two commands never share a mutable state.

    Attributes:
        position: Nozzle position in millimeters
        filament_position: Extruder axis position in millimeters
        feed_rate: Current feed rate in millimeters per second
        position_relative: True after G91 (relative XYZ)
        extrusion_relative: True after M83 (relative E)
    """

    position: Vector3 = Vector3()
    filament_position: float = 0.0
    feed_rate: float = 0.0
    position_relative: bool = False
    extrusion_relative: bool = False

    def replace(self, **changes) -> "MotionState":
        """Return a copy with the given fields changed."""
        return replace(self, **changes)


def initial_state() -> MotionState:
    """State assumed before the first line of a program.

    Absolute positioning with relative extrusion, the common slicer default.
    """
    return MotionState(position_relative=False, extrusion_relative=True)
