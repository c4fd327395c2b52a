"""Value types shared by the travel planner.

This package contains vectors, machine state, precision policy and options.
"""

from spline_travel.models.options import ProcessingOptions, TravelMode
from spline_travel.models.precision import (
    EPSILON,
    REL_CONFUSION,
    PrecisionSettings,
    format_number,
    round_to,
)
from spline_travel.models.state import SECONDS_PER_MINUTE, MotionState, initial_state
from spline_travel.models.vector import Vector3

__all__ = [
    "Vector3",
    "MotionState",
    "initial_state",
    "SECONDS_PER_MINUTE",
    "PrecisionSettings",
    "format_number",
    "round_to",
    "EPSILON",
    "REL_CONFUSION",
    "ProcessingOptions",
    "TravelMode",
]
