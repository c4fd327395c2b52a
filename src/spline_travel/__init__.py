"""Travel move post-processor that replaces straight travels with jerk-limited curves."""

from .chain import ProgramChain, parse_program
from .command import CommandKind, GCodeCommand
from .config import SplineTravelConfig, load_config
from .errors import ChainError, CurveFitError, DegenerateMoveError, SplineTravelError
from .models import MotionState, PrecisionSettings, ProcessingOptions, TravelMode, Vector3
from .move import GeometricMove
from .planner import TravelPlanner

__all__ = [
    "TravelPlanner",
    "ProcessingOptions",
    "PrecisionSettings",
    "TravelMode",
    "SplineTravelConfig",
    "load_config",
    "GeometricMove",
    "GCodeCommand",
    "CommandKind",
    "ProgramChain",
    "parse_program",
    "MotionState",
    "Vector3",
    "SplineTravelError",
    "CurveFitError",
    "DegenerateMoveError",
    "ChainError",
]
