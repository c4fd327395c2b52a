"""Exceptions raised by the travel planner."""

from typing import Optional


class SplineTravelError(Exception):
    """Base class for failures while rewriting a program.

    Attributes:
        group_index: Index of the move group being processed, if known
        line_number: Zero-based line of the first command in that group, if known
    """

    def __init__(
        self,
        message: str,
        group_index: Optional[int] = None,
        line_number: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.group_index = group_index
        self.line_number = line_number

    def __str__(self) -> str:
        context = []
        if self.group_index is not None:
            context.append(f"group {self.group_index}")
        if self.line_number is not None:
            context.append(f"line {self.line_number + 1}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class CurveFitError(SplineTravelError):
    """Boundary speeds or jerk settings do not allow a smooth curve."""


class DegenerateMoveError(SplineTravelError):
    """A move with zero duration has no defined speed."""


class ChainError(SplineTravelError, LookupError):
    """Lookup of a command or position outside a program chain."""
