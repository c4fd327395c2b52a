"""Straight-line motion primitive and its G-code rendering."""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from spline_travel.errors import DegenerateMoveError
from spline_travel.models.precision import (
    EPSILON,
    PrecisionSettings,
    format_number,
    round_to,
)
from spline_travel.models.state import SECONDS_PER_MINUTE, MotionState
from spline_travel.models.vector import Vector3

MILLISECONDS_PER_SECOND = 1000.0


@dataclass(frozen=True)
class GeometricMove:
    """Constant-speed straight move with a filament change.

    Note:
        A move with no travel and no filament change is a pause and renders
        as a G4 dwell.

    Attributes:
        start: Start position in millimeters
        end: End position in millimeters
        duration: Move time in seconds
        filament_delta: Filament change in millimeters, positive extrudes and
            negative retracts
    """

    start: Vector3
    end: Vector3
    duration: float
    filament_delta: float = 0.0

    @classmethod
    def from_speed(
        cls, start: Vector3, end: Vector3, speed: float, filament_delta: float = 0.0
    ) -> "GeometricMove":
        """Create a move that covers start→end at the given speed (mm/s)."""
        travel = start.distance_to(end)
        if travel <= EPSILON:
            raise DegenerateMoveError("Cannot set speed of a zero-distance move")
        return cls(start=start, end=end, duration=travel / speed, filament_delta=filament_delta)

    def with_speed(self, speed: float) -> "GeometricMove":
        """Return a copy whose duration gives the requested speed."""
        if self.travel_distance <= EPSILON:
            raise DegenerateMoveError("Cannot set speed of a zero-distance move")
        return replace(self, duration=self.travel_distance / speed)

    @property
    def travel_distance(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def speed(self) -> float:
        """Nozzle speed in mm/s."""
        if self.duration <= EPSILON:
            raise DegenerateMoveError("Zero time move has no speed")
        return self.travel_distance / self.duration

    @property
    def feed_rate(self) -> float:
        """Feed rate in mm/s: nozzle speed, or filament speed for pure filament moves."""
        if self.duration <= EPSILON:
            raise DegenerateMoveError("Zero time move has no feed rate")
        if self.travel_distance > EPSILON:
            return self.travel_distance / self.duration
        return abs(self.filament_delta) / self.duration

    @property
    def filament_speed(self) -> float:
        if self.duration <= EPSILON:
            raise DegenerateMoveError("Zero time move has no filament speed")
        return abs(self.filament_delta) / self.duration

    @property
    def is_pause(self) -> bool:
        return self.travel_distance < EPSILON and abs(self.filament_delta) < EPSILON

    def is_below_resolution(
        self,
        state: MotionState,
        precision: PrecisionSettings,
        filament_error: float = 0.0,
    ) -> bool:
        """Whether rendering from ``state`` would write no axis and no E word."""
        offset = self.end - state.position
        if any(abs(delta) > precision.position_confusion for delta in offset.as_tuple()):
            return False
        amount = self.filament_delta
        if state.extrusion_relative:
            amount = round_to(amount + filament_error, precision.extrusion_decimals)
        return abs(amount) <= precision.extrusion_confusion

    def joined_with(self, following: "GeometricMove") -> "GeometricMove":
        """Single move from this start to the end of ``following``, taking both times."""
        return GeometricMove(
            start=self.start,
            end=following.end,
            duration=self.duration + following.duration,
            filament_delta=self.filament_delta + following.filament_delta,
        )

    def render(
        self,
        state: MotionState,
        precision: PrecisionSettings,
        filament_error: float = 0.0,
    ) -> Tuple[str, float]:
        """Render the move as a G1 (or G4 for pauses) line.

        Only axes that differ from ``state`` by more than the position
        confusion are written. F is written when the feed rate changes. In
        relative extrusion mode the rounding error of E is returned so the
        caller can pass it into the next move, keeping the total filament
        written equal to the total requested.

        Args:
            state: Machine state the line will execute from
            precision: Decimal places policy
            filament_error: Rounding error carried from the previous line

        Returns:
            Tuple of (G-code line, rounding error to carry forward)

        Raises:
            DegenerateMoveError: If the move has zero duration
        """
        if self.duration < EPSILON:
            raise DegenerateMoveError("Invalid move: zero time")
        if self.is_pause:
            milliseconds = round_to(self.duration * MILLISECONDS_PER_SECOND, 0)
            return f"G4 P{format_number(milliseconds, 0)}", filament_error

        offset = self.end - state.position
        written = offset if state.position_relative else self.end

        words = []
        for letter, delta, value in (
            ("X", offset.x, written.x),
            ("Y", offset.y, written.y),
            ("Z", offset.z, written.z),
        ):
            if abs(delta) > precision.position_confusion:
                words.append(letter + format_number(value, precision.position_decimals))

        feed_rate = self.feed_rate
        if abs(feed_rate - state.feed_rate) > precision.speed_confusion:
            words.append(
                "F" + format_number(feed_rate * SECONDS_PER_MINUTE, precision.speed_decimals)
            )

        decimals = precision.extrusion_decimals
        if state.extrusion_relative:
            requested = self.filament_delta + filament_error
            amount = round_to(requested, decimals)
            filament_error = requested - amount
            if abs(amount) > precision.extrusion_confusion:
                words.append("E" + format_number(amount, decimals))
        elif abs(self.filament_delta) > precision.extrusion_confusion:
            amount = round_to(state.filament_position + self.filament_delta, decimals)
            words.append("E" + format_number(amount, decimals))

        if not words:
            return "G1", filament_error
        return "G1 " + " ".join(words), filament_error

    def split(self, time_point: float) -> Optional[Tuple["GeometricMove", "GeometricMove"]]:
        """Split the move at a time offset.

        Args:
            time_point: Seconds from the start of the move

        Returns:
            (first part, second part) with position, duration and filament
            divided proportionally, or None if time_point is not strictly
            inside the move
        """
        if time_point <= EPSILON or time_point >= self.duration - EPSILON:
            return None
        fraction = time_point / self.duration
        rest = 1.0 - fraction
        middle = self.start + (self.end - self.start) * fraction
        first = GeometricMove(
            start=self.start,
            end=middle,
            duration=fraction * self.duration,
            filament_delta=fraction * self.filament_delta,
        )
        second = GeometricMove(
            start=middle,
            end=self.end,
            duration=rest * self.duration,
            filament_delta=rest * self.filament_delta,
        )
        return first, second
