"""Smooth travel synthesis: fit a curve, then walk it into straight moves."""

import math
from typing import List, Optional, Tuple

from spline_travel.bezier import BezierCurve
from spline_travel.errors import CurveFitError
from spline_travel.models.options import ProcessingOptions
from spline_travel.models.precision import EPSILON, REL_CONFUSION
from spline_travel.models.vector import Vector3
from spline_travel.move import GeometricMove
from spline_travel.retract import RetractProfile

# Rounds of the exponential search for the shortest feasible move time
FIT_ITERATIONS = 30

# Initial log-step of that search
FIT_LOG_FACTOR = 0.25

# First trial time is the stopping time at full acceleration divided by this
INITIAL_TIME_DIVISOR = 10.0


class TravelGenerator:
    """Replace a straight travel with a jerk-limited curve and retraction.

    The curve leaves ``start`` with ``entry_velocity`` and arrives at ``end``
    with ``exit_velocity``, so the nozzle never stops between the two build
    moves. Filament retraction runs over the same time span.

    Args:
        start: End of the preceding build move
        end: Start of the following build move
        entry_velocity: Velocity (mm/s) of the preceding build move
        exit_velocity: Velocity (mm/s) of the following build move
        options: Acceleration, jerk, speed and retraction settings
        retract: Retract at the start of the travel
        unretract: Unretract at the end of the travel

    Example:
        >>> generator = TravelGenerator(
        ...     Vector3(0, 0, 0.2), Vector3(20, 10, 0.2),
        ...     Vector3(50, 0, 0), Vector3(0, 50, 0),
        ... )
        >>> curve, move_time = generator.fit_curve()
        >>> moves = generator.generate_move_train(curve, move_time)
    """

    def __init__(
        self,
        start: Vector3,
        end: Vector3,
        entry_velocity: Vector3,
        exit_velocity: Vector3,
        options: Optional[ProcessingOptions] = None,
        retract: bool = True,
        unretract: bool = True,
    ) -> None:
        self.start = start
        self.end = end
        self.entry_velocity = entry_velocity
        self.exit_velocity = exit_velocity
        self.options = options if options is not None else ProcessingOptions()
        self.retract = retract
        self.unretract = unretract

    def __repr__(self) -> str:
        return (
            f"TravelGenerator(start={self.start}, end={self.end}, "
            f"retract={self.retract}, unretract={self.unretract})"
        )

    def _place_inner_poles(
        self, curve: BezierCurve, move_time: float, entry: Vector3, leave: Vector3
    ) -> None:
        # B'(0) = 3(P1 - P0) must equal entry velocity × move time
        curve[1] = self.start + entry * (move_time / 3.0)
        curve[2] = self.end - leave * (move_time / 3.0)

    def fit_curve(self) -> Tuple[BezierCurve, float]:
        """Fit the curve with the shortest move time that respects acceleration.

        Control points 0 and 3 are the travel endpoints; points 1 and 2 lie
        along the boundary velocities, with ``z_jerk`` added upward at entry
        and removed at exit. The move time is found by exponential search:
        a time whose endpoint accelerations stay within the ceiling is
        recorded and shortened, otherwise the time is lengthened.

        Returns:
            Tuple of (curve placed for the best time, best time in seconds)

        Raises:
            CurveFitError: If both boundary speeds are below curve_jerk
        """
        options = self.options
        speed = max(self.entry_velocity.length, self.exit_velocity.length)
        if speed < options.curve_jerk or speed <= EPSILON:
            raise CurveFitError(
                f"Too slow to fit a smooth curve: boundary speed {speed:.4g} mm/s "
                f"is below curve jerk {options.curve_jerk:.4g} mm/s"
            )

        hop = Vector3(0.0, 0.0, options.z_jerk)
        entry = self.entry_velocity + hop
        leave = self.exit_velocity - hop

        acceleration = options.acceleration
        stop_distance = acceleration * (speed / acceleration) ** 2 / 2.0
        move_time = stop_distance / speed / INITIAL_TIME_DIVISOR
        log_factor = FIT_LOG_FACTOR
        best_time = move_time

        curve = BezierCurve([self.start, self.start, self.end, self.end])
        for _ in range(FIT_ITERATIONS):
            self._place_inner_poles(curve, move_time, entry, leave)
            scale = 1.0 / (move_time * move_time)
            peak = max(
                (curve.second_derivative(0.0) * scale).length,
                (curve.second_derivative(1.0) * scale).length,
            )
            if peak <= acceleration:
                best_time = move_time
                move_time *= math.exp(-log_factor)
                log_factor /= 2.0
            else:
                move_time *= math.exp(log_factor)

        self._place_inner_poles(curve, best_time, entry, leave)
        return curve, best_time

    def generate_move_train(self, curve: BezierCurve, move_time: float) -> List[GeometricMove]:
        """Walk the curve and the retraction profile into straight moves.

        Both the curve and the profile may shorten each step; the shorter
        step wins. Jerk bounds are scaled by ``move_time`` because the
        derivatives are taken with respect to the normalized parameter.
        Steps faster than ``speed_limit`` are slowed down.

        Args:
            curve: Curve returned by fit_curve
            move_time: Duration in seconds returned by fit_curve

        Returns:
            Moves covering the whole curve in order

        Raises:
            CurveFitError: If curve_jerk is not positive
        """
        options = self.options
        if options.curve_jerk <= EPSILON:
            raise CurveFitError("Curve jerk must be positive to step along a curve")

        profile = RetractProfile(
            length=options.retract_length,
            acceleration=options.filament_acceleration,
            move_time=move_time,
            retract=self.retract,
            unretract=self.unretract,
            jerk=options.filament_jerk * move_time,
        )
        curve.jerk = options.curve_jerk * move_time

        moves: List[GeometricMove] = []
        prev_t = 0.0
        prev_position = curve.value(0.0)
        while True:
            _, cur_t = curve.shrink_interval(prev_t, 1.0)
            _, cur_t = profile.shrink_interval(prev_t, cur_t)

            position = curve.value(cur_t)
            move = GeometricMove(
                start=prev_position,
                end=position,
                duration=move_time * (cur_t - prev_t),
                filament_delta=-(profile.value(cur_t) - profile.value(prev_t)),
            )
            if move.travel_distance > EPSILON and move.speed > options.speed_limit:
                move = move.with_speed(options.speed_limit)
            moves.append(move)

            prev_t = cur_t
            prev_position = position
            if cur_t >= 1.0 - REL_CONFUSION:
                break
        return moves
