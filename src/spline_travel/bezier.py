"""Cubic Bezier curve with jerk-bounded adaptive stepping."""

import math
from typing import Iterable, List, Tuple

from spline_travel.models.precision import EPSILON, REL_CONFUSION
from spline_travel.models.vector import Vector3

# Refinement rounds when growing a step
SHRINK_ITERATIONS = 7

# Initial log-step of the step search
INITIAL_LOG_FACTOR = 0.25

# A step covering more than this share of the distance to a breakpoint
# leaves a sliver behind and is cut back to SLIVER_STEP_RATIO instead
SLIVER_RATIO = 0.75
SLIVER_STEP_RATIO = 0.3

# Low-acceleration parameter used when the acceleration is constant
NO_LOW_ACCELERATION = 1000.0


class BezierCurve:
    """Cubic Bezier curve over four control points.

    B(t) = (1-t)³P0 + 3(1-t)²tP1 + 3(1-t)t²P2 + t³P3, t in [0, 1].

    Derived values (parameter of lowest acceleration, peak acceleration) are
    recomputed whenever a control point or the jerk bound changes.

    Attributes:
        jerk: Largest allowed change of the first derivative between two
            accepted samples, in parameter units
    """

    def __init__(self, poles: Iterable[Vector3] = (), jerk: float = 1e-7) -> None:
        self._poles: List[Vector3] = list(poles) or [Vector3()] * 4
        if len(self._poles) != 4:
            raise ValueError(f"A cubic curve needs 4 control points, got {len(self._poles)}")
        self._jerk = jerk
        self._recompute()

    def __getitem__(self, index: int) -> Vector3:
        return self._poles[index]

    def __setitem__(self, index: int, pole: Vector3) -> None:
        self._poles[index] = pole
        self._recompute()

    @property
    def poles(self) -> Tuple[Vector3, ...]:
        return tuple(self._poles)

    @property
    def jerk(self) -> float:
        return self._jerk

    @jerk.setter
    def jerk(self, value: float) -> None:
        self._jerk = value
        self._recompute()

    @property
    def low_acceleration_parameter(self) -> float:
        """Parameter where the second derivative is smallest along its path."""
        return self._low_acceleration_t

    @property
    def peak_acceleration(self) -> float:
        """Largest second-derivative magnitude (reached at an endpoint)."""
        return self._peak_acceleration

    def _recompute(self) -> None:
        start = self.second_derivative(0.0)
        end = self.second_derivative(1.0)
        change = end - start
        if change.length <= EPSILON:
            self._low_acceleration_t = NO_LOW_ACCELERATION
        else:
            self._low_acceleration_t = -start.dot(change.normalized()) / change.length
        self._peak_acceleration = max(start.length, end.length)

    def value(self, t: float) -> Vector3:
        p0, p1, p2, p3 = self._poles
        s = 1.0 - t
        return Vector3.linear_combination(
            (s * s * s, p0),
            (3.0 * s * s * t, p1),
            (3.0 * s * t * t, p2),
            (t * t * t, p3),
        )

    def derivative(self, t: float) -> Vector3:
        p0, p1, p2, p3 = self._poles
        s = 1.0 - t
        return Vector3.linear_combination(
            (-3.0 * s * s, p0),
            (3.0 * s * s - 6.0 * s * t, p1),
            (6.0 * s * t - 3.0 * t * t, p2),
            (3.0 * t * t, p3),
        )

    def second_derivative(self, t: float) -> Vector3:
        p0, p1, p2, p3 = self._poles
        s = 1.0 - t
        return Vector3.linear_combination(
            (6.0 * s, p0),
            (6.0 * t - 12.0 * s, p1),
            (6.0 * s - 12.0 * t, p2),
            (6.0 * t, p3),
        )

    def next_breakpoint(self, prev_t: float) -> float:
        """Next parameter that a step must land on exactly."""
        low = self._low_acceleration_t
        if prev_t < low - REL_CONFUSION and low < 1.0 - REL_CONFUSION:
            return low
        return 1.0

    def _derivative_change(self, prev_t: float, step: float) -> float:
        origin = self.derivative(prev_t)
        change = origin.distance_to(self.derivative(prev_t + step))
        low = self._low_acceleration_t
        if prev_t < low + REL_CONFUSION and prev_t + step > low:
            change = max(change, origin.distance_to(self.derivative(low)))
        return change

    def shrink_interval(self, prev_t: float, cur_t: float) -> Tuple[bool, float]:
        """Limit the step from prev_t so the derivative changes by less than jerk.

        The step starts at jerk / peak_acceleration, which always satisfies
        the bound, and is grown multiplicatively while it still does. Steps
        stop at the next breakpoint, and a step that would leave a sliver
        before the breakpoint is cut to a fraction of the remaining distance.

        Args:
            prev_t: Last accepted parameter
            cur_t: Proposed end parameter, usually 1

        Returns:
            Tuple of (whether cur_t was reduced, resulting end parameter)
        """
        breakpoint_t = self.next_breakpoint(prev_t)
        if self._peak_acceleration <= EPSILON:
            step = 1.0
        else:
            step = self._jerk / self._peak_acceleration
        log_factor = INITIAL_LOG_FACTOR
        valid_step = step

        for _ in range(SHRINK_ITERATIONS):
            step *= math.exp(log_factor)
            if self._derivative_change(prev_t, step) < self._jerk:
                valid_step = step
            else:
                step = valid_step
                log_factor /= 2.0

        step = clip_step(prev_t, step, breakpoint_t)
        if cur_t > prev_t + step + REL_CONFUSION:
            return True, prev_t + step
        return False, cur_t


def clip_step(prev_t: float, step: float, breakpoint_t: float) -> float:
    """Clip a step at a breakpoint, avoiding a sliver just before it."""
    to_breakpoint = breakpoint_t - prev_t
    if step > to_breakpoint:
        step = to_breakpoint
    if (
        step < to_breakpoint - REL_CONFUSION
        and to_breakpoint - step < to_breakpoint * (1.0 - SLIVER_RATIO)
    ):
        step = to_breakpoint * SLIVER_STEP_RATIO
    return step
