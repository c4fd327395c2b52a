"""Time profile of filament retraction during a travel move."""

import math
from typing import Tuple

from spline_travel.bezier import clip_step
from spline_travel.models.precision import EPSILON, REL_CONFUSION

# Disabled ramps are moved this many move-times outside [0, move_time]
DISABLED_RAMP_OFFSET = 10.0

# Step used where the filament does not accelerate
UNBOUNDED_STEP = 100.0


class RetractProfile:
    """Cumulative retraction as a function of normalized move time.

    The profile ramps up with constant acceleration then deceleration,
    holds, and ramps back down::

        retraction
           ^     ______________
           |    /              \\
           |___/                \\___
           0  s1 m1 e1      s2 m2 e2  -> time

    ``value(t)`` takes t in [0, 1] as a fraction of ``move_time``. Derived
    breakpoints are recomputed whenever a parameter changes.

    Args:
        length: Requested retraction length in millimeters
        acceleration: Filament acceleration in mm/s²
        move_time: Duration of the travel move in seconds
        retract: Whether the profile retracts at the start
        unretract: Whether the profile unretracts at the end
        jerk: Largest filament speed change per step, in parameter units
    """

    def __init__(
        self,
        length: float = 1.0,
        acceleration: float = 1000.0,
        move_time: float = 1.0,
        retract: bool = True,
        unretract: bool = True,
        jerk: float = 1.0,
    ) -> None:
        self._length = length
        self._acceleration = acceleration
        self._move_time = move_time
        self._retract = retract
        self._unretract = unretract
        self._jerk = jerk
        self._recompute()

    def __repr__(self) -> str:
        return (
            f"RetractProfile(length={self._length}, acceleration={self._acceleration}, "
            f"move_time={self._move_time}, retract={self._retract}, "
            f"unretract={self._unretract})"
        )

    @property
    def length(self) -> float:
        return self._length

    @length.setter
    def length(self, value: float) -> None:
        self._length = value
        self._recompute()

    @property
    def acceleration(self) -> float:
        return self._acceleration

    @acceleration.setter
    def acceleration(self, value: float) -> None:
        self._acceleration = value
        self._recompute()

    @property
    def move_time(self) -> float:
        return self._move_time

    @move_time.setter
    def move_time(self, value: float) -> None:
        self._move_time = value
        self._recompute()

    @property
    def retract(self) -> bool:
        return self._retract

    @retract.setter
    def retract(self, value: bool) -> None:
        self._retract = value
        self._recompute()

    @property
    def unretract(self) -> bool:
        return self._unretract

    @unretract.setter
    def unretract(self, value: bool) -> None:
        self._unretract = value
        self._recompute()

    @property
    def jerk(self) -> float:
        return self._jerk

    @jerk.setter
    def jerk(self, value: float) -> None:
        self._jerk = value

    @property
    def retract_length(self) -> float:
        """Retraction actually reached, which may be less than requested."""
        return self._retract_length

    @property
    def effective_acceleration(self) -> float:
        return self._ramp_acceleration

    @property
    def acceleration_duration(self) -> float:
        """Duration of each half of a ramp in seconds."""
        return self._ramp_half

    @property
    def breakpoints(self) -> Tuple[float, ...]:
        """Ramp times (start1, mid1, end1, start2, mid2, end2) in seconds."""
        return (
            self._start1,
            self._mid1,
            self._end1,
            self._start2,
            self._mid2,
            self._end2,
        )

    def _recompute(self) -> None:
        move_time = self._move_time
        acceleration = self._acceleration
        # Each half of a ramp covers half the length: length/2 = a·dt²/2
        ramp_half = math.sqrt(abs(self._length / acceleration))
        retract_length = self._length

        if self._retract and self._unretract:
            if ramp_half * 4.0 > move_time:
                ramp_half = move_time / 4.0
                retract_length = acceleration * ramp_half * ramp_half
        elif self._retract or self._unretract:
            if ramp_half * 2.0 > move_time:
                ramp_half = move_time / 2.0
                acceleration = self._length / (ramp_half * ramp_half)
        else:
            # Nothing to retract: keep both ramps flat for any move time
            ramp_half = 0.0
            acceleration = 0.0
            retract_length = 0.0

        self._ramp_half = ramp_half
        self._ramp_acceleration = acceleration
        self._retract_length = retract_length

        self._start1 = 0.0
        if not self._retract:
            self._start1 -= DISABLED_RAMP_OFFSET * move_time
        self._mid1 = self._start1 + ramp_half
        self._end1 = self._mid1 + ramp_half

        self._end2 = move_time
        if not self._unretract:
            self._end2 += DISABLED_RAMP_OFFSET * move_time
        self._mid2 = self._end2 - ramp_half
        self._start2 = self._mid2 - ramp_half

    def value(self, t: float) -> float:
        """Cumulative retraction in millimeters at parameter t."""
        time = t * self._move_time
        a = self._ramp_acceleration
        length = self._retract_length
        if time < self._start1:
            return 0.0
        if time < self._mid1:
            return a * (time - self._start1) ** 2 / 2.0
        if time < self._end1:
            return length - a * (time - self._end1) ** 2 / 2.0
        if time < self._start2:
            return length
        if time < self._mid2:
            return length - a * (time - self._start2) ** 2 / 2.0
        if time < self._end2:
            return a * (time - self._end2) ** 2 / 2.0
        return 0.0

    def derivative(self, t: float) -> float:
        """d value / dt in parameter units."""
        time = t * self._move_time
        a = self._ramp_acceleration * self._move_time
        if time < self._start1:
            return 0.0
        if time < self._mid1:
            return a * (time - self._start1)
        if time < self._end1:
            return -a * (time - self._end1)
        if time < self._start2:
            return 0.0
        if time < self._mid2:
            return -a * (time - self._start2)
        if time < self._end2:
            return a * (time - self._end2)
        return 0.0

    def second_derivative(self, t: float) -> float:
        """Second derivative just after t, in parameter units."""
        time = (t + REL_CONFUSION) * self._move_time
        a = self._ramp_acceleration * self._move_time * self._move_time
        if time < self._start1:
            return 0.0
        if time < self._mid1:
            return a
        if time < self._end1:
            return -a
        if time < self._start2:
            return 0.0
        if time < self._mid2:
            return -a
        if time < self._end2:
            return a
        return 0.0

    def next_breakpoint(self, prev_t: float) -> float:
        """Next ramp start after prev_t, or 1."""
        result = 1.0
        for start in (self._start1, self._start2):
            candidate = start / self._move_time
            if prev_t < candidate - REL_CONFUSION and result > candidate + REL_CONFUSION:
                result = candidate
        return result

    def shrink_interval(self, prev_t: float, cur_t: float) -> Tuple[bool, float]:
        """Limit the step from prev_t so the filament speed changes by at most jerk.

        Acceleration is piecewise constant, so the step is jerk / |acceleration|
        directly, clipped at the next ramp start.

        Returns:
            Tuple of (whether cur_t was reduced, resulting end parameter)
        """
        breakpoint_t = self.next_breakpoint(prev_t)
        step = UNBOUNDED_STEP
        acceleration = abs(self.second_derivative(prev_t))
        if acceleration > EPSILON:
            step = self._jerk / acceleration
        step = clip_step(prev_t, step, breakpoint_t)
        if cur_t > prev_t + step + REL_CONFUSION:
            return True, prev_t + step
        return False, cur_t
