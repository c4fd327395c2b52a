"""Three-component vector used for positions and velocities."""

import math
from dataclasses import dataclass
from typing import Tuple

# Lengths at or below this are treated as zero
ZERO_LENGTH = 1e-100


@dataclass(frozen=True)
class Vector3:
    """Immutable 3D vector in millimeters (positions) or mm/s (velocities).

    Attributes:
        x: X component
        y: Y component
        z: Z component
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scale: float) -> "Vector3":
        return Vector3(self.x * scale, self.y * scale, self.z * scale)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    @property
    def length(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> "Vector3":
        """Return the unit vector in the same direction.

        A zero-length vector normalizes to the X unit vector so callers never
        receive NaN components.
        """
        length = self.length
        if length <= ZERO_LENGTH:
            return Vector3(1.0, 0.0, 0.0)
        return self * (1.0 / length)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def distance_to(self, other: "Vector3") -> float:
        return (other - self).length

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @staticmethod
    def linear_combination(*terms: Tuple[float, "Vector3"]) -> "Vector3":
        """Weighted sum of vectors.

        Args:
            *terms: (coefficient, vector) pairs

        Returns:
            Sum of coefficient * vector over all pairs

        Examples:
            >>> Vector3.linear_combination((0.5, Vector3(2, 0, 0)), (2.0, Vector3(0, 1, 0)))
            Vector3(x=1.0, y=2.0, z=0.0)
        """
        x = y = z = 0.0
        for coefficient, vector in terms:
            x += coefficient * vector.x
            y += coefficient * vector.y
            z += coefficient * vector.z
        return Vector3(x, y, z)
