"""Output precision policy and numeric thresholds."""

from dataclasses import dataclass

# Distances and filament amounts at or below this are zero
EPSILON = 1e-100

# Relative tolerance for curve parameters in [0, 1]
REL_CONFUSION = 1e-12


@dataclass(frozen=True)
class PrecisionSettings:
    """Decimal places used when writing G-code.

    Attributes:
        position_decimals: Decimal places for X, Y and Z
        extrusion_decimals: Decimal places for E
        speed_decimals: Decimal places for F (mm/min). Negative means F is
            written as a whole number and only when the feed rate changes.
    """

    position_decimals: int = 3
    extrusion_decimals: int = 3
    speed_decimals: int = -1

    @property
    def position_confusion(self) -> float:
        """Smallest position difference that survives rounding."""
        return 10.0 ** (-self.position_decimals - 1)

    @property
    def extrusion_confusion(self) -> float:
        """Smallest filament difference that survives rounding."""
        return 10.0 ** (-self.extrusion_decimals - 1)

    @property
    def speed_confusion(self) -> float:
        """Smallest feed rate difference (mm/s) worth writing."""
        if self.speed_decimals < 0:
            return 0.0
        return 10.0 ** (-self.speed_decimals - 1)


def round_to(value: float, decimals: int) -> float:
    """Round to a number of decimals, treating negative counts as zero."""
    return round(value, max(decimals, 0))


def format_number(value: float, decimals: int) -> str:
    """Format a number for G-code with trailing zeros removed.

    Examples:
        >>> format_number(10.0, 3)
        '10'
        >>> format_number(-0.12345, 3)
        '-0.123'
        >>> format_number(12000.0, 0)
        '12000'
    """
    decimals = max(decimals, 0)
    text = f"{round(value, decimals):.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text
