"""Processing options for travel replacement."""

from dataclasses import dataclass
from enum import Enum


class TravelMode(Enum):
    """How eligible travel groups are rewritten."""

    SPLINE = "spline"  # Jerk-limited cubic curve with synchronized retraction
    STRAIGHT = "straight"  # Retract, hop, straight move, descend, unretract


@dataclass(frozen=True)
class ProcessingOptions:
    """Tunable settings for spline/straight travel and seam concealment.

    Speeds are in mm/s, accelerations in mm/s², jerks in mm/s and lengths in
    mm. Values are not range-checked here; ``spline_travel.config`` validates
    what it loads from disk.

    Attributes:
        use_spline_travel: Replace travel with fitted curves
        use_straight_travel: Replace travel with straight moves
        seam_concealment: Skip retraction next to closed build loops
        retract_length: Filament retracted during travel
        acceleration: Ceiling on nozzle acceleration along the curve
        curve_jerk: Largest velocity change allowed between curve segments
        speed_limit: Ceiling on nozzle speed of any emitted segment
        filament_acceleration: Acceleration of the retraction ramps
        filament_jerk: Largest filament speed change between segments
        z_jerk: Vertical speed added at curve entry and removed at exit
        loop_tolerance: Distance under which a build group counts as closed
        seam_conceal_retract_speed: Reserved, not used by the algorithm
        z_hop: Lift height for straight travel
        speed_straight: Nozzle speed of straight travel
        retract_speed_straight: Filament speed of straight retraction
    """

    use_spline_travel: bool = True
    use_straight_travel: bool = False
    seam_concealment: bool = True

    retract_length: float = 1.5
    acceleration: float = 800.0
    curve_jerk: float = 2.0
    speed_limit: float = 200.0
    filament_acceleration: float = 1000.0
    filament_jerk: float = 8.0
    z_jerk: float = 0.0

    loop_tolerance: float = 0.3
    seam_conceal_retract_speed: float = 8.0

    z_hop: float = 1.0
    speed_straight: float = 200.0
    retract_speed_straight: float = 300.0

    @property
    def travel_mode(self) -> TravelMode:
        """Selected travel mode. Spline wins unless only straight is requested."""
        if not self.use_spline_travel and self.use_straight_travel:
            return TravelMode.STRAIGHT
        return TravelMode.SPLINE
