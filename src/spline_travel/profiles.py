"""Extruder presets for common printer configurations."""

from dataclasses import replace
from enum import Enum
from typing import Optional

from spline_travel.models.options import ProcessingOptions


class ExtruderProfile(Enum):
    """Common extruder drive arrangements."""

    DIRECT_DRIVE = "direct_drive"  # Short filament path: short, fast retraction
    BOWDEN = "bowden"  # Long PTFE tube: long, gentler retraction


def create_options(
    profile: ExtruderProfile, base: Optional[ProcessingOptions] = None
) -> ProcessingOptions:
    """
    Create ProcessingOptions tuned for an extruder arrangement.

    Only retraction settings change; motion limits are taken from ``base``:
    - DIRECT_DRIVE: Extruder on the print head, little filament compression
    - BOWDEN: Remote extruder, the tube compresses and needs a longer pull

    Args:
        profile: Extruder profile to use
        base: Options to start from (default: ProcessingOptions())

    Returns:
        ProcessingOptions with retraction settings for the profile

    Examples:
        >>> direct = create_options(ExtruderProfile.DIRECT_DRIVE)
        >>> print(f"Retract: {direct.retract_length} mm")
        Retract: 0.8 mm

        >>> bowden = create_options(ExtruderProfile.BOWDEN)
        >>> print(f"Retract: {bowden.retract_length} mm")
        Retract: 4.0 mm
    """
    if base is None:
        base = ProcessingOptions()

    if profile == ExtruderProfile.DIRECT_DRIVE:
        return replace(
            base,
            retract_length=0.8,  # mm - short filament path
            filament_acceleration=1500.0,  # mm/s² - stiff drive train
            filament_jerk=10.0,  # mm/s
            retract_speed_straight=45.0,  # mm/s
        )
    elif profile == ExtruderProfile.BOWDEN:
        return replace(
            base,
            retract_length=4.0,  # mm - tube slack must be taken up
            filament_acceleration=800.0,  # mm/s² - gentler on the tube
            filament_jerk=6.0,  # mm/s
            retract_speed_straight=60.0,  # mm/s
        )
    else:
        raise ValueError(f"Unknown extruder profile: {profile}")
