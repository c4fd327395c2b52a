"""Extruder preset and seam concealment example.

This example demonstrates:
- Using extruder presets (Direct Drive, Bowden)
- Comparing spline and straight travel for each preset
- Seam concealment skipping retraction around a closed perimeter loop

Shows how to adapt the planner to your specific printer setup.
"""

import sys
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from plot_helper import save_move_train_plot

from spline_travel import TravelPlanner, Vector3
from spline_travel.groups import GroupKind
from spline_travel.profiles import ExtruderProfile, create_options
from spline_travel.travel import TravelGenerator

# Open perimeter, travel, closed square loop, travel, open perimeter
PROGRAM = """G90
M83
G1 X0 Y0 Z0.2 F3000
G1 X10 Y0 E0.5 F3000
G1 X50 Y0 F9000
G1 X60 Y0 E0.5 F3000
G1 X60 Y10 E0.5
G1 X50 Y10 E0.5
G1 X50 Y0 E0.5
G1 X80 Y0 F9000
G1 X90 Y0 E0.5 F3000
"""


def filament_summary(planner, text):
    """Total retraction and unretraction written in replaced travel groups.

    Returns:
        List of (first line number, retracted mm, unretracted mm) per travel group
    """
    summary = []
    groups = planner.plan(text)
    for previous, group, following in zip(groups, groups[1:], groups[2:]):
        if group.kind is not GroupKind.TRAVEL:
            continue
        if previous.kind is not GroupKind.BUILD or following.kind is not GroupKind.BUILD:
            continue
        amounts = [c.arguments.get("E", 0.0) for c in group.commands]
        retracted = -sum(a for a in amounts if a < 0)
        unretracted = sum(a for a in amounts if a > 0)
        summary.append((group.start_index + 1, retracted, unretracted))
    return summary


def analyze_profile(profile, save_plot=False):
    """Process the program with one extruder preset in both travel modes.

    Args:
        profile: ExtruderProfile enum value
        save_plot: Whether to save a plot of the first spline travel
    """
    options = create_options(profile)
    print(f"\n{profile.name}:")
    print(
        f"  Retraction: {options.retract_length} mm at "
        f"{options.filament_acceleration:.0f} mm/s², jerk {options.filament_jerk} mm/s"
    )

    for label, mode_options in (
        ("Spline", options),
        ("Straight", replace(options, use_spline_travel=False, use_straight_travel=True)),
    ):
        planner = TravelPlanner(mode_options)
        result = planner.process(PROGRAM)
        print(f"  {label}: {len(PROGRAM.splitlines())} -> {len(result.splitlines())} lines")
        for line, retracted, unretracted in filament_summary(planner, PROGRAM):
            print(
                f"    travel at line {line:<3} retract {retracted:.3f} mm, "
                f"unretract {unretracted:.3f} mm"
            )

    if save_plot:
        generator = TravelGenerator(
            start=Vector3(10.0, 0.0, 0.2),
            end=Vector3(50.0, 0.0, 0.2),
            entry_velocity=Vector3(50.0, 0.0, 0.0),
            exit_velocity=Vector3(50.0, 0.0, 0.0),
            options=options,
            unretract=False,
        )
        curve, move_time = generator.fit_curve()
        moves = generator.generate_move_train(curve, move_time)
        output_dir = Path(__file__).parent
        filename = str(output_dir / f"{profile.value}_plot.png")
        save_move_train_plot(
            moves,
            filename=filename,
            title=f"{profile.name}: travel into a closed loop",
            speed_limit=options.speed_limit,
        )


def main():
    print("=" * 80)
    print("EXTRUDER PRESETS AND SEAM CONCEALMENT")
    print("=" * 80)
    print("\nThe square loop between X50 and X60 is closed, so the travel into it")
    print("only retracts and the travel out of it only unretracts.")

    for profile in ExtruderProfile:
        analyze_profile(profile, save_plot=True)

    print("\nWithout seam concealment every travel retracts and unretracts:")
    planner = TravelPlanner(replace(create_options(ExtruderProfile.BOWDEN), seam_concealment=False))
    for line, retracted, unretracted in filament_summary(planner, PROGRAM):
        print(
            f"  travel at line {line:<3} retract {retracted:.3f} mm, "
            f"unretract {unretracted:.3f} mm"
        )
    print()


if __name__ == "__main__":
    main()
