"""Basic usage example.

This example demonstrates:
- Writing a small program with one travel move between two build moves
- Running it through the planner in spline and straight mode
- Displaying the lines that replaced the travel move

This is the simplest way to use the travel planner.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from plot_helper import generate_example_plot

from spline_travel import ProcessingOptions, TravelPlanner, Vector3
from spline_travel.travel import TravelGenerator

# A perimeter ending at X20, a travel to (40, 20), and the next perimeter
PROGRAM = """G90
M83
G1 X0 Y0 Z0.2 F3000
G1 X20 Y0 E1.0 F3000 ; perimeter
G1 X40 Y20 F9000 ; travel
G1 X40 Y40 E1.0 F3000 ; perimeter
"""


def print_program(title, text):
    print(f"\n{title}:")
    print("  " + "-" * 70)
    for number, line in enumerate(text.splitlines(), start=1):
        print(f"  {number:<4} {line}")


def main():
    """Basic usage example with given values."""

    print("=" * 80)
    print("BASIC SPLINE TRAVEL USAGE")
    print("=" * 80)

    # Default options: spline travel, 1.5 mm retraction, 800 mm/s² ceiling
    options = ProcessingOptions()
    print("\nInput Configuration:")
    print(f"  Retraction: {options.retract_length} mm")
    print(f"  Acceleration ceiling: {options.acceleration} mm/s²")
    print(f"  Curve jerk: {options.curve_jerk} mm/s")
    print(f"  Speed limit: {options.speed_limit} mm/s")

    print_program("Original Program", PROGRAM)

    planner = TravelPlanner(options)
    print("\nProcessing program...")
    result = planner.process(PROGRAM)
    print("Done!")
    print_program("Spline Travel", result)

    straight = TravelPlanner(
        ProcessingOptions(use_spline_travel=False, use_straight_travel=True)
    )
    print_program("Straight Travel", straight.process(PROGRAM))

    # The same travel generated directly, for plotting
    generator = TravelGenerator(
        start=Vector3(20.0, 0.0, 0.2),
        end=Vector3(40.0, 20.0, 0.2),
        entry_velocity=Vector3(50.0, 0.0, 0.0),
        exit_velocity=Vector3(0.0, 50.0, 0.0),
        options=options,
    )
    curve, move_time = generator.fit_curve()
    moves = generator.generate_move_train(curve, move_time)
    print(f"\nCurve time: {move_time * 1000:.1f} ms in {len(moves)} moves")

    print("\n" + "=" * 80)
    print("GENERATING PLOT")
    print("=" * 80)
    generate_example_plot("basic_usage", moves, speed_limit=options.speed_limit)
    print()


if __name__ == "__main__":
    main()
