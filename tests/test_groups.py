"""Tests for move grouping and seam concealment."""

import pytest

from spline_travel.chain import parse_program
from spline_travel.groups import GroupKind, classify_command, conceal_seams, group_commands
from spline_travel.models import Vector3

LOOP_PROGRAM = """G90
G1 X0 Y0 Z0.2 F3000
G1 X10 Y0 E1
G1 X50 Y0
G1 X60 Y0 E1
G1 X60 Y10 E1
G1 X50 Y10 E1
G1 X50 Y0 E1
G1 X80 Y0
G1 X90 Y0 E1
"""


@pytest.fixture
def groups():
    """Groups of a program with one closed build loop."""
    return group_commands(parse_program(LOOP_PROGRAM))


class TestClassifyCommand:
    """Test classify_command()."""

    def test_kinds(self):
        """Test classification of each kind of line."""
        chain = parse_program("G90\nG1 X10 F600\nG1 X20 E1\nG1 E-1\n; note\n")
        kinds = [classify_command(command) for command in chain]
        assert kinds == [
            GroupKind.OTHER,
            GroupKind.TRAVEL,
            GroupKind.BUILD,
            GroupKind.TRAVEL,
            GroupKind.OTHER,
        ]


class TestGroupCommands:
    """Test group_commands()."""

    def test_group_sequence(self, groups):
        """Test that runs of one kind form one group."""
        assert [group.kind for group in groups] == [
            GroupKind.OTHER,
            GroupKind.TRAVEL,
            GroupKind.BUILD,
            GroupKind.TRAVEL,
            GroupKind.BUILD,
            GroupKind.TRAVEL,
            GroupKind.BUILD,
        ]
        assert [len(group) for group in groups] == [1, 1, 1, 1, 4, 1, 1]

    def test_partition_covers_all_commands(self, groups):
        """Test that group lengths add up to the command count."""
        assert sum(len(group) for group in groups) == len(LOOP_PROGRAM.splitlines())

    def test_start_index(self, groups):
        """Test chain index of each group's first command."""
        assert [group.start_index for group in groups] == [0, 1, 2, 3, 4, 8, 9]

    def test_positions(self, groups):
        """Test start and end positions of a build group."""
        loop = groups[4]
        assert loop.start_position == Vector3(50.0, 0.0, 0.2)
        assert loop.end_position == Vector3(50.0, 0.0, 0.2)
        assert loop.first is loop.commands[0]
        assert loop.last is loop.commands[-1]

    def test_empty_input(self):
        """Test grouping no commands."""
        assert group_commands([]) == []


class TestConcealSeams:
    """Test conceal_seams()."""

    def test_marks_closed_loop(self, groups):
        """Test that only the closed build loop is marked."""
        assert conceal_seams(groups, loop_tolerance=0.3) == 1
        assert groups[4].retract_injected
        assert groups[4].unretract_injected
        assert not groups[2].retract_injected
        assert not groups[6].unretract_injected

    def test_tolerance(self, groups):
        """Test that a large tolerance treats open groups as loops."""
        assert conceal_seams(groups, loop_tolerance=100.0) == 3

    def test_idempotent(self, groups):
        """Test that running twice gives the same flags."""
        conceal_seams(groups, loop_tolerance=0.3)
        first = [(g.retract_injected, g.unretract_injected) for g in groups]
        conceal_seams(groups, loop_tolerance=0.3)
        second = [(g.retract_injected, g.unretract_injected) for g in groups]
        assert first == second
