"""Partitioning of a program into build, travel and other runs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from spline_travel.command import GCodeCommand
from spline_travel.models.vector import Vector3


class GroupKind(Enum):
    """Classification of a contiguous run of commands."""

    OTHER = "other"
    BUILD = "build"  # Moves that extrude
    TRAVEL = "travel"  # Non-extruding moves and extruder-only moves


@dataclass
class MoveGroup:
    """Maximal run of commands sharing one classification.

    Attributes:
        kind: Classification of every command in the run
        commands: Member commands in program order
        start_index: Chain index of the first command
        retract_injected: Build group already retracts at its end
        unretract_injected: Build group already unretracts at its start
    """

    kind: GroupKind
    commands: List[GCodeCommand] = field(default_factory=list)
    start_index: int = 0
    retract_injected: bool = False
    unretract_injected: bool = False

    def __len__(self) -> int:
        return len(self.commands)

    @property
    def first(self) -> Optional[GCodeCommand]:
        return self.commands[0] if self.commands else None

    @property
    def last(self) -> Optional[GCodeCommand]:
        return self.commands[-1] if self.commands else None

    @property
    def start_position(self) -> Vector3:
        return self.commands[0].state_before.position

    @property
    def end_position(self) -> Vector3:
        return self.commands[-1].state_after.position


def classify_command(command: GCodeCommand) -> GroupKind:
    if command.is_build_move:
        return GroupKind.BUILD
    if command.is_travel_move or command.is_extruder_move:
        return GroupKind.TRAVEL
    return GroupKind.OTHER


def group_commands(commands: Iterable[GCodeCommand]) -> List[MoveGroup]:
    """Split commands into groups, starting a new group whenever the kind changes."""
    groups: List[MoveGroup] = []
    current: Optional[MoveGroup] = None
    for index, command in enumerate(commands):
        kind = classify_command(command)
        if current is None or kind is not current.kind:
            current = MoveGroup(kind=kind, start_index=index)
            groups.append(current)
        current.commands.append(command)
    return groups


def conceal_seams(groups: List[MoveGroup], loop_tolerance: float) -> int:
    """Mark closed build loops so neighboring travel skips retraction.

    A build group whose start and end lie within ``loop_tolerance`` closes a
    loop; both its retract and unretract flags are set. Running this twice
    gives the same flags.

    Returns:
        Number of build groups marked
    """
    marked = 0
    for group in groups:
        if group.kind is not GroupKind.BUILD or not group.commands:
            continue
        if group.start_position.distance_to(group.end_position) > loop_tolerance:
            continue
        group.retract_injected = True
        group.unretract_injected = True
        marked += 1
    return marked
