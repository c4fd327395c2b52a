"""End-to-end travel rewriting pipeline.

This module provides the TravelPlanner class that ties the components together:
- Parsing the program into a chain of commands with machine state
- Grouping commands into build, travel and other runs
- Seam concealment for closed build loops
- Replacing travel between two build runs by spline or straight travel

Example:
    >>> from spline_travel.planner import TravelPlanner
    >>> from spline_travel.models import ProcessingOptions
    >>>
    >>> program = "G1 X0 Y0 F3000\\nG1 X20 E1\\nG1 X40 Y20\\nG1 Y40 E1\\n"
    >>> planner = TravelPlanner(ProcessingOptions(use_straight_travel=True,
    ...                                           use_spline_travel=False))
    >>> result = planner.process(program)
"""

import logging
from typing import List, Optional

from spline_travel.chain import parse_program
from spline_travel.command import GCodeCommand
from spline_travel.errors import SplineTravelError
from spline_travel.groups import GroupKind, MoveGroup, conceal_seams, group_commands
from spline_travel.models.options import ProcessingOptions, TravelMode
from spline_travel.models.precision import EPSILON, PrecisionSettings
from spline_travel.models.state import MotionState
from spline_travel.models.vector import Vector3
from spline_travel.move import GeometricMove
from spline_travel.travel import TravelGenerator

logger = logging.getLogger(__name__)


class TravelPlanner:
    """Rewrites travel moves of a G-code program.

    The pipeline operates in three stages:
    1. Parse and group: every line becomes a command; runs of build, travel
       and other commands become groups
    2. Seam concealment: closed build loops suppress retraction in the
       neighboring travel groups
    3. Replacement: each travel group with a build group on both sides is
       regenerated as spline travel (default) or straight travel

    Args:
        options: Travel, retraction and seam settings.
                 Default: ProcessingOptions() (spline travel)
        precision: Decimal places used for generated lines.
                   Default: PrecisionSettings() (3 decimals, F only on change)
    """

    def __init__(
        self,
        options: Optional[ProcessingOptions] = None,
        precision: Optional[PrecisionSettings] = None,
    ):
        self.options = options if options is not None else ProcessingOptions()
        self.precision = precision if precision is not None else PrecisionSettings()

    @property
    def travel_mode(self) -> TravelMode:
        return self.options.travel_mode

    def plan(self, text: str) -> List[MoveGroup]:
        """Parse a program and return its groups with travel replaced.

        Args:
            text: G-code program

        Returns:
            Groups in program order. Replaced travel groups hold the
            generated commands; all other groups hold the parsed lines.

        Raises:
            CurveFitError: If spline travel cannot be fitted for a group
            DegenerateMoveError: If a generated move has zero duration
        """
        chain = parse_program(text)
        groups = group_commands(chain)

        concealed = 0
        if self.options.seam_concealment:
            concealed = conceal_seams(groups, self.options.loop_tolerance)

        travel_count = 0
        replaced = 0
        for index, group in enumerate(groups):
            if group.kind is not GroupKind.TRAVEL:
                continue
            travel_count += 1
            previous = groups[index - 1] if index > 0 else None
            following = groups[index + 1] if index < len(groups) - 1 else None
            if (
                previous is None
                or following is None
                or previous.kind is not GroupKind.BUILD
                or following.kind is not GroupKind.BUILD
            ):
                continue

            try:
                self._replace_travel(group, previous, following)
            except SplineTravelError as exc:
                exc.group_index = index
                exc.line_number = group.start_index
                raise
            replaced += 1
            logger.debug(
                "Replaced travel group %d (line %d) with %d %s commands",
                index,
                group.start_index + 1,
                len(group.commands),
                self.travel_mode.value,
            )

        logger.info(
            "Processed %d lines in %d groups: replaced %d of %d travel groups, "
            "%d closed loops concealed",
            len(chain),
            len(groups),
            replaced,
            travel_count,
            concealed,
        )
        return groups

    def process(self, text: str) -> str:
        """Rewrite a program and return the new text.

        Lines outside replaced travel groups are copied verbatim, comments and
        blank lines included. The result ends with a newline.
        """
        groups = self.plan(text)
        lines = [command.raw_text for group in groups for command in group.commands]
        if not lines:
            return ""
        return "\n".join(lines) + "\n"

    def _replace_travel(
        self, group: MoveGroup, previous: MoveGroup, following: MoveGroup
    ) -> None:
        build_end = previous.commands[-1]
        build_start = following.commands[0]
        retract = not previous.retract_injected
        unretract = not following.unretract_injected

        if self.travel_mode is TravelMode.SPLINE:
            moves = self._spline_moves(build_end, build_start, retract, unretract)
        else:
            moves = self._straight_moves(build_end, build_start, retract, unretract)

        group.commands = self._emit(moves, build_end.state_after)

    def _spline_moves(
        self,
        build_end: GCodeCommand,
        build_start: GCodeCommand,
        retract: bool,
        unretract: bool,
    ) -> List[GeometricMove]:
        generator = TravelGenerator(
            start=build_end.state_after.position,
            end=build_start.state_before.position,
            entry_velocity=build_end.exit_velocity(),
            exit_velocity=build_start.entry_velocity(),
            options=self.options,
            retract=retract,
            unretract=unretract,
        )
        curve, move_time = generator.fit_curve()
        return generator.generate_move_train(curve, move_time)

    def _straight_moves(
        self,
        build_end: GCodeCommand,
        build_start: GCodeCommand,
        retract: bool,
        unretract: bool,
    ) -> List[GeometricMove]:
        """Retract, lift, move, descend and unretract as separate moves."""
        options = self.options
        position = build_end.state_after.position
        destination = build_start.state_before.position
        lifted = options.z_hop > EPSILON
        hop = Vector3(0.0, 0.0, options.z_hop) if lifted else Vector3()
        retract_time = options.retract_length / options.retract_speed_straight
        moves = []

        if options.retract_length > EPSILON and retract:
            moves.append(
                GeometricMove(position, position, retract_time, -options.retract_length)
            )
        if lifted:
            moves.append(
                GeometricMove(position, position + hop, options.z_hop / options.speed_straight)
            )
            position = position + hop
        # Extruder-only travel groups start and end at the same point
        if position.distance_to(destination + hop) > EPSILON:
            moves.append(
                GeometricMove.from_speed(position, destination + hop, options.speed_straight)
            )
        if lifted:
            moves.append(
                GeometricMove.from_speed(destination + hop, destination, options.speed_straight)
            )
        if options.retract_length > EPSILON and unretract:
            moves.append(
                GeometricMove(destination, destination, retract_time, options.retract_length)
            )
        return moves

    def _emit(self, moves: List[GeometricMove], state: MotionState) -> List[GCodeCommand]:
        """Render moves, joining steps too small to write into their neighbours.

        A step that would move no axis and no filament at the output precision
        is carried into the next move. The last step is joined to the previous
        one instead.
        """
        commands = []
        history = []
        filament_error = 0.0
        carried: Optional[GeometricMove] = None
        for index, move in enumerate(moves):
            if carried is not None:
                move = carried.joined_with(move)
                carried = None
            below = move.is_below_resolution(state, self.precision, filament_error)
            if below and index < len(moves) - 1:
                carried = move
                continue
            if below and history:
                previous, state, filament_error = history.pop()
                commands.pop()
                move = previous.joined_with(move)
            history.append((move, state, filament_error))
            command, filament_error = GCodeCommand.from_move(
                move, state, self.precision, filament_error
            )
            commands.append(command)
            state = command.state_after
        return commands

    def __repr__(self) -> str:
        return f"TravelPlanner(mode={self.travel_mode.name}, options={self.options!r})"
