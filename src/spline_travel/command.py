"""Parsed G-code commands with state propagation.

Each command keeps its raw text, the machine state before and after it, and
the straight move it performs (if any). States are recomputed from the
previous command's state, so editing one command and recomputing the rest of
a chain keeps positions, filament and modes consistent.
"""

from enum import Enum
from typing import Dict, Optional

from spline_travel.errors import SplineTravelError
from spline_travel.models.precision import EPSILON, PrecisionSettings, format_number
from spline_travel.models.state import SECONDS_PER_MINUTE, MotionState
from spline_travel.models.vector import Vector3
from spline_travel.move import GeometricMove

# Decimals used when regenerating text from parsed arguments
ARGUMENT_DECIMALS = 10

# Words whose X/Y/Z/E/F arguments describe motion
_MOTION_CODES = frozenset({"G0", "G1", "G2", "G3"})


class CommandKind(Enum):
    """Commands the planner understands. Anything else is EMPTY."""

    EMPTY = "empty"
    RAPID_MOVE = "G0"
    CONTROLLED_MOVE = "G1"
    DWELL = "G4"
    SET_UNITS_MM = "G21"
    EXTRUDER_ABSOLUTE = "M82"
    EXTRUDER_RELATIVE = "M83"
    POSITION_ABSOLUTE = "G90"
    POSITION_RELATIVE = "G91"
    POSITION_OVERRIDE = "G92"


_KIND_BY_CODE = {kind.value: kind for kind in CommandKind if kind is not CommandKind.EMPTY}


def _parse_number(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        return 0.0


class GCodeCommand:
    """One line of a G-code program.

    Attributes:
        raw_text: Line text as read or as generated
        state_before: Machine state before the line executes
        state_after: Machine state after the line executes
        kind: Recognized command kind
        code: Command word such as "G1" or "M104", None for blank/comment lines
        arguments: Parameter letter → value, last occurrence wins
        move: Straight move performed by G0/G1, None if it does not move
    """

    def __init__(self, raw_text: str = "", state_before: Optional[MotionState] = None) -> None:
        self.raw_text = raw_text
        self.state_before = state_before if state_before is not None else MotionState()
        self.state_after = self.state_before
        self.kind = CommandKind.EMPTY
        self.code: Optional[str] = None
        self.arguments: Dict[str, float] = {}
        self.move: Optional[GeometricMove] = None
        self.parse(raw_text)

    def __repr__(self) -> str:
        return f"GCodeCommand({self.raw_text!r}, kind={self.kind.name})"

    def parse(self, line: Optional[str]) -> None:
        """Parse line text into kind, code and arguments.

        Comments (';') and checksums ('*') are stripped. The first word picks
        the command, the remaining words become arguments.
        """
        self.arguments = {}
        self.kind = CommandKind.EMPTY
        self.code = None
        self.move = None
        if not line or not line.strip():
            return

        line = line.split(";", 1)[0]
        star = line.rfind("*")
        if star >= 0:
            line = line[:star]

        for index, word in enumerate(line.split()):
            letter = word[0].upper()
            if not "A" <= letter <= "Z":
                continue
            value = _parse_number(word[1:]) if len(word) > 1 else 0.0
            if index == 0:
                self.code = f"{letter}{int(value)}"
                self.kind = _KIND_BY_CODE.get(self.code, CommandKind.EMPTY)
            else:
                self.arguments[letter] = value

        if self.is_move:
            self.construct_move()

    @property
    def is_empty(self) -> bool:
        return self.kind is CommandKind.EMPTY

    @property
    def is_move(self) -> bool:
        return self.kind in (CommandKind.RAPID_MOVE, CommandKind.CONTROLLED_MOVE)

    @property
    def travel_distance(self) -> float:
        return self.state_before.position.distance_to(self.state_after.position)

    @property
    def filament_change(self) -> float:
        """Filament change in millimeters, positive extrudes."""
        return self.state_after.filament_position - self.state_before.filament_position

    @property
    def is_build_move(self) -> bool:
        """Moves the nozzle and extrudes."""
        if not self.is_move:
            return False
        return self.travel_distance >= EPSILON and self.filament_change >= EPSILON

    @property
    def is_travel_move(self) -> bool:
        """Moves the nozzle without changing filament."""
        if not self.is_move:
            return False
        return self.travel_distance >= EPSILON and abs(self.filament_change) <= EPSILON

    @property
    def is_extruder_move(self) -> bool:
        """Changes filament without moving the nozzle."""
        if not self.is_move:
            return False
        return self.travel_distance <= EPSILON and abs(self.filament_change) >= EPSILON

    @property
    def is_retract(self) -> bool:
        return self.is_move and self.filament_change < -EPSILON

    @property
    def exec_time(self) -> float:
        """Execution time in seconds, 0 for commands that do not move."""
        return self.move.duration if self.move is not None else 0.0

    def recompute_state(
        self,
        previous: Optional[MotionState] = None,
        preserve_filament_delta: bool = False,
        keep_state_before: bool = False,
    ) -> None:
        """Recompute state_after from state_before and the arguments.

        Args:
            previous: State after the preceding command; becomes state_before
                unless keep_state_before is set
            preserve_filament_delta: Keep the current filament change and
                rewrite the E argument to match it
            keep_state_before: Leave state_before untouched
        """
        old_delta = self.filament_change
        if previous is not None and not keep_state_before:
            self.state_before = previous
        before = self.state_before
        args = self.arguments

        x, y, z = before.position.x, before.position.y, before.position.z
        filament = before.filament_position
        feed_rate = before.feed_rate
        position_relative = before.position_relative
        extrusion_relative = before.extrusion_relative

        if self.code in _MOTION_CODES:
            if position_relative:
                x += args.get("X", 0.0)
                y += args.get("Y", 0.0)
                z += args.get("Z", 0.0)
            else:
                x = args.get("X", x)
                y = args.get("Y", y)
                z = args.get("Z", z)
            if "E" in args:
                if extrusion_relative:
                    filament = before.filament_position + args["E"]
                else:
                    filament = args["E"]
                if preserve_filament_delta:
                    filament = before.filament_position + old_delta
                    args["E"] = old_delta if extrusion_relative else filament
            if "F" in args:
                feed_rate = args["F"] / SECONDS_PER_MINUTE

        if self.kind is CommandKind.POSITION_ABSOLUTE:
            position_relative = False
        elif self.kind is CommandKind.POSITION_RELATIVE:
            position_relative = True
        elif self.kind is CommandKind.EXTRUDER_ABSOLUTE:
            extrusion_relative = False
        elif self.kind is CommandKind.EXTRUDER_RELATIVE:
            extrusion_relative = True
        elif self.kind is CommandKind.POSITION_OVERRIDE:
            x = args.get("X", x)
            y = args.get("Y", y)
            z = args.get("Z", z)
            filament = args.get("E", filament)

        self.state_after = MotionState(
            position=Vector3(x, y, z),
            filament_position=filament,
            feed_rate=feed_rate,
            position_relative=position_relative,
            extrusion_relative=extrusion_relative,
        )
        if self.is_move:
            self.construct_move()

    def construct_move(self) -> None:
        """Derive the straight move from the before/after states."""
        if not self.is_move:
            self.move = None
            return
        start = self.state_before.position
        end = self.state_after.position
        delta = self.filament_change
        feed_rate = self.state_after.feed_rate
        travel = start.distance_to(end)

        if travel > EPSILON:
            amount = travel
        elif abs(delta) > EPSILON:
            amount = abs(delta)
        else:
            self.move = None
            return
        duration = amount / feed_rate if feed_rate > EPSILON else float("inf")
        self.move = GeometricMove(start=start, end=end, duration=duration, filament_delta=delta)

    def entry_velocity(self) -> Vector3:
        """Nozzle velocity (mm/s) while executing this command."""
        delta = self.state_after.position - self.state_before.position
        if delta.length <= EPSILON:
            return Vector3()
        return delta.normalized() * self.state_after.feed_rate

    def exit_velocity(self) -> Vector3:
        """Velocity when leaving the command; equal to entry for straight moves."""
        return self.entry_velocity()

    def set_move(
        self,
        move: GeometricMove,
        precision: PrecisionSettings,
        filament_error: float = 0.0,
    ) -> float:
        """Replace the command text with a rendering of ``move``.

        The state is not recomputed; call ``recompute_state`` afterwards.

        Returns:
            Filament rounding error to carry into the next rendered move

        Raises:
            SplineTravelError: If this command is neither a move nor empty
        """
        if not self.is_move and not self.is_empty:
            raise SplineTravelError(f"Not a move command: {self.raw_text!r}")
        self.raw_text, filament_error = move.render(self.state_before, precision, filament_error)
        self.parse(self.raw_text)
        return filament_error

    def to_text(self) -> str:
        """Canonical text of the command word followed by sorted arguments."""
        if self.code is None:
            return self.raw_text
        words = [self.code]
        for letter in sorted(self.arguments):
            words.append(letter + format_number(self.arguments[letter], ARGUMENT_DECIMALS))
        return " ".join(words)

    def regenerate_text(self) -> None:
        """Rewrite raw_text from kind and arguments, dropping comments."""
        if self.is_empty:
            return
        self.raw_text = self.to_text()

    @classmethod
    def from_move(
        cls,
        move: GeometricMove,
        state: MotionState,
        precision: PrecisionSettings,
        filament_error: float = 0.0,
    ):
        """Build a command executing ``move`` from ``state``.

        Returns:
            Tuple of (command with recomputed state, filament rounding error)
        """
        command = cls(state_before=state)
        filament_error = command.set_move(move, precision, filament_error)
        command.recompute_state(state)
        return command, filament_error
