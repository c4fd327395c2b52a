"""Ordered program of G-code commands."""

from typing import Iterable, Iterator, List, Optional

from spline_travel.command import GCodeCommand
from spline_travel.errors import ChainError
from spline_travel.models.state import MotionState, initial_state


class ProgramChain:
    """Commands in program order, addressed by integer index.

    A command belongs to exactly one chain; ``parse_program`` creates fresh
    commands for every line.
    """

    def __init__(self, commands: Optional[Iterable[GCodeCommand]] = None) -> None:
        self._commands: List[GCodeCommand] = list(commands) if commands is not None else []

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[GCodeCommand]:
        return iter(self._commands)

    def __getitem__(self, index: int) -> GCodeCommand:
        return self._commands[self._check_index(index)]

    @property
    def commands(self) -> List[GCodeCommand]:
        """Copy of the command list."""
        return list(self._commands)

    @property
    def first(self) -> Optional[GCodeCommand]:
        return self._commands[0] if self._commands else None

    @property
    def last(self) -> Optional[GCodeCommand]:
        return self._commands[-1] if self._commands else None

    def _check_index(self, index: int) -> int:
        if not 0 <= index < len(self._commands):
            raise ChainError(f"Index {index} outside chain of {len(self._commands)} commands")
        return index

    def append(self, command: GCodeCommand) -> None:
        self._commands.append(command)

    def insert_after(self, index: int, command: GCodeCommand) -> int:
        """Insert a command after position ``index``.

        Returns:
            Index of the inserted command
        """
        self._check_index(index)
        self._commands.insert(index + 1, command)
        return index + 1

    def index_of(self, command: GCodeCommand) -> int:
        """Position of a command object (identity, not equality)."""
        for index, candidate in enumerate(self._commands):
            if candidate is command:
                return index
        raise ChainError(f"Command not in chain: {command!r}")

    def previous(self, index: int) -> Optional[GCodeCommand]:
        """Command before ``index``, None at the start."""
        self._check_index(index)
        return self._commands[index - 1] if index > 0 else None

    def next(self, index: int) -> Optional[GCodeCommand]:
        """Command after ``index``, None at the end."""
        self._check_index(index)
        return self._commands[index + 1] if index < len(self._commands) - 1 else None

    def remove_range(self, start: int, count: int) -> None:
        if count < 0 or start < 0 or start + count > len(self._commands):
            raise ChainError(
                f"Cannot remove {count} commands at {start} from chain of "
                f"{len(self._commands)} commands"
            )
        del self._commands[start : start + count]

    def clear(self) -> None:
        self._commands.clear()

    def to_text(self) -> str:
        """Program text, one line per command with a trailing newline."""
        if not self._commands:
            return ""
        return "\n".join(command.raw_text for command in self._commands) + "\n"


def parse_program(text: str, state: Optional[MotionState] = None) -> ProgramChain:
    """Parse program text into a chain with propagated state.

    Args:
        text: G-code program
        state: State before the first line (default: absolute positioning,
            relative extrusion)

    Returns:
        ProgramChain with one command per input line, blank lines included
    """
    if state is None:
        state = initial_state()
    chain = ProgramChain()
    for line in text.splitlines():
        command = GCodeCommand(line, state_before=state)
        command.recompute_state(state)
        chain.append(command)
        state = command.state_after
    return chain
