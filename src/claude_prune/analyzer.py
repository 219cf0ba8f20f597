"""Session analysis: turn extraction, phases, and key turns."""

from __future__ import annotations

from .classifier import classify_turn
from .helpers import is_turn_record, parse_line
from .phases import detect_work_phases
from .scoring import find_key_messages
from .tokens import estimate_tokens
from .types import SessionAnalysis, Turn, WorkPhase


class SessionAnalyzer:
    """Read-only analysis over an immutable line sequence.

    ``turn_positions`` is the single rank -> global position table; every
    index handed to other components is a global line position.
    """

    def __init__(self, lines: list[str], config: dict | None = None):
        self.lines = list(lines)
        self.config = config or {}
        self.turns: list[Turn] = []
        self.turn_positions: list[int] = []
        self.assistant_positions: list[int] = []
        self._analyze()

    def _analyze(self) -> None:
        for pos, line in enumerate(self.lines):
            if pos == 0:
                continue  # session metadata
            parsed = parse_line(line, pos)
            if not is_turn_record(parsed):
                continue
            turn = classify_turn(parsed)
            self.turns.append(turn)
            self.turn_positions.append(pos)
            if turn.type == "assistant":
                self.assistant_positions.append(pos)

    @property
    def total_turns(self) -> int:
        return len(self.turns)

    def position_of_rank(self, rank: int) -> int:
        """Global line position of the turn at 0-based ``rank``."""
        return self.turn_positions[rank]

    def detect_work_phases(self) -> list[WorkPhase]:
        return detect_work_phases(self.turns, self.config)

    def find_key_messages(self) -> list[int]:
        return find_key_messages(self.turns, self.config)

    def estimate_tokens(self) -> int:
        return estimate_tokens(self.lines)

    def get_analysis(self) -> SessionAnalysis:
        return SessionAnalysis(
            total_messages=self.total_turns,
            total_tokens=self.estimate_tokens(),
            work_phases=self.detect_work_phases(),
            key_messages=self.find_key_messages(),
            message_details=list(self.turns),
        )
