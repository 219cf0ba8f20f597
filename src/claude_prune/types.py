"""Core data types for claude-prune."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

# Discriminants that make a record a conversational turn
MSG_TYPES = frozenset({"user", "assistant", "system"})


@dataclass(frozen=True)
class Record:
    """A transcript line that decoded to a JSON object."""

    position: int
    raw: str
    data: dict


@dataclass(frozen=True)
class OpaqueLine:
    """A transcript line that is not a decodable JSON object."""

    position: int
    raw: str


@dataclass(frozen=True)
class Turn:
    """A user/assistant/system record with its derived signal flags."""

    position: int
    type: str
    content: str
    has_code: bool
    has_error: bool
    has_file_edit: bool
    has_tool: bool
    length: int
    timestamp: str | None = None


@dataclass
class PhaseCharacteristics:
    code_blocks: int = 0
    errors: int = 0
    file_edits: int = 0
    tool_uses: int = 0

    def absorb(self, other: PhaseCharacteristics) -> None:
        self.code_blocks += other.code_blocks
        self.errors += other.errors
        self.file_edits += other.file_edits
        self.tool_uses += other.tool_uses


@dataclass
class WorkPhase:
    """A contiguous labeled span of turns.

    ``start``/``end`` are global line positions; ``start_rank``/``end_rank``
    are the same bounds as 0-based ranks in the turn sequence.
    """

    start: int
    end: int
    start_rank: int
    end_rank: int
    description: str
    message_count: int
    characteristics: PhaseCharacteristics = field(default_factory=PhaseCharacteristics)


@dataclass
class SessionAnalysis:
    total_messages: int
    total_tokens: int
    work_phases: list[WorkPhase]
    key_messages: list[int]
    message_details: list[Turn]


@dataclass
class StrategyCandidate:
    """A named candidate selection offered to the user."""

    name: str
    label: str
    menu_label: str
    indices: list[int]
    percent_freed: int


@dataclass
class StrategyInfo:
    """Metadata about a registered strategy."""

    name: str
    description: str
    func: Callable


@dataclass
class PruneSelection:
    """The final choice handed to the pruning transform."""

    indices_to_keep: list[int]
    strategy: str


@dataclass
class PruneResult:
    out_lines: list[str]
    kept: int
    dropped: int
    strategy: str


@dataclass
class LegacyPruneResult(PruneResult):
    assistant_count: int = 0


@dataclass(frozen=True)
class BackupInfo:
    name: str
    timestamp: int


# Type alias for the parser's tagged result
ParsedLine = Record | OpaqueLine
