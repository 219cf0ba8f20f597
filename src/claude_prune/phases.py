"""Work phase segmentation.

Two passes over the turn sequence:

1. ``label_windows`` cuts the turns into fixed windows, labels each window
   and extends the current phase while consecutive windows share a label.
2. ``merge_phases`` folds same-label phases whose gap is at most
   ``MERGE_GAP`` turns, absorbing label flicker from a single outlier window.
"""

from __future__ import annotations

from .types import MSG_TYPES, PhaseCharacteristics, Turn, WorkPhase

WINDOW_SIZE = 10
SETUP_TURN_THRESHOLD = 6
MERGE_GAP = 3

DEBUGGING = "Debugging and error resolution"
IMPLEMENTATION = "Implementation and coding"
EXPLORATION = "Exploration and file reading"
SETUP = "Initial setup and requirements"
DISCUSSION = "Discussion and planning"
GENERAL = "General development"

_CONVERSATIONAL = MSG_TYPES - {"system"}


def window_characteristics(window: list[Turn]) -> PhaseCharacteristics:
    return PhaseCharacteristics(
        code_blocks=sum(1 for t in window if t.has_code),
        errors=sum(1 for t in window if t.has_error),
        file_edits=sum(1 for t in window if t.has_file_edit),
        tool_uses=sum(1 for t in window if t.has_tool),
    )


def classify_window(
    chars: PhaseCharacteristics,
    window: list[Turn],
    start_rank: int,
    setup_turn_threshold: int = SETUP_TURN_THRESHOLD,
) -> str:
    """Label one window. Rules are checked in precedence order."""
    total = len(window)

    if chars.errors > total * 0.3:
        return DEBUGGING

    if chars.file_edits > total * 0.3 or chars.code_blocks > total * 0.4:
        return IMPLEMENTATION

    if chars.tool_uses > total * 0.4 and chars.file_edits == 0:
        return EXPLORATION

    if all(t.type in _CONVERSATIONAL for t in window) and chars.tool_uses == 0:
        if start_rank < setup_turn_threshold:
            return SETUP
        return DISCUSSION

    return GENERAL


def label_windows(
    turns: list[Turn],
    window_size: int = WINDOW_SIZE,
    setup_turn_threshold: int = SETUP_TURN_THRESHOLD,
) -> list[WorkPhase]:
    """First pass: label fixed windows and run-length join identical labels."""
    phases: list[WorkPhase] = []
    current: WorkPhase | None = None

    for start in range(0, len(turns), window_size):
        window = turns[start:start + window_size]
        end = start + len(window) - 1
        chars = window_characteristics(window)
        label = classify_window(chars, window, start, setup_turn_threshold)

        if current is None or label != current.description:
            current = WorkPhase(
                start=window[0].position,
                end=window[-1].position,
                start_rank=start,
                end_rank=end,
                description=label,
                message_count=len(window),
                characteristics=chars,
            )
            phases.append(current)
        else:
            current.end = window[-1].position
            current.end_rank = end
            current.message_count += len(window)
            current.characteristics.absorb(chars)

    return phases


def merge_phases(phases: list[WorkPhase], gap: int = MERGE_GAP) -> list[WorkPhase]:
    """Second pass: fold same-label neighbours separated by at most ``gap`` turns.

    Returns new WorkPhase objects; the input list is left untouched.
    """
    if not phases:
        return []

    def _copy(p: WorkPhase) -> WorkPhase:
        return WorkPhase(
            start=p.start,
            end=p.end,
            start_rank=p.start_rank,
            end_rank=p.end_rank,
            description=p.description,
            message_count=p.message_count,
            characteristics=PhaseCharacteristics(
                p.characteristics.code_blocks,
                p.characteristics.errors,
                p.characteristics.file_edits,
                p.characteristics.tool_uses,
            ),
        )

    merged: list[WorkPhase] = []
    current = _copy(phases[0])
    for phase in phases[1:]:
        if phase.description == current.description and phase.start_rank - current.end_rank <= gap:
            current.end = phase.end
            current.end_rank = phase.end_rank
            current.message_count += phase.message_count
            current.characteristics.absorb(phase.characteristics)
        else:
            merged.append(current)
            current = _copy(phase)
    merged.append(current)
    return merged


def detect_work_phases(turns: list[Turn], config: dict | None = None) -> list[WorkPhase]:
    """Segment turns into contiguous labeled work phases."""
    if not turns:
        return []
    config = config or {}
    phases = label_windows(
        turns,
        window_size=config.get("window_size", WINDOW_SIZE),
        setup_turn_threshold=config.get("setup_turn_threshold", SETUP_TURN_THRESHOLD),
    )
    return merge_phases(phases, gap=config.get("merge_gap", MERGE_GAP))
