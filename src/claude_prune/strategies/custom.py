"""Custom range selection: ``1-10,50-*`` style expressions over 1-based turn ranks."""

from __future__ import annotations

import re

from ..errors import InvalidRangeError
from ..types import PruneSelection

RANGE_EXPRESSION = re.compile(r"^\d+(-(\d+|\*))?(,\d+(-(\d+|\*))?)*,?$")
RANGE_PART = re.compile(r"(\d+)(?:-(\d+|\*))?")

_WHITESPACE = re.compile(r"\s+")


def _normalize(text: str) -> str:
    return _WHITESPACE.sub("", text or "")


def validate_range_expression(text: str) -> str | None:
    """Return a validation message for a bad expression, or None if it is fine."""
    value = _normalize(text)
    if not value:
        return "Please enter at least one range"
    if not RANGE_EXPRESSION.match(value):
        return 'Invalid format. Use "1-10,20-30" or "1-10,50-*"'
    return None


def parse_ranges(text: str, turn_positions: list[int]) -> list[int]:
    """Resolve a range expression to sorted global line positions.

    Ranks are 1-based; ``*`` as an end bound means the last turn. Ranks
    outside the session are clipped, duplicates collapse.

    Raises InvalidRangeError on a part that is not ``N``, ``N-M`` or ``N-*``.
    """
    total = len(turn_positions)
    positions: set[int] = set()

    for part in _normalize(text).split(","):
        if not part:
            continue
        m = RANGE_PART.fullmatch(part)
        if m is None:
            raise InvalidRangeError(f"Invalid range: {part}")
        start_str, end_str = m.groups()
        if end_str is not None:
            start = int(start_str) - 1
            end = total - 1 if end_str == "*" else int(end_str) - 1
            for rank in range(max(0, start), min(end, total - 1) + 1):
                positions.add(turn_positions[rank])
        else:
            rank = int(start_str) - 1
            if 0 <= rank < total:
                positions.add(turn_positions[rank])

    return sorted(positions)


def custom_selection(text: str, turn_positions: list[int]) -> PruneSelection:
    """Build a selection from a range expression.

    Raises InvalidRangeError if the expression is malformed or selects nothing.
    """
    message = validate_range_expression(text)
    if message:
        raise InvalidRangeError(message)

    indices = parse_ranges(text, turn_positions)
    if not indices:
        raise InvalidRangeError("No valid indices found")

    return PruneSelection(indices_to_keep=indices, strategy=f"Custom ({text.strip()})")
