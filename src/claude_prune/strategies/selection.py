"""Menu strategies: recent-only, bookends, and smart key-turn selection."""

from __future__ import annotations

import math

from ..registry import percent_freed, strategy
from ..types import StrategyCandidate

RECENT_KEEP_FRACTION = 0.4
AUTO_RECENT_START_FRACTION = 0.4
BOOKEND_FIRST_MAX = 10
BOOKEND_FIRST_FRACTION = 0.1
BOOKEND_LAST_MAX = 30
BOOKEND_LAST_FRACTION = 0.3


def floor_share(total: int, fraction: float) -> int:
    """``floor(total * fraction)``, tolerant of float noise such as 0.29 * 100."""
    return math.floor(round(total * fraction, 9))


def recent_positions(turn_positions: list[int], start_fraction: float) -> list[int]:
    """Keep turns from rank ``floor(start_fraction * n)`` onward."""
    start = floor_share(len(turn_positions), start_fraction)
    return turn_positions[start:]


def bookend_positions(
    turn_positions: list[int],
    first_count: int,
    last_count: int,
) -> list[int]:
    head = turn_positions[:first_count]
    tail = turn_positions[len(turn_positions) - last_count:] if last_count > 0 else []
    return sorted(set(head) | set(tail))


@strategy("recent", "Keep only the most recent turns (last 40% by default)")
def strategy_recent(analyzer, config: dict) -> StrategyCandidate:
    positions = analyzer.turn_positions
    total = len(positions)
    keep_fraction = config.get("recent_keep_fraction", RECENT_KEEP_FRACTION)
    indices = recent_positions(positions, 1 - keep_fraction)
    kept = len(indices)
    return StrategyCandidate(
        name="recent",
        label=f"Keep last {kept} messages",
        menu_label=f"Keep last {kept} messages only",
        indices=indices,
        percent_freed=percent_freed(total, kept),
    )


@strategy("bookends", "Keep the opening turns plus the most recent ones")
def strategy_bookends(analyzer, config: dict) -> StrategyCandidate:
    positions = analyzer.turn_positions
    total = len(positions)
    first_count = min(
        config.get("bookend_first_max", BOOKEND_FIRST_MAX),
        floor_share(total, config.get("bookend_first_fraction", BOOKEND_FIRST_FRACTION)),
    )
    last_count = min(
        config.get("bookend_last_max", BOOKEND_LAST_MAX),
        floor_share(total, config.get("bookend_last_fraction", BOOKEND_LAST_FRACTION)),
    )
    indices = bookend_positions(positions, first_count, last_count)
    return StrategyCandidate(
        name="bookends",
        label=f"Bookends (first {first_count} + last {last_count})",
        menu_label=f"Keep first {first_count} + last {last_count} messages",
        indices=indices,
        percent_freed=percent_freed(total, len(indices)),
    )


@strategy("smart", "Keep the highest-scoring turns (edits, code, errors)")
def strategy_smart(analyzer, config: dict) -> StrategyCandidate:
    indices = analyzer.find_key_messages()
    total = analyzer.total_turns
    return StrategyCandidate(
        name="smart",
        label=f"Smart selection ({len(indices)} important messages)",
        menu_label=f"Keep {len(indices)} important messages (code/errors)",
        indices=indices,
        percent_freed=percent_freed(total, len(indices)),
    )
