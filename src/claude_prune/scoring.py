"""Importance scoring and key-turn selection."""

from __future__ import annotations

import math

from .types import Turn

KEY_MIN_COUNT = 10
KEY_FRACTION = 0.2

# Additive weights per signal
WEIGHT_FILE_EDIT = 10
WEIGHT_CODE = 5
WEIGHT_ERROR = 7
WEIGHT_TOOL = 3
LONG_TURN_BYTES = 1000
VERY_LONG_TURN_BYTES = 2000
RECENCY_WEIGHT = 3


def score_turn(turn: Turn, rank: int, total: int) -> float:
    """Weighted sum of the turn's signals plus a recency bonus in [0, 3)."""
    score = 0.0

    if turn.has_file_edit:
        score += WEIGHT_FILE_EDIT
    if turn.has_code:
        score += WEIGHT_CODE
    if turn.has_error:
        score += WEIGHT_ERROR
    if turn.has_tool:
        score += WEIGHT_TOOL

    # Longer turns tend to carry more substance
    if turn.length > LONG_TURN_BYTES:
        score += 2
    if turn.length > VERY_LONG_TURN_BYTES:
        score += 3

    if total:
        score += rank / total * RECENCY_WEIGHT
    return score


def find_key_messages(turns: list[Turn], config: dict | None = None) -> list[int]:
    """Return positions of the highest-scoring turns, in ascending order.

    Keeps ``max(key_min_count, floor(key_fraction * n))`` turns. Equal scores
    keep their original relative order (``sorted`` is stable).
    """
    config = config or {}
    total = len(turns)
    scored = [(score_turn(t, rank, total), t.position) for rank, t in enumerate(turns)]
    scored = sorted(scored, key=lambda s: s[0], reverse=True)

    keep_count = max(
        config.get("key_min_count", KEY_MIN_COUNT),
        math.floor(total * config.get("key_fraction", KEY_FRACTION)),
    )
    return sorted(pos for _, pos in scored[:keep_count])
