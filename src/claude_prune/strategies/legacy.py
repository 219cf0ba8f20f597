"""Legacy mode: keep everything from the N-th-from-last assistant turn onward."""

from __future__ import annotations


def legacy_selection(
    turn_positions: list[int],
    assistant_positions: list[int],
    keep_n: int,
) -> list[int]:
    """Positions of all turns at or after the cutoff assistant turn.

    With ``keep_n`` or fewer assistant turns every turn is kept. ``keep_n == 0``
    against a session that has assistant turns keeps none.
    """
    keep_n = max(0, keep_n)
    if len(assistant_positions) <= keep_n:
        return list(turn_positions)
    if keep_n == 0:
        return []

    cut_from = assistant_positions[-keep_n]
    return [pos for pos in turn_positions if pos >= cut_from]
