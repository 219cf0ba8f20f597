"""Pruning transform: rewrite a transcript down to a selection of turns."""

from __future__ import annotations

import json
from typing import Iterable

from .helpers import get_msg_type, is_turn_record, parse_line, usage_of
from .strategies.legacy import legacy_selection
from .types import MSG_TYPES, LegacyPruneResult, PruneResult, Record

CACHE_READ_FIELD = "cache_read_input_tokens"


def _cache_read_value(parsed) -> int | float:
    if not isinstance(parsed, Record):
        return 0
    usage = usage_of(parsed.data)
    if usage is None:
        return 0
    value = usage.get(CACHE_READ_FIELD)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def find_last_cache_read_line(lines: list[str]) -> int:
    """Position of the last line with a positive cache-read token count, or -1."""
    for pos in range(len(lines) - 1, -1, -1):
        if _cache_read_value(parse_line(lines[pos], pos)) > 0:
            return pos
    return -1


def apply_cache_fixup(lines: list[str]) -> list[str]:
    """Zero the cache-read count on the last line that has a positive one.

    Every other line, including earlier non-zero readings, is left as is.
    Returns a new list.
    """
    target = find_last_cache_read_line(lines)
    out = list(lines)
    if target < 0:
        return out

    data = json.loads(lines[target])
    usage = data.get("usage")
    if not isinstance(usage, dict):
        usage = data["message"]["usage"]
    usage[CACHE_READ_FIELD] = 0
    out[target] = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return out


def prune_with_indices(lines: list[str], indices_to_keep: Iterable[int], strategy: str) -> PruneResult:
    """Keep the selected turns; copy every non-turn line unconditionally.

    Line 0 (session metadata) always leads the output.
    """
    keep = set(indices_to_keep)
    out_lines: list[str] = []
    kept = 0
    dropped = 0

    if not lines:
        return PruneResult(out_lines=out_lines, kept=0, dropped=0, strategy=strategy)

    out_lines.append(lines[0])
    processed = apply_cache_fixup(lines)

    for pos in range(1, len(processed)):
        line = processed[pos]
        if is_turn_record(parse_line(line, pos)):
            if pos in keep:
                kept += 1
                out_lines.append(line)
            else:
                dropped += 1
        else:
            # tool results, snapshots, diagnostics
            out_lines.append(line)

    return PruneResult(out_lines=out_lines, kept=kept, dropped=dropped, strategy=strategy)


def prune_session_lines(lines: list[str], keep_n: int) -> LegacyPruneResult:
    """Legacy mode: keep turns from the ``keep_n``-th-from-last assistant turn on."""
    turn_positions: list[int] = []
    assistant_positions: list[int] = []
    for pos in range(1, len(lines)):
        parsed = parse_line(lines[pos], pos)
        if not isinstance(parsed, Record):
            continue
        mtype = get_msg_type(parsed.data)
        if mtype in MSG_TYPES:
            turn_positions.append(pos)
            if mtype == "assistant":
                assistant_positions.append(pos)

    indices = legacy_selection(turn_positions, assistant_positions, keep_n)
    result = prune_with_indices(lines, indices, f"Keep last {keep_n} assistant messages")
    return LegacyPruneResult(
        out_lines=result.out_lines,
        kept=result.kept,
        dropped=result.dropped,
        strategy=result.strategy,
        assistant_count=len(assistant_positions),
    )
