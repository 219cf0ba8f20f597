"""Token estimation for session transcripts.

Two methods:
1. Heuristic: total characters / 4, used for before/after reports.
2. Exact: read ``usage`` from the last main-chain assistant turn.
"""

from __future__ import annotations

from .helpers import get_msg_type, parse_line
from .types import Record

DEFAULT_CONTEXT_WINDOW = 200_000
CHARS_PER_TOKEN = 4


def estimate_tokens(lines: list[str]) -> int:
    """Rough token count for a line sequence (~4 characters per token)."""
    return sum(len(line) for line in lines) // CHARS_PER_TOKEN


def extract_usage_tokens(lines: list[str]) -> dict | None:
    """Extract exact token counts from the last main-chain assistant turn.

    Returns dict with keys: input_tokens, output_tokens,
    cache_creation_input_tokens, cache_read_input_tokens, total.
    Returns None if no usage data found.
    """
    for pos in range(len(lines) - 1, -1, -1):
        parsed = parse_line(lines[pos], pos)
        if not isinstance(parsed, Record):
            continue
        msg = parsed.data
        if get_msg_type(msg) != "assistant" or msg.get("isSidechain"):
            continue

        inner = msg.get("message")
        usage = inner.get("usage") if isinstance(inner, dict) else None
        if not usage or not isinstance(usage, dict):
            continue

        input_tok = usage.get("input_tokens", 0) or 0
        output_tok = usage.get("output_tokens", 0) or 0
        cache_create = usage.get("cache_creation_input_tokens", 0) or 0
        cache_read = usage.get("cache_read_input_tokens", 0) or 0

        # The cumulative context size is the sum of all input components
        return {
            "input_tokens": input_tok,
            "output_tokens": output_tok,
            "cache_creation_input_tokens": cache_create,
            "cache_read_input_tokens": cache_read,
            "total": input_tok + cache_create + cache_read,
        }

    return None


def context_pct(tokens: int, window: int = DEFAULT_CONTEXT_WINDOW) -> float:
    return round(tokens / window * 100, 1)
