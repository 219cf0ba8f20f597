"""Shared helper functions for decoding and inspecting transcript lines."""

from __future__ import annotations

import json

from .types import MSG_TYPES, OpaqueLine, ParsedLine, Record


def parse_line(line: str, position: int) -> ParsedLine:
    """Decode one transcript line.

    Anything that is not a JSON object comes back as an OpaqueLine; this
    never raises.
    """
    try:
        data = json.loads(line)
    except (ValueError, TypeError, RecursionError):
        return OpaqueLine(position=position, raw=line)
    if not isinstance(data, dict):
        return OpaqueLine(position=position, raw=line)
    return Record(position=position, raw=line, data=data)


def msg_bytes(msg: dict) -> int:
    """Calculate the serialized byte size of a message."""
    return len(json.dumps(msg, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))


def get_msg_type(msg: dict) -> str:
    """Get the type field from a message."""
    mtype = msg.get("type", "unknown")
    return mtype if isinstance(mtype, str) else "unknown"


def is_turn_record(parsed: ParsedLine) -> bool:
    """True if the parsed line is a user/assistant/system turn past the metadata line."""
    return (
        isinstance(parsed, Record)
        and parsed.position > 0
        and get_msg_type(parsed.data) in MSG_TYPES
    )


def _inner(msg: dict) -> dict:
    inner = msg.get("message")
    return inner if isinstance(inner, dict) else {}


def content_text(msg: dict) -> str:
    """Get the textual content of a message.

    Prefers the top-level ``content`` field and falls back to
    ``message.content``. Content block lists are flattened to their text.
    """
    content = msg.get("content") or _inner(msg).get("content") or ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict):
                text = block.get("text") or block.get("content") or ""
                if isinstance(text, str):
                    parts.append(text)
        return "\n".join(parts)
    return ""


def usage_of(msg: dict) -> dict | None:
    """Return the token-accounting object at ``usage`` or ``message.usage``."""
    usage = msg.get("usage")
    if not isinstance(usage, dict):
        usage = _inner(msg).get("usage")
    return usage if isinstance(usage, dict) else None
