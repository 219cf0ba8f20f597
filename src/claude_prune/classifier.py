"""Turn classification: lexical signal flags for a decoded record."""

from __future__ import annotations

import re

from .helpers import content_text, get_msg_type, msg_bytes
from .types import Record, Turn

CODE_FENCE_PATTERN = re.compile(r"```[\s\S]*?```")
CODE_DECL_PATTERN = re.compile(r"^\s*(import|export|function|class|const|let|var)\s+", re.MULTILINE)
ERROR_PATTERN = re.compile(r"error|exception|failed|failure|bug|issue|problem")

FILE_EDIT_TOOLS = frozenset({"Edit", "Write", "MultiEdit"})


def detect_code(msg: dict) -> bool:
    content = content_text(msg)
    return bool(CODE_FENCE_PATTERN.search(content) or CODE_DECL_PATTERN.search(content))


def detect_error(msg: dict) -> bool:
    if ERROR_PATTERN.search(content_text(msg).lower()):
        return True
    error = msg.get("error")
    if isinstance(error, (str, list, dict)):
        return len(error) > 0
    return False


def detect_file_edit(msg: dict) -> bool:
    tool_use = msg.get("tool_use")
    return isinstance(tool_use, dict) and tool_use.get("name") in FILE_EDIT_TOOLS


def _has_payload(value) -> bool:
    # an empty list or dict still marks the turn as a tool call
    return isinstance(value, (list, dict)) or bool(value)


def detect_tool_use(msg: dict) -> bool:
    return _has_payload(msg.get("tool_use")) or _has_payload(msg.get("tool_uses"))


def classify_turn(record: Record) -> Turn:
    """Project a turn record into a Turn with its signal flags.

    The flags are independent; a turn may set several at once.
    """
    msg = record.data
    timestamp = msg.get("timestamp")
    return Turn(
        position=record.position,
        type=get_msg_type(msg),
        content=content_text(msg),
        has_code=detect_code(msg),
        has_error=detect_error(msg),
        has_file_edit=detect_file_edit(msg),
        has_tool=detect_tool_use(msg),
        length=msg_bytes(msg),
        timestamp=timestamp if isinstance(timestamp, str) else None,
    )
