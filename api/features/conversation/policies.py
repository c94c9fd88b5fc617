"""Conversation policies: title heuristic and history windowing."""
from __future__ import annotations

from typing import Dict, List, Sequence

from api.features.conversation.entities.message import Message

DEFAULT_HISTORY_WINDOW = 20
TITLE_MAX_CHARS = 20
TITLE_ELLIPSIS = "..."


def derive_title(first_message: str, max_chars: int = TITLE_MAX_CHARS) -> str:
    """Title from the first user message.

    Lengths count code points (``str`` indexing), never bytes.
    """
    if len(first_message) <= max_chars:
        return first_message
    return first_message[:max_chars] + TITLE_ELLIPSIS


def build_history_window(
    messages: Sequence[Message], window_size: int = DEFAULT_HISTORY_WINDOW
) -> List[Dict[str, str]]:
    """Project the trailing ``window_size`` messages into ``{role, content}`` dicts.

    Order is preserved. The system prompt is not part of the window.
    """
    if window_size <= 0:
        return []
    tail = list(messages)[-window_size:]
    return [{"role": m.role.wire_name, "content": m.content} for m in tail]
