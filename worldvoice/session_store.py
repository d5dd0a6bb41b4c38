"""
In-memory conversation store for the chat runtime, keyed by speaker id.
Lost on restart; nothing is persisted.
"""
from __future__ import annotations

import time
from typing import Any

# speaker_id -> {
#   "messages": [{"role": "user"|"assistant", "content": str}, ...],
#   "created_at": float,
#   "updated_at": float,
# }
_conversation_store: dict[str, dict[str, Any]] = {}


def get_conversation(speaker_id: str) -> dict[str, Any] | None:
    """Return conversation dict or None if not found."""
    return _conversation_store.get(speaker_id)


def ensure_conversation(speaker_id: str) -> dict[str, Any]:
    """Create conversation if not exists and return it."""
    conv = _conversation_store.get(speaker_id)
    if conv is None:
        now = time.time()
        conv = {"messages": [], "created_at": now, "updated_at": now}
        _conversation_store[speaker_id] = conv
    return conv


def append_exchange(speaker_id: str, user_text: str, reply: str, max_messages: int) -> None:
    """Append one user/assistant pair, keeping only the last max_messages entries."""
    conv = ensure_conversation(speaker_id)
    messages = conv["messages"]
    messages.append({"role": "user", "content": user_text})
    messages.append({"role": "assistant", "content": reply})
    if max_messages > 0 and len(messages) > max_messages:
        del messages[: len(messages) - max_messages]
    conv["updated_at"] = time.time()


def delete_conversation(speaker_id: str) -> bool:
    """Remove conversation. Return True if it existed."""
    return _conversation_store.pop(speaker_id, None) is not None


def clear_conversations() -> None:
    _conversation_store.clear()
