from __future__ import annotations

from themeport_core.messages.convert import (
    convert_message_value,
    convert_messages,
    merge_messages,
    messages_to_json,
)

__all__ = [
    "convert_message_value",
    "convert_messages",
    "merge_messages",
    "messages_to_json",
]
