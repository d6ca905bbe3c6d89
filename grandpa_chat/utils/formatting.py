# Role: Display helpers shared by the Streamlit page and the CLI (timestamps, speaker labels, status line).

from __future__ import annotations

from datetime import datetime
from typing import Optional

from grandpa_chat.models.message import Message

PROCESSING_TEXT = "Processing..."

_LABELS = {"user": "You", "assistant": "Grandpa", "system": "System"}


def format_timestamp(ts: Optional[datetime]) -> Optional[str]:
    # Local wall-clock time, like a browser's toLocaleTimeString().
    if ts is None:
        return None
    return ts.astimezone().strftime("%H:%M:%S")


def speaker_label(message: Message) -> str:
    return _LABELS.get(message.role, message.role)


def format_line(message: Message) -> str:
    stamp = format_timestamp(message.timestamp)
    head = f"{speaker_label(message)}" + (f" [{stamp}]" if stamp else "")
    return f"{head}: {message.content}"
