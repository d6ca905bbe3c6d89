# Role: Draft buffer for the user's next message. Knows when a submit is allowed;
# the session decides what a submit does.

from __future__ import annotations

from typing import Optional


class InputController:
    def __init__(self, draft: str = "") -> None:
        self._draft = draft

    @property
    def draft(self) -> str:
        return self._draft

    def set_draft(self, text: Optional[str]) -> None:
        self._draft = text or ""

    def replace_draft(self, text: str) -> None:
        # Key line: transcription replaces the draft wholesale, it never appends.
        self._draft = text

    def clear(self) -> None:
        self._draft = ""

    def has_content(self) -> bool:
        return bool(self._draft.strip())

    def can_submit(self, busy: bool) -> bool:
        return self.has_content() and not busy

    def take(self) -> str:
        # Return the stripped draft and clear the buffer.
        text = self._draft.strip()
        self._draft = ""
        return text
