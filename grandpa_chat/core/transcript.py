# Role: Append-only transcript for one session. Owns ordering and id uniqueness;
# the first entry is always the system directive and nothing is ever removed or edited.

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Set, Tuple

from grandpa_chat.models.message import Message
from grandpa_chat.prompts.system_prompt import build_system_prompt


class TranscriptStore:
    def __init__(self, system_prompt: Optional[str] = None) -> None:
        directive = Message.system(system_prompt if system_prompt is not None else build_system_prompt())
        self._messages: List[Message] = [directive]
        self._ids: Set[str] = {directive.id}

    def append(self, message: Message) -> Message:
        # 1) Only one system directive, and it is already at index 0
        # 2) Reject id collisions (ids are render keys)
        # 3) Add to the end
        if message.role == "system":
            raise ValueError("Transcript already has a system message")
        if message.id in self._ids:
            raise ValueError(f"Duplicate message id: {message.id}")

        self._messages.append(message)
        self._ids.add(message.id)
        return message

    def snapshot(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def visible(self) -> List[Message]:
        # Key line: rendering skips the system directive.
        return self._messages[1:]

    def as_payload(self) -> List[Dict[str, str]]:
        return [m.to_payload() for m in self._messages]

    def latest_user_message(self) -> Optional[Message]:
        for message in reversed(self._messages):
            if message.role == "user":
                return message
        return None

    def is_floating(self, message: Message) -> bool:
        # Only the most recently sent user message floats.
        latest = self.latest_user_message()
        return message.is_floating and latest is not None and latest.id == message.id

    @property
    def system_message(self) -> Message:
        return self._messages[0]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
