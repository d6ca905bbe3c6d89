# Role: Single chat message schema for the transcript. Rendered by the UIs and serialized (role + content)
# for the chat endpoint. Frozen so content never changes after creation.

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict

Role = Literal["user", "assistant", "system"]

SYSTEM_MESSAGE_ID = "system-prompt"


def new_message_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    id: str
    timestamp: Optional[datetime] = None
    is_floating: bool = False

    @classmethod
    def system(cls, content: str) -> "Message":
        # Key line: the directive has a fixed id and no timestamp.
        return cls(role="system", content=content, id=SYSTEM_MESSAGE_ID)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(
            role="user",
            content=content,
            id=new_message_id("user"),
            timestamp=_now(),
            is_floating=True,
        )

    @classmethod
    def assistant(cls, content: str, *, error: bool = False) -> "Message":
        return cls(
            role="assistant",
            content=content,
            id=new_message_id("error" if error else "assistant"),
            timestamp=_now(),
        )

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}
