# Role: Typed contracts for the voice path. AudioPayload is a finalized recording handed to transcription;
# RecordingState is the capture state machine's only state.

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

WEBM_MIME_TYPE = "audio/webm"
MPEG_MIME_TYPE = "audio/mpeg"


class RecordingState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"


class AudioPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str = WEBM_MIME_TYPE
    filename: str = Field(default="audio.webm")

    @property
    def size(self) -> int:
        return len(self.data)
