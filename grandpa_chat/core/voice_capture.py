# Role: Recording state machine (idle -> recording -> idle). Owns the microphone stream while recording,
# buffers captured chunks, and produces one AudioPayload on stop. Transcription is the session's job.

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from grandpa_chat.audio.base import AudioStream, Microphone
from grandpa_chat.models.audio import WEBM_MIME_TYPE, AudioPayload, RecordingState

logger = logging.getLogger(__name__)


class VoiceCapture:
    def __init__(self, microphone: Optional[Microphone] = None, mime_type: str = WEBM_MIME_TYPE) -> None:
        self.microphone = microphone
        self.mime_type = mime_type
        self._state = RecordingState.IDLE
        self._stream: Optional[AudioStream] = None
        self._chunks: List[bytes] = []
        self._stop_requested = False

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state == RecordingState.RECORDING

    async def start_recording(
        self,
        microphone: Optional[Microphone] = None,
        still_allowed: Optional[Callable[[], bool]] = None,
    ) -> bool:
        # 1) No-op if already recording
        # 2) Acquire the device (off the event loop; opening can block on a permission prompt)
        # 3) On denial/unavailable: log and stay idle
        # 4) Re-check after the open: a stop, or the caller's gate, may have changed meanwhile
        if self.is_recording:
            return False

        mic = microphone or self.microphone
        if mic is None:
            logger.error("Error accessing microphone: no microphone configured")
            return False

        # Key line: claim the state before suspending so a second start is a no-op.
        self._state = RecordingState.RECORDING
        self._stop_requested = False
        stream: Optional[AudioStream] = None
        try:
            stream = await asyncio.to_thread(mic.open)
        except OSError as e:
            logger.error("Error accessing microphone: %s", e)
        finally:
            if stream is None:
                self._state = RecordingState.IDLE

        if stream is None:
            return False

        if self._stop_requested or (still_allowed is not None and not still_allowed()):
            stream.close()
            self._state = RecordingState.IDLE
            self._stop_requested = False
            logger.debug("Recording abandoned while the microphone was opening")
            return False

        self._stream = stream
        self._chunks = []
        logger.debug("Recording started")
        return True

    def append_chunk(self, chunk: bytes) -> bool:
        # Chunks outside a recording are dropped.
        if not self.is_recording or self._stream is None or not chunk:
            return False
        self._chunks.append(chunk)
        return True

    def stop_recording(self) -> Optional[AudioPayload]:
        # 1) No-op unless recording; a stop during the open cancels the pending start
        # 2) Drain the final chunk, finalize the buffer
        # 3) Release the stream (always)
        if not self.is_recording:
            return None
        if self._stream is None:
            self._stop_requested = True
            return None

        stream = self._stream
        try:
            tail = stream.flush()
            if tail:
                self._chunks.append(tail)
        finally:
            stream.close()
            self._stream = None
            self._state = RecordingState.IDLE

        payload = AudioPayload(data=b"".join(self._chunks), mime_type=self.mime_type)
        self._chunks = []
        logger.debug("Recording stopped (%d bytes)", payload.size)
        return payload
