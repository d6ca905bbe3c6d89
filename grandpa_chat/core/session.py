# Role: Orchestrator for one conversation. It glues together:
# transcript, draft/submit gating, the busy flag, voice capture + transcription, chat gateway, and playback.

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from grandpa_chat.audio.base import AudioPlayer, Microphone
from grandpa_chat.audio.players import FilePlayer
from grandpa_chat.core.input_controller import InputController
from grandpa_chat.core.playback import Playback
from grandpa_chat.core.transcript import TranscriptStore
from grandpa_chat.core.voice_capture import VoiceCapture
from grandpa_chat.models.audio import AudioPayload
from grandpa_chat.models.message import Message
from grandpa_chat.tools.chat_gateway import ChatGateway, ChatGatewayError
from grandpa_chat.tools.speech_client import SpeechClient, TranscriptionResult

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I encountered an error. Please try again."
RECORDING_DISCARDED = "Still processing the previous request; recording discarded."

Notifier = Callable[[str], None]


def _log_notification(message: str) -> None:
    logger.warning("Notification: %s", message)


class ConversationSession:
    def __init__(
        self,
        chat_gateway: Optional[ChatGateway] = None,
        speech_client: Optional[SpeechClient] = None,
        microphone: Optional[Microphone] = None,
        player: Optional[AudioPlayer] = None,
        notify: Optional[Notifier] = None,
        system_prompt: Optional[str] = None,
    ) -> None:
        # Key line: dependencies are injectable for testing/mocking.
        self.chat_gateway = chat_gateway or ChatGateway()
        self.speech_client = speech_client or SpeechClient()
        self.transcript = TranscriptStore(system_prompt)
        self.input = InputController()
        self.voice = VoiceCapture(microphone)
        self.playback = Playback(self.speech_client, player or FilePlayer(), self.notify)

        self._system_prompt = system_prompt
        self._notifier = notify or _log_notification
        self.notifications: List[str] = []
        self._busy = False

    # ----------------------------
    # State inspection
    # ----------------------------
    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def is_recording(self) -> bool:
        return self.voice.is_recording

    def can_submit(self) -> bool:
        return self.input.can_submit(self._busy)

    def can_record(self) -> bool:
        return not self._busy and not self.voice.is_recording

    def notify(self, message: str) -> None:
        self.notifications.append(message)
        self._notifier(message)

    @contextmanager
    def _hold_busy(self) -> Iterator[None]:
        # Key line: busy is released on every exit path.
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    # ----------------------------
    # Chat
    # ----------------------------
    async def submit(self) -> Optional[Message]:
        # 1) Gate: non-blank draft and not busy (checked before any await)
        # 2) Append user message, clear draft, hold busy
        # 3) Send the full transcript (system included)
        # 4) Append the reply, or the fallback apology on any gateway failure
        if not self.can_submit():
            return None

        with self._hold_busy():
            self.transcript.append(Message.user(self.input.take()))
            payload = self.transcript.as_payload()

            try:
                content = await asyncio.to_thread(self.chat_gateway.complete, payload)
                reply = Message.assistant(content)
            except ChatGatewayError as e:
                logger.error("Error getting completion: %s", e)
                reply = Message.assistant(FALLBACK_REPLY, error=True)

            return self.transcript.append(reply)

    # ----------------------------
    # Voice capture + transcription
    # ----------------------------
    async def start_recording(self, microphone: Optional[Microphone] = None) -> bool:
        if self._busy:
            return False
        # Key line: busy may be taken while the microphone is opening.
        return await self.voice.start_recording(microphone, still_allowed=lambda: not self._busy)

    def append_chunk(self, chunk: bytes) -> bool:
        return self.voice.append_chunk(chunk)

    async def stop_recording(self) -> Optional[TranscriptionResult]:
        # 1) No-op unless recording; always releases the microphone
        # 2) Refuse to share busy with an in-flight request
        # 3) Transcribe and replace the draft
        try:
            payload = self.voice.stop_recording()
        except OSError as e:
            logger.error("Error finishing recording: %s", e)
            return None

        if payload is None:
            return None

        if self._busy:
            self.notify(RECORDING_DISCARDED)
            return None

        return await self.transcribe(payload)

    async def transcribe(self, payload: AudioPayload) -> Optional[TranscriptionResult]:
        if self._busy:
            return None

        with self._hold_busy():
            result = await asyncio.to_thread(self.speech_client.transcribe, payload)

        if result.ok:
            self.input.replace_draft(result.text)
        else:
            self.notify(result.error or "Failed to transcribe audio")
        return result

    # ----------------------------
    # Playback (not gated by busy)
    # ----------------------------
    async def speak_text(self, text: str) -> bool:
        return await self.playback.speak_text(text)

    def speak(self, text: str) -> "asyncio.Task[bool]":
        return self.playback.speak(text)

    # ----------------------------
    # Lifecycle
    # ----------------------------
    def reset(self) -> bool:
        # Start a fresh transcript (same gateways). Not allowed mid-request or mid-recording.
        if self._busy or self.voice.is_recording:
            return False
        self.transcript = TranscriptStore(self._system_prompt)
        self.input.clear()
        self.notifications.clear()
        return True

    def close(self) -> None:
        self.chat_gateway.close()
        self.speech_client.close()
        self.playback.player.close()
