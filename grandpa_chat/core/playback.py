# Role: Text-to-speech for assistant messages. Fetches audio through SpeechClient and starts the player
# right away. Independent of the busy flag; overlapping requests each play on their own.

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Set

from grandpa_chat.audio.base import AudioPlayer
from grandpa_chat.tools.speech_client import SpeechClient

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]


class Playback:
    def __init__(self, speech_client: SpeechClient, player: AudioPlayer, notify: Notifier) -> None:
        self.speech_client = speech_client
        self.player = player
        self._notify = notify
        self._tasks: Set["asyncio.Task[bool]"] = set()

    async def speak_text(self, text: str) -> bool:
        # 1) Synthesize (off the event loop)
        # 2) Any failure -> notification only
        # 3) Success -> start playback, don't wait for it
        logger.debug("Sending text to speech API: %s", text)
        result = await asyncio.to_thread(self.speech_client.synthesize, text)
        if not result.ok:
            self._notify(result.error or "Failed to generate speech")
            return False

        mime_type = result.mime_type or "audio/mpeg"
        try:
            if self.player.blocking:
                await asyncio.to_thread(self.player.play, result.audio, mime_type)
            else:
                self.player.play(result.audio, mime_type)
        except OSError as e:
            logger.error("Error playing audio: %s", e)
            self._notify("Failed to play audio")
            return False
        return True

    def speak(self, text: str) -> "asyncio.Task[bool]":
        # Key line: detached task; the set keeps a strong reference until it finishes.
        task = asyncio.get_running_loop().create_task(self.speak_text(text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def wait_idle(self, timeout: Optional[float] = None) -> None:
        if self._tasks:
            await asyncio.wait(set(self._tasks), timeout=timeout)
