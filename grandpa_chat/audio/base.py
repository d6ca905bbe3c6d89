# Role: Device seams for the voice path. A Microphone hands out an exclusively-owned AudioStream;
# an AudioPlayer starts playing bytes and returns without waiting for the end.

from __future__ import annotations

from abc import ABC, abstractmethod


class AudioStream(ABC):
    """An open capture stream. Owned by one recording at a time."""

    @abstractmethod
    def flush(self) -> bytes:
        """Return whatever audio is still buffered in the device (may be empty)."""

    @abstractmethod
    def close(self) -> None:
        """Release the device."""


class Microphone(ABC):
    @abstractmethod
    def open(self) -> AudioStream:
        """Acquire the device.

        Raises:
            PermissionError: access was denied
            OSError: the device is unavailable
        """


class AudioPlayer(ABC):
    # Players that touch the disk or spawn processes set this; they are called off the event loop.
    blocking: bool = False

    @abstractmethod
    def play(self, audio: bytes, mime_type: str) -> None:
        """Begin playback. Must not block until playback ends."""

    def close(self) -> None:
        """Release anything the player still holds."""
