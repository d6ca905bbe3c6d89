# Role: Microphone adapters for front-ends that capture a whole clip at once
# (Streamlit's audio widget, an audio file passed to the CLI).

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Optional, Union

from grandpa_chat.audio.base import AudioStream, Microphone


class _ClipStream(AudioStream):
    def __init__(self, data: bytes) -> None:
        self._data: Optional[bytes] = data

    def flush(self) -> bytes:
        # The whole clip arrives as the final chunk.
        data, self._data = self._data or b"", b""
        return data

    def close(self) -> None:
        self._data = None


class ClipMicrophone(Microphone):
    def __init__(self, data: Optional[bytes]) -> None:
        self._data = data

    def open(self) -> AudioStream:
        if not self._data:
            raise PermissionError("No microphone input available")
        return _ClipStream(self._data)


class _FileStream(AudioStream):
    def __init__(self, handle: BinaryIO) -> None:
        self._handle = handle

    def flush(self) -> bytes:
        return self._handle.read()

    def close(self) -> None:
        self._handle.close()


class FileMicrophone(Microphone):
    """Treats an audio file on disk as the microphone. Opening fails like a missing device."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def open(self) -> AudioStream:
        # Key line: FileNotFoundError / PermissionError are OSErrors, same as a device failure.
        return _FileStream(self.path.open("rb"))
