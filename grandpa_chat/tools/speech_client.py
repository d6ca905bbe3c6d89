# Role: External tool adapter for the speech endpoint. One URL, two modes:
# multipart upload -> {text} (transcription) and JSON {text} -> audio/mpeg bytes (synthesis).
# Never raises for transport/validation problems; returns ok/error result objects instead.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

import grandpa_chat.config as config
from grandpa_chat.models.audio import MPEG_MIME_TYPE, AudioPayload

logger = logging.getLogger(__name__)

TRANSCRIBE_FAILED = "Failed to transcribe audio"
NOT_AUDIO = "Response was not audio format"
EMPTY_AUDIO = "Empty audio received from API"


@dataclass(frozen=True)
class TranscriptionResult:
    ok: bool
    text: str = ""
    error: Optional[str] = None


@dataclass(frozen=True)
class SynthesisResult:
    ok: bool
    audio: bytes = b""
    mime_type: Optional[str] = None
    error: Optional[str] = None


def _error_field(r: requests.Response) -> Optional[str]:
    # Best effort: servers report {error: "..."} on failure, but the body may be anything.
    try:
        payload: Any = r.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, str) and error.strip():
            return error
    return None


class SpeechClient:
    SPEECH_PATH = "/api/speech"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or config.BACKEND_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self._http = http or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.SPEECH_PATH}"

    def transcribe(self, audio: AudioPayload) -> TranscriptionResult:
        # 1) Package the clip as multipart field "file"
        # 2) POST once
        # 3) Non-success -> server error message (or default); success -> {text}
        files = {"file": (audio.filename, audio.data, audio.mime_type)}
        logger.debug("POST %s (transcribe, %d bytes)", self.url, audio.size)

        try:
            r = self._http.post(self.url, files=files, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Error transcribing audio: %s", e)
            return TranscriptionResult(ok=False, error=TRANSCRIBE_FAILED)

        if not r.ok:
            error = _error_field(r) or TRANSCRIBE_FAILED
            logger.error("Transcription failed: HTTP %s %s", r.status_code, error)
            return TranscriptionResult(ok=False, error=error)

        try:
            payload: Any = r.json()
        except ValueError as e:
            logger.error("Bad transcription payload: %s", e)
            return TranscriptionResult(ok=False, error=TRANSCRIBE_FAILED)

        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            return TranscriptionResult(ok=False, error=TRANSCRIBE_FAILED)

        return TranscriptionResult(ok=True, text=text)

    def synthesize(self, text: str) -> SynthesisResult:
        # 1) POST {text}
        # 2) Non-success -> server error message (or status-based default)
        # 3) Content-Type must be audio/mpeg and the body non-empty, even on success
        logger.debug("POST %s (synthesize, %d chars)", self.url, len(text))

        try:
            r = self._http.post(self.url, json={"text": text}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Error generating speech: %s", e)
            return SynthesisResult(ok=False, error=f"Failed to generate speech: {e}")

        if not r.ok:
            error = _error_field(r) or f"Failed to generate speech: {r.status_code}"
            logger.error("Error response from speech API: %s %s", r.status_code, error)
            return SynthesisResult(ok=False, error=error)

        content_type = r.headers.get("Content-Type")
        logger.debug("Response content type: %s", content_type)
        if not content_type or MPEG_MIME_TYPE not in content_type:
            error = _error_field(r) or NOT_AUDIO
            logger.error("Invalid response format: %s", error)
            return SynthesisResult(ok=False, error=error)

        audio = r.content or b""
        if not audio:
            logger.error("Empty audio blob received")
            return SynthesisResult(ok=False, error=EMPTY_AUDIO)

        logger.debug("Audio received, size: %d", len(audio))
        return SynthesisResult(ok=True, audio=audio, mime_type=MPEG_MIME_TYPE)

    def close(self) -> None:
        self._http.close()
