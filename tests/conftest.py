"""Pytest configuration and shared fixtures."""
import json
import threading
from typing import Any, Dict, List, Optional, Union

import pytest
import requests

from grandpa_chat.audio.base import AudioPlayer, AudioStream, Microphone
from grandpa_chat.core.session import ConversationSession
from grandpa_chat.tools.chat_gateway import ChatGateway
from grandpa_chat.tools.speech_client import SpeechClient

BASE_URL = "http://backend.test"

Reply = Union[requests.Response, Exception]


def make_response(
    status: int = 200,
    json_body: Any = None,
    content: Optional[bytes] = None,
    content_type: Optional[str] = None,
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    r = requests.Response()
    r.status_code = status
    r.url = BASE_URL
    if json_body is not None:
        r._content = json.dumps(json_body).encode("utf-8")
        r.headers["Content-Type"] = "application/json"
    else:
        r._content = content or b""
    if content_type is not None:
        r.headers["Content-Type"] = content_type
    r.encoding = "utf-8"
    return r


def mpeg_response(audio: bytes = b"ID3fake-mp3") -> requests.Response:
    return make_response(200, content=audio, content_type="audio/mpeg")


class FakeHTTP:
    """Stands in for requests.Session; routes POSTs to per-endpoint reply queues."""

    def __init__(self) -> None:
        self.replies: Dict[str, List[Reply]] = {"chat": [], "transcribe": [], "synthesize": []}
        self.calls: List[Dict[str, Any]] = []
        self.gate: Optional[threading.Event] = None
        self.closed = False

    def queue(self, route: str, *replies: Reply) -> "FakeHTTP":
        self.replies[route].extend(replies)
        return self

    def _route(self, url: str, files: Any) -> str:
        if url.endswith("/api/chat"):
            return "chat"
        return "transcribe" if files is not None else "synthesize"

    def post(self, url: str, json: Any = None, files: Any = None, timeout: Any = None, **kwargs: Any) -> requests.Response:
        route = self._route(url, files)
        self.calls.append({"route": route, "url": url, "json": json, "files": files, "timeout": timeout})
        if self.gate is not None:
            self.gate.wait(timeout=5)
        reply = self.replies[route].pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def route_calls(self, route: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["route"] == route]

    def close(self) -> None:
        self.closed = True


class FakeStream(AudioStream):
    def __init__(self, tail: bytes) -> None:
        self.tail = tail
        self.closed = False

    def flush(self) -> bytes:
        data, self.tail = self.tail, b""
        return data

    def close(self) -> None:
        self.closed = True


class FakeMicrophone(Microphone):
    def __init__(self, tail: bytes = b"", error: Optional[OSError] = None) -> None:
        self.tail = tail
        self.error = error
        self.streams: List[FakeStream] = []

    def open(self) -> AudioStream:
        if self.error is not None:
            raise self.error
        stream = FakeStream(self.tail)
        self.streams.append(stream)
        return stream


class SlowMicrophone(FakeMicrophone):
    """Microphone whose open() blocks until the test releases it."""

    def __init__(self, tail: bytes = b"") -> None:
        super().__init__(tail=tail)
        self.release = threading.Event()

    def open(self) -> AudioStream:
        self.release.wait(timeout=5)
        return super().open()


class FakePlayer(AudioPlayer):
    def __init__(self) -> None:
        self.played: List[bytes] = []
        self.closed = False

    def play(self, audio: bytes, mime_type: str) -> None:
        assert mime_type == "audio/mpeg"
        self.played.append(audio)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def http():
    return FakeHTTP()


@pytest.fixture
def microphone():
    return FakeMicrophone(tail=b"webm-bytes")


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def notices():
    return []


@pytest.fixture
def session(http, microphone, player, notices):
    return ConversationSession(
        chat_gateway=ChatGateway(base_url=BASE_URL, http=http),
        speech_client=SpeechClient(base_url=BASE_URL, http=http),
        microphone=microphone,
        player=player,
        notify=notices.append,
    )
