"""Unit tests for the speech endpoint adapter."""
import pytest
import requests

from conftest import BASE_URL, make_response, mpeg_response
from grandpa_chat.models.audio import AudioPayload
from grandpa_chat.tools.speech_client import EMPTY_AUDIO, NOT_AUDIO, TRANSCRIBE_FAILED, SpeechClient


@pytest.fixture
def client(http):
    return SpeechClient(base_url=BASE_URL, http=http)


class TestTranscribe:
    """Tests for the multipart transcription path."""

    def test_uploads_webm_file_field(self, client, http):
        http.queue("transcribe", make_response(200, {"text": "hello grandpa"}))

        result = client.transcribe(AudioPayload(data=b"clip"))

        assert result.ok
        assert result.text == "hello grandpa"
        call = http.calls[0]
        assert call["url"] == f"{BASE_URL}/api/speech"
        assert call["files"] == {"file": ("audio.webm", b"clip", "audio/webm")}

    def test_server_error_message_is_used(self, client, http):
        http.queue("transcribe", make_response(400, {"error": "Audio too short"}))
        result = client.transcribe(AudioPayload(data=b"clip"))
        assert not result.ok
        assert result.error == "Audio too short"

    def test_default_error_message(self, client, http):
        http.queue("transcribe", make_response(500, content=b"oops"))
        result = client.transcribe(AudioPayload(data=b"clip"))
        assert result.error == TRANSCRIBE_FAILED

    def test_network_error(self, client, http):
        http.queue("transcribe", requests.Timeout("slow"))
        result = client.transcribe(AudioPayload(data=b"clip"))
        assert not result.ok
        assert result.error == TRANSCRIBE_FAILED

    def test_missing_text_field(self, client, http):
        http.queue("transcribe", make_response(200, {"transcript": "x"}))
        assert not client.transcribe(AudioPayload(data=b"clip")).ok


class TestSynthesize:
    """Tests for the text-to-speech path."""

    def test_returns_mpeg_bytes(self, client, http):
        http.queue("synthesize", mpeg_response(b"mp3-data"))

        result = client.synthesize("Back in my day")

        assert result.ok
        assert result.audio == b"mp3-data"
        assert result.mime_type == "audio/mpeg"
        assert http.calls[0]["json"] == {"text": "Back in my day"}

    def test_content_type_with_parameters_accepted(self, client, http):
        http.queue("synthesize", make_response(200, content=b"mp3", content_type="audio/mpeg; charset=binary"))
        assert client.synthesize("x").ok

    def test_wrong_content_type_fails_even_on_success(self, client, http):
        http.queue("synthesize", make_response(200, content=b"RIFF", content_type="audio/wav"))
        result = client.synthesize("x")
        assert not result.ok
        assert result.error == NOT_AUDIO

    def test_json_body_instead_of_audio_reports_its_error(self, client, http):
        http.queue("synthesize", make_response(200, {"error": "voice unavailable"}))
        result = client.synthesize("x")
        assert result.error == "voice unavailable"

    def test_missing_content_type_fails(self, client, http):
        http.queue("synthesize", make_response(200, content=b"mp3"))
        assert client.synthesize("x").error == NOT_AUDIO

    def test_empty_audio_fails(self, client, http):
        http.queue("synthesize", make_response(200, content=b"", content_type="audio/mpeg"))
        result = client.synthesize("x")
        assert not result.ok
        assert result.error == EMPTY_AUDIO

    def test_http_error_uses_status(self, client, http):
        http.queue("synthesize", make_response(503))
        assert client.synthesize("x").error == "Failed to generate speech: 503"

    def test_http_error_prefers_server_message(self, client, http):
        http.queue("synthesize", make_response(429, {"error": "Rate limited"}))
        assert client.synthesize("x").error == "Rate limited"

    def test_network_error(self, client, http):
        http.queue("synthesize", requests.ConnectionError("down"))
        result = client.synthesize("x")
        assert not result.ok
        assert "down" in result.error
