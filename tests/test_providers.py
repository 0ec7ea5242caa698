"""Tests für den OpenAI-kompatiblen Transkriptions-Provider (Client gemockt)."""

from types import SimpleNamespace
from unittest.mock import Mock

import httpx
import openai
import pytest

from providers import get_transcriber
from providers.openai import OpenAITranscriber
from utils.errors import UploadError
from utils.settings import Settings


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "20261019-093000.mp3"
    path.write_bytes(b"ID3 fake mp3")
    return path


def _transcriber(response=None, error=None, language=None):
    client = Mock()
    create = client.audio.transcriptions.create
    if error is not None:
        create.side_effect = error
    else:
        create.return_value = response
    transcriber = OpenAITranscriber(
        api_key="k", model="whisper-large-v3", base_url="https://x/v1",
        language=language, client=client,
    )
    return transcriber, create


class TestTranscribe:
    def test_text_response(self, audio_file):
        transcriber, create = _transcriber(" hello world\n")

        assert transcriber.transcribe(audio_file) == " hello world\n"

        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "whisper-large-v3"
        assert kwargs["response_format"] == "text"
        assert kwargs["file"][0] == "20261019-093000.mp3"
        assert "language" not in kwargs

    def test_object_response(self, audio_file):
        transcriber, _ = _transcriber(SimpleNamespace(text="hallo"))
        assert transcriber.transcribe(audio_file) == "hallo"

    def test_language_passed(self, audio_file):
        transcriber, create = _transcriber("hallo", language="de")
        transcriber.transcribe(audio_file)
        assert create.call_args.kwargs["language"] == "de"

    def test_api_error_becomes_upload_error(self, audio_file):
        request = httpx.Request("POST", "https://x/v1/audio/transcriptions")
        transcriber, _ = _transcriber(error=openai.APIConnectionError(request=request))

        with pytest.raises(UploadError) as exc:
            transcriber.transcribe(audio_file)

        assert exc.value.stage == "upload"

    def test_unexpected_response(self, audio_file):
        transcriber, _ = _transcriber(response=42)
        with pytest.raises(UploadError):
            transcriber.transcribe(audio_file)

    def test_missing_file(self, tmp_path):
        transcriber, _ = _transcriber("x")
        with pytest.raises(UploadError):
            transcriber.transcribe(tmp_path / "fehlt.mp3")


def test_client_configured_from_settings():
    settings = Settings(
        api_key="k", model="m", base_url="https://api.example.com/v1",
        upload_timeout=30.0, upload_retries=2,
    )

    transcriber = get_transcriber(settings)

    client = transcriber._client
    assert str(client.base_url).rstrip("/") == "https://api.example.com/v1"
    assert client.timeout == 30.0
    assert client.max_retries == 2
