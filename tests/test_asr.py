from types import SimpleNamespace

import pytest

from worldvoice.asr.base import is_valid_transcription
from worldvoice.asr.cloudflare import CloudflareWhisperEngine, _parse_whisper_response
from worldvoice.asr.local_whisper import LocalWhisperEngine


def test_is_valid_transcription():
    assert is_valid_transcription("hello")
    assert not is_valid_transcription("")
    assert not is_valid_transcription("   ")
    assert not is_valid_transcription(None)
    assert not is_valid_transcription("[BLANK_AUDIO]")
    assert not is_valid_transcription(" [BLANK_AUDIO] ")
    assert not is_valid_transcription("<nothing>", blank_token="<nothing>")


class _FakeWhisperModel:
    def __init__(self, texts):
        self.texts = texts
        self.inputs = []

    def transcribe(self, audio, **kwargs):
        self.inputs.append(audio.read(4))
        return [SimpleNamespace(text=t) for t in self.texts], None


@pytest.mark.asyncio
async def test_local_whisper_joins_segments():
    model = _FakeWhisperModel([" Hello", "", " world "])
    result = await LocalWhisperEngine(model=model, beam_size=1).transcribe(b"RIFF....")
    assert result.text == "Hello world"
    assert result.confidence == 1.0
    assert model.inputs == [b"RIFF"]


@pytest.mark.asyncio
async def test_local_whisper_without_model_is_empty():
    result = await LocalWhisperEngine(model=None).transcribe(b"RIFF")
    assert result.text == ""


@pytest.mark.asyncio
async def test_cloudflare_without_credentials_is_empty():
    engine = CloudflareWhisperEngine(account_id="", api_token="")
    result = await engine.transcribe(b"RIFF")
    assert result.text == ""
    assert result.confidence == 0.0


def test_parse_whisper_response_shapes():
    assert _parse_whisper_response({"result": {"text": " hi "}}) == "hi"
    assert _parse_whisper_response({"result": {"transcript": "alt"}}) == "alt"
    assert _parse_whisper_response({"result": "plain"}) == "plain"
    assert _parse_whisper_response({"result": 3}) == ""
    assert "acct-1" in CloudflareWhisperEngine(account_id="acct-1", api_token="t").url
