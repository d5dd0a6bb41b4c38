import pytest

from worldvoice.tts.base import TTSEngine
from worldvoice.tts.edge_tts import EdgeTTSEngine, split_text_chunks
from worldvoice.tts.payload import BufferedSpeech, PulledSpeech, PushedSpeech
from worldvoice.tts.remote import ElevenLabsTTSEngine, OpenAITTSEngine
from worldvoice.tts.service import FallbackTTSEngine, get_tts_engine


@pytest.mark.asyncio
async def test_buffered_and_pulled_drain():
    assert await BufferedSpeech(b"abc").drain() == b"abc"
    assert await PulledSpeech([b"ab", b"", b"cd"]).drain() == b"abcd"

    async def chunks():
        yield b"12"
        yield b"34"

    assert await PulledSpeech(chunks()).drain() == b"1234"


@pytest.mark.asyncio
async def test_pushed_speech_collects_until_end():
    speech = PushedSpeech()
    speech.feed(b"ab")
    speech.feed(b"cd")
    speech.end()
    assert await speech.drain() == b"abcd"

    with pytest.raises(RuntimeError):
        speech.feed(b"late")


@pytest.mark.asyncio
async def test_pushed_speech_failure_surfaces():
    speech = PushedSpeech()
    speech.feed(b"ab")
    speech.fail(ConnectionError("socket closed"))
    with pytest.raises(ConnectionError):
        await speech.drain()


class _StaticTTS(TTSEngine):
    def __init__(self, result=None, error=None):
        self.calls = 0
        self._result = result
        self._error = error

    @property
    def format(self):
        return "audio/mpeg"

    async def synthesize(self, text):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._result


@pytest.mark.asyncio
async def test_fallback_moves_on_after_failure():
    async def broken_stream():
        yield b"partial"
        raise ConnectionError("dropped")

    first = _StaticTTS(result=PulledSpeech(broken_stream()))
    second = _StaticTTS(error=RuntimeError("401"))
    third = _StaticTTS(result=BufferedSpeech(b"mp3-bytes"))
    engine = FallbackTTSEngine([first, second, third])

    speech = await engine.synthesize("hello")
    assert await speech.drain() == b"mp3-bytes"
    assert (first.calls, second.calls, third.calls) == (1, 1, 1)


@pytest.mark.asyncio
async def test_fallback_returns_none_when_all_fail():
    engine = FallbackTTSEngine([_StaticTTS(result=None), _StaticTTS(result=BufferedSpeech(b""))])
    assert await engine.synthesize("hello") is None

    with pytest.raises(ValueError):
        FallbackTTSEngine([])


def test_split_text_chunks():
    assert split_text_chunks("") == []
    assert split_text_chunks("Short one.") == ["Short one."]

    text = "First sentence here. Second sentence follows! Third one?"
    chunks = split_text_chunks(text, max_chars=25)
    assert all(len(c) <= 25 for c in chunks)
    assert " ".join(chunks) == text

    long_word = "x" * 60
    assert split_text_chunks(long_word, max_chars=25) == ["x" * 25, "x" * 25, "x" * 10]


@pytest.mark.asyncio
async def test_engines_without_keys_return_none():
    assert await ElevenLabsTTSEngine(api_key="").synthesize("hello") is None
    assert await OpenAITTSEngine(api_key="").synthesize("hello") is None
    assert await EdgeTTSEngine().synthesize("   ") is None


def test_get_tts_engine_backends(monkeypatch):
    monkeypatch.setenv("TTS_BACKEND", "none")
    assert get_tts_engine() is None

    monkeypatch.setenv("TTS_BACKEND", "edge")
    assert isinstance(get_tts_engine(), EdgeTTSEngine)

    monkeypatch.setenv("TTS_BACKEND", "auto")
    assert isinstance(get_tts_engine(), FallbackTTSEngine)

    monkeypatch.setenv("TTS_BACKEND", "nonsense")
    assert get_tts_engine() is None
