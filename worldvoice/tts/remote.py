"""
HTTP TTS engines: ElevenLabs and OpenAI.

Both return compressed audio (MP3 by default) as BufferedSpeech; the
transcoder turns it into playback PCM. A missing API key means the engine
cannot run and synthesize() returns None. HTTP errors raise.
"""
from __future__ import annotations

import logging

import httpx

from worldvoice.config import get_settings
from worldvoice.tts.base import TTSEngine
from worldvoice.tts.payload import BufferedSpeech

logger = logging.getLogger(__name__)


class ElevenLabsTTSEngine(TTSEngine):
    """ElevenLabs text-to-speech REST API."""

    base_url = "https://api.elevenlabs.io/v1/text-to-speech"

    def __init__(self, api_key: str | None = None, voice_id: str | None = None, timeout: float = 60.0) -> None:
        settings = get_settings()
        self._api_key = api_key if api_key is not None else settings.ELEVENLABS_XI_API_KEY
        self._voice_id = voice_id or settings.ELEVENLABS_VOICE_ID
        self._model_id = settings.ELEVENLABS_MODEL_ID
        self._output_format = settings.ELEVENLABS_OUTPUT_FORMAT
        self._voice_settings = {
            "stability": settings.ELEVENLABS_VOICE_STABILITY,
            "similarity_boost": settings.ELEVENLABS_VOICE_SIMILARITY_BOOST,
            "style": settings.ELEVENLABS_VOICE_STYLE,
            "use_speaker_boost": settings.ELEVENLABS_VOICE_USE_SPEAKER_BOOST,
        }
        self._timeout = timeout

    @property
    def format(self) -> str:
        return "audio/mpeg" if self._output_format.startswith("mp3") else "audio/L16"

    async def synthesize(self, text: str) -> BufferedSpeech | None:
        if not self._api_key:
            logger.error("ElevenLabs TTS: ELEVENLABS_XI_API_KEY not set")
            return None
        if not (text or "").strip():
            return None
        logger.info(
            "ElevenLabs TTS: voice=%s model=%s format=%s", self._voice_id, self._model_id, self._output_format
        )
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(
                f"{self.base_url}/{self._voice_id}",
                params={"output_format": self._output_format},
                headers={"xi-api-key": self._api_key, "Content-Type": "application/json"},
                json={
                    "text": text,
                    "model_id": self._model_id,
                    "voice_settings": self._voice_settings,
                },
            )
            resp.raise_for_status()
        logger.info("ElevenLabs TTS: %d bytes of audio", len(resp.content))
        return BufferedSpeech(resp.content)


class OpenAITTSEngine(TTSEngine):
    """OpenAI /v1/audio/speech. Output: MP3."""

    url = "https://api.openai.com/v1/audio/speech"

    def __init__(self, api_key: str | None = None, model: str | None = None, voice: str | None = None, timeout: float = 60.0) -> None:
        settings = get_settings()
        self._api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self._model = model or settings.OPENAI_TTS_MODEL
        self._voice = voice or settings.OPENAI_TTS_VOICE
        self._timeout = timeout

    @property
    def format(self) -> str:
        return "audio/mpeg"

    async def synthesize(self, text: str) -> BufferedSpeech | None:
        if not self._api_key:
            logger.error("OpenAI TTS: OPENAI_API_KEY not set")
            return None
        if not (text or "").strip():
            return None
        logger.info("OpenAI TTS: model=%s voice=%s", self._model, self._voice)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(
                self.url,
                headers={"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"},
                json={"model": self._model, "input": text, "voice": self._voice, "response_format": "mp3"},
            )
            resp.raise_for_status()
        logger.info("OpenAI TTS: %d bytes of audio", len(resp.content))
        return BufferedSpeech(resp.content)
