"""
TTS service: pick engine from config.
- edge: Edge TTS (free).
- elevenlabs / openai: HTTP engines (API key required).
- auto: ElevenLabs first, OpenAI when ElevenLabs fails.
- none: TTS off.
"""
from __future__ import annotations

import logging
from typing import Sequence

from worldvoice.config import get_settings
from worldvoice.tts.base import TTSEngine
from worldvoice.tts.edge_tts import EdgeTTSEngine
from worldvoice.tts.payload import BufferedSpeech, SpeechAudio
from worldvoice.tts.remote import ElevenLabsTTSEngine, OpenAITTSEngine

logger = logging.getLogger(__name__)


class FallbackTTSEngine(TTSEngine):
    """
    Tries engines in order. Each result is drained here so a failure half-way
    through a stream still falls through to the next engine.
    """

    def __init__(self, engines: Sequence[TTSEngine]) -> None:
        if not engines:
            raise ValueError("FallbackTTSEngine needs at least one engine")
        self._engines = list(engines)

    @property
    def format(self) -> str:
        return self._engines[0].format

    async def synthesize(self, text: str) -> SpeechAudio | None:
        for engine in self._engines:
            name = type(engine).__name__
            try:
                speech = await engine.synthesize(text)
                if speech is None:
                    continue
                data = await speech.drain()
            except Exception as e:
                logger.warning("TTS engine %s failed: %s", name, e)
                continue
            if data:
                return BufferedSpeech(data)
            logger.warning("TTS engine %s returned no audio", name)
        return None


def get_tts_engine() -> TTSEngine | None:
    """Return TTS engine from config (edge / elevenlabs / openai / auto / none)."""
    settings = get_settings()
    backend = (getattr(settings, "TTS_BACKEND", "") or "edge").strip().lower()
    if backend == "none":
        return None
    if backend == "edge":
        return EdgeTTSEngine(voice=settings.TTS_EDGE_VOICE or None)
    if backend == "elevenlabs":
        return ElevenLabsTTSEngine()
    if backend == "openai":
        return OpenAITTSEngine()
    if backend == "auto":
        return FallbackTTSEngine([ElevenLabsTTSEngine(), OpenAITTSEngine()])
    logger.warning("Unknown TTS_BACKEND=%s; use edge, elevenlabs, openai, auto or none", backend)
    return None
