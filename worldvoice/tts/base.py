"""
TTS engine interface. Implementations: Edge TTS, ElevenLabs, OpenAI.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from worldvoice.tts.payload import SpeechAudio


class TTSEngine(ABC):
    """Abstract TTS. synthesize(text) returns a SpeechAudio variant, or None when the engine cannot run."""

    @abstractmethod
    async def synthesize(self, text: str) -> SpeechAudio | None:
        """
        Convert text to speech. Errors from the remote service may surface
        here or later from SpeechAudio.drain().
        """
        ...

    @property
    @abstractmethod
    def format(self) -> str:
        """MIME type of output, e.g. 'audio/mpeg'."""
        ...
