"""
ASREngine: abstract interface for Whisper-compatible speech-to-text.

Engines receive a self-describing WAV buffer (header + int16 PCM) so they never
have to be told the inbound sample rate. Implementations: LocalWhisperEngine
(faster-whisper), CloudflareWhisperEngine. Heavy work runs in an executor so
the event loop keeps pacing audio.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

BLANK_AUDIO_TOKEN = "[BLANK_AUDIO]"


@dataclass
class ASRResult:
    """Result of one ASR transcribe call."""

    text: str
    confidence: float  # 0.0–1.0 estimate


def is_valid_transcription(text: str | None, blank_token: str = BLANK_AUDIO_TOKEN) -> bool:
    """False for empty text and for the engine's "no speech" sentinel."""
    if not text or not text.strip():
        return False
    return blank_token not in text


class ASREngine(ABC):
    """Abstract ASR engine. transcribe() is async and must not block the event loop."""

    @abstractmethod
    async def transcribe(self, wav_bytes: bytes) -> ASRResult:
        """Transcribe one complete utterance given as a WAV buffer."""
        ...
