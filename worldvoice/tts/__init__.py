"""
TTS: text-to-speech for agent replies.

Engines return a SpeechAudio variant (buffered, pulled or pushed); callers
drain it into one buffer before transcoding.
"""
from __future__ import annotations

from worldvoice.tts.base import TTSEngine
from worldvoice.tts.edge_tts import EdgeTTSEngine
from worldvoice.tts.payload import BufferedSpeech, PulledSpeech, PushedSpeech, SpeechAudio
from worldvoice.tts.remote import ElevenLabsTTSEngine, OpenAITTSEngine
from worldvoice.tts.service import FallbackTTSEngine, get_tts_engine

__all__ = [
    "TTSEngine",
    "EdgeTTSEngine",
    "ElevenLabsTTSEngine",
    "OpenAITTSEngine",
    "FallbackTTSEngine",
    "get_tts_engine",
    "SpeechAudio",
    "BufferedSpeech",
    "PulledSpeech",
    "PushedSpeech",
]
