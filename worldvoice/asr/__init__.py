"""ASR: swappable Whisper-compatible engines."""
from .base import BLANK_AUDIO_TOKEN, ASREngine, ASRResult, is_valid_transcription
from .local_whisper import LocalWhisperEngine, load_whisper_model
from .cloudflare import CloudflareWhisperEngine

__all__ = [
    "BLANK_AUDIO_TOKEN",
    "ASREngine",
    "ASRResult",
    "is_valid_transcription",
    "LocalWhisperEngine",
    "CloudflareWhisperEngine",
    "load_whisper_model",
]
