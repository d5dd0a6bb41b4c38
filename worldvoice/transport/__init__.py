"""Transport adapters: inbound speaker frames, outbound agent voice track."""
from .base import (
    AudioOutput,
    AudioTransport,
    EmoteSink,
    NoOpEmoteSink,
    NoOpPlayerHandle,
    PlayerHandle,
    TransportUnavailableError,
)

__all__ = [
    "AudioOutput",
    "AudioTransport",
    "EmoteSink",
    "NoOpEmoteSink",
    "NoOpPlayerHandle",
    "PlayerHandle",
    "TransportUnavailableError",
]
