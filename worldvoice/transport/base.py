"""
Transport boundary: where audio enters and leaves the agent.

- AudioTransport delivers (speaker_id, pcm_bytes) to a frame handler and
  publishes one named local audio track for the agent's voice.
- PlayerHandle receives the speaking-state toggle (lip sync).
- EmoteSink receives the emotion tag attached to a reply.
World movement and the rest of the avatar are handled elsewhere.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from worldvoice.audio.frames import AudioFrame

logger = logging.getLogger(__name__)

FrameHandler = Callable[[str, bytes], None]


class TransportUnavailableError(RuntimeError):
    """Transport is not connected (world not joined yet, or disconnected)."""


class AudioOutput(ABC):
    """Outbound audio source bound to a published track."""

    @abstractmethod
    async def capture_frame(self, frame: AudioFrame) -> None:
        ...


class AudioTransport(ABC):
    """Real-time room transport."""

    def __init__(self) -> None:
        self._frame_handler: FrameHandler | None = None

    def set_frame_handler(self, handler: FrameHandler | None) -> None:
        """handler(speaker_id, pcm_bytes) is called on the event loop for each inbound frame."""
        self._frame_handler = handler

    def emit_frame(self, speaker_id: str, pcm_bytes: bytes) -> None:
        if self._frame_handler is None:
            return
        try:
            self._frame_handler(speaker_id, pcm_bytes)
        except ValueError as e:
            logger.warning("Dropped frame from %s: %s", speaker_id, e)

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        ...

    @abstractmethod
    async def publish_track(self, name: str, sample_rate: int, channels: int) -> AudioOutput:
        """Create an audio source and publish it as a local track. Raises TransportUnavailableError."""
        ...


class PlayerHandle(ABC):
    """The agent's own avatar in the world."""

    @abstractmethod
    def set_speaking(self, speaking: bool) -> None:
        ...


class EmoteSink(ABC):
    @abstractmethod
    def play_emote(self, name: str) -> None:
        ...


class NoOpPlayerHandle(PlayerHandle):
    """Used when no avatar is attached."""

    def set_speaking(self, speaking: bool) -> None:
        pass


class NoOpEmoteSink(EmoteSink):
    def play_emote(self, name: str) -> None:
        pass
