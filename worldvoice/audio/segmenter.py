"""
SpeakerSegmenter: per-speaker buffering of inbound PCM frames.

- One SpeakerSession per speaker identity, created on the first frame.
- Loudness gate: a frame is kept only if its mean absolute amplitude exceeds
  the threshold (1000 on the int16 scale by default). Quiet frames are
  dropped without touching audio already buffered.
- Every accepted frame calls on_speech(speaker_id); the transcription
  scheduler uses it to re-arm the silence debounce.
- Sessions are never removed; flushing empties them but keeps the slot.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from worldvoice.audio.frames import check_pcm_length, mean_abs_amplitude
from worldvoice.audio.vad import VADProcessor
from worldvoice.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class SpeakerSession:
    """Buffered audio and rolling transcript for one speaker."""

    speaker_id: str
    chunks: list[bytes] = field(default_factory=list)
    total_length: int = 0
    last_active: float = field(default_factory=time.time)
    transcript: str = ""

    def append(self, chunk: bytes, now: float) -> None:
        self.chunks.append(chunk)
        self.total_length += len(chunk)
        self.last_active = now

    def take_audio(self) -> bytes:
        """Concatenate buffered chunks and empty the buffer. Transcript is kept."""
        audio = b"".join(self.chunks)
        self.chunks.clear()
        self.total_length = 0
        return audio

    def clear(self) -> None:
        self.chunks.clear()
        self.total_length = 0
        self.transcript = ""

    @property
    def has_audio(self) -> bool:
        return self.total_length > 0


class SpeakerSegmenter:
    """
    Routes frames to per-speaker sessions behind a loudness gate.
    Not thread-safe; call from the event loop only.
    """

    def __init__(
        self,
        on_speech: Callable[[str], None] | None = None,
        loudness_threshold: int | None = None,
        vad: VADProcessor | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        settings = get_settings()
        self._threshold = loudness_threshold if loudness_threshold is not None else settings.LOUDNESS_THRESHOLD
        self._on_speech = on_speech
        self._vad = vad
        self._clock = clock
        self._sessions: dict[str, SpeakerSession] = {}

    def set_on_speech(self, on_speech: Callable[[str], None] | None) -> None:
        self._on_speech = on_speech

    def is_loud_enough(self, frame: bytes) -> bool:
        return mean_abs_amplitude(frame) > self._threshold

    def ingest(self, speaker_id: str, frame: bytes) -> bool:
        """
        Offer one frame from speaker_id. Returns True when the frame was buffered.
        Raises ValueError for odd-length frames before any state changes.
        """
        check_pcm_length(frame)
        session = self._sessions.get(speaker_id)
        if session is None:
            session = SpeakerSession(speaker_id=speaker_id, last_active=self._clock())
            self._sessions[speaker_id] = session
            logger.debug("New speaker session: %s", speaker_id)

        if not frame or not self.is_loud_enough(frame):
            return False
        if self._vad is not None and not self._vad.is_speech(frame):
            return False

        session.append(frame, self._clock())
        if self._on_speech is not None:
            self._on_speech(speaker_id)
        return True

    def session(self, speaker_id: str) -> SpeakerSession | None:
        return self._sessions.get(speaker_id)

    @property
    def sessions(self) -> dict[str, SpeakerSession]:
        return self._sessions

    def clear_all(self) -> None:
        """Empty every session's buffer and transcript (slots stay)."""
        for session in self._sessions.values():
            session.clear()

    def reset(self) -> None:
        """Forget all speakers (disconnect)."""
        self._sessions.clear()
