"""
VADProcessor: optional Voice Activity Detection after the loudness gate.

Uses webrtcvad (aggressiveness 0–3). webrtcvad only accepts 10, 20 or 30 ms
frames of mono PCM at 8/16/32/48 kHz; frames it cannot judge are passed
through, since they already cleared the loudness gate.
"""
from __future__ import annotations

import webrtcvad

from worldvoice.config import get_settings

_VAD_SAMPLE_RATES = (8000, 16000, 32000, 48000)
_VAD_FRAME_MS = (10, 20, 30)


class VADProcessor:
    """Wraps webrtcvad for mono int16 frames at the inbound sample rate."""

    def __init__(self, aggressiveness: int | None = None, sample_rate: int | None = None) -> None:
        """
        aggressiveness: 0 (least aggressive) to 3 (most aggressive).
        Higher = more frames classified as silence.
        """
        settings = get_settings()
        if aggressiveness is None:
            aggressiveness = settings.VAD_AGGRESSIVENESS
        self._sample_rate = sample_rate or settings.INPUT_SAMPLE_RATE
        if self._sample_rate not in _VAD_SAMPLE_RATES:
            raise ValueError(f"webrtcvad does not support {self._sample_rate} Hz")
        self._vad = webrtcvad.Vad(aggressiveness)
        # 2 bytes per sample, mono
        self._frame_sizes = {self._sample_rate * ms // 1000 * 2 for ms in _VAD_FRAME_MS}

    def can_judge(self, frame: bytes) -> bool:
        return len(frame) in self._frame_sizes

    def is_speech(self, frame: bytes) -> bool:
        """True if frame contains speech, or if the frame size is one webrtcvad cannot judge."""
        if not self.can_judge(frame):
            return True
        return self._vad.is_speech(frame, self._sample_rate)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate
