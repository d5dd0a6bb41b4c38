"""
AudioReceiver: re-frames an arbitrary byte stream into fixed-size PCM frames.

WebSocket clients may split audio anywhere (even mid-sample); the segmenter
needs whole int16 frames. Any remainder is kept for the next message.
"""
from __future__ import annotations

from worldvoice.config import get_settings


class AudioReceiver:
    def __init__(self, frame_bytes: int | None = None) -> None:
        settings = get_settings()
        if frame_bytes is None:
            frame_bytes = (
                settings.INPUT_SAMPLE_RATE * settings.INGRESS_FRAME_MS // 1000
                * settings.SAMPLE_WIDTH * settings.INPUT_CHANNELS
            )
        if frame_bytes <= 0 or frame_bytes % 2:
            raise ValueError(f"frame_bytes must be a positive even number, got {frame_bytes}")
        self._frame_bytes = frame_bytes
        self._buffer = bytearray()

    @property
    def frame_bytes(self) -> int:
        return self._frame_bytes

    def feed(self, data: bytes) -> None:
        """Append raw PCM bytes. Call from WebSocket handler."""
        self._buffer.extend(data)

    def drain_frames(self) -> list[bytes]:
        """
        Drain all complete frames from the buffer.
        Returns list of full frames; remainder stays in buffer.
        """
        out: list[bytes] = []
        while len(self._buffer) >= self._frame_bytes:
            out.append(bytes(self._buffer[: self._frame_bytes]))
            del self._buffer[: self._frame_bytes]
        return out

    def remaining_bytes(self) -> int:
        """Bytes left in buffer (incomplete frame)."""
        return len(self._buffer)
