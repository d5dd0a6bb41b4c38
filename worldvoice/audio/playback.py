"""
PlaybackScheduler: real-time, frame-paced publishing of agent speech.

- One PlaybackSession per scheduler: the outbound track is created and
  published on first use and reused afterwards.
- One frame of silence goes out first to prime the receiver's jitter buffer.
- Content is cut into fixed frames (100 ms by default). Frame i is sent no
  earlier than T0 + i * frame_ms on a monotonic clock. When the loop falls
  behind, frames go out immediately; nothing is dropped and nothing is sent
  early.
- A publish() while another is in flight is rejected, not queued.
- The avatar's speaking flag is on for the duration and always reset.
"""
from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

import numpy as np

from worldvoice.audio.frames import AudioFrame
from worldvoice.config import get_settings
from worldvoice.transport.base import AudioOutput, AudioTransport, NoOpPlayerHandle, PlayerHandle

logger = logging.getLogger(__name__)


@dataclass
class PlaybackSession:
    """Outbound track handle plus the busy flag guarding it."""

    output: AudioOutput | None = None
    sample_rate: int | None = None
    channels: int | None = None
    busy: bool = False


class PlaybackScheduler:
    def __init__(
        self,
        transport: AudioTransport | None,
        player: PlayerHandle | None = None,
        frame_ms: int | None = None,
        track_name: str | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        settings = get_settings()
        self._transport = transport
        self._player = player or NoOpPlayerHandle()
        self._frame_ms = frame_ms or settings.PLAYBACK_FRAME_MS
        self._track_name = track_name or settings.AGENT_TRACK_NAME
        self._clock = clock
        self._sleep = sleep
        self._session = PlaybackSession()
        self._speaking = False

    @property
    def busy(self) -> bool:
        return self._session.busy

    @property
    def speaking(self) -> bool:
        return self._speaking

    @property
    def frame_ms(self) -> int:
        return self._frame_ms

    def set_player(self, player: PlayerHandle | None) -> None:
        self._player = player or NoOpPlayerHandle()

    def _set_speaking(self, speaking: bool) -> None:
        self._speaking = speaking
        try:
            self._player.set_speaking(speaking)
        except Exception as e:
            logger.warning("set_speaking(%s) failed: %s", speaking, e)

    def frame_count(self, num_samples: int, sample_rate: int, channels: int = 1) -> int:
        """Content frames needed for num_samples interleaved samples (silence primer excluded)."""
        step = sample_rate * self._frame_ms // 1000 * channels
        return math.ceil(num_samples / step) if num_samples else 0

    async def _ensure_output(self, sample_rate: int, channels: int) -> AudioOutput:
        session = self._session
        if session.output is None:
            logger.info("Creating audio source and track %r", self._track_name)
            session.output = await self._transport.publish_track(self._track_name, sample_rate, channels)
            session.sample_rate = sample_rate
            session.channels = channels
        return session.output

    async def publish(self, samples: np.ndarray, sample_rate: int, channels: int = 1) -> bool:
        """
        Stream samples to the outbound track at real-time pace.
        Returns True when every frame was sent; False when rejected or failed.
        Raises ValueError for malformed input before anything is touched.
        """
        if channels < 1 or len(samples) % channels:
            raise ValueError(f"{len(samples)} samples cannot be split into {channels} channels")
        session = self._session
        if session.output is not None and (session.sample_rate, session.channels) != (sample_rate, channels):
            raise ValueError(
                f"track publishes {session.sample_rate} Hz x {session.channels}, got {sample_rate} Hz x {channels}"
            )
        if session.busy:
            logger.info("Playback already in progress; ignoring new audio")
            return False
        if self._transport is None or not self._transport.is_ready:
            logger.error("Cannot play audio - transport not available")
            return False
        if len(samples) == 0:
            logger.warning("No PCM samples to play")
            return False

        session.busy = True
        self._set_speaking(True)
        samples = np.asarray(samples, dtype=np.int16)
        samples_per_frame = sample_rate * self._frame_ms // 1000
        step = samples_per_frame * channels
        frame_sec = self._frame_ms / 1000.0
        try:
            output = await self._ensure_output(sample_rate, channels)
            await output.capture_frame(AudioFrame.silence(sample_rate, channels, samples_per_frame))

            total_frames = math.ceil(len(samples) / step)
            start = self._clock()
            for i in range(total_frames):
                deadline = start + i * frame_sec
                now = self._clock()
                if now < deadline:
                    await self._sleep(deadline - now)
                chunk = samples[i * step : (i + 1) * step]
                await output.capture_frame(AudioFrame.from_samples(chunk, sample_rate, channels))

            logger.info(
                "Audio streaming complete (%d frames, %.0fms)", total_frames, (self._clock() - start) * 1000
            )
            return True
        except Exception as e:
            logger.error("Audio playback failed: %s", e)
            return False
        finally:
            session.busy = False
            self._set_speaking(False)
