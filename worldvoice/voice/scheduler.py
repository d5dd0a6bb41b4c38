"""
TranscriptionScheduler: silence-debounced speech-to-text turns.

Debounce policy: ONE timer for the whole pipeline, not one per speaker.
Every accepted frame (from any speaker) cancels the pending timer and arms a
new one; when it fires, only the speaker whose frame armed it is transcribed
and every other session is cleared. Overlapping speech from other speakers is
therefore dropped, not queued.

A turn:
1. Lock already active (reply or behavior in flight) -> clear all sessions, no STT.
2. Otherwise hold the activity lock; wrap the speaker's audio in a WAV header
   and transcribe it.
3. Empty or blank-audio results add nothing.
4. A non-empty rolling transcript is handed to on_transcript and cleared.
5. All sessions are cleared before the lock is released, whatever happened.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from worldvoice.asr.base import ASREngine, is_valid_transcription
from worldvoice.audio.frames import pcm_to_wav
from worldvoice.audio.segmenter import SpeakerSegmenter
from worldvoice.config import get_settings
from worldvoice.voice.activity_lock import ActivityLock

logger = logging.getLogger(__name__)

TranscriptHandler = Callable[[str, str], Awaitable[None]]


class TranscriptionScheduler:
    def __init__(
        self,
        segmenter: SpeakerSegmenter,
        engine: ASREngine,
        lock: ActivityLock,
        on_transcript: TranscriptHandler | None = None,
        debounce_ms: int | None = None,
        sample_rate: int | None = None,
        channels: int | None = None,
        blank_token: str | None = None,
    ) -> None:
        settings = get_settings()
        self._segmenter = segmenter
        self._engine = engine
        self._lock = lock
        self._on_transcript = on_transcript
        self._debounce_sec = (debounce_ms if debounce_ms is not None else settings.SILENCE_DEBOUNCE_MS) / 1000.0
        self._sample_rate = sample_rate or settings.INPUT_SAMPLE_RATE
        self._channels = channels or settings.INPUT_CHANNELS
        self._blank_token = blank_token or settings.BLANK_AUDIO_TOKEN

        self._timer: asyncio.TimerHandle | None = None
        self._turns: set[asyncio.Task] = set()
        self.fired_count = 0
        self.skipped_count = 0

        segmenter.set_on_speech(self.arm)

    def set_on_transcript(self, handler: TranscriptHandler | None) -> None:
        self._on_transcript = handler

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def arm(self, speaker_id: str) -> None:
        """Cancel any pending timer and start a new one for speaker_id."""
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._debounce_sec, self._fire, speaker_id)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, speaker_id: str) -> None:
        self._timer = None
        self.fired_count += 1
        task = asyncio.ensure_future(self.run_turn(speaker_id))
        self._turns.add(task)
        task.add_done_callback(self._turns.discard)

    async def wait_idle(self) -> None:
        """Wait for turns already started (timer callbacks) to finish."""
        while self._turns:
            await asyncio.gather(*list(self._turns), return_exceptions=True)

    async def run_turn(self, speaker_id: str) -> None:
        if self._lock.is_active():
            logger.info("Agent busy; discarding speech from %d session(s)", len(self._segmenter.sessions))
            self.skipped_count += 1
            self._segmenter.clear_all()
            return
        await self._lock.run(lambda: self._turn(speaker_id))

    async def _turn(self, speaker_id: str) -> None:
        try:
            await self._process(speaker_id)
        finally:
            # Drop everything, including audio from speakers who talked over this turn
            self._segmenter.clear_all()

    async def _process(self, speaker_id: str) -> None:
        session = self._segmenter.session(speaker_id)
        if session is None or not session.has_audio:
            return
        audio = session.take_audio()
        wav = pcm_to_wav(audio, self._sample_rate, self._channels)
        logger.debug("Starting transcription for %s (%d bytes)", speaker_id, len(audio))
        try:
            result = await self._engine.transcribe(wav)
        except Exception as e:
            logger.error("Error transcribing audio for %s: %s", speaker_id, e)
            return

        logger.debug("Transcription for %s: %r", speaker_id, result.text)
        if is_valid_transcription(result.text, self._blank_token):
            session.transcript += result.text

        if session.transcript:
            final_text = session.transcript
            session.transcript = ""
            if self._on_transcript is None:
                return
            try:
                await self._on_transcript(speaker_id, final_text)
            except Exception as e:
                logger.error("Error dispatching transcript for %s: %s", speaker_id, e)
