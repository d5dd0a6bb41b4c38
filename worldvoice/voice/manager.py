"""
VoiceManager: wires the voice pipeline together.

transport frames -> SpeakerSegmenter -> TranscriptionScheduler -> ReplyDispatch
-> runtime -> TTS -> transcoder -> PlaybackScheduler -> transport track.

One ActivityLock is shared by the scheduler, the dispatcher and (when
enabled) the behavior loop; pass it in to share it with anything else that
acts on behalf of the agent.
"""
from __future__ import annotations

import logging
from typing import Any

from worldvoice.asr.base import ASREngine
from worldvoice.audio.playback import PlaybackScheduler
from worldvoice.audio.segmenter import SpeakerSegmenter
from worldvoice.audio.transcoder import Transcoder
from worldvoice.audio.vad import VADProcessor
from worldvoice.config import get_settings
from worldvoice.transport.base import AudioTransport, EmoteSink, PlayerHandle
from worldvoice.tts.base import TTSEngine
from worldvoice.voice.activity_lock import ActivityLock
from worldvoice.voice.behavior import Behavior, BehaviorLoop
from worldvoice.voice.dispatch import AgentRuntime, NameResolver, ReplyDispatch
from worldvoice.voice.scheduler import TranscriptionScheduler

logger = logging.getLogger(__name__)


class VoiceManager:
    def __init__(
        self,
        engine: ASREngine,
        runtime: AgentRuntime,
        transport: AudioTransport | None = None,
        tts: TTSEngine | None = None,
        transcoder: Transcoder | None = None,
        lock: ActivityLock | None = None,
        player: PlayerHandle | None = None,
        emotes: EmoteSink | None = None,
        name_resolver: NameResolver | None = None,
        behavior: Behavior | None = None,
    ) -> None:
        settings = get_settings()
        self.lock = lock or ActivityLock()
        self.transport = transport
        vad = VADProcessor() if settings.VAD_ENABLED else None
        self.segmenter = SpeakerSegmenter(vad=vad)
        self.playback = PlaybackScheduler(transport, player=player)
        self.dispatch = ReplyDispatch(
            runtime,
            self.lock,
            self.playback,
            tts=tts,
            transcoder=transcoder,
            emotes=emotes,
            name_resolver=name_resolver,
        )
        self.scheduler = TranscriptionScheduler(
            self.segmenter,
            engine,
            self.lock,
            on_transcript=self.dispatch.dispatch,
        )
        self.behavior_loop = BehaviorLoop(self.lock, behavior) if behavior is not None else None
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Attach to the transport's inbound audio and start the behavior loop if one was given."""
        if self._started:
            logger.warning("Voice manager already started")
            return
        if self.transport is not None:
            self.transport.set_frame_handler(self.handle_frame)
        else:
            logger.info("No transport configured; only WebSocket ingress will deliver audio")
        if self.behavior_loop is not None:
            self.behavior_loop.start()
        self._started = True

    def handle_frame(self, speaker_id: str, pcm_bytes: bytes) -> bool:
        return self.segmenter.ingest(speaker_id, pcm_bytes)

    async def speak(self, text: str, emote: str | None = None) -> bool:
        """Say something unprompted (ambient speech from the behavior side)."""
        return await self.dispatch.speak(text, emote)

    async def cleanup(self) -> None:
        """Cancel the pending timer and forget speakers (disconnect)."""
        self.scheduler.cancel()
        if self.behavior_loop is not None and self.behavior_loop.running:
            await self.behavior_loop.stop()
        if self.transport is not None:
            self.transport.set_frame_handler(None)
        self.segmenter.reset()
        self._started = False
        logger.info("Voice manager cleanup completed")

    def status(self) -> dict[str, Any]:
        return {
            "started": self._started,
            "activity_locked": self.lock.is_active(),
            "lock_depth": self.lock.depth,
            "speaking": self.playback.speaking,
            "playback_busy": self.playback.busy,
            "debounce_pending": self.scheduler.pending,
            "transport_ready": bool(self.transport is not None and self.transport.is_ready),
            "speakers": {sid: s.total_length for sid, s in self.segmenter.sessions.items()},
        }
