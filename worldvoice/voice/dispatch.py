"""
ReplyDispatch: hands finalized transcripts to the host agent runtime and
turns its replies into paced speech.

The activity lock is entered before the runtime sees the message and exited
by the runtime's on_complete signal, so the lock covers reply generation and
playback, not only the transcription turn. on_complete is idempotent, and a
runtime that fails synchronously releases the lock straight away.
"""
from __future__ import annotations

import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from worldvoice.audio.playback import PlaybackScheduler
from worldvoice.audio.transcoder import Transcoder, to_pcm
from worldvoice.config import get_settings
from worldvoice.transport.base import EmoteSink, NoOpEmoteSink
from worldvoice.tts.base import TTSEngine
from worldvoice.voice.activity_lock import ActivityLock

logger = logging.getLogger(__name__)


@dataclass
class VoiceMessage:
    """A finalized voice utterance addressed to the agent."""

    id: str
    speaker_id: str
    speaker_name: str
    text: str
    created_at: int  # unix_ms
    is_voice_message: bool = True


@dataclass
class ReplyContent:
    """What the runtime wants said (and shown) in response."""

    text: str = ""
    emote: str | None = None
    actions: list[str] = field(default_factory=list)


ReplyCallback = Callable[[ReplyContent], Awaitable[None]]
NameResolver = Callable[[str], "str | None"]


class AgentRuntime(ABC):
    """Host agent runtime: decides whether and how to reply."""

    @abstractmethod
    async def handle_voice_message(
        self,
        message: VoiceMessage,
        callback: ReplyCallback,
        on_complete: Callable[[], None],
    ) -> None:
        """
        Process message. Call callback(reply) for each reply to deliver and
        on_complete() exactly when the runtime is done with this message
        (it may be later than this coroutine returning).
        """
        ...


class ReplyDispatch:
    def __init__(
        self,
        runtime: AgentRuntime,
        lock: ActivityLock,
        playback: PlaybackScheduler,
        tts: TTSEngine | None = None,
        transcoder: Transcoder | None = None,
        emotes: EmoteSink | None = None,
        name_resolver: NameResolver | None = None,
        output_sample_rate: int | None = None,
        min_chars: int | None = None,
        default_emote: str | None = None,
    ) -> None:
        settings = get_settings()
        self._runtime = runtime
        self._lock = lock
        self._playback = playback
        self._tts = tts
        self._transcoder = transcoder
        self._emotes = emotes or NoOpEmoteSink()
        self._name_resolver = name_resolver
        self._sample_rate = output_sample_rate or settings.OUTPUT_SAMPLE_RATE
        self._min_chars = min_chars if min_chars is not None else settings.MIN_MESSAGE_CHARS
        self._default_emote = default_emote or settings.DEFAULT_EMOTE

    def set_emotes(self, emotes: EmoteSink | None) -> None:
        self._emotes = emotes or NoOpEmoteSink()

    def _speaker_name(self, speaker_id: str) -> str:
        if self._name_resolver is not None:
            try:
                name = self._name_resolver(speaker_id)
            except Exception as e:
                logger.warning("Name lookup failed for %s: %s", speaker_id, e)
                name = None
            if name:
                return name
        return speaker_id

    async def dispatch(self, speaker_id: str, text: str) -> bool:
        """Hand text to the runtime. Returns False when the message was ignored or the runtime failed."""
        if not text or not text.strip() or len(text) < self._min_chars:
            logger.debug("Ignoring short voice message from %s: %r", speaker_id, text)
            return False

        message = VoiceMessage(
            id=uuid.uuid4().hex,
            speaker_id=speaker_id,
            speaker_name=self._speaker_name(speaker_id),
            text=text.strip(),
            created_at=int(time.time() * 1000),
        )
        released = False

        def on_complete() -> None:
            nonlocal released
            if released:
                return
            released = True
            self._lock.exit()

        self._lock.enter()
        logger.info("Voice message from %s: %s", message.speaker_name, message.text)
        try:
            await self._runtime.handle_voice_message(message, self._deliver_reply, on_complete)
        except Exception as e:
            logger.error("Error processing voice message: %s", e)
            on_complete()
            return False
        return True

    async def _deliver_reply(self, content: ReplyContent) -> None:
        logger.info("Reply received: %r (emote=%s)", content.text, content.emote)
        if not (content.text or "").strip():
            return
        await self.speak(content.text, content.emote)

    async def speak(self, text: str, emote: str | None = None) -> bool:
        """Synthesize text, emit the emote and play it. Failures are logged; returns False."""
        if self._tts is None:
            logger.info("TTS disabled; reply not spoken")
            return False
        try:
            speech = await self._tts.synthesize(text)
            if speech is None:
                logger.warning("TTS produced nothing for %d chars", len(text))
                return False
            data = await speech.drain()
            if not data:
                logger.warning("TTS returned no audio (engine=%s)", type(self._tts).__name__)
                return False
            samples = await to_pcm(data, self._sample_rate, self._transcoder)
        except Exception as e:
            logger.warning("Speech synthesis failed: %s", e)
            return False

        try:
            self._emotes.play_emote(emote or self._default_emote)
        except Exception as e:
            logger.warning("play_emote failed: %s", e)
        return await self._playback.publish(samples, self._sample_rate, 1)
