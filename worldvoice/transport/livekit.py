"""
LiveKitTransport: AudioTransport over a LiveKit room (livekit rtc SDK).

Inbound: every subscribed remote audio track is read through rtc.AudioStream
at the configured input rate (mono) and forwarded as (participant identity,
int16 bytes). Outbound: one LocalAudioTrack published as a microphone source.
"""
from __future__ import annotations

import asyncio
import logging

from livekit import rtc

from worldvoice.audio.frames import AudioFrame
from worldvoice.config import get_settings
from worldvoice.transport.base import AudioOutput, AudioTransport, TransportUnavailableError

logger = logging.getLogger(__name__)


class LiveKitAudioOutput(AudioOutput):
    def __init__(self, source: rtc.AudioSource, track: rtc.LocalAudioTrack) -> None:
        self.source = source
        self.track = track

    async def capture_frame(self, frame: AudioFrame) -> None:
        await self.source.capture_frame(
            rtc.AudioFrame(
                data=frame.data.tobytes(),
                sample_rate=frame.sample_rate,
                num_channels=frame.channels,
                samples_per_channel=frame.samples_per_channel,
            )
        )


class LiveKitTransport(AudioTransport):
    def __init__(self, url: str | None = None, token: str | None = None, input_sample_rate: int | None = None) -> None:
        super().__init__()
        settings = get_settings()
        self._url = url or settings.LIVEKIT_URL
        self._token = token or settings.LIVEKIT_TOKEN
        self._input_sample_rate = input_sample_rate or settings.INPUT_SAMPLE_RATE
        self._room: rtc.Room | None = None
        self._connected = False
        self._reader_tasks: set[asyncio.Task] = set()

    @property
    def is_ready(self) -> bool:
        return self._room is not None and self._connected

    async def connect(self) -> None:
        if not self._url or not self._token:
            logger.info("No LiveKit URL/token configured - voice chat not available")
            return
        logger.info("Connecting to LiveKit: %s", self._url)
        self._room = rtc.Room()
        self._setup_room_events(self._room)
        await self._room.connect(
            self._url,
            self._token,
            options=rtc.RoomOptions(auto_subscribe=True, dynacast=True),
        )
        self._connected = True
        logger.info("Connected to LiveKit room")

    async def disconnect(self) -> None:
        for task in list(self._reader_tasks):
            task.cancel()
        self._reader_tasks.clear()
        if self._room is not None:
            await self._room.disconnect()
        self._connected = False
        self._room = None

    def _setup_room_events(self, room: rtc.Room) -> None:
        @room.on("participant_connected")
        def _on_participant_connected(participant: rtc.RemoteParticipant) -> None:
            logger.info("Participant connected: %s", participant.identity)

        @room.on("disconnected")
        def _on_disconnected(*_args) -> None:
            logger.info("Disconnected from LiveKit room")
            self._connected = False

        @room.on("track_subscribed")
        def _on_track_subscribed(
            track: rtc.Track,
            _publication: rtc.RemoteTrackPublication,
            participant: rtc.RemoteParticipant,
        ) -> None:
            logger.info("Track subscribed: kind=%s from %s", track.kind, participant.identity)
            if track.kind != rtc.TrackKind.KIND_AUDIO:
                return
            task = asyncio.ensure_future(self._read_audio(track, participant.identity))
            self._reader_tasks.add(task)
            task.add_done_callback(self._reader_tasks.discard)

    async def _read_audio(self, track: rtc.Track, identity: str) -> None:
        stream = rtc.AudioStream(track, sample_rate=self._input_sample_rate, num_channels=1)
        try:
            async for event in stream:
                self.emit_frame(identity, bytes(event.frame.data))
        finally:
            await stream.aclose()

    async def publish_track(self, name: str, sample_rate: int, channels: int) -> AudioOutput:
        if not self.is_ready:
            raise TransportUnavailableError("LiveKit room not connected")
        source = rtc.AudioSource(sample_rate, channels)
        track = rtc.LocalAudioTrack.create_audio_track(name, source)
        options = rtc.TrackPublishOptions()
        options.source = rtc.TrackSource.SOURCE_MICROPHONE
        await self._room.local_participant.publish_track(track, options)
        logger.info("Published local audio track %r (%d Hz, %d ch)", name, sample_rate, channels)
        return LiveKitAudioOutput(source, track)
