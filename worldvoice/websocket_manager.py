"""
WebSocketIngress: one WebSocket = one speaker feeding the voice pipeline.

Used by transport bridges that cannot join the room directly. The client sends
binary PCM (int16 little-endian, INPUT_SAMPLE_RATE, mono) in messages of any
size; text messages are ignored. The server sends one JSON hello:
{ "type": "session", "speaker_id": "..." }.
"""
from __future__ import annotations

import json
import logging

from fastapi import WebSocket

from worldvoice.audio.receiver import AudioReceiver
from worldvoice.voice.manager import VoiceManager

logger = logging.getLogger(__name__)


class WebSocketIngress:
    def __init__(self, websocket: WebSocket, manager: VoiceManager, speaker_id: str) -> None:
        self._ws = websocket
        self._manager = manager
        self._speaker_id = speaker_id
        self._receiver = AudioReceiver()
        self.frames_in = 0
        self.frames_accepted = 0

    async def run(self) -> None:
        """Main loop: receive binary, cut into frames, hand each to the segmenter."""
        try:
            await self._ws.send_text(json.dumps({"type": "session", "speaker_id": self._speaker_id}))
        except Exception:
            return
        logger.info("WebSocket audio ingress opened for %s", self._speaker_id)
        try:
            while True:
                msg = await self._ws.receive()
                if msg.get("type") == "websocket.disconnect":
                    break
                data = msg.get("bytes")
                if data is None:
                    continue
                self._receiver.feed(data)
                for frame in self._receiver.drain_frames():
                    self.frames_in += 1
                    if self._manager.handle_frame(self._speaker_id, frame):
                        self.frames_accepted += 1
        finally:
            logger.info(
                "WebSocket audio ingress closed for %s (%d frames, %d accepted, %d bytes left over)",
                self._speaker_id,
                self.frames_in,
                self.frames_accepted,
                self._receiver.remaining_bytes(),
            )
