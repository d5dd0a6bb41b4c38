import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

from worldvoice.asr.base import ASRResult
from worldvoice.transport.base import AudioOutput, AudioTransport
from worldvoice.tts.base import TTSEngine
from worldvoice.tts.payload import BufferedSpeech
from worldvoice.voice.dispatch import AgentRuntime, ReplyContent
from worldvoice.voice.manager import VoiceManager
from worldvoice.websocket_manager import WebSocketIngress

from conftest import pcm_frame


class _Output(AudioOutput):
    def __init__(self):
        self.frames = []

    async def capture_frame(self, frame):
        self.frames.append(frame)


class _Transport(AudioTransport):
    def __init__(self):
        super().__init__()
        self.output = _Output()

    @property
    def is_ready(self):
        return True

    async def publish_track(self, name, sample_rate, channels):
        return self.output


class _EchoRuntime(AgentRuntime):
    def __init__(self):
        self.texts = []

    async def handle_voice_message(self, message, callback, on_complete):
        self.texts.append(message.text)
        try:
            await callback(ReplyContent(text=f"you said {message.text}"))
        finally:
            on_complete()


class _PcmTTS(TTSEngine):
    @property
    def format(self):
        return "audio/L16"

    async def synthesize(self, text):
        return BufferedSpeech(pcm_frame(500, 4800))


@pytest.mark.asyncio
async def test_frame_to_reply_end_to_end(monkeypatch, loud_frame):
    monkeypatch.setenv("SILENCE_DEBOUNCE_MS", "30")
    monkeypatch.setenv("PLAYBACK_FRAME_MS", "20")
    engine = AsyncMock()
    engine.transcribe.return_value = ASRResult(text="hello agent", confidence=1.0)
    transport = _Transport()
    runtime = _EchoRuntime()
    manager = VoiceManager(engine, runtime, transport=transport, tts=_PcmTTS())
    manager.start()

    for _ in range(10):
        transport.emit_frame("alice", loud_frame)
    assert manager.status()["speakers"] == {"alice": 10 * len(loud_frame)}
    assert manager.status()["debounce_pending"]

    await asyncio.sleep(0.1)
    await manager.scheduler.wait_idle()

    assert runtime.texts == ["hello agent"]
    # silence primer + 100 ms of reply in 20 ms frames
    assert len(transport.output.frames) == 6
    status = manager.status()
    assert status["activity_locked"] is False
    assert status["speaking"] is False
    assert status["speakers"] == {"alice": 0}

    await manager.cleanup()
    assert manager.status()["speakers"] == {}
    assert not manager.started


@pytest.mark.asyncio
async def test_malformed_transport_frame_dropped(loud_frame):
    transport = _Transport()
    manager = VoiceManager(AsyncMock(), _EchoRuntime(), transport=transport)
    manager.start()
    transport.emit_frame("alice", loud_frame + b"\x00")
    assert manager.status()["speakers"] == {}
    await manager.cleanup()


class _FakeWebSocket:
    def __init__(self, messages):
        self._messages = list(messages)
        self.sent = []

    async def send_text(self, text):
        self.sent.append(json.loads(text))

    async def receive(self):
        if not self._messages:
            return {"type": "websocket.disconnect"}
        return self._messages.pop(0)


@pytest.mark.asyncio
async def test_websocket_ingress_reframes_and_forwards():
    frame = pcm_frame(2000)  # 1920 bytes = 20 ms at 48 kHz
    data = frame * 3
    ws = _FakeWebSocket(
        [
            {"type": "websocket.receive", "bytes": data[:1001]},
            {"type": "websocket.receive", "text": "ignored"},
            {"type": "websocket.receive", "bytes": data[1001:] + b"\x01"},
        ]
    )
    manager = MagicMock()
    manager.handle_frame.return_value = True

    ingress = WebSocketIngress(ws, manager, "alice")
    await ingress.run()

    assert ws.sent == [{"type": "session", "speaker_id": "alice"}]
    assert ingress.frames_in == 3
    assert ingress.frames_accepted == 3
    forwarded = [c.args for c in manager.handle_frame.call_args_list]
    assert forwarded == [("alice", frame)] * 3
    assert np.frombuffer(forwarded[0][1], dtype="<i2")[0] == 2000
