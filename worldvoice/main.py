"""
FastAPI app hosting the voice agent.

Startup builds the VoiceManager from config (ASR engine, TTS engine, ffmpeg
transcoder, chat runtime) and joins the LiveKit room when LIVEKIT_URL and
LIVEKIT_TOKEN are set. Audio can also arrive over WebSocket:

  /ws/audio/{speaker_id}   binary PCM 16-bit mono at INPUT_SAMPLE_RATE

HTTP: GET /health, GET /status, POST /api/speak.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect

from worldvoice.asr.base import ASREngine
from worldvoice.asr.cloudflare import CloudflareWhisperEngine
from worldvoice.asr.local_whisper import LocalWhisperEngine, load_whisper_model
from worldvoice.audio.transcoder import FFmpegTranscoder
from worldvoice.config import get_settings
from worldvoice.schemas.status import SpeakRequest, SpeakResponse, StatusResponse
from worldvoice.services.chat_runtime import CloudflareChatRuntime
from worldvoice.transport.livekit import LiveKitTransport
from worldvoice.tts.service import get_tts_engine
from worldvoice.voice.manager import VoiceManager
from worldvoice.websocket_manager import WebSocketIngress

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    """Apply LOG_LEVEL and, when LOG_FILE is set, also log to that file."""
    settings = get_settings()
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.LOG_FILE:
        os.makedirs(os.path.dirname(settings.LOG_FILE) or ".", exist_ok=True)
        handlers.append(logging.FileHandler(settings.LOG_FILE, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def get_asr_engine(app: FastAPI) -> ASREngine:
    """Return ASR engine based on config. Local uses singleton model from app.state."""
    settings = get_settings()
    if settings.ASR_BACKEND == "cloudflare":
        return CloudflareWhisperEngine()
    model = getattr(app.state, "whisper_model", None)
    return LocalWhisperEngine(model=model)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    settings = get_settings()
    # Load Whisper model once at startup when using local backend (singleton)
    app.state.whisper_model = load_whisper_model() if settings.ASR_BACKEND == "local" else None

    transport = LiveKitTransport() if settings.LIVEKIT_URL and settings.LIVEKIT_TOKEN else None
    manager = VoiceManager(
        engine=get_asr_engine(app),
        runtime=CloudflareChatRuntime(),
        transport=transport,
        tts=get_tts_engine(),
        transcoder=FFmpegTranscoder(),
    )
    if transport is not None:
        try:
            await transport.connect()
        except Exception as e:
            # Playback stays unavailable until a reconnect; WebSocket ingress still works
            logger.error("LiveKit connect failed: %s", e)
    manager.start()
    app.state.voice_manager = manager
    yield
    await manager.cleanup()
    if transport is not None:
        await transport.disconnect()
    app.state.voice_manager = None
    app.state.whisper_model = None


app = FastAPI(
    title="World Voice Agent",
    description="Real-time voice turn-taking: segmentation, debounced STT, replies and paced playback",
    lifespan=lifespan,
)


def _manager(state) -> VoiceManager:
    manager = getattr(state, "voice_manager", None)
    if manager is None:
        raise HTTPException(status_code=503, detail="Voice manager not running")
    return manager


@app.websocket("/ws/audio/{speaker_id}")
async def websocket_audio(websocket: WebSocket, speaker_id: str) -> None:
    """Binary PCM from one speaker; see WebSocketIngress."""
    manager = getattr(websocket.app.state, "voice_manager", None)
    if manager is None:
        await websocket.close(code=1013)
        return
    await websocket.accept()
    try:
        await WebSocketIngress(websocket, manager, speaker_id).run()
    except WebSocketDisconnect:
        pass


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    return StatusResponse(**_manager(request.app.state).status())


@app.post("/api/speak", response_model=SpeakResponse)
async def speak(request: Request, body: SpeakRequest) -> SpeakResponse:
    """Ambient speech. Refused while a voice turn holds the activity lock."""
    manager = _manager(request.app.state)
    if manager.lock.is_active():
        raise HTTPException(status_code=409, detail="Agent is busy with a voice turn")
    played = await manager.lock.run(lambda: manager.speak(body.text, body.emote))
    return SpeakResponse(played=played)
