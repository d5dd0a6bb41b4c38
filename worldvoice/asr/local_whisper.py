"""
LocalWhisperEngine: Whisper-compatible ASR using faster-whisper.

- Model loaded ONCE at startup (singleton, injected at construction).
- Input is a WAV buffer; faster-whisper decodes and resamples it to 16 kHz.
- Runs in executor so event loop stays responsive.
"""
from __future__ import annotations

import asyncio
import io
import logging
from typing import Any

from worldvoice.asr.base import ASREngine, ASRResult
from worldvoice.config import get_settings

logger = logging.getLogger(__name__)

# Type for shared WhisperModel (loaded at startup)
WhisperModelT = Any


def load_whisper_model() -> WhisperModelT:
    """Load faster-whisper model once. Called at startup when ASR_BACKEND=local."""
    try:
        from faster_whisper import WhisperModel
    except ImportError as err:
        raise ImportError(
            "faster-whisper is required for ASR_BACKEND=local. "
            "Install with: pip install faster-whisper"
        ) from err
    settings = get_settings()
    return WhisperModel(
        settings.LOCAL_WHISPER_MODEL,
        device=settings.LOCAL_WHISPER_DEVICE,
        compute_type=settings.LOCAL_WHISPER_COMPUTE_TYPE,
    )


class LocalWhisperEngine(ASREngine):
    """
    Local Whisper via faster-whisper. Uses shared model (singleton).
    transcribe() is async; heavy work runs in executor.
    """

    def __init__(self, model: WhisperModelT | None = None, beam_size: int | None = None) -> None:
        """
        model: shared WhisperModel instance (loaded at app startup).
        If None, transcribe() returns empty text until a model is set.
        """
        self._model = model
        self._beam_size = beam_size or get_settings().LOCAL_WHISPER_BEAM_SIZE

    def _transcribe_sync(self, wav_bytes: bytes) -> ASRResult:
        if self._model is None:
            logger.warning("Local Whisper model not loaded; returning empty transcript")
            return ASRResult(text="", confidence=0.0)

        segments, _ = self._model.transcribe(
            io.BytesIO(wav_bytes),
            beam_size=self._beam_size,
            vad_filter=True,
            vad_parameters=dict(min_silence_duration_ms=300, speech_pad_ms=100),
        )
        parts = [(seg.text or "").strip() for seg in segments]
        text = " ".join(p for p in parts if p).strip()
        return ASRResult(text=text, confidence=1.0 if text else 0.0)

    async def transcribe(self, wav_bytes: bytes) -> ASRResult:
        """Run _transcribe_sync in executor so event loop is not blocked."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._transcribe_sync, wav_bytes)
