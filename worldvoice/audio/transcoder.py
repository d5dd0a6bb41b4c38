"""
Transcoder: synthesized speech -> canonical PCM for playback.

to_pcm() sniffs the payload:
- "RIFF" tag                        -> wav
- 0xFF + top three bits of byte 1   -> mp3 (MPEG frame sync)
- anything else                     -> raw int16 PCM, already at the target rate

Raw PCM passes through untouched. Everything else goes through a Transcoder;
the default one pipes the bytes through ffmpeg (stdin -> s16le mono stdout).
A failed run raises TranscodingError and no partial output is returned.
"""
from __future__ import annotations

import asyncio
import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Literal

import numpy as np

from worldvoice.audio.frames import pcm_bytes_to_int16
from worldvoice.config import get_settings

logger = logging.getLogger(__name__)

AudioFormat = Literal["wav", "mp3", "pcm"]


class TranscodingError(RuntimeError):
    """External transcoder could not be started or exited non-zero."""


def detect_audio_format(data: bytes) -> AudioFormat:
    if data[:4] == b"RIFF":
        return "wav"
    if len(data) >= 2 and data[0] == 0xFF and (data[1] & 0xE0) == 0xE0:
        return "mp3"
    return "pcm"


class Transcoder(ABC):
    """compressed bytes x target rate -> int16 mono samples, or TranscodingError."""

    @abstractmethod
    async def transcode(self, data: bytes, fmt: AudioFormat, target_sample_rate: int) -> np.ndarray:
        ...


class FFmpegTranscoder(Transcoder):
    """Runs ffmpeg synchronously in the default executor."""

    def __init__(self, binary: str | None = None, timeout: float | None = None) -> None:
        settings = get_settings()
        self._binary = binary or settings.FFMPEG_BINARY
        self._timeout = timeout if timeout is not None else settings.TRANSCODE_TIMEOUT_SEC

    def build_args(self, fmt: AudioFormat, target_sample_rate: int) -> list[str]:
        return [
            self._binary,
            "-hide_banner",
            "-loglevel", "error",
            "-f", fmt,
            "-i", "pipe:0",
            "-f", "s16le",
            "-ar", str(target_sample_rate),
            "-ac", "1",
            "pipe:1",
        ]

    def _run_sync(self, data: bytes, fmt: AudioFormat, target_sample_rate: int) -> bytes:
        args = self.build_args(fmt, target_sample_rate)
        try:
            proc = subprocess.run(args, input=data, capture_output=True, timeout=self._timeout)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise TranscodingError(f"{self._binary} could not run: {e}") from e
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            logger.error("%s failed with code %d: %s", self._binary, proc.returncode, stderr)
            raise TranscodingError(f"{self._binary} failed (code {proc.returncode})")
        return proc.stdout

    async def transcode(self, data: bytes, fmt: AudioFormat, target_sample_rate: int) -> np.ndarray:
        loop = asyncio.get_running_loop()
        raw = await loop.run_in_executor(None, self._run_sync, data, fmt, target_sample_rate)
        # s16le output is always even unless ffmpeg was cut off mid-sample
        if len(raw) % 2:
            raw = raw[:-1]
        logger.debug("Transcoded %d bytes of %s into %d PCM bytes", len(data), fmt, len(raw))
        return pcm_bytes_to_int16(raw)


async def to_pcm(data: bytes, target_sample_rate: int, transcoder: Transcoder | None = None) -> np.ndarray:
    """Return int16 samples at target_sample_rate; raw PCM is passed through byte-identical."""
    fmt = detect_audio_format(data)
    logger.debug("Detected audio format: %s (%d bytes)", fmt, len(data))
    if fmt == "pcm":
        return pcm_bytes_to_int16(data)
    transcoder = transcoder or FFmpegTranscoder()
    return await transcoder.transcode(data, fmt, target_sample_rate)
