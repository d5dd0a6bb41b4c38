"""
PCM helpers shared by the inbound and outbound audio paths.

Canonical PCM: signed int16, little-endian. Everything entering the segmenter
and everything leaving the playback scheduler uses this layout.
"""
from __future__ import annotations

import io
import wave
from dataclasses import dataclass

import numpy as np

SAMPLE_WIDTH = 2  # bytes per int16 sample


@dataclass
class AudioFrame:
    """
    One block of int16 PCM.

    samples_per_channel must equal len(data) / channels; data is interleaved
    when channels > 1.
    """

    data: np.ndarray
    sample_rate: int
    channels: int
    samples_per_channel: int

    def __post_init__(self) -> None:
        if self.data.dtype != np.int16:
            raise ValueError(f"AudioFrame data must be int16, got {self.data.dtype}")
        if self.channels < 1:
            raise ValueError("AudioFrame needs at least one channel")
        if self.samples_per_channel * self.channels != len(self.data):
            raise ValueError(
                f"AudioFrame length mismatch: {len(self.data)} samples for "
                f"{self.samples_per_channel} x {self.channels} channels"
            )

    @classmethod
    def from_samples(cls, samples: np.ndarray, sample_rate: int, channels: int = 1) -> "AudioFrame":
        return cls(
            data=samples,
            sample_rate=sample_rate,
            channels=channels,
            samples_per_channel=len(samples) // channels,
        )

    @classmethod
    def silence(cls, sample_rate: int, channels: int, samples_per_channel: int) -> "AudioFrame":
        data = np.zeros(samples_per_channel * channels, dtype=np.int16)
        return cls(data=data, sample_rate=sample_rate, channels=channels, samples_per_channel=samples_per_channel)

    @property
    def duration_ms(self) -> float:
        return self.samples_per_channel * 1000.0 / self.sample_rate


def check_pcm_length(pcm_bytes: bytes) -> None:
    """PCM contract: length divisible by 2 (int16). Raises ValueError otherwise."""
    if len(pcm_bytes) % SAMPLE_WIDTH != 0:
        raise ValueError(f"malformed PCM buffer: length {len(pcm_bytes)} is not a multiple of {SAMPLE_WIDTH}")


def pcm_bytes_to_int16(pcm_bytes: bytes) -> np.ndarray:
    """Reinterpret little-endian PCM bytes as int16 samples (no copy)."""
    check_pcm_length(pcm_bytes)
    return np.frombuffer(pcm_bytes, dtype="<i2")


def mean_abs_amplitude(pcm_bytes: bytes) -> float:
    """Mean absolute sample value on the int16 scale; 0.0 for an empty buffer."""
    samples = pcm_bytes_to_int16(pcm_bytes)
    if samples.size == 0:
        return 0.0
    # int32 so abs(-32768) does not overflow
    return float(np.abs(samples.astype(np.int32)).mean())


def pcm_to_wav(pcm_bytes: bytes, sample_rate: int, channels: int = 1) -> bytes:
    """Wrap raw PCM in a 44-byte RIFF/WAVE header so STT engines get self-describing input."""
    check_pcm_length(pcm_bytes)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(SAMPLE_WIDTH)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm_bytes)
    return buf.getvalue()
