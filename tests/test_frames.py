import io
import wave

import numpy as np
import pytest

from worldvoice.audio.frames import (
    AudioFrame,
    check_pcm_length,
    mean_abs_amplitude,
    pcm_bytes_to_int16,
    pcm_to_wav,
)
from worldvoice.audio.receiver import AudioReceiver

from conftest import pcm_frame


def test_mean_abs_amplitude_handles_negative_and_empty():
    assert mean_abs_amplitude(b"") == 0.0
    assert mean_abs_amplitude(pcm_frame(-1500, 10)) == 1500.0
    # abs(-32768) must not wrap around
    assert mean_abs_amplitude(pcm_frame(-32768, 4)) == 32768.0


def test_odd_length_rejected():
    with pytest.raises(ValueError):
        check_pcm_length(b"\x00\x01\x02")
    with pytest.raises(ValueError):
        pcm_bytes_to_int16(b"\x00")


def test_pcm_to_wav_header():
    pcm = pcm_frame(1000, 480)
    wav = pcm_to_wav(pcm, 48000, 1)

    assert len(wav) == 44 + len(pcm)
    assert wav[:4] == b"RIFF"
    assert wav[8:12] == b"WAVE"
    with wave.open(io.BytesIO(wav), "rb") as w:
        assert w.getframerate() == 48000
        assert w.getnchannels() == 1
        assert w.getsampwidth() == 2
        assert w.readframes(w.getnframes()) == pcm


def test_audio_frame_validation():
    frame = AudioFrame.from_samples(np.zeros(960, dtype=np.int16), 48000, 2)
    assert frame.samples_per_channel == 480
    assert frame.duration_ms == 10.0

    with pytest.raises(ValueError):
        AudioFrame(np.zeros(10, dtype=np.float32), 48000, 1, 10)
    with pytest.raises(ValueError):
        AudioFrame(np.zeros(10, dtype=np.int16), 48000, 1, 9)

    silence = AudioFrame.silence(48000, 1, 4800)
    assert not silence.data.any()
    assert silence.duration_ms == 100.0


def test_receiver_reframes_split_messages():
    receiver = AudioReceiver(frame_bytes=8)
    receiver.feed(b"\x01" * 5)
    assert receiver.drain_frames() == []
    assert receiver.remaining_bytes() == 5

    receiver.feed(b"\x02" * 13)
    frames = receiver.drain_frames()
    assert frames == [b"\x01" * 5 + b"\x02" * 3, b"\x02" * 8]
    assert receiver.remaining_bytes() == 2


def test_receiver_default_frame_size_and_validation():
    # 48 kHz, 20 ms, mono int16
    assert AudioReceiver().frame_bytes == 1920
    with pytest.raises(ValueError):
        AudioReceiver(frame_bytes=7)
    with pytest.raises(ValueError):
        AudioReceiver(frame_bytes=0)
