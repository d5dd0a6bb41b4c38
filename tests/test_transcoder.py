import subprocess

import numpy as np
import pytest

from worldvoice.audio import transcoder as transcoder_module
from worldvoice.audio.transcoder import (
    FFmpegTranscoder,
    Transcoder,
    TranscodingError,
    detect_audio_format,
    to_pcm,
)

from conftest import pcm_frame


def test_detect_audio_format():
    assert detect_audio_format(b"RIFF\x00\x00\x00\x00WAVE") == "wav"
    assert detect_audio_format(b"\xff\xfb\x90\x00") == "mp3"
    assert detect_audio_format(b"\xff\xe0") == "mp3"
    assert detect_audio_format(b"\xff\x10\x00\x00") == "pcm"
    assert detect_audio_format(b"ID3\x04") == "pcm"
    assert detect_audio_format(b"") == "pcm"


@pytest.mark.asyncio
async def test_raw_pcm_passes_through_byte_identical():
    data = pcm_frame(1234, 480)

    class _Untouched(Transcoder):
        async def transcode(self, data, fmt, target_sample_rate):
            raise AssertionError("PCM must not be transcoded")

    samples = await to_pcm(data, 48000, _Untouched())
    assert samples.dtype == np.int16
    assert samples.tobytes() == data


@pytest.mark.asyncio
async def test_compressed_audio_goes_through_transcoder():
    calls = []

    class _Fake(Transcoder):
        async def transcode(self, data, fmt, target_sample_rate):
            calls.append((fmt, target_sample_rate))
            return np.zeros(10, dtype=np.int16)

    samples = await to_pcm(b"\xff\xfb\x90\x00" + b"\x00" * 100, 48000, _Fake())
    assert calls == [("mp3", 48000)]
    assert len(samples) == 10


def test_build_args_pipe_to_s16le_mono():
    args = FFmpegTranscoder(binary="ffmpeg-test").build_args("mp3", 24000)
    assert args[0] == "ffmpeg-test"
    assert args[args.index("-f") + 1] == "mp3"
    assert "pipe:0" in args and args[-1] == "pipe:1"
    assert args[args.index("-ar") + 1] == "24000"
    assert args[args.index("-ac") + 1] == "1"
    assert "s16le" in args


@pytest.mark.asyncio
async def test_ffmpeg_output_decoded_and_odd_byte_trimmed(monkeypatch):
    out = pcm_frame(7, 4) + b"\x01"

    def fake_run(args, input, capture_output, timeout):
        assert input == b"RIFFdata"
        return subprocess.CompletedProcess(args, 0, stdout=out, stderr=b"")

    monkeypatch.setattr(transcoder_module.subprocess, "run", fake_run)
    samples = await FFmpegTranscoder().transcode(b"RIFFdata", "wav", 48000)
    assert samples.tolist() == [7, 7, 7, 7]


@pytest.mark.asyncio
async def test_ffmpeg_nonzero_exit_raises(monkeypatch):
    def fake_run(args, input, capture_output, timeout):
        return subprocess.CompletedProcess(args, 1, stdout=b"\x00\x00", stderr=b"Invalid data found")

    monkeypatch.setattr(transcoder_module.subprocess, "run", fake_run)
    with pytest.raises(TranscodingError):
        await FFmpegTranscoder().transcode(b"\xff\xfb\x00\x00", "mp3", 48000)


@pytest.mark.asyncio
async def test_ffmpeg_missing_binary_raises(monkeypatch):
    def fake_run(args, input, capture_output, timeout):
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(transcoder_module.subprocess, "run", fake_run)
    with pytest.raises(TranscodingError):
        await FFmpegTranscoder(binary="no-such-ffmpeg").transcode(b"\xff\xfb\x00\x00", "mp3", 48000)


@pytest.mark.asyncio
async def test_ffmpeg_timeout_raises(monkeypatch):
    def fake_run(args, input, capture_output, timeout):
        raise subprocess.TimeoutExpired(args, timeout)

    monkeypatch.setattr(transcoder_module.subprocess, "run", fake_run)
    with pytest.raises(TranscodingError):
        await FFmpegTranscoder(timeout=0.1).transcode(b"RIFF", "wav", 48000)
