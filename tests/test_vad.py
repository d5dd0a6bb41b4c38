import pytest

from worldvoice.audio.segmenter import SpeakerSegmenter
from worldvoice.audio.vad import VADProcessor

from conftest import pcm_frame


def test_silent_frame_is_not_speech():
    vad = VADProcessor(aggressiveness=3, sample_rate=48000)
    assert vad.can_judge(pcm_frame(0, 960))
    assert vad.is_speech(pcm_frame(0, 960)) is False


def test_unjudgeable_frame_passes_through():
    vad = VADProcessor(aggressiveness=2, sample_rate=48000)
    frame = pcm_frame(3000, 1000)  # not 10/20/30 ms
    assert not vad.can_judge(frame)
    assert vad.is_speech(frame) is True

    seg = SpeakerSegmenter(loudness_threshold=1000, vad=vad)
    assert seg.ingest("alice", frame) is True


def test_unsupported_rate_rejected():
    with pytest.raises(ValueError):
        VADProcessor(sample_rate=44100)
