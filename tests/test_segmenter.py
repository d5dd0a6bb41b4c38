import pytest

from worldvoice.audio.segmenter import SpeakerSegmenter

from conftest import pcm_frame


def test_quiet_frames_never_accumulate(quiet_frame):
    calls = []
    seg = SpeakerSegmenter(on_speech=calls.append, loudness_threshold=1000)

    for _ in range(50):
        assert seg.ingest("alice", quiet_frame) is False

    session = seg.session("alice")
    assert session is not None  # created lazily on the first frame
    assert session.total_length == 0
    assert session.chunks == []
    assert calls == []


def test_threshold_is_strict():
    seg = SpeakerSegmenter(loudness_threshold=1000)
    assert seg.ingest("alice", pcm_frame(1000)) is False
    assert seg.ingest("alice", pcm_frame(1001)) is True


def test_loud_frames_buffered_in_order():
    calls = []
    seg = SpeakerSegmenter(on_speech=calls.append, loudness_threshold=1000, clock=lambda: 42.0)
    frames = [pcm_frame(1100 + i, 4) for i in range(3)]
    for f in frames:
        seg.ingest("bob", f)

    session = seg.session("bob")
    assert session.chunks == frames
    assert session.total_length == sum(len(f) for f in frames)
    assert session.last_active == 42.0
    assert calls == ["bob", "bob", "bob"]


def test_quiet_frame_does_not_touch_buffer(loud_frame, quiet_frame):
    seg = SpeakerSegmenter(loudness_threshold=1000)
    seg.ingest("alice", loud_frame)
    seg.ingest("alice", quiet_frame)
    assert seg.session("alice").chunks == [loud_frame]


def test_odd_length_frame_rejected_without_mutation(loud_frame):
    seg = SpeakerSegmenter(loudness_threshold=1000)
    seg.ingest("alice", loud_frame)

    with pytest.raises(ValueError):
        seg.ingest("alice", loud_frame + b"\x00")
    with pytest.raises(ValueError):
        seg.ingest("carol", b"\x00\x10\x00")

    assert seg.session("alice").chunks == [loud_frame]
    assert seg.session("carol") is None


def test_take_audio_keeps_transcript_and_clear_all_keeps_slots(loud_frame):
    seg = SpeakerSegmenter(loudness_threshold=1000)
    seg.ingest("alice", loud_frame)
    seg.ingest("alice", loud_frame)
    session = seg.session("alice")
    session.transcript = "hello"

    assert session.take_audio() == loud_frame * 2
    assert not session.has_audio
    assert session.transcript == "hello"

    seg.ingest("bob", loud_frame)
    seg.clear_all()
    assert set(seg.sessions) == {"alice", "bob"}
    assert all(not s.has_audio and s.transcript == "" for s in seg.sessions.values())

    seg.reset()
    assert seg.sessions == {}


class _RejectAllVAD:
    def is_speech(self, frame: bytes) -> bool:
        return False


def test_vad_rejects_after_loudness_gate(loud_frame):
    seg = SpeakerSegmenter(loudness_threshold=1000, vad=_RejectAllVAD())
    assert seg.ingest("alice", loud_frame) is False
    assert not seg.session("alice").has_audio
