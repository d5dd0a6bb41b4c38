"""Audio pipeline: frames, loudness-gated segmentation, optional VAD, transcoding, paced playback."""
from .frames import AudioFrame, mean_abs_amplitude, pcm_bytes_to_int16, pcm_to_wav
from .receiver import AudioReceiver
from .segmenter import SpeakerSegmenter, SpeakerSession
from .vad import VADProcessor
from .transcoder import FFmpegTranscoder, Transcoder, TranscodingError, detect_audio_format, to_pcm
from .playback import PlaybackScheduler, PlaybackSession

__all__ = [
    "AudioFrame",
    "mean_abs_amplitude",
    "pcm_bytes_to_int16",
    "pcm_to_wav",
    "AudioReceiver",
    "SpeakerSegmenter",
    "SpeakerSession",
    "VADProcessor",
    "FFmpegTranscoder",
    "Transcoder",
    "TranscodingError",
    "detect_audio_format",
    "to_pcm",
    "PlaybackScheduler",
    "PlaybackSession",
]
