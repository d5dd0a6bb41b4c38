"""Application configuration. Loads from env vars."""
from pydantic_settings import BaseSettings
from typing import Literal


class Settings(BaseSettings):
    """Voice agent settings. Override via environment variables."""

    # Inbound audio: PCM 16-bit little-endian, 48kHz mono (LiveKit default)
    INPUT_SAMPLE_RATE: int = 48000
    INPUT_CHANNELS: int = 1
    SAMPLE_WIDTH: int = 2  # 16-bit
    # WebSocket ingress re-frames client audio into frames of this length
    INGRESS_FRAME_MS: int = 20

    # Loudness gate: mean absolute amplitude (int16 scale) a frame must exceed
    LOUDNESS_THRESHOLD: int = 1000
    # Optional webrtcvad check after the loudness gate (10/20/30ms frames only)
    VAD_ENABLED: bool = False
    VAD_AGGRESSIVENESS: int = 2

    # Silence debounce before a turn is transcribed
    SILENCE_DEBOUNCE_MS: int = 1500
    # STT output meaning "no speech"
    BLANK_AUDIO_TOKEN: str = "[BLANK_AUDIO]"
    # Shorter transcripts are ignored by reply dispatch
    MIN_MESSAGE_CHARS: int = 3

    # ASR backend: "local" | "cloudflare"
    ASR_BACKEND: Literal["local", "cloudflare"] = "local"

    # Cloudflare Workers AI: ASR (when ASR_BACKEND=cloudflare) and chat runtime
    CLOUDFLARE_ACCOUNT_ID: str = ""
    CLOUDFLARE_API_TOKEN: str = ""
    CHAT_CF_MODEL: str = "@cf/meta/llama-3.1-8b-instruct"
    CHAT_MAX_TOKENS: int = 256
    CHAT_HISTORY_MAX_MESSAGES: int = 20
    CHAT_SYSTEM_PROMPT: str = "You are a friendly character in a shared virtual world. Reply briefly, as spoken dialogue."

    # Local Whisper (when ASR_BACKEND=local): model loaded once at startup
    LOCAL_WHISPER_MODEL: str = "base"  # base | small | medium | large-v3
    LOCAL_WHISPER_DEVICE: Literal["cpu", "cuda"] = "cpu"
    LOCAL_WHISPER_COMPUTE_TYPE: Literal["int8", "float16"] = "int8"
    LOCAL_WHISPER_BEAM_SIZE: int = 5

    # TTS backend: edge | elevenlabs | openai | auto (elevenlabs, then openai) | none
    TTS_BACKEND: str = "edge"
    TTS_EDGE_VOICE: str = "en-US-GuyNeural"

    ELEVENLABS_XI_API_KEY: str = ""
    ELEVENLABS_VOICE_ID: str = "EXAVITQu4vr4xnSDxMaL"
    ELEVENLABS_MODEL_ID: str = "eleven_multilingual_v2"
    # mp3 is transcoded to OUTPUT_SAMPLE_RATE; pcm_16000 would play at the wrong speed
    ELEVENLABS_OUTPUT_FORMAT: str = "mp3_44100_128"
    ELEVENLABS_VOICE_STABILITY: float = 0.5
    ELEVENLABS_VOICE_SIMILARITY_BOOST: float = 0.9
    ELEVENLABS_VOICE_STYLE: float = 0.66
    ELEVENLABS_VOICE_USE_SPEAKER_BOOST: bool = False

    OPENAI_API_KEY: str = ""
    OPENAI_TTS_MODEL: str = "tts-1"
    OPENAI_TTS_VOICE: str = "nova"

    # Outbound playback
    OUTPUT_SAMPLE_RATE: int = 48000
    OUTPUT_CHANNELS: int = 1
    PLAYBACK_FRAME_MS: int = 100
    AGENT_TRACK_NAME: str = "agent-voice"
    DEFAULT_EMOTE: str = "TALK"

    # External transcoder
    FFMPEG_BINARY: str = "ffmpeg"
    TRANSCODE_TIMEOUT_SEC: float = 30.0

    # LiveKit room (empty = no transport; WebSocket ingress still works)
    LIVEKIT_URL: str = ""
    LIVEKIT_TOKEN: str = ""

    # Autonomous behavior loop (seconds)
    BEHAVIOR_INTERVAL_MIN_SEC: float = 15.0
    BEHAVIOR_INTERVAL_MAX_SEC: float = 30.0
    BEHAVIOR_IDLE_INTERVAL_MIN_SEC: float = 60.0  # when no other players are around
    BEHAVIOR_IDLE_INTERVAL_MAX_SEC: float = 120.0

    # Logging: level (DEBUG, INFO, WARNING, ERROR); file path (empty = console only)
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()
