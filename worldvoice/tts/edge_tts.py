"""
Edge TTS engine (Microsoft Edge online TTS). Free, no API key needed.
If Microsoft answers 403: check network/region or set TTS_BACKEND=none.
"""
from __future__ import annotations

import logging
import re
from typing import AsyncIterator, List

from worldvoice.tts.base import TTSEngine
from worldvoice.tts.payload import PulledSpeech

logger = logging.getLogger(__name__)

DEFAULT_VOICE = "en-US-GuyNeural"

# Long replies are split so a single request stays under the service limit; MP3 chunks concatenate
MAX_CHARS_PER_CHUNK = 800


def split_text_chunks(text: str, max_chars: int = MAX_CHARS_PER_CHUNK) -> List[str]:
    """Split text into pieces of ~max_chars, at sentence boundaries where possible."""
    text = (text or "").strip()
    if not text or len(text) <= max_chars:
        return [text] if text else []
    chunks: List[str] = []
    parts = re.split(r"(?<=[.!?\n])\s+", text)
    current: List[str] = []
    current_len = 0
    for p in parts:
        if current_len + len(p) + 1 <= max_chars:
            current.append(p)
            current_len += len(p) + 1
        else:
            if current:
                chunks.append(" ".join(current))
            if len(p) > max_chars:
                for i in range(0, len(p), max_chars):
                    chunks.append(p[i : i + max_chars])
                current = []
                current_len = 0
            else:
                current = [p]
                current_len = len(p) + 1
    if current:
        chunks.append(" ".join(current))
    return chunks


class EdgeTTSEngine(TTSEngine):
    """TTS via edge-tts (Microsoft Edge). Output: MP3, pulled chunk by chunk."""

    def __init__(self, voice: str | None = None) -> None:
        self._voice = (voice or DEFAULT_VOICE).strip() or DEFAULT_VOICE

    @property
    def format(self) -> str:
        return "audio/mpeg"

    async def _stream(self, text_chunks: List[str]) -> AsyncIterator[bytes]:
        try:
            import edge_tts
        except ImportError as err:
            raise ImportError("edge-tts is required for TTS_BACKEND=edge. Install with: pip install edge-tts") from err
        for seg in text_chunks:
            communicate = edge_tts.Communicate(seg, self._voice)
            async for chunk in communicate.stream():
                if isinstance(chunk, dict) and chunk.get("type") == "audio":
                    data = chunk.get("data")
                    if data:
                        yield data

    async def synthesize(self, text: str) -> PulledSpeech | None:
        text_chunks = [c for c in split_text_chunks(text) if c.strip()]
        if not text_chunks:
            return None
        logger.debug("Edge TTS: %d chars in %d request(s), voice=%s", len(text), len(text_chunks), self._voice)
        return PulledSpeech(self._stream(text_chunks))
