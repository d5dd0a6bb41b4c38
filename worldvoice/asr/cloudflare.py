"""
CloudflareWhisperEngine: Whisper via Cloudflare Workers AI.

Sends the WAV buffer as a byte list. HTTP failures raise, so the scheduler
logs them and drops the turn.
"""
from __future__ import annotations

import logging

import httpx

from worldvoice.asr.base import ASREngine, ASRResult
from worldvoice.config import get_settings

logger = logging.getLogger(__name__)

_WHISPER_MODEL = "@cf/openai/whisper"


def _parse_whisper_response(data: dict) -> str:
    result = data.get("result", data)
    if isinstance(result, dict):
        text = result.get("text", result.get("transcript", ""))
    elif isinstance(result, str):
        text = result
    else:
        text = ""
    return (text or "").strip()


class CloudflareWhisperEngine(ASREngine):
    """Remote Whisper via Cloudflare Workers AI."""

    def __init__(self, account_id: str | None = None, api_token: str | None = None, timeout: float = 30.0) -> None:
        settings = get_settings()
        self._account_id = account_id if account_id is not None else settings.CLOUDFLARE_ACCOUNT_ID
        self._token = api_token if api_token is not None else settings.CLOUDFLARE_API_TOKEN
        self._timeout = timeout

    @property
    def url(self) -> str:
        return f"https://api.cloudflare.com/client/v4/accounts/{self._account_id}/ai/run/{_WHISPER_MODEL}"

    async def transcribe(self, wav_bytes: bytes) -> ASRResult:
        if not self._account_id or not self._token:
            logger.warning("CLOUDFLARE_ACCOUNT_ID / CLOUDFLARE_API_TOKEN not set; skipping transcription")
            return ASRResult(text="", confidence=0.0)

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(
                self.url,
                headers={"Authorization": f"Bearer {self._token}"},
                json={"audio": list(wav_bytes)},
            )
            resp.raise_for_status()
            data = resp.json()

        text = _parse_whisper_response(data)
        return ASRResult(text=text, confidence=1.0 if text else 0.0)
