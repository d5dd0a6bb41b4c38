"""
CloudflareChatRuntime: a minimal AgentRuntime backed by Cloudflare Workers AI.

Keeps a short per-speaker history (session_store) and asks a text-generation
model for a one-shot spoken reply. Reply quality is not a concern here; this
runtime exists so the pipeline can run end to end without a host framework.
"""
from __future__ import annotations

import logging
from typing import Callable

import httpx

from worldvoice.config import Settings, get_settings
from worldvoice.session_store import append_exchange, ensure_conversation
from worldvoice.voice.dispatch import AgentRuntime, ReplyCallback, ReplyContent, VoiceMessage

logger = logging.getLogger(__name__)


def _get_cloudflare_auth(settings: Settings) -> tuple[str, str]:
    return (
        (settings.CLOUDFLARE_ACCOUNT_ID or "").strip(),
        (settings.CLOUDFLARE_API_TOKEN or "").strip(),
    )


def _parse_chat_response(data: dict) -> str:
    result = data.get("result", data)
    if isinstance(result, dict):
        content = result.get("response", "") or ""
    elif isinstance(result, str):
        content = result
    else:
        content = ""
    return (content or "").strip()


async def chat_with_ai_messages(messages: list[dict[str, str]], timeout: float = 60.0) -> str:
    """
    Call Cloudflare Workers AI with full message history. Returns assistant reply only.
    messages = [ { "role": "system"|"user"|"assistant", "content": "..." }, ... ]
    Raises ValueError if auth is missing; httpx.HTTPStatusError on API errors.
    """
    settings = get_settings()
    account_id, token = _get_cloudflare_auth(settings)
    if not account_id or not token:
        raise ValueError("CLOUDFLARE_ACCOUNT_ID and CLOUDFLARE_API_TOKEN are required for chat")

    model = settings.CHAT_CF_MODEL
    url = f"https://api.cloudflare.com/client/v4/accounts/{account_id}/ai/run/{model}"
    payload = {
        "messages": messages,
        "max_tokens": settings.CHAT_MAX_TOKENS,
        "temperature": 0.7,
    }
    logger.info("LLM request to Cloudflare: model=%s, messages=%s", model, len(messages))

    async with httpx.AsyncClient(timeout=timeout) as client:
        resp = await client.post(
            url,
            json=payload,
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
        )
        resp.raise_for_status()
        data = resp.json()
    return _parse_chat_response(data)


class CloudflareChatRuntime(AgentRuntime):
    def __init__(self, system_prompt: str | None = None, history_max_messages: int | None = None) -> None:
        settings = get_settings()
        self._system_prompt = system_prompt or settings.CHAT_SYSTEM_PROMPT
        self._history_max = (
            history_max_messages if history_max_messages is not None else settings.CHAT_HISTORY_MAX_MESSAGES
        )

    def build_messages(self, message: VoiceMessage) -> list[dict[str, str]]:
        history = list(ensure_conversation(message.speaker_id)["messages"])
        return [
            {"role": "system", "content": self._system_prompt},
            *history,
            {"role": "user", "content": f"{message.speaker_name}: {message.text}"},
        ]

    async def handle_voice_message(
        self,
        message: VoiceMessage,
        callback: ReplyCallback,
        on_complete: Callable[[], None],
    ) -> None:
        try:
            reply = await chat_with_ai_messages(self.build_messages(message))
            if not reply:
                logger.info("Chat runtime chose not to reply to %s", message.speaker_name)
                return
            append_exchange(message.speaker_id, message.text, reply, self._history_max)
            await callback(ReplyContent(text=reply))
        finally:
            on_complete()
