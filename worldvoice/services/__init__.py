"""Application services (e.g. chat runtime answering voice messages)."""
from worldvoice.services.chat_runtime import CloudflareChatRuntime, chat_with_ai_messages

__all__ = ["CloudflareChatRuntime", "chat_with_ai_messages"]
