"""Voice turn-taking: activity lock, debounced transcription, reply dispatch, behavior loop."""
from .activity_lock import ActivityLock
from .behavior import BehaviorLoop
from .dispatch import AgentRuntime, ReplyContent, ReplyDispatch, VoiceMessage
from .manager import VoiceManager
from .scheduler import TranscriptionScheduler

__all__ = [
    "ActivityLock",
    "AgentRuntime",
    "BehaviorLoop",
    "ReplyContent",
    "ReplyDispatch",
    "TranscriptionScheduler",
    "VoiceManager",
    "VoiceMessage",
]
