"""
Schemas for the voice agent's small HTTP surface: status and ambient speech.
"""
from __future__ import annotations

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    """Response body for GET /status."""

    started: bool = Field(False, description="Voice manager attached to its transport")
    activity_locked: bool = Field(False, description="A voice turn or reply is holding the activity lock")
    lock_depth: int = Field(0, ge=0, description="Activity lock entry count")
    speaking: bool = Field(False, description="Agent audio is being published right now")
    playback_busy: bool = Field(False, description="A playback session is in flight")
    debounce_pending: bool = Field(False, description="A silence debounce timer is armed")
    transport_ready: bool = Field(False, description="Room transport connected")
    speakers: dict[str, int] = Field(default_factory=dict, description="Buffered bytes per speaker")


class SpeakRequest(BaseModel):
    """Request body for POST /api/speak."""

    text: str = Field(..., min_length=1, description="What the agent should say")
    emote: str | None = Field(None, description="Emotion tag played with the speech (default TALK)")


class SpeakResponse(BaseModel):
    played: bool = Field(False, description="True when the audio was fully published")
