"""Pydantic schemas for API request/response."""
from worldvoice.schemas.status import SpeakRequest, SpeakResponse, StatusResponse

__all__ = [
    "SpeakRequest",
    "SpeakResponse",
    "StatusResponse",
]
