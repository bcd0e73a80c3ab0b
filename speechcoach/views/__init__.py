"""Pydantic schemas used as views in the MVC architecture."""

from .analysis import (
    AnalyzeSpeechRequest,
    AnalyzeSpeechResponse,
    FeedbackResponse,
    SpeechFeedbackListResponse,
)
from .common import ErrorResponse

__all__ = [
    "AnalyzeSpeechRequest",
    "AnalyzeSpeechResponse",
    "ErrorResponse",
    "FeedbackResponse",
    "SpeechFeedbackListResponse",
]
