"""Pydantic schemas for the speech analysis endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from speechcoach.models.feedback import Feedback
from speechcoach.pipelines.speech import AnalysisRequest, AnalysisResult


class AnalyzeSpeechRequest(BaseModel):
    """Body of POST /analyze-speech."""

    audio_url: Optional[str] = Field(default=None, description="Public or signed URL of the uploaded recording")
    speech_id: Optional[str] = Field(default=None, description="Speech row the recording belongs to")
    prompt_used: Optional[str] = Field(default=None, description="Practice prompt the speaker answered")

    def to_pipeline_request(self) -> AnalysisRequest:
        return AnalysisRequest(
            audio_url=self.audio_url,
            speech_id=self.speech_id,
            prompt_used=self.prompt_used,
        )


class FeedbackResponse(BaseModel):
    """One persisted feedback record."""

    id: str
    speech_id: str
    user_id: str
    confidence_score: Optional[Any] = None
    pace_rating: Optional[str] = None
    clarity_rating: Optional[str] = None
    filler_words_count: int = 0
    strengths: list[Any] = Field(default_factory=list)
    improvements: list[Any] = Field(default_factory=list)
    ai_summary: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_row(cls, row: Feedback, **overrides: Any) -> "FeedbackResponse":
        view = cls.model_validate(row)
        return view.model_copy(update=overrides) if overrides else view


class AnalyzeSpeechResponse(BaseModel):
    """Success envelope of POST /analyze-speech."""

    success: bool = True
    transcript: str
    feedback: FeedbackResponse

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalyzeSpeechResponse":
        # The list columns are echoed from the parsed reply, not re-read from storage.
        feedback = FeedbackResponse.from_row(
            result.feedback,
            strengths=list(result.analysis.strengths),
            improvements=list(result.analysis.improvements),
        )
        return cls(transcript=result.transcript or "", feedback=feedback)


class SpeechFeedbackListResponse(BaseModel):
    """Response for GET /speeches/{speech_id}/feedback."""

    speech_id: str
    transcript: Optional[str] = None
    feedback: list[FeedbackResponse]
