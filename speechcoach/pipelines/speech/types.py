"""Typed containers shared across the speech analysis pipeline.

These live in their own module so the stage modules (`locator`, `prompts`,
`flow`) can import them without creating circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from speechcoach.errors import AnalysisError, InvalidAnalysisRequest
from speechcoach.models.feedback import Feedback
from speechcoach.services.feedback_repository import NewFeedback
from speechcoach.services.response_contract import FeedbackAnalysis
from speechcoach.services.transcribe import TranscriptionResult


class AnalysisStage(str, Enum):
    """States of one analysis run, in execution order."""

    RECEIVED = "received"
    DOWNLOADING = "downloading"
    TRANSCRIBING = "transcribing"
    PROMPTING = "prompting"
    PARSING_RESPONSE = "parsing_response"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (AnalysisStage.COMPLETED, AnalysisStage.FAILED)


@dataclass(frozen=True)
class AnalysisRequest:
    """Inbound analysis payload; rejected before any external call when incomplete."""

    audio_url: str | None
    speech_id: str | None
    prompt_used: str | None = None

    def validate(self) -> None:
        if not (self.audio_url or "").strip() or not (self.speech_id or "").strip():
            raise InvalidAnalysisRequest("Missing required parameters")


@dataclass(frozen=True)
class FeedbackPrompt:
    """System/user prompt pair handed to the language model."""

    system_prompt: str
    user_prompt: str


@dataclass
class AnalysisResult:
    """Outcome of one pipeline run, successful or not."""

    speech_id: str | None
    stage: AnalysisStage = AnalysisStage.RECEIVED
    history: list[AnalysisStage] = field(default_factory=list)
    transcript: str | None = None
    analysis: FeedbackAnalysis | None = None
    feedback: Feedback | None = None
    error: AnalysisError | None = None

    @property
    def succeeded(self) -> bool:
        return self.stage is AnalysisStage.COMPLETED


class BlobStore(Protocol):
    async def download(self, bucket: str, key: str) -> bytes: ...


class Transcriber(Protocol):
    async def transcribe(self, audio_bytes: bytes) -> TranscriptionResult: ...


class LanguageModel(Protocol):
    async def complete(self, *, system_prompt: str, user_prompt: str) -> str: ...


class FeedbackGateway(Protocol):
    async def attach_transcript(self, speech_id: str, transcript: str) -> None: ...

    async def find_owner_of(self, speech_id: str) -> str: ...

    async def insert_feedback(self, record: NewFeedback) -> Feedback: ...


__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisStage",
    "BlobStore",
    "FeedbackGateway",
    "FeedbackPrompt",
    "LanguageModel",
    "Transcriber",
]
