"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from speechcoach.config.settings import settings
from speechcoach.database import session_scope
from speechcoach.pipelines.speech import SpeechAnalysisPipeline
from speechcoach.services import (
    ChatCompletionClient,
    FeedbackRepository,
    WhisperTranscriptionClient,
    get_blob_store,
)


def get_feedback_repository() -> FeedbackRepository:
    """Repository bound to the application's session factory."""

    return FeedbackRepository(session_scope)


RepositoryDep = Annotated[FeedbackRepository, Depends(get_feedback_repository)]


def get_analysis_pipeline(repository: RepositoryDep) -> SpeechAnalysisPipeline:
    """Wire the pipeline from configured providers.

    Raises ConfigurationError when an API key is missing; the application's
    exception handler turns that into the error envelope.
    """

    return SpeechAnalysisPipeline(
        blob_store=get_blob_store(),
        transcriber=WhisperTranscriptionClient.from_config(settings.transcription),
        llm=ChatCompletionClient.from_config(settings.llm),
        repository=repository,
        bucket=settings.storage.bucket_name,
    )


PipelineDep = Annotated[SpeechAnalysisPipeline, Depends(get_analysis_pipeline)]


__all__ = [
    "get_analysis_pipeline",
    "get_feedback_repository",
    "PipelineDep",
    "RepositoryDep",
]
