"""Speech analysis endpoints.

For a stage-by-stage map see
`speechcoach.pipelines.speech.flow.SpeechAnalysisPipeline.describe()`. The
POST `/analyze-speech` pipeline performs:

1. Object-key resolution and download of the uploaded recording.
2. Transcription, with the transcript saved on the speech straight away.
3. One language-model call for structured coaching feedback.
4. Parsing of the reply and a single feedback insert.
"""

import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from speechcoach.controllers.dependencies import PipelineDep, RepositoryDep
from speechcoach.pipelines.speech import SpeechAnalysisPipeline
from speechcoach.views import (
    AnalyzeSpeechRequest,
    AnalyzeSpeechResponse,
    ErrorResponse,
    FeedbackResponse,
    SpeechFeedbackListResponse,
)

router = APIRouter(tags=["analysis"])

logger = logging.getLogger(__name__)

PIPELINE_STAGES = tuple(SpeechAnalysisPipeline.describe())
"""Ordered pipeline metadata used for quick reference and debugging."""

_ERROR_RESPONSES = {
    code: {"model": ErrorResponse}
    for code in (400, 402, 404, 422, 429, 500, 502)
}


@router.post(
    "/analyze-speech",
    response_model=AnalyzeSpeechResponse,
    responses=_ERROR_RESPONSES,
)
async def analyze_speech(
    payload: AnalyzeSpeechRequest,
    pipeline: PipelineDep,
):
    """Transcribe an uploaded speech and generate AI coaching feedback."""

    result = await pipeline.run(payload.to_pipeline_request())
    if not result.succeeded:
        error = result.error
        return JSONResponse(
            status_code=error.status_code,
            content={"error": error.message or "Analysis failed"},
        )

    return AnalyzeSpeechResponse.from_result(result)


@router.get(
    "/speeches/{speech_id}/feedback",
    response_model=SpeechFeedbackListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_speech_feedback(
    speech_id: str,
    repository: RepositoryDep,
) -> SpeechFeedbackListResponse:
    """Return the speech's transcript and every feedback record, newest first."""

    speech = await repository.get_speech(speech_id)
    if speech is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Speech not found",
        )

    rows = await repository.list_feedback(speech_id)
    return SpeechFeedbackListResponse(
        speech_id=speech_id,
        transcript=speech.transcript,
        feedback=[FeedbackResponse.from_row(row) for row in rows],
    )
