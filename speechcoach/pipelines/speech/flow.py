"""Orchestration for the `/analyze-speech` pipeline.

One run walks ``received → downloading → transcribing → prompting →
parsing_response → persisting → completed``. Any ``AnalysisError`` raised by a
stage moves the run straight to ``failed``; later stages are skipped and no
external call is retried.

The transcript is written back at the end of ``transcribing``, before the
language model is consulted, so a run that fails afterwards still leaves the
speech with its transcript. Callers treat "transcript without feedback" as a
valid state.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List

from speechcoach.errors import AnalysisError, UnparsableAnalysis
from speechcoach.models.feedback import Feedback
from speechcoach.services.feedback_repository import NewFeedback
from speechcoach.services.response_contract import FeedbackAnalysis
from speechcoach.telemetry import observe_stage, record_analysis_failure, record_analysis_outcome

from .locator import resolve_object_key
from .prompts import build_feedback_prompt
from .types import (
    AnalysisRequest,
    AnalysisResult,
    AnalysisStage,
    BlobStore,
    FeedbackGateway,
    LanguageModel,
    Transcriber,
)

logger = logging.getLogger("speechcoach.pipeline")
transcript_logger = logging.getLogger("speechcoach.logs.transcript")


def _truncate(value: str, max_length: int = 100) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the speech pipeline."""

    order: int
    stage: AnalysisStage
    module: str
    summary: str


class SpeechAnalysisPipeline:
    """Sequence download, transcription, prompting, parsing and persistence."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            AnalysisStage.DOWNLOADING,
            "speechcoach.pipelines.speech.locator",
            "Resolve the object key from audio_url and download the recording.",
        ),
        PipelineStage(
            2,
            AnalysisStage.TRANSCRIBING,
            "speechcoach.services.transcribe",
            "Send the recording to the speech-to-text provider and save the transcript.",
        ),
        PipelineStage(
            3,
            AnalysisStage.PROMPTING,
            "speechcoach.pipelines.speech.prompts",
            "Render the coaching prompt and call the language model once.",
        ),
        PipelineStage(
            4,
            AnalysisStage.PARSING_RESPONSE,
            "speechcoach.services.response_contract",
            "Extract the JSON object from the reply and decode it into feedback.",
        ),
        PipelineStage(
            5,
            AnalysisStage.PERSISTING,
            "speechcoach.services.feedback_repository",
            "Resolve the speech owner and insert exactly one feedback row.",
        ),
    ]

    def __init__(
        self,
        *,
        blob_store: BlobStore,
        transcriber: Transcriber,
        llm: LanguageModel,
        repository: FeedbackGateway,
        bucket: str = "speeches",
    ) -> None:
        self._blob_store = blob_store
        self._transcriber = transcriber
        self._llm = llm
        self._repository = repository
        self._bucket = bucket

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)

    async def run(self, request: AnalysisRequest) -> AnalysisResult:
        """Execute one analysis; failures come back as a `failed` result."""

        result = AnalysisResult(speech_id=request.speech_id)
        self._enter(result, AnalysisStage.RECEIVED)
        logger.info("Analyzing speech speech_id=%s audio_url=%s", request.speech_id, request.audio_url)

        try:
            request.validate()
            audio = await self._run_stage(result, AnalysisStage.DOWNLOADING, self._download, request)
            result.transcript = await self._run_stage(
                result, AnalysisStage.TRANSCRIBING, self._transcribe, request, audio
            )
            reply = await self._run_stage(
                result, AnalysisStage.PROMPTING, self._prompt, request, result.transcript
            )
            result.analysis = await self._run_stage(
                result, AnalysisStage.PARSING_RESPONSE, self._parse, reply
            )
            result.feedback = await self._run_stage(
                result, AnalysisStage.PERSISTING, self._persist, request, result.analysis
            )
        except AnalysisError as exc:
            return self._fail(result, exc)

        self._enter(result, AnalysisStage.COMPLETED)
        record_analysis_outcome("completed")
        logger.info("Feedback saved speech_id=%s feedback_id=%s", request.speech_id, result.feedback.id)
        return result

    @staticmethod
    def _enter(result: AnalysisResult, stage: AnalysisStage) -> None:
        result.stage = stage
        result.history.append(stage)
        logger.debug("speech_id=%s -> %s", result.speech_id, stage.value)

    async def _run_stage(
        self,
        result: AnalysisResult,
        stage: AnalysisStage,
        handler: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> Any:
        self._enter(result, stage)
        started = time.perf_counter()
        try:
            return await handler(*args)
        finally:
            observe_stage(stage.value, time.perf_counter() - started)

    def _fail(self, result: AnalysisResult, exc: AnalysisError) -> AnalysisResult:
        failed_stage = result.stage
        if exc.stage is None:
            exc.stage = failed_stage.value
        result.error = exc
        self._enter(result, AnalysisStage.FAILED)
        record_analysis_failure(exc.stage, exc.kind)
        record_analysis_outcome("failed")
        logger.error(
            "Error in analyze-speech speech_id=%s stage=%s kind=%s upstream_status=%s: %s",
            result.speech_id,
            exc.stage,
            exc.kind,
            exc.upstream_status,
            exc.message,
        )
        return result

    async def _download(self, request: AnalysisRequest) -> bytes:
        object_key = resolve_object_key(request.audio_url, self._bucket)
        logger.info("Downloading from path: %s", object_key)
        return await self._blob_store.download(self._bucket, object_key)

    async def _transcribe(self, request: AnalysisRequest, audio: bytes) -> str:
        outcome = await self._transcriber.transcribe(audio)
        transcript = outcome.transcript
        logger.info("Transcript speech_id=%s: %s", request.speech_id, _truncate(transcript))
        transcript_logger.info("speech=%s | text=%s", request.speech_id, transcript)

        await self._repository.attach_transcript(request.speech_id, transcript)
        return transcript

    async def _prompt(self, request: AnalysisRequest, transcript: str) -> str:
        prompt = build_feedback_prompt(transcript, request.prompt_used)
        return await self._llm.complete(
            system_prompt=prompt.system_prompt,
            user_prompt=prompt.user_prompt,
        )

    async def _parse(self, reply: str) -> FeedbackAnalysis:
        try:
            return FeedbackAnalysis.from_model_reply(reply)
        except UnparsableAnalysis:
            logger.error("Failed to parse AI response: %s", _truncate(reply or "", 500))
            raise

    async def _persist(
        self,
        request: AnalysisRequest,
        analysis: FeedbackAnalysis,
    ) -> Feedback:
        owner_id = await self._repository.find_owner_of(request.speech_id)
        return await self._repository.insert_feedback(
            NewFeedback(
                speech_id=request.speech_id,
                user_id=owner_id,
                confidence_score=analysis.confidence_score,
                pace_rating=analysis.pace_rating,
                clarity_rating=analysis.clarity_rating,
                filler_words_count=analysis.filler_words_count,
                strengths=list(analysis.strengths),
                improvements=list(analysis.improvements),
                ai_summary=analysis.ai_summary,
            )
        )


__all__ = ["PipelineStage", "SpeechAnalysisPipeline"]
