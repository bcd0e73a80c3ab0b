"""Repository helpers for reading/writing speeches and their feedback."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncContextManager, Callable, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from speechcoach.errors import PersistenceError, SpeechNotFound
from speechcoach.models.feedback import Feedback
from speechcoach.models.speech import Speech

logger = logging.getLogger(__name__)

SessionProvider = Callable[[], AsyncContextManager[AsyncSession]]


@dataclass(frozen=True)
class NewFeedback:
    """Column values for one feedback insert."""

    speech_id: str
    user_id: str
    confidence_score: Any
    pace_rating: str
    clarity_rating: str
    filler_words_count: int
    strengths: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    ai_summary: str = ""


class FeedbackRepository:
    """Typed access to the `speeches` and `feedback` tables.

    Each method opens its own session, so the transcript update and the
    feedback insert never share a transaction.
    """

    def __init__(self, session_factory: SessionProvider) -> None:
        self._session_factory = session_factory

    async def attach_transcript(self, speech_id: str, transcript: str) -> None:
        """Store the transcript on the speech row; repeated calls overwrite it."""

        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    update(Speech)
                    .where(Speech.id == speech_id)
                    .values(transcript=transcript)
                )
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise PersistenceError(f"Failed to save transcript: {exc}") from exc

        if result.rowcount == 0:
            logger.warning("No speech row to attach transcript speech_id=%s", speech_id)

    async def find_owner_of(self, speech_id: str) -> str:
        """Return the user id owning the speech.

        Raises SpeechNotFound when no row matches and PersistenceError when the
        lookup itself fails.
        """

        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    select(Speech.user_id).where(Speech.id == speech_id)
                )
            except SQLAlchemyError as exc:
                raise PersistenceError(f"Failed to look up speech: {exc}") from exc
            user_id = result.scalar_one_or_none()

        if user_id is None:
            raise SpeechNotFound("Speech not found")
        return user_id

    async def insert_feedback(self, record: NewFeedback) -> Feedback:
        """Insert one feedback row and return it with server defaults loaded."""

        row = Feedback(
            speech_id=record.speech_id,
            user_id=record.user_id,
            confidence_score=record.confidence_score,
            pace_rating=record.pace_rating,
            clarity_rating=record.clarity_rating,
            filler_words_count=record.filler_words_count,
            strengths=list(record.strengths),
            improvements=list(record.improvements),
            ai_summary=record.ai_summary,
        )
        async with self._session_factory() as session:
            session.add(row)
            try:
                await session.commit()
                await session.refresh(row)
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error("Feedback insert error speech_id=%s: %s", record.speech_id, exc)
                raise PersistenceError(f"Failed to save feedback: {exc}") from exc
        return row

    async def get_speech(self, speech_id: str) -> Speech | None:
        async with self._session_factory() as session:
            result = await session.execute(select(Speech).where(Speech.id == speech_id))
            return result.scalar_one_or_none()

    async def list_feedback(self, speech_id: str) -> Sequence[Feedback]:
        """Return every feedback row for the speech, newest first."""

        async with self._session_factory() as session:
            result = await session.execute(
                select(Feedback)
                .where(Feedback.speech_id == speech_id)
                .order_by(Feedback.created_at.desc(), Feedback.id)
            )
            return result.scalars().all()


__all__ = ["FeedbackRepository", "NewFeedback", "SessionProvider"]
