"""Shared fixtures: fake providers and a throwaway SQLite-backed repository."""

from __future__ import annotations

import asyncio
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Keep module-level engine creation away from a real PostgreSQL server.
os.environ.setdefault("DB_URL", "sqlite+aiosqlite://")

from sqlalchemy import event, text  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from speechcoach.errors import SpeechNotFound  # noqa: E402
from speechcoach.models import Base, Feedback, Speech  # noqa: E402
from speechcoach.services.feedback_repository import FeedbackRepository, NewFeedback  # noqa: E402
from speechcoach.services.transcribe import TranscriptionResult  # noqa: E402

FENCED_REPLY = """Here is my analysis of the speech.

```json
{
  "confidence_score": 72,
  "pace_rating": "good",
  "clarity_rating": "fair",
  "filler_words_count": 2,
  "strengths": ["Clear intro"],
  "improvements": ["Reduce filler words"],
  "ai_summary": "Solid start."
}
```

Keep practicing!"""


class FakeBlobStore:
    def __init__(self, payload: bytes = b"webm-bytes", error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def download(self, bucket: str, key: str) -> bytes:
        self.calls.append((bucket, key))
        if self.error is not None:
            raise self.error
        return self.payload


class FakeTranscriber:
    def __init__(self, transcript: str = "Um, hi, I am, uh, testing.", error: Exception | None = None) -> None:
        self.transcript = transcript
        self.error = error
        self.calls: list[bytes] = []

    async def transcribe(self, audio_bytes: bytes) -> TranscriptionResult:
        self.calls.append(audio_bytes)
        if self.error is not None:
            raise self.error
        return TranscriptionResult(transcript=self.transcript, language_code="en")


class FakeLanguageModel:
    def __init__(self, reply: str = FENCED_REPLY, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, str]] = []

    async def complete(self, *, system_prompt: str, user_prompt: str) -> str:
        self.calls.append({"system_prompt": system_prompt, "user_prompt": user_prompt})
        if self.error is not None:
            raise self.error
        return self.reply


class InMemoryFeedbackRepository:
    """Dictionary-backed stand-in for FeedbackRepository."""

    def __init__(self, speeches: dict[str, str] | None = None) -> None:
        self.owners = dict(speeches or {})
        self.transcripts: dict[str, str] = {}
        self.feedback: list[Feedback] = []

    async def attach_transcript(self, speech_id: str, transcript: str) -> None:
        self.transcripts[speech_id] = transcript

    async def find_owner_of(self, speech_id: str) -> str:
        if speech_id not in self.owners:
            raise SpeechNotFound("Speech not found")
        return self.owners[speech_id]

    async def insert_feedback(self, record: NewFeedback) -> Feedback:
        row = Feedback(
            id=str(uuid4()),
            speech_id=record.speech_id,
            user_id=record.user_id,
            confidence_score=record.confidence_score,
            pace_rating=record.pace_rating,
            clarity_rating=record.clarity_rating,
            filler_words_count=record.filler_words_count,
            strengths=list(record.strengths),
            improvements=list(record.improvements),
            ai_summary=record.ai_summary,
            created_at=datetime.now(timezone.utc),
        )
        self.feedback.append(row)
        return row

    async def get_speech(self, speech_id: str) -> Speech | None:
        if speech_id not in self.owners:
            return None
        return Speech(
            id=speech_id,
            user_id=self.owners[speech_id],
            title="",
            audio_url="",
            transcript=self.transcripts.get(speech_id),
        )

    async def list_feedback(self, speech_id: str) -> list[Feedback]:
        rows = [row for row in self.feedback if row.speech_id == speech_id]
        return list(reversed(rows))


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def run_with_database() -> Callable[[Callable[..., Awaitable[Any]]], Any]:
    """Run an async scenario against a fresh in-memory SQLite schema.

    Foreign keys are enforced, matching PostgreSQL. The scenario receives ``(repository, session_factory)``; everything runs
    inside a single event loop so the aiosqlite connection is never shared
    across loops.
    """

    def _run(scenario: Callable[..., Awaitable[Any]]) -> Any:
        async def _main() -> Any:
            engine = create_async_engine(
                "sqlite+aiosqlite://",
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
            event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
            try:
                return await scenario(FeedbackRepository(factory), factory)
            finally:
                await engine.dispose()

        return asyncio.run(_main())

    return _run


async def add_speech(session_factory, speech_id: str = "s1", user_id: str = "u1", **fields: Any) -> None:
    async with session_factory() as session:
        session.add(
            Speech(
                id=speech_id,
                user_id=user_id,
                title=fields.pop("title", "Practice"),
                audio_url=fields.pop(
                    "audio_url",
                    f"https://example.supabase.co/storage/v1/object/public/speeches/{user_id}/123-a.webm",
                ),
                **fields,
            )
        )
        await session.commit()


async def drop_tables(session_factory) -> None:
    """Remove both tables so any later statement fails at the driver."""

    async with session_factory() as session:
        await session.execute(text("DROP TABLE feedback"))
        await session.execute(text("DROP TABLE speeches"))
        await session.commit()
