"""FeedbackRepository against an in-memory SQLite database."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import add_speech, drop_tables
from speechcoach.errors import PersistenceError, SpeechNotFound
from speechcoach.models import Feedback
from speechcoach.services.feedback_repository import NewFeedback


def _new_feedback(**overrides) -> NewFeedback:
    fields = {
        "speech_id": "s1",
        "user_id": "u1",
        "confidence_score": 65,
        "pace_rating": "too_slow",
        "clarity_rating": "good",
        "filler_words_count": 4,
        "strengths": ["Warm tone"],
        "improvements": ["Tighten the ending"],
        "ai_summary": "Good effort.",
    }
    fields.update(overrides)
    return NewFeedback(**fields)


def test_attach_transcript_last_write_wins(run_with_database) -> None:
    async def scenario(repository, session_factory):
        await add_speech(session_factory, "s1", "u1")
        await repository.attach_transcript("s1", "first take")
        await repository.attach_transcript("s1", "second take")
        return await repository.get_speech("s1")

    speech = run_with_database(scenario)

    assert speech.transcript == "second take"


def test_attach_transcript_to_unknown_speech_is_a_noop(run_with_database) -> None:
    async def scenario(repository, session_factory):
        await repository.attach_transcript("ghost", "hello")
        return await repository.get_speech("ghost")

    assert run_with_database(scenario) is None


def test_find_owner_of(run_with_database) -> None:
    async def scenario(repository, session_factory):
        await add_speech(session_factory, "s1", "owner-7")
        owner = await repository.find_owner_of("s1")
        with pytest.raises(SpeechNotFound):
            await repository.find_owner_of("missing")
        return owner

    assert run_with_database(scenario) == "owner-7"


def test_insert_feedback_returns_row_with_generated_fields(run_with_database) -> None:
    async def scenario(repository, session_factory):
        await add_speech(session_factory, "s1", "u1")
        return await repository.insert_feedback(_new_feedback())

    row = run_with_database(scenario)

    assert row.id
    assert row.created_at is not None
    assert row.strengths == ["Warm tone"]
    assert row.pace_rating == "too_slow"


def test_insert_feedback_keeps_unrecognized_ratings(run_with_database) -> None:
    async def scenario(repository, session_factory):
        await add_speech(session_factory, "s1", "u1")
        await repository.insert_feedback(_new_feedback(pace_rating="brisk", confidence_score=130))
        return await repository.list_feedback("s1")

    (row,) = run_with_database(scenario)

    assert row.pace_rating == "brisk"
    assert row.confidence_score == 130


def test_insert_feedback_failure_raises_persistence_error(run_with_database) -> None:
    async def scenario(repository, session_factory):
        await add_speech(session_factory, "s1", "u1")
        with pytest.raises(PersistenceError):
            await repository.insert_feedback(_new_feedback(user_id=None))
        return await repository.list_feedback("s1")

    assert list(run_with_database(scenario)) == []


def test_list_feedback_is_newest_first(run_with_database) -> None:
    earlier = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    async def scenario(repository, session_factory):
        await add_speech(session_factory, "s1", "u1")
        await add_speech(session_factory, "s2", "u1")
        async with session_factory() as session:
            session.add_all(
                [
                    Feedback(id="old", speech_id="s1", user_id="u1", created_at=earlier),
                    Feedback(id="new", speech_id="s1", user_id="u1", created_at=earlier + timedelta(hours=1)),
                    Feedback(id="other", speech_id="s2", user_id="u1", created_at=earlier),
                ]
            )
            await session.commit()
        return await repository.list_feedback("s1")

    rows = run_with_database(scenario)

    assert [row.id for row in rows] == ["new", "old"]


def test_insert_feedback_for_unknown_speech_raises_persistence_error(run_with_database) -> None:
    async def scenario(repository, session_factory):
        await add_speech(session_factory, "s1", "u1")
        with pytest.raises(PersistenceError):
            await repository.insert_feedback(_new_feedback(speech_id="ghost"))
        return await repository.list_feedback("ghost")

    assert list(run_with_database(scenario)) == []


def test_find_owner_of_database_failure_raises_persistence_error(run_with_database) -> None:
    async def scenario(repository, session_factory):
        await add_speech(session_factory, "s1", "u1")
        await drop_tables(session_factory)
        with pytest.raises(PersistenceError) as excinfo:
            await repository.find_owner_of("s1")
        return excinfo.value

    error = run_with_database(scenario)

    assert error.message.startswith("Failed to look up speech")
    assert error.status_code == 500


def test_list_feedback_orders_rows_written_in_the_same_second(run_with_database) -> None:
    async def scenario(repository, session_factory):
        await add_speech(session_factory, "s1", "u1")
        inserted = []
        for summary in ("first", "second", "third"):
            row = await repository.insert_feedback(_new_feedback(ai_summary=summary))
            inserted.append(row.id)
        rows = await repository.list_feedback("s1")
        return inserted, rows

    inserted, rows = run_with_database(scenario)

    assert [row.id for row in rows] == list(reversed(inserted))
    assert [row.ai_summary for row in rows] == ["third", "second", "first"]
