"""HTTP surface of the speech analysis API."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import FakeBlobStore, FakeLanguageModel, FakeTranscriber, InMemoryFeedbackRepository
from speechcoach.config.settings import settings
from speechcoach.controllers import dependencies
from speechcoach.controllers.dependencies import get_analysis_pipeline, get_feedback_repository
from speechcoach.errors import (
    BlobNotFound,
    ProviderBillingRequired,
    ProviderError,
    ProviderRateLimited,
    TranscriptionFailed,
)
from speechcoach.main import app
from speechcoach.pipelines.speech import SpeechAnalysisPipeline

AUDIO_URL = "https://abc.supabase.co/storage/v1/object/public/speeches/u1/123-a.webm"


@pytest.fixture
def repository():
    return InMemoryFeedbackRepository({"s1": "u1"})


@pytest.fixture
def client(repository):
    app.dependency_overrides[get_feedback_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


def _use_pipeline(repository, **collaborators) -> None:
    pipeline = SpeechAnalysisPipeline(
        blob_store=collaborators.get("blob_store") or FakeBlobStore(),
        transcriber=collaborators.get("transcriber") or FakeTranscriber(),
        llm=collaborators.get("llm") or FakeLanguageModel(),
        repository=repository,
    )
    app.dependency_overrides[get_analysis_pipeline] = lambda: pipeline


def test_analyze_speech_success_envelope(client, repository) -> None:
    _use_pipeline(repository)

    response = client.post(
        "/analyze-speech",
        json={"audio_url": AUDIO_URL, "speech_id": "s1", "prompt_used": "Tell us about yourself"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["transcript"] == "Um, hi, I am, uh, testing."
    feedback = body["feedback"]
    assert feedback["speech_id"] == "s1"
    assert feedback["user_id"] == "u1"
    assert feedback["confidence_score"] == 72
    assert feedback["pace_rating"] == "good"
    assert feedback["clarity_rating"] == "fair"
    assert feedback["filler_words_count"] == 2
    assert feedback["strengths"] == ["Clear intro"]
    assert feedback["improvements"] == ["Reduce filler words"]
    assert feedback["ai_summary"] == "Solid start."
    assert feedback["id"] == repository.feedback[0].id


@pytest.mark.parametrize("payload", [{}, {"audio_url": AUDIO_URL}, {"speech_id": "s1"}])
def test_missing_parameters_return_400(client, repository, payload) -> None:
    blob_store = FakeBlobStore()
    _use_pipeline(repository, blob_store=blob_store)

    response = client.post("/analyze-speech", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required parameters"}
    assert blob_store.calls == []


def test_malformed_reference_returns_422(client, repository) -> None:
    _use_pipeline(repository)

    response = client.post(
        "/analyze-speech",
        json={"audio_url": "https://cdn.test/avatars/u1/a.webm", "speech_id": "s1"},
    )

    assert response.status_code == 422
    assert response.json() == {"error": "Could not parse storage path from audio_url"}


@pytest.mark.parametrize(
    "collaborator, error, status",
    [
        ("blob_store", BlobNotFound("Failed to download audio: not found"), 404),
        ("transcriber", TranscriptionFailed(401, "Incorrect API key"), 502),
        ("llm", ProviderRateLimited("Rate limit exceeded. Please try again later."), 429),
        ("llm", ProviderBillingRequired("Payment required. Please add credits to your workspace."), 402),
        ("llm", ProviderError("AI analysis failed: 503 - unavailable"), 502),
    ],
)
def test_pipeline_failures_use_error_envelope(client, repository, collaborator, error, status) -> None:
    fakes = {
        "blob_store": FakeBlobStore,
        "transcriber": FakeTranscriber,
        "llm": FakeLanguageModel,
    }
    _use_pipeline(repository, **{collaborator: fakes[collaborator](error=error)})

    response = client.post("/analyze-speech", json={"audio_url": AUDIO_URL, "speech_id": "s1"})

    assert response.status_code == status
    assert response.json() == {"error": error.message}
    assert repository.feedback == []


def test_unparsable_reply_returns_502(client, repository) -> None:
    _use_pipeline(repository, llm=FakeLanguageModel(reply="Sorry, I cannot help with that."))

    response = client.post("/analyze-speech", json={"audio_url": AUDIO_URL, "speech_id": "s1"})

    assert response.status_code == 502
    assert response.json()["error"].startswith("Invalid AI response format")


def test_unknown_speech_returns_404(client) -> None:
    _use_pipeline(InMemoryFeedbackRepository({}))

    response = client.post("/analyze-speech", json={"audio_url": AUDIO_URL, "speech_id": "ghost"})

    assert response.status_code == 404
    assert response.json() == {"error": "Speech not found"}


def test_missing_api_key_returns_500(client, monkeypatch) -> None:
    monkeypatch.setattr(dependencies, "get_blob_store", lambda: FakeBlobStore())
    monkeypatch.setattr(settings.transcription, "api_key", None)

    response = client.post("/analyze-speech", json={"audio_url": AUDIO_URL, "speech_id": "s1"})

    assert response.status_code == 500
    assert response.json() == {"error": "API keys not configured"}


def test_non_json_body_is_rejected(client, repository) -> None:
    _use_pipeline(repository)

    response = client.post(
        "/analyze-speech",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 422
    assert response.json() == {"error": "Invalid request body"}


def test_list_feedback_after_analysis(client, repository) -> None:
    _use_pipeline(repository)
    client.post("/analyze-speech", json={"audio_url": AUDIO_URL, "speech_id": "s1"})
    client.post("/analyze-speech", json={"audio_url": AUDIO_URL, "speech_id": "s1"})

    response = client.get("/speeches/s1/feedback")

    assert response.status_code == 200
    body = response.json()
    assert body["speech_id"] == "s1"
    assert body["transcript"] == "Um, hi, I am, uh, testing."
    assert len(body["feedback"]) == 2
    assert body["feedback"][0]["id"] == repository.feedback[-1].id


def test_list_feedback_unknown_speech(client) -> None:
    response = client.get("/speeches/ghost/feedback")

    assert response.status_code == 404
    assert response.json() == {"error": "Speech not found"}


def test_health_and_metrics(client) -> None:
    health = client.get("/health")
    assert health.json()["status"] == "healthy"
    assert float(health.headers["X-Process-Time-Ms"]) >= 0

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "speech_analysis_runs_total" in metrics.text


def test_request_metrics_use_route_template(client) -> None:
    client.get("/speeches/ghost/feedback")

    metrics = client.get("/metrics").text

    assert 'route="/speeches/{speech_id}/feedback"' in metrics
    assert "/speeches/ghost/feedback" not in metrics
