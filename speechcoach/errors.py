"""Error taxonomy for the speech-analysis pipeline.

Every failure the pipeline can report is one of these classes. They carry
enough metadata for the orchestrator to log the failing stage and for the
HTTP layer to pick a status code without inspecting message strings.
"""

from __future__ import annotations

from typing import ClassVar


class AnalysisError(RuntimeError):
    """Base class for terminal pipeline failures."""

    kind: ClassVar[str] = "analysis_error"
    status_code: ClassVar[int] = 500

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.upstream_status = upstream_status
        self.stage = stage

    def __str__(self) -> str:
        return self.message


class InvalidAnalysisRequest(AnalysisError):
    """Raised when audio_url or speech_id is missing from the request."""

    kind = "invalid_request"
    status_code = 400


class ConfigurationError(AnalysisError):
    """Raised when provider credentials are not configured."""

    kind = "configuration_error"
    status_code = 500


class MalformedReference(AnalysisError):
    """Raised when no storage object key can be derived from an audio URL."""

    kind = "malformed_reference"
    status_code = 422


class BlobNotFound(AnalysisError):
    """Raised when the audio object does not exist in the blob store."""

    kind = "blob_not_found"
    status_code = 404


class StorageUnavailable(AnalysisError):
    """Raised when the blob store fails for reasons other than a missing key."""

    kind = "storage_unavailable"
    status_code = 502


class TranscriptionFailed(AnalysisError):
    """Raised when the speech-to-text provider rejects the audio."""

    kind = "transcription_failed"
    status_code = 502

    def __init__(self, status: int | None, provider_message: str) -> None:
        label = status if status is not None else "no response"
        super().__init__(
            f"Transcription failed: {label} - {provider_message}",
            upstream_status=status,
        )
        self.status = status
        self.provider_message = provider_message


class ProviderRateLimited(AnalysisError):
    """Raised when the language-model provider answers 429."""

    kind = "provider_rate_limited"
    status_code = 429


class ProviderBillingRequired(AnalysisError):
    """Raised when the language-model provider answers 402."""

    kind = "provider_billing_required"
    status_code = 402


class ProviderError(AnalysisError):
    """Raised for any other language-model provider failure."""

    kind = "provider_error"
    status_code = 502


class UnparsableAnalysis(AnalysisError):
    """Raised when the model reply cannot be decoded into feedback."""

    kind = "unparsable_analysis"
    status_code = 502


class SpeechNotFound(AnalysisError):
    """Raised when the speech row referenced by the request does not exist."""

    kind = "speech_not_found"
    status_code = 404


class PersistenceError(AnalysisError):
    """Raised when the relational store rejects a write."""

    kind = "persistence_error"
    status_code = 500


__all__ = [
    "AnalysisError",
    "InvalidAnalysisRequest",
    "ConfigurationError",
    "MalformedReference",
    "BlobNotFound",
    "StorageUnavailable",
    "TranscriptionFailed",
    "ProviderRateLimited",
    "ProviderBillingRequired",
    "ProviderError",
    "UnparsableAnalysis",
    "SpeechNotFound",
    "PersistenceError",
]
