"""Service layer helpers for external integrations."""

from .feedback_repository import FeedbackRepository, NewFeedback
from .llm_client import ChatCompletionClient
from .response_contract import FeedbackAnalysis, extract_json_payload
from .storage import S3BlobStore, get_blob_store
from .transcribe import TranscriptionResult, WhisperTranscriptionClient

__all__ = [
    "ChatCompletionClient",
    "FeedbackAnalysis",
    "FeedbackRepository",
    "NewFeedback",
    "S3BlobStore",
    "TranscriptionResult",
    "WhisperTranscriptionClient",
    "extract_json_payload",
    "get_blob_store",
]
