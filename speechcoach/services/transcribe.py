"""Whisper-compatible speech-to-text integration."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from speechcoach.config.settings import TranscriptionConfig
from speechcoach.errors import ConfigurationError, TranscriptionFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranscriptionResult:
    """Structured transcription outcome returned to the pipeline."""

    transcript: str
    language_code: str | None = None


class WhisperTranscriptionClient:
    """Send a whole recording to `/audio/transcriptions` in a single request.

    The provider segments and times the audio itself; nothing is streamed and
    a failed call is never repeated, since every attempt is billed.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "whisper-1",
        language: str = "en",
        filename: str = "audio.webm",
        timeout_seconds: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("API keys not configured")
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/audio/transcriptions"
        self._model = model
        self._language = language
        self._filename = filename
        self._timeout = timeout_seconds
        self._transport = transport

    @classmethod
    def from_config(cls, config: TranscriptionConfig) -> "WhisperTranscriptionClient":
        api_key = config.api_key.get_secret_value() if config.api_key else ""
        return cls(
            api_key=api_key,
            base_url=config.base_url,
            model=config.model,
            language=config.language,
            filename=config.upload_filename,
            timeout_seconds=config.timeout_seconds,
        )

    async def transcribe(self, audio_bytes: bytes) -> TranscriptionResult:
        """Return the provider's transcript for the recording (possibly empty)."""

        files = {"file": (self._filename, audio_bytes, "application/octet-stream")}
        data = {"model": self._model, "language": self._language}
        headers = {"Authorization": f"Bearer {self._api_key}"}

        async with httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(
                    self._url,
                    headers=headers,
                    data=data,
                    files=files,
                )
            except httpx.RequestError as exc:
                logger.error("Whisper request failed: %s", exc)
                raise TranscriptionFailed(None, str(exc)) from exc

        if response.is_error:
            logger.error("Whisper error: %s %s", response.status_code, response.text[:500])
            raise TranscriptionFailed(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            raise TranscriptionFailed(
                response.status_code,
                f"Invalid transcription payload: {response.text[:200]}",
            ) from exc

        transcript = payload.get("text") if isinstance(payload, dict) else None
        if transcript is None:
            transcript = ""
        logger.info("Transcription complete. Length: %s", len(transcript))
        return TranscriptionResult(transcript=transcript, language_code=self._language)


__all__ = ["TranscriptionResult", "WhisperTranscriptionClient"]
