from typing import Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "speechcoach"
    serverless: bool = Field(
        default=True,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )
    url_override: Optional[str] = Field(
        default=None,
        validation_alias="DB_URL",
        description="Full SQLAlchemy async URL; takes precedence over host/port/credentials.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        if self.url_override:
            return self.url_override
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            "postgresql+asyncpg://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class StorageConfig(BaseSettings):
    """S3-compatible blob storage holding the uploaded speech recordings."""

    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: str = "us-east-1"
    bucket_name: str = "speeches"
    endpoint_url: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class TranscriptionConfig(BaseSettings):
    """Whisper-compatible speech-to-text provider."""

    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
    )
    base_url: str = Field(
        default="https://api.openai.com/v1",
        validation_alias="WHISPER_BASE_URL",
    )
    model: str = Field(default="whisper-1", validation_alias="WHISPER_MODEL")
    language: str = Field(default="en", validation_alias="WHISPER_LANGUAGE")
    upload_filename: str = Field(
        default="audio.webm",
        validation_alias="WHISPER_UPLOAD_FILENAME",
    )
    timeout_seconds: float = Field(
        default=120.0,
        validation_alias="WHISPER_TIMEOUT_SECONDS",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class LlmConfig(BaseSettings):
    """OpenAI-compatible chat completion gateway used for coaching feedback."""

    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="LLM_API_KEY",
    )
    base_url: str = Field(
        default="https://ai.gateway.lovable.dev/v1",
        validation_alias="LLM_BASE_URL",
    )
    model: str = Field(
        default="google/gemini-2.5-flash",
        validation_alias="LLM_MODEL",
    )
    temperature: float = Field(
        default=0.7,
        validation_alias="LLM_TEMPERATURE",
        ge=0.0,
        le=2.0,
    )
    timeout_seconds: float = Field(
        default=120.0,
        validation_alias="LLM_TIMEOUT_SECONDS",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "SpeechCoach Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/speech_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # Blob storage
    storage: StorageConfig = Field(default_factory=StorageConfig)

    # Speech-to-text
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)

    # Language model
    llm: LlmConfig = Field(default_factory=LlmConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
