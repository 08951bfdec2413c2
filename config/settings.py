# config/settings.py
import os
import sys
from dotenv import load_dotenv
from pydantic import ValidationError, Field, model_validator
from pydantic_settings import BaseSettings
from util.enums import Environment, EmbeddingBackend


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(default=Environment.DEV.value, validation_alias="APP_ENV")
    ALLOWED_ORIGIN: str = Field(default="*", validation_alias="ALLOWED_ORIGIN")

    # Specification corpus
    SPEC_VERSIONS: list[str] = Field(
        default=["draft", "2025-06-18", "2025-03-26", "2024-11-05"],
        validation_alias="SPEC_VERSIONS",
    )
    DEFAULT_SPEC_VERSION: str = Field(
        default="2025-06-18", validation_alias="DEFAULT_SPEC_VERSION"
    )
    DATA_DIR: str = Field(default="data/embeddings", validation_alias="DATA_DIR")
    CORPUS_CACHE_ENABLED: bool = Field(
        default=True, validation_alias="CORPUS_CACHE_ENABLED"
    )

    # Embedding provider
    EMBEDDING_BACKEND: EmbeddingBackend = Field(
        default=EmbeddingBackend.OPENAI, validation_alias="EMBEDDING_BACKEND"
    )
    OPENAI_API_KEY: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    OPENAI_BASE_URL: str = Field(
        default="https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL"
    )
    EMBEDDING_MODEL: str = Field(
        default="text-embedding-ada-002", validation_alias="EMBEDDING_MODEL"
    )
    LOCAL_EMBEDDING_MODEL: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        validation_alias="LOCAL_EMBEDDING_MODEL",
    )
    EMBEDDING_TIMEOUT_SECONDS: float = Field(
        default=30.0, gt=0, validation_alias="EMBEDDING_TIMEOUT_SECONDS"
    )
    EMBEDDING_RETRY_DELAY_SECONDS: float = Field(
        default=0.25, ge=0, validation_alias="EMBEDDING_RETRY_DELAY_SECONDS"
    )

    # Validation pipeline
    CHUNK_SIZE: int = Field(default=800, gt=0, validation_alias="CHUNK_SIZE")
    CHUNK_OVERLAP: int = Field(default=100, ge=0, validation_alias="CHUNK_OVERLAP")
    CHUNKING_THRESHOLD: int = Field(
        default=500, ge=0, validation_alias="CHUNKING_THRESHOLD"
    )
    VALIDATE_CONCURRENCY: int = Field(
        default=4, ge=1, validation_alias="VALIDATE_CONCURRENCY"
    )
    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=120.0, gt=0, validation_alias="REQUEST_TIMEOUT_SECONDS"
    )

    # Logging knobs
    LOGGER_NAME: str = "spec-factcheck"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    @model_validator(mode="after")
    def _check_consistency(self) -> "Settings":
        if self.CHUNK_OVERLAP >= self.CHUNK_SIZE:
            raise ValueError("CHUNK_OVERLAP must be smaller than CHUNK_SIZE")
        if self.DEFAULT_SPEC_VERSION not in self.SPEC_VERSIONS:
            raise ValueError("DEFAULT_SPEC_VERSION must be one of SPEC_VERSIONS")
        return self


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
