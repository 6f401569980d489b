"""
Application configuration with environment variable support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ClassifierBackend = Literal["auto", "openai", "finbert", "http", "lexicon"]
CorpusBackend = Literal["auto", "mock", "file", "reddit"]


class Settings(BaseSettings):
    """Runtime settings, read from the environment and an optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Classifier
    CLASSIFIER_BACKEND: ClassifierBackend = "auto"
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.0
    FINBERT_MODEL: str = "yiyanghkust/finbert-tone"
    CLASSIFIER_URL: str = ""
    CLASSIFIER_TIMEOUT: float = 20.0

    # Corpus
    CORPUS_BACKEND: CorpusBackend = "auto"
    CORPUS_PATH: str = ""
    REDDIT_QUERY: str = ""  # empty: search Reddit for the submitted keyword
    REDDIT_LIMIT: int = Field(50, ge=1, le=100)

    # Input boundary
    MIN_KEYWORD_LENGTH: int = Field(2, ge=1)

    # When false the sentiment filter survives new keyword submissions
    RESET_FILTER_ON_RUN: bool = False

    # HTTP
    CORS_ALLOW_ORIGINS: str = "*"
    PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @property
    def cors_origins(self) -> List[str]:
        """Comma separated CORS_ALLOW_ORIGINS as a list."""
        origins = [item.strip() for item in self.CORS_ALLOW_ORIGINS.split(",") if item.strip()]
        return origins or ["*"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


settings = get_settings()
