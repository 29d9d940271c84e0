import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Environment settings (declared first so production checks can read it)
    ENVIRONMENT: str = "development"

    # API settings
    DEBUG: bool = False
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Immigration AMA Assistant"

    # CORS settings - accepts string or list, normalized to list[str] by validator
    CORS_ORIGINS: str | list[str] = "*"

    # Directory settings
    DATA_DIR: str = "api/data"

    # Persona answering the questions
    PERSONA_NAME: str = "Peter Roberts"
    # Hacker News usernames/display names treated as the persona (comma-separated)
    TARGET_AUTHOR_ALIASES: str | list[str] = "peter roberts,proberts"

    # OpenAI settings
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini-2024-07-18"  # Used until a fine-tuned model exists
    OPENAI_MODEL_ID: str = ""  # Fine-tuned model ID, overrides OPENAI_MODEL
    CLASSIFIER_MODEL: str = "gpt-4o-mini-2024-07-18"
    MAX_TOKENS: int = 1000
    CLASSIFIER_MAX_TOKENS: int = 5
    LLM_TEMPERATURE: float = 0.7  # Temperature for chat responses (0.0-2.0)
    OPENAI_TIMEOUT: int = 60  # Seconds per OpenAI request
    OPENAI_MAX_RETRIES: int = 2

    # Chat settings
    MAX_CHAT_HISTORY_LENGTH: int = (
        10  # Maximum number of chat history entries to include
    )
    MAX_SAMPLE_LOG_LENGTH: int = 200  # Maximum length to log in samples

    # Hacker News scraping settings
    HN_SEARCH_URL: str = "https://hn.algolia.com/api/v1/search"
    HN_ITEMS_URL: str = "https://hn.algolia.com/api/v1/items"
    HN_SEARCH_QUERY: str = "Peter Roberts immigration ask me anything"
    HN_HITS_PER_PAGE: int = 100
    AMA_TITLE_KEYWORDS: str | list[str] = "peter roberts,immigration,ask me anything"
    HN_MAX_RETRIES: int = 3
    HN_RETRY_DELAY: float = 2.0  # seconds, doubled after each failed attempt
    HN_REQUEST_TIMEOUT: int = 30
    DEDUP_KEY_LENGTH: int = 50  # Question prefix length used for deduplication

    # Fine-tuning settings
    FINE_TUNE_BASE_MODEL: str = "gpt-3.5-turbo"
    FINE_TUNE_EPOCHS: int = 3

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        extra="ignore",
    )

    # Path properties that return complete paths
    @property
    def RAW_AMAS_FILE_PATH(self) -> str:
        """Complete path to the raw extracted QA pairs"""
        return os.path.join(self.DATA_DIR, "raw_amas.json")

    @property
    def PROCESSED_DATA_FILE_PATH(self) -> str:
        """Complete path to the fine-tuning JSONL file"""
        return os.path.join(self.DATA_DIR, "processed_data.jsonl")

    @property
    def FINE_TUNING_JOB_FILE_PATH(self) -> str:
        """Complete path to the last submitted fine-tuning job record"""
        return os.path.join(self.DATA_DIR, "fine_tuning_job.json")

    @property
    def ACTIVE_CHAT_MODEL(self) -> str:
        """Fine-tuned model when configured, otherwise the base chat model."""
        return self.OPENAI_MODEL_ID.strip() or self.OPENAI_MODEL

    def get_data_path(self, *path_parts) -> str:
        """Utility method to construct paths within DATA_DIR

        Args:
            *path_parts: Path components to join with DATA_DIR

        Returns:
            Complete path within DATA_DIR
        """
        return os.path.join(self.DATA_DIR, *path_parts)

    @field_validator("LLM_TEMPERATURE")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Validate LLM temperature is within acceptable range.

        Raises:
            ValueError: If temperature is outside acceptable range
        """
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"LLM_TEMPERATURE must be between 0.0 and 2.0, got {v}")
        return v

    @field_validator("DEDUP_KEY_LENGTH", "HN_MAX_RETRIES", "MAX_TOKENS")
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name} must be at least 1, got {v}")
        return v

    @field_validator("HN_SEARCH_URL", "HN_ITEMS_URL")
    @classmethod
    def normalize_url(cls, v: str) -> str:
        """Strip whitespace and trailing slashes from API base URLs."""
        v = v.strip()
        if not v:
            raise ValueError("Hacker News API URLs must be non-empty")
        return v.rstrip("/")

    @field_validator("TARGET_AUTHOR_ALIASES", "AMA_TITLE_KEYWORDS", mode="before")
    @classmethod
    def parse_lowercase_list(cls, v: str | list[str]) -> list[str]:
        """Normalize comma-separated strings or lists to lowercase entries.

        Handles trimming whitespace and ignores empty entries.
        """
        if isinstance(v, list):
            return [
                item.strip().lower()
                for item in v
                if isinstance(item, str) and item.strip()
            ]

        if isinstance(v, str):
            return [item.strip().lower() for item in v.split(",") if item.strip()]

        return []

    @field_validator("TARGET_AUTHOR_ALIASES")
    @classmethod
    def validate_aliases(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("TARGET_AUTHOR_ALIASES must contain at least one alias")
        return v

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Normalize CORS_ORIGINS to list of hosts.

        Accepts either a comma-separated string or a list of strings.
        Handles wildcards, trims whitespace, and ignores empty entries.
        """
        if isinstance(v, list):
            return [
                host.strip() for host in v if isinstance(host, str) and host.strip()
            ]

        if isinstance(v, str):
            if v.strip() == "*":
                return ["*"]
            return [host.strip() for host in v.split(",") if host.strip()]

        # Fallback for unexpected types: fail-closed (deny all origins)
        return []

    @classmethod
    def _is_production(cls, info: ValidationInfo) -> bool:
        """Check if ENVIRONMENT indicates production."""
        raw_env = info.data.get("ENVIRONMENT", "development")
        environment = str(raw_env).strip().lower()
        return environment in {"production", "prod"}

    @field_validator("ENVIRONMENT")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("CORS_ORIGINS")
    @classmethod
    def validate_cors_in_production(cls, v: list[str], info) -> list[str]:
        """Reject wildcard CORS in production environments."""
        if cls._is_production(info) and v == ["*"]:
            raise ValueError("CORS wildcard '*' not allowed in production")
        return v

    @field_validator("OPENAI_API_KEY")
    @classmethod
    def validate_openai_key_in_production(cls, v: str, info) -> str:
        """Ensure OPENAI_API_KEY is set in production environments."""
        if cls._is_production(info) and not v.strip():
            raise ValueError("OPENAI_API_KEY required in production")
        return v.strip()

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Make paths absolute
        self.DATA_DIR = os.path.abspath(self.DATA_DIR)

    def ensure_data_dirs(self) -> None:
        """Create required data directories if they don't exist.

        Called from entry points rather than at import time.
        """
        Path(self.DATA_DIR).mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings instance with lazy initialization.

    Settings are only created once on first access, then cached for subsequent calls.
    This prevents module-level side effects and allows testing without environment variables.

    Returns:
        Settings: Application settings object
    """
    return Settings()


def reset_settings() -> None:
    """Reset the cached settings instance.

    Useful for testing when you need to reload settings with different values.
    """
    get_settings.cache_clear()
