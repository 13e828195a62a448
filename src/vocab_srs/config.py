from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vocab_srs.db import DEFAULT_DB_PATH


class Settings(BaseSettings):
    """Application settings loaded from `VOCAB_SRS_*` variables or `.env`."""

    db_path: str = DEFAULT_DB_PATH
    # One key per user/device; the saved review session lives under it
    session_key: str = "default"
    max_cards: int = 20
    session_ttl_hours: float = 24.0

    # Leave unset to keep sessions on this device only
    remote_url: Optional[str] = None
    remote_timeout: float = 5.0
    remote_retries: int = 3
    remote_retry_delay: float = 0.5

    model_config = SettingsConfigDict(
        env_prefix="VOCAB_SRS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("remote_url", mode="before")
    @classmethod
    def blank_url_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("max_cards", "remote_retries")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v


settings = Settings()
