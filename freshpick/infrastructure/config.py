"""Configuration utilities for infrastructure layer."""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
    """
    Process-wide settings read from the environment.

    Example .env:
        OPENAI_API_KEY=sk-...
        OPENAI_MODEL=o4-mini
        OPENAI_TIMEOUT_SECONDS=30
        OPENAI_MAX_RETRIES=0
        FRESHPICK_MAX_OUTPUT_TOKENS=400
    """

    model_config = ConfigDict(frozen=True)

    openai_api_key: Optional[str] = Field(None, repr=False)
    openai_model: str = "o4-mini"
    openai_timeout_seconds: float = Field(30.0, gt=0)
    openai_max_retries: int = Field(0, ge=0)
    max_output_tokens: int = Field(400, gt=0)
    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=list)
    app_version: str = "0.0.0-dev"


def load_env_file(path: Optional[Path] = None) -> None:
    """Load .env (if present) without overriding real environment values."""
    env_path = path or Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)


def _split_origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


def get_settings() -> Settings:
    """
    Build settings from environment variables.

    Returns:
        Settings instance (validated)

    Raises:
        pydantic.ValidationError: If a numeric variable is malformed
    """
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL", "o4-mini"),
        openai_timeout_seconds=os.getenv("OPENAI_TIMEOUT_SECONDS", "30"),
        openai_max_retries=os.getenv("OPENAI_MAX_RETRIES", "0"),
        max_output_tokens=os.getenv("FRESHPICK_MAX_OUTPUT_TOKENS", "400"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "")),
        app_version=os.getenv("APP_VERSION", "0.0.0-dev"),
    )
