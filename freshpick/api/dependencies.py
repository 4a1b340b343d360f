"""FastAPI dependencies for the analysis endpoint.

The process-wide client and settings live on ``app.state`` (set by the
lifespan). Tests replace these via ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Request

from freshpick.infrastructure.ai.openai_client import OpenAIClient
from freshpick.infrastructure.config import Settings, get_settings


def get_inference_client(request: Request) -> Optional[OpenAIClient]:
    """Shared OpenAI client, or None if the lifespan did not run."""
    return getattr(request.app.state, "openai_client", None)


def get_app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()
