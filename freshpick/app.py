from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from freshpick.api.analyze import router as analyze_router
from freshpick.api.dependencies import get_inference_client
from freshpick.infrastructure.ai.openai_client import OpenAIClient
from freshpick.infrastructure.config import Settings, get_settings, load_env_file
from freshpick.infrastructure.logging_config import configure_logging

logger = structlog.get_logger("startup")


def build_openai_client(settings: Settings) -> OpenAIClient:
    """Create the (not yet entered) process-wide inference client.

    Raises:
        ValueError: If no API key is configured
    """
    return OpenAIClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        max_retries=settings.openai_max_retries,
        timeout=settings.openai_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the shared OpenAI client for the life of the process."""
    settings: Settings = app.state.settings
    client = getattr(app.state, "openai_client", None) or build_openai_client(settings)

    logger.info(
        "lifespan.startup",
        model=settings.openai_model,
        timeout_s=settings.openai_timeout_seconds,
        max_retries=settings.openai_max_retries,
        version=settings.app_version,
    )

    async with client as initialized:
        app.state.openai_client = initialized
        try:
            yield
        finally:
            app.state.openai_client = None
            logger.info("lifespan.shutdown")


def create_app(
    settings: Optional[Settings] = None,
    openai_client: Optional[OpenAIClient] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Explicit settings (read from environment if None)
        openai_client: Pre-built client to use instead of the default one
    """
    if settings is None:
        load_env_file()
        settings = get_settings()

    configure_logging(settings.log_level)

    app = FastAPI(
        title="FreshPick",
        description="Produce freshness assessment from a photo",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.openai_client = openai_client

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["POST"],
            allow_headers=["*"],
        )

    app.include_router(analyze_router)

    @app.get("/health")
    async def health(
        client: Optional[OpenAIClient] = Depends(get_inference_client),
    ) -> Dict[str, Any]:
        return {
            "status": "ok",
            "version": settings.app_version,
            "model": settings.openai_model,
            "client": client.get_stats() if client is not None else None,
        }

    return app


app = create_app()
