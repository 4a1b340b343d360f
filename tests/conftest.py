"""
Shared fixtures for FreshPick tests.

The OpenAI SDK is replaced by AsyncMock objects; everything above it
(client wrapper, service, router) runs for real.
"""

import json
from typing import Any, AsyncIterator, Callable, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fastapi import FastAPI

from freshpick.app import create_app
from freshpick.infrastructure.ai.openai_client import OpenAIClient
from freshpick.infrastructure.config import Settings


# ═══════════════════════════════════════════════════════════
# SAMPLE DATA
# ═══════════════════════════════════════════════════════════

SAMPLE_IMAGE_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="


@pytest.fixture
def sample_result() -> Dict[str, Any]:
    """Complete AnalysisResult with all optional fields."""
    return {
        "label": "Avocado — Ripe",
        "ripeness": "ripe",
        "days_left": 2,
        "recommendation": "Eat soon, ideal for today or tomorrow.",
        "average_hue": 95.2,
        "brightness": 0.41,
        "dark_spots": 0.05,
    }


@pytest.fixture
def minimal_result() -> Dict[str, Any]:
    """AnalysisResult with only the mandatory fields."""
    return {
        "label": "Tomato — Unripe",
        "ripeness": "unripe",
        "days_left": 5,
        "recommendation": "Leave it on the counter for a few days.",
    }


@pytest.fixture
def valid_body() -> Dict[str, Any]:
    """Well-formed inbound request body."""
    return {"imageBase64": SAMPLE_IMAGE_B64, "produce": "Avocado", "daysUntilUse": 3}


# ═══════════════════════════════════════════════════════════
# MOCK OPENAI SDK
# ═══════════════════════════════════════════════════════════


def make_completion(
    content: Optional[str],
    refusal: Optional[str] = None,
    finish_reason: str = "stop",
) -> MagicMock:
    """Build a ChatCompletion-like mock."""
    response = MagicMock()

    choice = MagicMock()
    choice.message.content = content
    choice.message.refusal = refusal
    choice.finish_reason = finish_reason

    usage = MagicMock()
    usage.prompt_tokens = 900
    usage.completion_tokens = 60
    usage.total_tokens = 960

    response.choices = [choice]
    response.usage = usage
    return response


@pytest.fixture
def completion_factory() -> Callable[..., MagicMock]:
    return make_completion


@pytest.fixture
def mock_sdk(sample_result: Dict[str, Any]) -> AsyncMock:
    """Mock AsyncOpenAI returning ``sample_result`` by default."""
    sdk = AsyncMock()
    sdk.close = AsyncMock()
    sdk.chat.completions.create = AsyncMock(
        return_value=make_completion(json.dumps(sample_result))
    )
    return sdk


@pytest.fixture
def openai_client(mock_sdk: AsyncMock) -> OpenAIClient:
    """OpenAIClient wrapper around the mock SDK (no retries)."""
    return OpenAIClient(client=mock_sdk, retry_backoff=0)


# ═══════════════════════════════════════════════════════════
# APP FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def test_settings() -> Settings:
    return Settings(openai_api_key="test-key", log_level="WARNING")


@pytest.fixture
def app(test_settings: Settings, openai_client: OpenAIClient) -> FastAPI:
    """App with the mock-backed client injected."""
    return create_app(settings=test_settings, openai_client=openai_client)


@pytest_asyncio.fixture
async def http_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
