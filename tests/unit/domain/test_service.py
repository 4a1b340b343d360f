"""Unit tests for FreshnessAnalysisService."""

import json
from typing import Any, Callable, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from freshpick.domain.freshness.models import AnalysisRequest
from freshpick.domain.freshness.prompts import FRESHNESS_RESPONSE_FORMAT
from freshpick.domain.freshness.service import FreshnessAnalysisService
from freshpick.domain.shared.errors import SchemaViolationError, UpstreamError
from freshpick.infrastructure.ai.openai_client import OpenAIClient


@pytest.fixture
def request_model(valid_body: Dict[str, Any]) -> AnalysisRequest:
    return AnalysisRequest.model_validate(valid_body)


@pytest.fixture
def service(openai_client: OpenAIClient) -> FreshnessAnalysisService:
    return FreshnessAnalysisService(openai_client=openai_client, max_output_tokens=400)


class TestFreshnessAnalysisService:
    """Service builds one request and checks the reply contract."""

    @pytest.mark.asyncio
    async def test_returns_reply_unmodified(
        self,
        service: FreshnessAnalysisService,
        request_model: AnalysisRequest,
        sample_result: Dict[str, Any],
    ) -> None:
        result = await service.analyze(request_model)

        assert result == sample_result

    @pytest.mark.asyncio
    async def test_optional_fields_stay_absent(
        self,
        service: FreshnessAnalysisService,
        request_model: AnalysisRequest,
        mock_sdk: AsyncMock,
        minimal_result: Dict[str, Any],
        completion_factory: Callable[..., MagicMock],
    ) -> None:
        mock_sdk.chat.completions.create.return_value = completion_factory(
            json.dumps(minimal_result)
        )

        result = await service.analyze(request_model)

        assert result == minimal_result
        assert "average_hue" not in result

    @pytest.mark.asyncio
    async def test_single_call_with_expected_payload(
        self,
        service: FreshnessAnalysisService,
        request_model: AnalysisRequest,
        mock_sdk: AsyncMock,
    ) -> None:
        await service.analyze(request_model)

        mock_sdk.chat.completions.create.assert_awaited_once()
        kwargs = mock_sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "o4-mini"
        assert kwargs["response_format"] == FRESHNESS_RESPONSE_FORMAT
        assert kwargs["max_completion_tokens"] == 400

        text_part, image_part = kwargs["messages"][1]["content"]
        assert "The user is shopping for Avocado." in text_part["text"]
        assert "eat it in 3 day(s)" in text_part["text"]
        assert image_part["image_url"]["url"] == (
            f"data:image/jpeg;base64,{request_model.imageBase64}"
        )

    @pytest.mark.asyncio
    async def test_custom_output_ceiling(
        self,
        openai_client: OpenAIClient,
        request_model: AnalysisRequest,
        mock_sdk: AsyncMock,
    ) -> None:
        service = FreshnessAnalysisService(openai_client=openai_client, max_output_tokens=123)

        await service.analyze(request_model)

        assert mock_sdk.chat.completions.create.call_args.kwargs["max_completion_tokens"] == 123

    @pytest.mark.asyncio
    async def test_schema_violation_raises_distinct_error(
        self,
        service: FreshnessAnalysisService,
        request_model: AnalysisRequest,
        mock_sdk: AsyncMock,
        completion_factory: Callable[..., MagicMock],
    ) -> None:
        mock_sdk.chat.completions.create.return_value = completion_factory(
            json.dumps({"label": "Banana", "ripeness": "ripe"})
        )

        with pytest.raises(SchemaViolationError, match="days_left"):
            await service.analyze(request_model)

    @pytest.mark.asyncio
    async def test_schema_violation_is_upstream_error(
        self,
        service: FreshnessAnalysisService,
        request_model: AnalysisRequest,
        mock_sdk: AsyncMock,
        minimal_result: Dict[str, Any],
        completion_factory: Callable[..., MagicMock],
    ) -> None:
        minimal_result["brightness"] = 7.0
        mock_sdk.chat.completions.create.return_value = completion_factory(
            json.dumps(minimal_result)
        )

        with pytest.raises(UpstreamError):
            await service.analyze(request_model)

    @pytest.mark.asyncio
    async def test_unparsable_reply_propagates(
        self,
        service: FreshnessAnalysisService,
        request_model: AnalysisRequest,
        mock_sdk: AsyncMock,
        completion_factory: Callable[..., MagicMock],
    ) -> None:
        mock_sdk.chat.completions.create.return_value = completion_factory("not json")

        with pytest.raises(UpstreamError, match="Invalid JSON response"):
            await service.analyze(request_model)

    @pytest.mark.asyncio
    async def test_no_caching_between_calls(
        self,
        service: FreshnessAnalysisService,
        request_model: AnalysisRequest,
        mock_sdk: AsyncMock,
    ) -> None:
        await service.analyze(request_model)
        await service.analyze(request_model)

        assert mock_sdk.chat.completions.create.await_count == 2
