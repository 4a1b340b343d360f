"""
Produce freshness analysis service.

AI-powered ripeness assessment from one photo using OpenAI Vision.
"""

from __future__ import annotations

import time
from typing import Any, Dict

import structlog
from pydantic import ValidationError

from freshpick.infrastructure.ai.openai_client import OpenAIClient
from freshpick.domain.freshness.models import AnalysisRequest, AnalysisResult
from freshpick.domain.freshness.prompts import (
    FRESHNESS_RESPONSE_FORMAT,
    build_freshness_messages,
)
from freshpick.domain.shared.errors import SchemaViolationError

logger = structlog.get_logger(__name__)


class FreshnessAnalysisService:
    """
    Service for freshness assessment of a produce photo.

    Builds one schema-constrained vision request, sends it, and checks
    the reply against the AnalysisResult contract. The reply is returned
    as parsed, without reinterpreting any field.

    Example:
        >>> service = FreshnessAnalysisService(openai_client=client)
        >>> request = AnalysisRequest(
        ...     imageBase64="...", produce="Avocado", daysUntilUse=3
        ... )
        >>> result = await service.analyze(request)
        >>> print(result["days_left"])
    """

    def __init__(self, openai_client: OpenAIClient, max_output_tokens: int = 400) -> None:
        """
        Initialize freshness analysis service.

        Args:
            openai_client: Initialized (entered) OpenAI client
            max_output_tokens: Output-token ceiling per call
        """
        self.openai_client = openai_client
        self.max_output_tokens = max_output_tokens

    async def analyze(self, request: AnalysisRequest) -> Dict[str, Any]:
        """
        Assess freshness of the pictured produce.

        Args:
            request: Validated analysis request

        Returns:
            Parsed model reply (AnalysisResult shape, unmodified)

        Raises:
            UpstreamError: On API failure or unparsable reply
            SchemaViolationError: If the reply breaks the result contract
        """
        start_time = time.time()

        logger.info(
            "analysis.request",
            produce=request.produce,
            days_until_use=request.daysUntilUse,
            image_chars=len(request.imageBase64),
        )

        messages = build_freshness_messages(
            image_base64=request.imageBase64,
            produce=request.produce,
            days_until_use=request.daysUntilUse,
        )

        data = await self.openai_client.complete_json(
            messages=messages,
            response_format=FRESHNESS_RESPONSE_FORMAT,
            max_completion_tokens=self.max_output_tokens,
        )

        result = self._check_contract(data)

        logger.info(
            "analysis.complete",
            produce=request.produce,
            label=result.label,
            days_left=result.days_left,
            processing_time_ms=int((time.time() - start_time) * 1000),
        )

        return data

    @staticmethod
    def _check_contract(data: Dict[str, Any]) -> AnalysisResult:
        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            )
            logger.warning(
                "analysis.schema_violation",
                problems=problems,
                keys=sorted(data.keys()),
            )
            raise SchemaViolationError(f"Model reply violates result schema: {problems}") from e
