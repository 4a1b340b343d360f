"""REST endpoint for produce freshness analysis.

POST /api/analyze with ``{imageBase64, produce, daysUntilUse}`` returns the
model's structured assessment. Every failure is mapped to a JSON error body
here; nothing propagates past the handler.
"""

import json
from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from freshpick.api.dependencies import get_app_settings, get_inference_client
from freshpick.domain.freshness.models import validate_request
from freshpick.domain.freshness.service import FreshnessAnalysisService
from freshpick.domain.shared.errors import (
    ClientInputError,
    MethodNotAllowedError,
    MissingFieldsError,
    SchemaViolationError,
    UpstreamError,
)
from freshpick.infrastructure.ai.openai_client import OpenAIClient
from freshpick.infrastructure.config import Settings

logger = structlog.get_logger(__name__)

# Every method is routed here so the gate below owns the 405 body
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

router = APIRouter(prefix="/api", tags=["analyze"])


def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    content: Dict[str, Any] = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def client_error_response(exc: ClientInputError) -> JSONResponse:
    return error_response(exc.status_code, exc.public_message)


async def read_json_body(request: Request) -> Any:
    """Decoded JSON body, or None when absent or malformed."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
        return None


@router.api_route("/analyze", methods=ALL_METHODS)
async def analyze(
    request: Request,
    client: Optional[OpenAIClient] = Depends(get_inference_client),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Assess freshness of the pictured produce.

    Returns:
        200 with the AnalysisResult object,
        405 for non-POST, 400 for missing fields, 500 on any upstream failure.
    """
    if request.method != "POST":
        logger.info("analysis.rejected", reason="method", method=request.method)
        return client_error_response(MethodNotAllowedError())

    outcome = validate_request(await read_json_body(request))
    analysis_request = outcome.request
    if analysis_request is None:
        logger.info("analysis.rejected", reason=outcome.error)
        return client_error_response(MissingFieldsError(outcome.error))

    try:
        if client is None:
            raise UpstreamError("Inference client not initialized")

        service = FreshnessAnalysisService(
            openai_client=client,
            max_output_tokens=settings.max_output_tokens,
        )
        result = await service.analyze(analysis_request)
    except Exception as e:
        kind = "schema_violation" if isinstance(e, SchemaViolationError) else type(e).__name__
        logger.exception("analysis.failed", kind=kind)
        return error_response(500, "Server error", str(e))

    return JSONResponse(status_code=200, content=result)
