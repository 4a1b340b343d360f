"""Produce freshness analysis domain."""

from freshpick.domain.freshness.models import (
    AnalysisRequest,
    AnalysisResult,
    ValidationOutcome,
    validate_request,
)
from freshpick.domain.freshness.service import FreshnessAnalysisService

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "ValidationOutcome",
    "validate_request",
    "FreshnessAnalysisService",
]
