"""
Domain models for produce freshness analysis.

Transient value objects scoped to a single request/response cycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)


class AnalysisRequest(BaseModel):
    """
    Shopper request: photo plus context.

    Field names match the inbound JSON body (camelCase).

    Attributes:
        imageBase64: Base64-encoded image content
        produce: Free-text name of the shopped item
        daysUntilUse: Planned consumption horizon in days

    Example:
        >>> req = AnalysisRequest(imageBase64="aGVsbG8=", produce="Avocado", daysUntilUse=3)
        >>> assert req.produce == "Avocado"
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    imageBase64: StrictStr = Field(..., min_length=1, description="Base64 image payload")
    produce: StrictStr = Field(..., min_length=1, description="Produce name")
    daysUntilUse: Union[StrictInt, StrictFloat] = Field(..., description="Days until use")

    @field_validator("daysUntilUse", mode="before")
    @classmethod
    def reject_bool(cls, v: Any) -> Any:
        """JSON true/false is not a number."""
        if isinstance(v, bool):
            raise ValueError("daysUntilUse must be a number")
        return v


class AnalysisResult(BaseModel):
    """
    Structured freshness assessment returned by the model.

    Only used to check the model reply; the endpoint returns the raw
    parsed object so optional fields stay absent when omitted.

    Example:
        >>> result = AnalysisResult(
        ...     label="Avocado — Ripe",
        ...     ripeness="ripe",
        ...     days_left=2,
        ...     recommendation="Eat soon.",
        ... )
        >>> assert result.average_hue is None
    """

    model_config = ConfigDict(frozen=True)

    label: StrictStr = Field(..., description="Item label, e.g. 'Tomato — Unripe'")
    ripeness: StrictStr = Field(..., description="Ripeness category")
    days_left: StrictInt = Field(..., description="Days before the item becomes unsuitable")
    recommendation: StrictStr = Field(..., description="Sentence shown in the app")
    average_hue: Optional[float] = Field(None, ge=0.0, le=360.0, description="Hue 0-360")
    brightness: Optional[float] = Field(None, ge=0.0, le=1.0, description="Brightness 0-1")
    dark_spots: Optional[float] = Field(None, ge=0.0, le=1.0, description="Dark spot ratio 0-1")

    @field_validator("days_left", mode="before")
    @classmethod
    def reject_bool_days(cls, v: Any) -> Any:
        """JSON true/false is not an integer."""
        if isinstance(v, bool):
            raise ValueError("days_left must be an integer")
        return v

    @field_validator("average_hue", "brightness", "dark_spots", mode="before")
    @classmethod
    def require_json_number(cls, v: Any) -> Any:
        """Accept null or a JSON number; no string or bool coercion."""
        if v is not None and (isinstance(v, bool) or not isinstance(v, (int, float))):
            raise ValueError("must be a number")
        return v


@dataclass(frozen=True)
class ValidationOutcome:
    """Tagged result of inbound body validation.

    Exactly one of ``request`` / ``error`` is set.
    """

    request: Optional[AnalysisRequest] = None
    error: Optional[str] = None


def validate_request(body: Any) -> ValidationOutcome:
    """
    Validate an untyped inbound body.

    Args:
        body: Decoded JSON body (any type)

    Returns:
        ValidationOutcome with either the typed request or the failure reason

    Example:
        >>> outcome = validate_request({"produce": "Kiwi"})
        >>> assert outcome.request is None
    """
    if not isinstance(body, dict):
        return ValidationOutcome(error="body is not a JSON object")

    try:
        return ValidationOutcome(request=AnalysisRequest.model_validate(body))
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        return ValidationOutcome(error="invalid fields: " + ", ".join(fields))
