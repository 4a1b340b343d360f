"""
OpenAI prompts for produce freshness analysis.

IMPORTANT: System prompts are cacheable by OpenAI.
Keep static instructions in SYSTEM_PROMPT and dynamic content in user messages.
"""

from typing import Any, Dict, List, Union


# ═══════════════════════════════════════════════════════════
# SYSTEM PROMPT (Cacheable - static instructions)
# ═══════════════════════════════════════════════════════════

FRESHNESS_SYSTEM_PROMPT = (
    "You are FreshPick AI. You look at produce photos and help shoppers choose "
    "the best item based on when they plan to eat it. Be practical and cautious. "
    "Always remind users results are only estimates."
)

IMAGE_MIME_TYPE = "image/jpeg"


# ═══════════════════════════════════════════════════════════
# USER MESSAGE BUILDERS (Dynamic - not cached)
# ═══════════════════════════════════════════════════════════


def build_freshness_user_text(produce: str, days_until_use: Union[int, float]) -> str:
    """Build the instruction text for one analysis.

    Args:
        produce: Produce name, interpolated verbatim
        days_until_use: Consumption horizon; whole floats render as integers

    Returns:
        User message text
    """
    days: Union[int, float] = days_until_use
    if isinstance(days, float) and days.is_integer():
        days = int(days)

    return (
        f"The user is shopping for {produce}. "
        f"They plan to eat it in {days} day(s). "
        "Look at the image. Estimate which items are suitable and how many days "
        "they have before they become overripe. "
        "Return a JSON object following the schema: "
        "label (like 'Tomato — Unripe'), ripeness, days_left (integer), "
        "recommendation (plain sentence to show in the app), "
        "average_hue (0–360), brightness (0–1), dark_spots (0–1)."
    )


def build_image_data_url(image_base64: str) -> str:
    """Embed a base64 payload as a data URL (no separate upload)."""
    return f"data:{IMAGE_MIME_TYPE};base64,{image_base64}"


# ═══════════════════════════════════════════════════════════
# JSON SCHEMA (For OpenAI structured output)
# ═══════════════════════════════════════════════════════════

FRESHNESS_SCHEMA_NAME = "freshpick_schema"

FRESHNESS_OUTPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "label": {"type": "string"},
        "ripeness": {"type": "string"},
        "days_left": {"type": "integer"},
        "recommendation": {"type": "string"},
        "average_hue": {"type": "number"},
        "brightness": {"type": "number"},
        "dark_spots": {"type": "number"},
    },
    "required": ["label", "ripeness", "days_left", "recommendation"],
    "additionalProperties": False,
}

FRESHNESS_RESPONSE_FORMAT: Dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": FRESHNESS_SCHEMA_NAME,
        "schema": FRESHNESS_OUTPUT_SCHEMA,
        "strict": True,
    },
}


# ═══════════════════════════════════════════════════════════
# HELPER: Build complete message arrays for OpenAI
# ═══════════════════════════════════════════════════════════


def build_freshness_messages(
    image_base64: str, produce: str, days_until_use: Union[int, float]
) -> List[Dict[str, Any]]:
    """Build system + multimodal user messages.

    Args:
        image_base64: Base64 image payload from the request
        produce: Produce name
        days_until_use: Consumption horizon in days

    Returns:
        Messages ready for chat.completions.create

    Example:
        >>> messages = build_freshness_messages("aGk=", "Avocado", 3)
        >>> messages[1]["content"][1]["image_url"]["url"]
        'data:image/jpeg;base64,aGk='
    """
    return [
        {"role": "system", "content": FRESHNESS_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {
                    "type": "text",
                    "text": build_freshness_user_text(produce, days_until_use),
                },
                {
                    "type": "image_url",
                    "image_url": {"url": build_image_data_url(image_base64)},
                },
            ],
        },
    ]
