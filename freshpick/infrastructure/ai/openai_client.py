"""
OpenAI API client for produce freshness analysis.

Async client with strict JSON-schema output, explicit timeout and
opt-in retries.
"""

from __future__ import annotations

import os
import json
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import openai
import structlog
from openai import AsyncOpenAI
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from freshpick.domain.shared.errors import UpstreamError

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletion

logger = structlog.get_logger(__name__)

# Failures worth another attempt; anything else surfaces immediately
TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


class OpenAIClient:
    """
    Async OpenAI client for vision completion with structured output.

    One instance is created per process and shared read-only across
    requests. The SDK's own retries are disabled so that ``max_retries``
    is the single knob: 0 means exactly one call per request.

    Example:
        >>> async with OpenAIClient(api_key="sk-...") as client:
        ...     data = await client.complete_json(
        ...         messages=messages,
        ...         response_format=FRESHNESS_RESPONSE_FORMAT,
        ...     )
        ...     print(data["label"])
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "o4-mini",
        max_retries: int = 0,
        timeout: float = 30.0,
        retry_backoff: float = 1.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (reads OPENAI_API_KEY if None)
            model: Vision-capable model name
            max_retries: Extra attempts on transient failures
            timeout: Request timeout in seconds
            retry_backoff: Exponential backoff multiplier in seconds
            client: Optional pre-configured AsyncOpenAI client (for testing)

        Raises:
            ValueError: If API key not found and client not provided
        """
        if client is not None:
            self._client: Optional[AsyncOpenAI] = client
            self.api_key: str = api_key or "test-key"
        else:
            resolved_key = api_key or os.getenv("OPENAI_API_KEY")
            if not resolved_key:
                raise ValueError(
                    "OPENAI_API_KEY not found in environment. "
                    "Set it in .env file or pass as parameter."
                )
            self.api_key = resolved_key
            self._client = None

        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")

        self.model = model
        self.max_retries = max_retries
        self.timeout = timeout
        self.retry_backoff = retry_backoff

    async def __aenter__(self) -> OpenAIClient:
        """Async context manager entry."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.close()

    async def complete(
        self,
        messages: List[Dict[str, Any]],
        response_format: Optional[Dict[str, Any]] = None,
        max_completion_tokens: int = 400,
    ) -> Dict[str, Any]:
        """
        Run one chat completion.

        Args:
            messages: Chat messages (system, user with image parts)
            response_format: OpenAI response_format payload
            max_completion_tokens: Output-token ceiling

        Returns:
            Dict with:
            - content: Response text ("" if none)
            - refusal: Refusal text or None
            - finish_reason: Completion reason
            - usage: Token usage stats

        Raises:
            UpstreamError: On API failure after all attempts
            RuntimeError: If used outside ``async with``
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with.")

        params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_completion_tokens": max_completion_tokens,
        }
        if response_format:
            params["response_format"] = response_format

        try:
            completion = await self._create_with_retries(self._client, params)
        except openai.APIError as e:
            raise UpstreamError(f"OpenAI API error: {e}") from e

        if not completion.choices:
            raise UpstreamError("OpenAI returned no choices")

        choice = completion.choices[0]
        refusal = getattr(choice.message, "refusal", None)
        return {
            "content": choice.message.content or "",
            "refusal": refusal if isinstance(refusal, str) and refusal else None,
            "finish_reason": choice.finish_reason,
            "usage": {
                "prompt_tokens": (completion.usage.prompt_tokens if completion.usage else 0),
                "completion_tokens": (
                    completion.usage.completion_tokens if completion.usage else 0
                ),
                "total_tokens": (completion.usage.total_tokens if completion.usage else 0),
            },
        }

    async def complete_json(
        self,
        messages: List[Dict[str, Any]],
        response_format: Dict[str, Any],
        max_completion_tokens: int = 400,
    ) -> Dict[str, Any]:
        """
        Run one completion and parse the reply as a JSON object.

        Args:
            messages: Vision messages (system + user with image)
            response_format: json_schema response format
            max_completion_tokens: Output-token ceiling

        Returns:
            Parsed JSON object

        Raises:
            UpstreamError: On API failure, refusal, empty or non-object reply
        """
        response = await self.complete(
            messages=messages,
            response_format=response_format,
            max_completion_tokens=max_completion_tokens,
        )

        logger.debug(
            "openai.completion",
            model=self.model,
            finish_reason=response["finish_reason"],
            total_tokens=response["usage"]["total_tokens"],
        )

        if response["refusal"]:
            raise UpstreamError(f"Model refused: {response['refusal']}")

        content = response["content"]
        if not content.strip():
            raise UpstreamError(
                f"Empty response from model (finish_reason={response['finish_reason']})"
            )

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise UpstreamError(f"Invalid JSON response: {content[:200]}") from e

        if not isinstance(data, dict):
            raise UpstreamError(f"Expected JSON object, got {type(data).__name__}")

        return data

    async def _create_with_retries(
        self, sdk: AsyncOpenAI, params: Dict[str, Any]
    ) -> ChatCompletion:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_backoff, max=10),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "openai.retry",
                        attempt=attempt.retry_state.attempt_number,
                        model=self.model,
                    )
                completion: ChatCompletion = await sdk.chat.completions.create(
                    **params
                )
        return completion

    def get_stats(self) -> Dict[str, Any]:
        """Client settings for the health endpoint (no secrets)."""
        return {
            "model": self.model,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
        }
