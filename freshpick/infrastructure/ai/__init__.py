"""OpenAI client implementation for vision analysis."""

from freshpick.infrastructure.ai.openai_client import OpenAIClient

__all__ = ["OpenAIClient"]
