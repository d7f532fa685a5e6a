"""LLM text generation adapters."""

from .gemini_client import GeminiClient

__all__ = [
    "GeminiClient",
]
