"""Extraction provider backends."""

from .base import ExtractionProvider, ExtractionResponse
from .factory import available_providers, create_provider
from .gemini import GeminiProvider
from .openai_compatible import OpenAICompatibleProvider

__all__ = [
    "ExtractionProvider",
    "ExtractionResponse",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "available_providers",
    "create_provider",
]
