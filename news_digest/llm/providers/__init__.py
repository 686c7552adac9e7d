"""Generation provider implementations for article summaries."""

from .base import SummaryProvider
from .factory import available_providers, create_provider
from .openai_compatible import OpenAICompatibleProvider

__all__ = [
    "SummaryProvider",
    "OpenAICompatibleProvider",
    "create_provider",
    "available_providers",
]
