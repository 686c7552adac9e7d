"""Abstract interface for summary generation backends."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SummaryProvider(ABC):
    """Provider interface for one-shot article summarization."""

    @abstractmethod
    async def generate_summary(self, content: str, title: str | None = None) -> str:
        """Return the raw generated text for the given article content.

        Raises:
            ProviderTransportError: The service could not be reached or
                answered with an HTTP error status. Callers may retry.
            ProviderResponseError: The service answered successfully but the
                body lacks the expected fields. Retrying will not help.
        """
        raise NotImplementedError
