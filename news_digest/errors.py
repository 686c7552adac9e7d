class NewsDigestError(Exception):
    """Base class for errors raised by the news digest pipeline."""


class FeedFetchError(NewsDigestError):
    """Raised when a feed cannot be fetched or parsed."""


class ProviderTransportError(NewsDigestError):
    """Raised when the text-generation service cannot be reached or returns an HTTP error."""


class ProviderResponseError(NewsDigestError):
    """Raised when the text-generation service answers 200 with an unusable body."""
