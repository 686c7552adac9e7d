"""
Response payloads for callers that expose the digest over HTTP.

Routing, method dispatch and CORS belong to the hosting framework; this
module only maps one aggregation pass onto the `{feeds: [...]}` contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Awaitable, Callable

from .core.types import NewsItem
from .utils.logging import log_event


ERROR_MESSAGE = "Failed to fetch news"


@dataclass
class FeedsResponse:
    """Status code plus JSON-serializable body."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code == 200


def feeds_payload(items: list[NewsItem]) -> FeedsResponse:
    return FeedsResponse(status_code=200, body={"feeds": [item.to_dict() for item in items]})


def error_payload(exc: BaseException) -> FeedsResponse:
    return FeedsResponse(
        status_code=500,
        body={"error": ERROR_MESSAGE, "details": str(exc) or type(exc).__name__, "feeds": []},
    )


async def build_feeds_response(
    aggregate: Callable[[], Awaitable[list[NewsItem]]],
    logger: logging.Logger | None = None,
) -> FeedsResponse:
    """Run an aggregation and wrap its result.

    Partial and empty results are successes (200). Only an exception that
    escapes the aggregation itself produces a 500 with an empty list.
    """
    try:
        items = await aggregate()
    except Exception as exc:  # noqa: BLE001
        log_event(
            logger,
            "Aggregation failed",
            level=logging.ERROR,
            event="aggregation_failed",
            error=f"{type(exc).__name__}: {exc}",
        )
        return error_payload(exc)
    return feeds_payload(items)
