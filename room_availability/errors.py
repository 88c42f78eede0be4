"""Exception types raised by the feed ingestor and the query layer.

Feed errors are isolated per resource identifier by the refresh coordinator.
``ReferenceClockError`` is raised at query time and propagates to the caller.
"""

from __future__ import annotations


class FeedError(Exception):
    """Base class for failures fetching or parsing one resource feed."""

    def __init__(self, resource: str, message: str) -> None:
        super().__init__(f"resource {resource}: {message}")
        self.resource = resource


class FeedTransportError(FeedError):
    """The feed could not be downloaded (network error, timeout, HTTP error)."""


class MalformedFeedError(FeedError):
    """The feed was downloaded but is not a usable calendar document."""


class ReferenceClockError(Exception):
    """The service-day boundary could not be derived from the reference clock."""
