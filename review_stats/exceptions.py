"""Exceptions raised while talking to GitHub or loading the cache."""


class ReviewStatsError(Exception):
    """Base exception for github-review-stats errors."""

    pass


class TransportError(ReviewStatsError):
    """Raised when a request fails at the network or HTTP level.

    Never retried within a run beyond the session's own adapter retries; the
    next invocation picks up where this one stopped.
    """

    pass


class ProtocolError(ReviewStatsError):
    """Raised when a response body or its pagination metadata is malformed."""

    pass


class CorruptCache(ReviewStatsError):
    """Raised when a persisted cache file cannot be deserialized."""

    def __init__(self, message: str, path: str = None) -> None:
        super().__init__(message)
        self.path = path


class RequestRejected(ReviewStatsError):
    """Raised when GitHub refuses a request for good, e.g. 401 or 404.

    Retrying in a later run would fail the same way.
    """

    def __init__(self, message: str, status_code: int = None) -> None:
        super().__init__(message)
        self.status_code = status_code
