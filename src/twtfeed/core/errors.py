"""Error types surfaced to callers."""


class FeedError(Exception):
    """Base error for feed loading; `str(exc)` is a displayable message."""


class TransportError(FeedError):
    """Network failure or unexpected HTTP status."""

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{url}: {reason}")


class NotModifiedWithoutCacheError(FeedError):
    """Server answered 304 for content that was never stored locally."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"{url}: server returned 304 but no local copy exists")


class ConfigError(FeedError):
    """Invalid configuration file."""
