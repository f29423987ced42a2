"""Core interfaces for adapters."""

from abc import ABC, abstractmethod


class FeedFetcher(ABC):
    """Interface for retrieving feed documents and images."""

    @abstractmethod
    async def fetch_text(self, url: str) -> str:
        """Fetch a text document."""
        pass

    @abstractmethod
    async def fetch_binary(self, url: str) -> bytes:
        """Fetch a binary payload."""
        pass


class LinkOpener(ABC):
    """Interface for opening non-feed links outside the app."""

    @abstractmethod
    def open(self, url: str) -> None:
        """Open url, e.g. in the system browser."""
        pass
