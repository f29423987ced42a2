"""Conditional-GET HTTP client backed by the disk cache."""

from typing import Optional

import httpx

from twtfeed import DEFAULT_USER_AGENT
from twtfeed.adapters.cache import CacheStore
from twtfeed.core import (
    BinaryCacheEntry,
    CacheEntry,
    CacheValidators,
    FeedFetcher,
    NotModifiedWithoutCacheError,
    TransportError,
)


class HttpCache(FeedFetcher):
    """Fetch feeds and images, revalidating cached copies with ETag/Last-Modified."""

    def __init__(
        self,
        store: CacheStore,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize HTTP cache.

        Args:
            store: Disk cache for payloads and validators
            user_agent: User-Agent sent with every request
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.store = store
        self.user_agent = user_agent
        self.timeout = timeout
        self.transport = transport

    async def fetch_text(self, url: str) -> str:
        """Fetch a text document, serving the cached copy on 304."""
        cached = self.store.read_text(url)
        validators = cached.validators if cached else None

        response = await self._get(url, validators)

        if response.status_code == httpx.codes.NOT_MODIFIED:
            if cached is None:
                raise NotModifiedWithoutCacheError(url)
            print(f"  └─ 304 Not Modified: {url}")
            return cached.content

        content = response.text
        self.store.write_text(
            url,
            CacheEntry(content=content, validators=_validators_from(response)),
        )
        print(f"  └─ 200 OK: {url}")
        return content

    async def fetch_binary(self, url: str) -> bytes:
        """Fetch a binary payload, serving the cached copy on 304."""
        validators = self.store.read_binary_validators(url)

        response = await self._get(url, validators)

        if response.status_code == httpx.codes.NOT_MODIFIED:
            cached = self.store.read_binary(url)
            if cached is None:
                raise NotModifiedWithoutCacheError(url)
            return cached.payload

        payload = response.content
        self.store.write_binary(
            url,
            BinaryCacheEntry(payload=payload, validators=_validators_from(response)),
        )
        return payload

    async def _get(self, url: str, validators: Optional[CacheValidators]) -> httpx.Response:
        """GET url with conditional headers; the body is fully read on return."""
        headers = {"User-Agent": self.user_agent}
        if validators:
            headers.update(validators.request_headers())

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(url, str(e) or e.__class__.__name__) from e

        if response.status_code != httpx.codes.NOT_MODIFIED and not response.is_success:
            raise TransportError(
                url,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return response


def _validators_from(response: httpx.Response) -> CacheValidators:
    return CacheValidators(
        etag=response.headers.get("ETag"),
        last_modified=response.headers.get("Last-Modified"),
    )
