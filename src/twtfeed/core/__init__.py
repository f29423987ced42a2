"""Core domain layer."""

from twtfeed.core.entities import (
    BinaryCacheEntry,
    CacheEntry,
    CacheValidators,
    FeedBundle,
    FeedMetadata,
    FeedProfile,
    FeedSource,
    Link,
    LinkAction,
    LinkActionKind,
    LoadResult,
    OptLink,
    ParsedCacheEntry,
    Post,
)
from twtfeed.core.errors import ConfigError, FeedError, NotModifiedWithoutCacheError, TransportError
from twtfeed.core.hashing import compute_hash, content_hash, url_digest
from twtfeed.core.interfaces import FeedFetcher, LinkOpener
from twtfeed.core.metadata import parse_metadata
from twtfeed.core.posts import parse_posts, tokenize_content
from twtfeed.core.window import WindowedFeed

__all__ = [
    "Post",
    "OptLink",
    "Link",
    "FeedMetadata",
    "FeedBundle",
    "FeedSource",
    "FeedProfile",
    "LoadResult",
    "LinkAction",
    "LinkActionKind",
    "CacheValidators",
    "CacheEntry",
    "BinaryCacheEntry",
    "ParsedCacheEntry",
    "FeedError",
    "TransportError",
    "NotModifiedWithoutCacheError",
    "ConfigError",
    "FeedFetcher",
    "LinkOpener",
    "compute_hash",
    "content_hash",
    "url_digest",
    "parse_metadata",
    "parse_posts",
    "tokenize_content",
    "WindowedFeed",
]
