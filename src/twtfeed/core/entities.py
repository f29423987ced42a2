"""Core domain entities."""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Optional
from urllib.parse import urlparse


@dataclass
class OptLink:
    """Mention target: explicit display name, or a bare url."""

    url: str
    text: Optional[str] = None

    @property
    def label(self) -> str:
        return self.text if self.text is not None else self.url

    def to_dict(self) -> dict:
        return {"text": self.text, "url": self.url}

    @classmethod
    def from_dict(cls, data: dict) -> "OptLink":
        return cls(url=data["url"], text=data.get("text"))


@dataclass
class Link:
    """Named link declared in feed metadata (`follow` or `link`)."""

    text: str
    url: str

    def to_dict(self) -> dict:
        return {"text": self.text, "url": self.url}

    @classmethod
    def from_dict(cls, data: dict) -> "Link":
        return cls(text=data["text"], url=data["url"])


@dataclass
class Post:
    """A single twt.

    `hash` depends only on the canonical feed url and the verbatim
    timestamp and content strings of the source line, never on `content`.
    """

    hash: str
    timestamp: datetime
    source_url: str
    author: str
    content: str
    reply_to: Optional[str] = None
    mentions: list[OptLink] = field(default_factory=list)
    # Renderer-owned image payload, None means the placeholder avatar
    avatar: Optional[bytes] = None

    def to_dict(self) -> dict:
        return {
            "hash": self.hash,
            "reply_to": self.reply_to,
            "mentions": [m.to_dict() for m in self.mentions],
            "timestamp": self.timestamp.isoformat(),
            "source_url": self.source_url,
            "author": self.author,
            "content": self.content,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Post":
        return cls(
            hash=data["hash"],
            reply_to=data.get("reply_to"),
            mentions=[OptLink.from_dict(m) for m in data.get("mentions") or []],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            source_url=data["source_url"],
            author=data["author"],
            content=data["content"],
        )


@dataclass
class FeedMetadata:
    """Feed-level metadata declared in `# key = value` comment lines."""

    urls: list[str] = field(default_factory=list)
    nick: Optional[str] = None
    avatar_url: Optional[str] = None
    description: Optional[str] = None
    kind: Optional[str] = None
    follows: list[Link] = field(default_factory=list)
    following_count: Optional[int] = None
    links: list[Link] = field(default_factory=list)
    prev: list[str] = field(default_factory=list)
    refresh_interval: Optional[int] = None

    @property
    def canonical_url(self) -> Optional[str]:
        return self.urls[0] if self.urls else None

    def is_empty(self) -> bool:
        return self == FeedMetadata()

    def declares(self, url: str) -> bool:
        """Check whether the feed lists `url` among its own urls."""
        return url in self.urls

    def to_dict(self) -> dict:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ("follows", "links"):
                value = [link.to_dict() for link in value]
            elif isinstance(value, list):
                value = list(value)
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "FeedMetadata":
        return cls(
            urls=list(data.get("urls") or []),
            nick=data.get("nick"),
            avatar_url=data.get("avatar_url"),
            description=data.get("description"),
            kind=data.get("kind"),
            follows=[Link.from_dict(link) for link in data.get("follows") or []],
            following_count=data.get("following_count"),
            links=[Link.from_dict(link) for link in data.get("links") or []],
            prev=list(data.get("prev") or []),
            refresh_interval=data.get("refresh_interval"),
        )


@dataclass
class FeedBundle:
    """Parsed result of one feed document."""

    metadata: Optional[FeedMetadata]
    posts: list[Post] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "posts": [post.to_dict() for post in self.posts],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FeedBundle":
        metadata = data.get("metadata")
        return cls(
            metadata=FeedMetadata.from_dict(metadata) if metadata else None,
            posts=[Post.from_dict(p) for p in data.get("posts") or []],
        )


@dataclass
class CacheValidators:
    """HTTP validators captured from a 200 response."""

    etag: Optional[str] = None
    last_modified: Optional[str] = None

    def request_headers(self) -> dict[str, str]:
        """Conditional request headers for the stored validators."""
        headers = {}
        if self.etag:
            headers["If-None-Match"] = self.etag
        if self.last_modified:
            headers["If-Modified-Since"] = self.last_modified
        return headers

    def to_dict(self) -> dict:
        return {"etag": self.etag, "last_modified": self.last_modified}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "CacheValidators":
        data = data or {}
        return cls(etag=data.get("etag"), last_modified=data.get("last_modified"))


@dataclass
class CacheEntry:
    """Cached text payload."""

    content: str
    validators: CacheValidators = field(default_factory=CacheValidators)


@dataclass
class BinaryCacheEntry:
    """Cached binary payload (avatars)."""

    payload: bytes
    validators: CacheValidators = field(default_factory=CacheValidators)


@dataclass
class ParsedCacheEntry:
    """Memoized parse of a feed, valid while `content_hash` matches."""

    content_hash: str
    bundle: FeedBundle


@dataclass
class FeedSource:
    """A feed to load.

    `trust_remote_nick` is False for the local user's own feed, where the
    configured nick wins over whatever the file declares.
    """

    display_name: str
    url: str
    trust_remote_nick: bool = True

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("URL cannot be empty")


@dataclass
class LoadResult:
    """Outcome of loading one source during a refresh."""

    source: FeedSource
    bundle: Optional[FeedBundle] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.bundle is not None


@dataclass
class FeedProfile:
    """Profile header shown when viewing a single feed."""

    nick: str
    description: str
    following_count: int
    links: list[Link] = field(default_factory=list)
    avatar_url: Optional[str] = None

    @classmethod
    def from_metadata(cls, metadata: Optional[FeedMetadata], source_url: str) -> "FeedProfile":
        metadata = metadata or FeedMetadata()
        return cls(
            nick=metadata.nick or url_host(source_url) or "unknown",
            description=metadata.description or "No description provided.",
            following_count=metadata.following_count or 0,
            links=list(metadata.links),
            avatar_url=metadata.avatar_url,
        )


class LinkActionKind(str, Enum):
    """What the app should do with a clicked link."""

    VIEW_FEED = "view_feed"
    OPEN_BROWSER = "open_browser"


@dataclass
class LinkAction:
    """Routing decision for a clicked in-post link."""

    kind: LinkActionKind
    url: str


def url_host(url: str) -> Optional[str]:
    """Host component of `url`, or None when it has none."""
    try:
        return urlparse(url).hostname
    except ValueError:
        return None
