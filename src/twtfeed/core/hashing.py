"""Post identifiers and cache digests."""

import base64
import hashlib

HASH_LENGTH = 7


def twt_digest(payload: bytes) -> bytes:
    """BLAKE2b digest with a 32-byte output."""
    return hashlib.blake2b(payload, digest_size=32).digest()


def encode_twt_hash(digest: bytes) -> str:
    """Lowercase unpadded base32 of `digest`, keeping the last seven characters."""
    encoded = base64.b32encode(digest).decode("ascii").rstrip("=").lower()
    return encoded[-HASH_LENGTH:]


def compute_hash(feed_url: str, timestamp: str, content: str) -> str:
    """Compute the twt hash shared by twtxt clients.

    The payload is `feed_url`, `timestamp` and `content` joined by newlines,
    exactly as they appear in the feed.

    Args:
        feed_url: Canonical url of the feed
        timestamp: Timestamp string verbatim from the feed line
        content: Raw content verbatim from the feed line
    """
    payload = f"{feed_url}\n{timestamp}\n{content}".encode("utf-8")
    return encode_twt_hash(twt_digest(payload))


def content_hash(text: str) -> str:
    """Hash of a downloaded document, used to validate the parsed cache."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def url_digest(url: str) -> str:
    """Cache address for a request url."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()
