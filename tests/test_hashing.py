"""Tests for twt hashes and cache digests."""

import hashlib
import string

from twtfeed.core import compute_hash, content_hash, url_digest
from twtfeed.core.hashing import encode_twt_hash, twt_digest

URL = "https://example.com/twtxt.txt"
TIMESTAMP = "2024-01-01T00:00:00Z"


def test_compute_hash_is_deterministic() -> None:
    """Test same inputs give the same 7 character id."""
    first = compute_hash(URL, TIMESTAMP, "hello world")
    second = compute_hash(URL, TIMESTAMP, "hello world")

    assert first == second
    assert len(first) == 7
    assert set(first) <= set(string.ascii_lowercase + "234567")


def test_twt_digest_is_blake2b_256() -> None:
    """Test the digest against the published BLAKE2b-256 empty-input vector."""
    assert twt_digest(b"") == bytes.fromhex(
        "0e5751c026e543b2e8ab2eb06099daa1d1e5df47778f7787faab45cdf12fe3a8"
    )


def test_encode_keeps_lowercase_tail() -> None:
    """Test encoding keeps the last 7 unpadded base32 characters."""
    # base32 of bytes 0..31 is "AAAQEAYE...DENBWHA5DYPQ======"
    assert encode_twt_hash(bytes(range(32))) == "ha5dypq"


def test_compute_hash_payload_layout() -> None:
    """Test url, timestamp and content are joined by newlines."""
    expected = encode_twt_hash(
        twt_digest(b"https://example.com/twtxt.txt\n2024-01-01T00:00:00Z\nhello world")
    )

    assert compute_hash(URL, TIMESTAMP, "hello world") == expected


def test_compute_hash_sensitive_to_every_input() -> None:
    """Test changing any input changes the id."""
    base = compute_hash(URL, TIMESTAMP, "hello world")

    assert compute_hash(URL, "2024-01-01T00:00:01Z", "hello world") != base
    assert compute_hash(URL, TIMESTAMP, "hello world!") != base
    assert compute_hash("https://example.org/twtxt.txt", TIMESTAMP, "hello world") != base


def test_compute_hash_uses_verbatim_strings() -> None:
    """Test equivalent timestamps and whitespace variants are not normalized."""
    base = compute_hash(URL, TIMESTAMP, "hello world")

    assert compute_hash(URL, "2024-01-01T00:00:00+00:00", "hello world") != base
    assert compute_hash(URL, TIMESTAMP, "hello  world") != base
    assert compute_hash(URL, TIMESTAMP, "Hello world") != base


def test_compute_hash_accepts_empty_and_unicode() -> None:
    """Test hashing never fails."""
    assert len(compute_hash("", "", "")) == 7
    assert len(compute_hash(URL, TIMESTAMP, "héllo 🌍\tworld")) == 7


def test_content_and_url_digests() -> None:
    """Test document and url digests are sha256 hex."""
    assert content_hash("abc") == hashlib.sha256(b"abc").hexdigest()
    assert url_digest(URL) == hashlib.sha256(URL.encode()).hexdigest()
    assert content_hash("abc") != content_hash("abd")
