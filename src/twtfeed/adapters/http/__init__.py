"""HTTP adapters."""

from twtfeed.adapters.http.http_cache import HttpCache

__all__ = ["HttpCache"]
