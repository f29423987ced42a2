"""Disk cache adapters."""

from twtfeed.adapters.cache.disk_store import CacheStore

__all__ = ["CacheStore"]
