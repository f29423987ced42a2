"""Disk cache for downloaded feeds, images and parsed bundles."""

import os
import tempfile
from pathlib import Path
from typing import Optional

import yaml

from twtfeed.core.entities import (
    BinaryCacheEntry,
    CacheEntry,
    CacheValidators,
    FeedBundle,
    ParsedCacheEntry,
)
from twtfeed.core.hashing import url_digest

# Files that fail to load are treated as missing
READ_ERRORS = (OSError, UnicodeDecodeError, yaml.YAMLError, KeyError, TypeError, ValueError, AttributeError)


class CacheStore:
    """Cache entries stored as YAML files addressed by a digest of the url.

    Layout under `cache_dir`:
        <digest>.yaml         text payload and validators
        <digest>.bin          binary payload
        <digest>.meta.yaml    validators of the binary payload
        <digest>.parsed.yaml  content hash and parsed bundle
    """

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = Path(cache_dir)
        self._ensure_structure()

    def _ensure_structure(self) -> None:
        """Create cache directory."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    # Text store

    def text_path(self, url: str) -> Path:
        return self.cache_dir / f"{url_digest(url)}.yaml"

    def read_text(self, url: str) -> Optional[CacheEntry]:
        data = self._load_yaml(self.text_path(url))
        if data is None:
            return None
        try:
            return CacheEntry(
                content=str(data["content"]),
                validators=CacheValidators.from_dict(data.get("validators")),
            )
        except READ_ERRORS:
            return None

    def write_text(self, url: str, entry: CacheEntry) -> None:
        self._dump_yaml(
            self.text_path(url),
            {
                "url": url,
                "content": entry.content,
                "validators": entry.validators.to_dict(),
            },
        )

    # Binary store

    def binary_paths(self, url: str) -> tuple[Path, Path]:
        digest = url_digest(url)
        return self.cache_dir / f"{digest}.bin", self.cache_dir / f"{digest}.meta.yaml"

    def read_binary_validators(self, url: str) -> Optional[CacheValidators]:
        """Validators of a cached binary, without reading the payload."""
        _, meta_path = self.binary_paths(url)
        data = self._load_yaml(meta_path)
        if data is None:
            return None
        return CacheValidators.from_dict(data)

    def read_binary(self, url: str) -> Optional[BinaryCacheEntry]:
        data_path, _ = self.binary_paths(url)
        try:
            payload = data_path.read_bytes()
        except OSError:
            return None
        validators = self.read_binary_validators(url) or CacheValidators()
        return BinaryCacheEntry(payload=payload, validators=validators)

    def write_binary(self, url: str, entry: BinaryCacheEntry) -> None:
        data_path, meta_path = self.binary_paths(url)
        self._atomic_write(data_path, entry.payload)
        self._dump_yaml(meta_path, entry.validators.to_dict())

    # Parsed bundle store

    def parsed_path(self, url: str) -> Path:
        return self.cache_dir / f"{url_digest(url)}.parsed.yaml"

    def read_parsed(self, url: str) -> Optional[ParsedCacheEntry]:
        data = self._load_yaml(self.parsed_path(url))
        if data is None:
            return None
        try:
            return ParsedCacheEntry(
                content_hash=data["content_hash"],
                bundle=FeedBundle.from_dict(data["bundle"]),
            )
        except READ_ERRORS:
            return None

    def write_parsed(self, url: str, entry: ParsedCacheEntry) -> None:
        self._dump_yaml(
            self.parsed_path(url),
            {
                "url": url,
                "content_hash": entry.content_hash,
                "bundle": entry.bundle.to_dict(),
            },
        )

    def get_stats(self) -> dict:
        """Get statistics about cached files."""
        stats = {"text": 0, "binary": 0, "parsed": 0, "bytes": 0}

        for path in self.cache_dir.iterdir():
            if not path.is_file():
                continue
            name = path.name
            if name.endswith(".parsed.yaml"):
                stats["parsed"] += 1
            elif name.endswith(".bin"):
                stats["binary"] += 1
            elif name.endswith(".meta.yaml"):
                pass
            elif name.endswith(".yaml"):
                stats["text"] += 1
            else:
                continue
            stats["bytes"] += path.stat().st_size

        return stats

    def _load_yaml(self, path: Path) -> Optional[dict]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except READ_ERRORS:
            return None
        return data if isinstance(data, dict) else None

    def _dump_yaml(self, path: Path, data: dict) -> None:
        text = yaml.safe_dump(data, allow_unicode=True, default_flow_style=False, sort_keys=False)
        self._atomic_write(path, text.encode("utf-8"))

    def _atomic_write(self, path: Path, payload: bytes) -> None:
        """Write to a temp file next to `path`, then rename over it."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
