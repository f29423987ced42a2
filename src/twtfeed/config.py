"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from twtfeed import DEFAULT_USER_AGENT
from twtfeed.core import ConfigError
from twtfeed.core import window


@dataclass
class CacheConfig:
    """Disk cache settings."""
    dir: Path = Path("cache")


@dataclass
class HttpConfig:
    """HTTP client settings."""
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30.0


@dataclass
class WindowConfig:
    """Timeline reveal settings."""
    initial_load: int = window.INITIAL_LOAD
    batch_size: int = window.BATCH_SIZE
    load_threshold: float = window.LOAD_THRESHOLD
    top_threshold: float = window.TOP_THRESHOLD


@dataclass
class IdentityConfig:
    """The local user's feed."""
    nick: str = ""
    url: str = ""
    twtxt: Optional[Path] = None


@dataclass
class Settings:
    """Application settings."""

    cache: CacheConfig = field(default_factory=CacheConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    window: WindowConfig = field(default_factory=WindowConfig)
    identity: IdentityConfig = field(default_factory=IdentityConfig)

    # Display name -> feed url, in declaration order
    following: dict[str, str] = field(default_factory=dict)

    @property
    def cache_dir(self) -> Path:
        return self.cache.dir

    @property
    def user_agent(self) -> str:
        return self.http.user_agent

    @property
    def http_timeout(self) -> float:
        return self.http.timeout

    @property
    def has_local_feed(self) -> bool:
        return bool(self.identity.twtxt and self.identity.nick and self.identity.url)


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{config_path}: invalid YAML: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"{config_path}: expected a mapping at the top level")

    return config


def _section(config: dict, name: str) -> dict:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _apply(target: object, section: dict, name: str) -> None:
    for key, value in section.items():
        if not hasattr(target, key):
            raise ConfigError(f"Unknown setting '{name}.{key}'")
        setattr(target, key, value)


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    # Load YAML config
    config = load_config(config_path)

    settings = Settings()

    # Apply YAML config
    cache = _section(config, "cache")
    if "dir" in cache:
        settings.cache.dir = Path(cache["dir"])

    _apply(settings.http, _section(config, "http"), "http")
    _apply(settings.window, _section(config, "window"), "window")

    identity = _section(config, "identity")
    _apply(settings.identity, identity, "identity")
    if identity.get("twtxt"):
        settings.identity.twtxt = Path(identity["twtxt"]).expanduser()

    following = _section(config, "following")
    for name, url in following.items():
        if not isinstance(url, str) or not url.strip():
            raise ConfigError(f"'following.{name}' needs a feed url")
        settings.following[str(name)] = url.strip()

    # Environment overrides
    cache_dir = os.getenv("TWTFEED_CACHE_DIR")
    if cache_dir:
        settings.cache.dir = Path(cache_dir)

    return settings
