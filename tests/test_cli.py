"""Tests for the command line interface."""

from pathlib import Path

from typer.testing import CliRunner

from twtfeed.adapters.cache import CacheStore
from twtfeed.cli import app
from twtfeed.core import CacheEntry

runner = CliRunner()


def test_cache_stats(tmp_path: Path, monkeypatch) -> None:
    """Test the cache command reports stored entries."""
    cache_dir = tmp_path / "cache"
    CacheStore(cache_dir).write_text("https://a.example/twtxt.txt", CacheEntry(content="x"))
    monkeypatch.setenv("TWTFEED_CACHE_DIR", str(cache_dir))

    result = runner.invoke(app, ["cache", "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 0
    assert "Feeds: 1" in result.output


def test_invalid_config_exits(tmp_path: Path) -> None:
    """Test a broken config stops with exit code 1."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text("http: [unclosed", encoding="utf-8")

    result = runner.invoke(app, ["cache", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "invalid YAML" in result.output


def test_empty_follow_url_exits(tmp_path: Path) -> None:
    """Test a follow entry with no url is reported, not a traceback."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text('following:\n  bob: ""\n', encoding="utf-8")

    result = runner.invoke(app, ["timeline", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "following.bob" in result.output
