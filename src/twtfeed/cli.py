"""CLI entry point for twtfeed."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from twtfeed.adapters.cache import CacheStore
from twtfeed.adapters.http import HttpCache
from twtfeed.adapters.links import BrowserOpener
from twtfeed.adapters.output import MarkdownTimelineRenderer
from twtfeed.config import Settings, get_settings
from twtfeed.core import ConfigError, FeedSource, LinkActionKind, WindowedFeed
from twtfeed.core.entities import url_host
from twtfeed.use_cases import FeedLoader, LocalFeed, TimelineService

app = typer.Typer(help="Read twtxt timelines from the terminal.", no_args_is_help=True)

CONFIG_OPTION = typer.Option(Path("config.yaml"), "--config", "-c", help="Path to config.yaml")


def build_service(settings: Settings) -> TimelineService:
    """Wire the cache, HTTP client and loader from settings."""
    store = CacheStore(settings.cache_dir)
    fetcher = HttpCache(store, user_agent=settings.user_agent, timeout=settings.http_timeout)
    window = WindowedFeed(
        initial_load=settings.window.initial_load,
        batch_size=settings.window.batch_size,
        load_threshold=settings.window.load_threshold,
        top_threshold=settings.window.top_threshold,
    )
    return TimelineService(FeedLoader(fetcher, store), window=window, link_opener=BrowserOpener())


def _settings(config: Path) -> Settings:
    try:
        return get_settings(config)
    except ConfigError as e:
        print(f"❌ {e}")
        raise typer.Exit(code=1)


def _reveal_more(service: TimelineService, batches: int) -> None:
    # A scroll report whose viewport reaches the bottom of the content
    for _ in range(batches):
        service.window.on_scroll(service.window.top_threshold + 1, 0.0, 0.0)


def _emit(text: str, output: Optional[Path]) -> None:
    if output is None:
        print(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    print(f"📄 Saved to {output}")


@app.command()
def timeline(
    config: Path = CONFIG_OPTION,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write Markdown here"),
    more: int = typer.Option(0, "--more", help="Reveal this many extra batches"),
) -> None:
    """Show the merged timeline of your feed and everyone you follow."""
    settings = _settings(config)
    asyncio.run(async_timeline(settings, output, more))


async def async_timeline(settings: Settings, output: Optional[Path], more: int) -> None:
    """Async implementation of timeline command."""
    service = build_service(settings)

    local = None
    if settings.has_local_feed:
        local = LocalFeed(
            path=settings.identity.twtxt,
            nick=settings.identity.nick,
            url=settings.identity.url,
        )

    sources = [FeedSource(display_name=name, url=url) for name, url in settings.following.items()]

    print("\n" + "=" * 70)
    print(f"📡 Loading {len(sources)} followed feeds" + (" and your own feed" if local else ""))
    print("=" * 70)

    results = await service.refresh(sources, local=local)

    failed = [r for r in results if not r.ok]
    print(f"\n✓ {len(service.posts)} posts from {len(results) - len(failed)} feeds")
    if failed:
        print(f"⚠️  {len(failed)} feeds failed")

    _reveal_more(service, more)
    renderer = MarkdownTimelineRenderer()
    _emit(
        renderer.render(service.visible_posts, len(service.posts), reply_parent=service.reply_parent),
        output,
    )


@app.command()
def view(
    url: str = typer.Argument(..., help="twtxt.txt url"),
    config: Path = CONFIG_OPTION,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write Markdown here"),
    more: int = typer.Option(0, "--more", help="Reveal this many extra batches"),
) -> None:
    """Show a single feed with its profile."""
    settings = _settings(config)
    asyncio.run(async_view(settings, url, output, more))


async def async_view(settings: Settings, url: str, output: Optional[Path], more: int) -> None:
    """Async implementation of view command."""
    service = build_service(settings)

    print(f"\n🔍 Viewing {url}")
    source = FeedSource(display_name=url_host(url) or "unknown", url=url)
    results = await service.refresh([source])

    if not results[0].ok:
        raise typer.Exit(code=1)

    _reveal_more(service, more)
    renderer = MarkdownTimelineRenderer()
    _emit(
        renderer.render(
            service.visible_posts,
            len(service.posts),
            reply_parent=service.reply_parent,
            profile=service.profile(url),
        ),
        output,
    )


@app.command("open")
def open_link(
    url: str = typer.Argument(..., help="Link clicked in a post"),
    config: Path = CONFIG_OPTION,
) -> None:
    """Follow a link: twtxt feeds open in the viewer, anything else in the browser."""
    settings = _settings(config)
    service = build_service(settings)

    action = service.route_link(url)
    if action.kind == LinkActionKind.VIEW_FEED:
        asyncio.run(async_view(settings, action.url, None, 0))


@app.command()
def cache(config: Path = CONFIG_OPTION) -> None:
    """Show what is stored in the disk cache."""
    settings = _settings(config)
    stats = CacheStore(settings.cache_dir).get_stats()

    print(f"\n💾 Cache: {settings.cache_dir}")
    print(f"  • Feeds: {stats['text']}")
    print(f"  • Parsed bundles: {stats['parsed']}")
    print(f"  • Images: {stats['binary']}")
    print(f"  • Size: {stats['bytes'] / 1024:.1f} KiB")


if __name__ == "__main__":
    app()
