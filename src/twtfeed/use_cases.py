"""Business logic use cases."""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from twtfeed.adapters.cache import CacheStore
from twtfeed.core import (
    FeedBundle,
    FeedError,
    FeedFetcher,
    FeedMetadata,
    FeedProfile,
    FeedSource,
    LinkAction,
    LinkActionKind,
    LinkOpener,
    LoadResult,
    ParsedCacheEntry,
    Post,
    WindowedFeed,
    content_hash,
    parse_metadata,
    parse_posts,
)
from twtfeed.core.entities import url_host


def canonical_url(metadata: Optional[FeedMetadata], fetched_url: str) -> str:
    """Url the feed declares for itself, falling back to where it was fetched."""
    if metadata and metadata.canonical_url:
        return metadata.canonical_url
    return fetched_url


def is_feed_link(url: str) -> bool:
    """Whether a clicked link points at a twtxt document."""
    return "twtxt" in url and url.endswith(".txt")


@dataclass
class LocalFeed:
    """The user's own feed file and identity."""

    path: Path
    nick: str
    url: str


class FeedLoader:
    """Fetch, parse and memoize single feeds."""

    def __init__(self, fetcher: FeedFetcher, store: CacheStore) -> None:
        self.fetcher = fetcher
        self.store = store

    async def load(self, source: FeedSource) -> FeedBundle:
        """Fetch and parse one feed.

        Raises:
            FeedError: The document could not be retrieved
        """
        text = await self.fetcher.fetch_text(source.url)
        bundle = self._bundle_for(source, text)
        return self._apply_nick_override(bundle, source)

    async def load_local(self, local: LocalFeed) -> FeedBundle:
        """Parse the local feed file; the configured nick always wins."""
        try:
            text = local.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FeedError(f"{local.path}: {e}") from e

        source = FeedSource(display_name=local.nick, url=local.url, trust_remote_nick=False)
        bundle = self._bundle_for(source, text)
        return self._apply_nick_override(bundle, source)

    def _bundle_for(self, source: FeedSource, text: str) -> FeedBundle:
        """Reuse the parsed cache while the document is unchanged, else parse."""
        raw_hash = content_hash(text)

        cached = self.store.read_parsed(source.url)
        if cached and cached.content_hash == raw_hash:
            return cached.bundle

        metadata = parse_metadata(text)
        author = (metadata.nick if metadata else None) or url_host(source.url) or source.display_name
        posts = parse_posts(text, canonical_url(metadata, source.url), author)

        bundle = FeedBundle(metadata=metadata, posts=posts)
        # Stored before any nick override so the cache only holds feed data
        try:
            self.store.write_parsed(source.url, ParsedCacheEntry(content_hash=raw_hash, bundle=bundle))
        except OSError as e:
            print(f"  └─ ⚠️  Could not cache parsed feed {source.url}: {e}")
        return bundle

    def _apply_nick_override(self, bundle: FeedBundle, source: FeedSource) -> FeedBundle:
        if source.trust_remote_nick:
            return bundle

        posts = [_with_author(post, source.display_name) for post in bundle.posts]
        return FeedBundle(metadata=bundle.metadata, posts=posts)


def _with_author(post: Post, author: str) -> Post:
    return Post(
        hash=post.hash,
        timestamp=post.timestamp,
        source_url=post.source_url,
        author=author,
        content=post.content,
        reply_to=post.reply_to,
        mentions=list(post.mentions),
        avatar=post.avatar,
    )


class TimelineService:
    """Merged, newest-first timeline of many feeds, filled as loads complete."""

    def __init__(
        self,
        loader: FeedLoader,
        window: Optional[WindowedFeed] = None,
        link_opener: Optional[LinkOpener] = None,
        on_update: Optional[Callable[[LoadResult], None]] = None,
    ) -> None:
        self.loader = loader
        self.window = window or WindowedFeed()
        self.link_opener = link_opener
        self.on_update = on_update

        self.posts: list[Post] = []
        self.metadata: dict[str, Optional[FeedMetadata]] = {}
        self.results: list[LoadResult] = []
        self.pending = 0

        self._by_hash: dict[str, Post] = {}
        self._by_source: dict[str, list[Post]] = {}

    @property
    def visible_posts(self) -> list[Post]:
        return list(self.window.visible(self.posts))

    def clear(self) -> None:
        self.posts = []
        self.metadata = {}
        self.results = []
        self._by_hash = {}
        self._by_source = {}
        self.window.reset(0)

    async def refresh(
        self, sources: list[FeedSource], local: Optional[LocalFeed] = None
    ) -> list[LoadResult]:
        """Reload every source concurrently.

        Each source is merged as soon as it completes; a failing source
        contributes no posts and does not stop the others. Avatars are
        fetched after their feed and patched in whenever they arrive.

        Returns:
            One result per source, in completion order
        """
        self.clear()
        tasks: list[asyncio.Task] = []
        avatar_tasks: list[asyncio.Task] = []

        try:
            if local is not None:
                result = await self._load_local(local)
                self._apply(result)
                avatar_tasks.extend(self._schedule_avatar(result))

            tasks = [asyncio.create_task(self._load_source(source)) for source in sources]
            self.pending += len(tasks)

            for next_done in asyncio.as_completed(tasks):
                result = await next_done
                self.pending -= 1
                self._apply(result)
                avatar_tasks.extend(self._schedule_avatar(result))
        finally:
            # Nothing is left running, even when merging a result raised
            await asyncio.gather(*tasks, *avatar_tasks, return_exceptions=True)
            self.pending = 0

        return list(self.results)

    async def _load_source(self, source: FeedSource) -> LoadResult:
        try:
            bundle = await self.loader.load(source)
        except FeedError as e:
            return LoadResult(source=source, error=str(e))
        except Exception as e:
            return LoadResult(source=source, error=f"{source.url}: unexpected error: {e}")
        return LoadResult(source=source, bundle=bundle)

    async def _load_local(self, local: LocalFeed) -> LoadResult:
        source = FeedSource(display_name=local.nick, url=local.url, trust_remote_nick=False)
        try:
            bundle = await self.loader.load_local(local)
        except FeedError as e:
            return LoadResult(source=source, error=str(e))
        except Exception as e:
            return LoadResult(source=source, error=f"{local.path}: unexpected error: {e}")
        return LoadResult(source=source, bundle=bundle)

    def _apply(self, result: LoadResult) -> None:
        """Merge one completed load into the timeline."""
        self.results.append(result)
        source = result.source

        if not result.ok:
            print(f"  └─ ❌ {source.display_name}: {result.error}")
        else:
            bundle = result.bundle
            self.metadata[source.url] = bundle.metadata

            if bundle.metadata and bundle.metadata.urls and not bundle.metadata.declares(source.url):
                print(
                    f"  └─ ⚠️  {source.display_name}: feed declares "
                    f"{', '.join(bundle.metadata.urls)}, fetched from {source.url}"
                )

            added = 0
            for post in bundle.posts:
                if post.hash in self._by_hash:
                    continue
                self._by_hash[post.hash] = post
                self._by_source.setdefault(post.source_url, []).append(post)
                self.posts.append(post)
                added += 1

            self.posts.sort(key=lambda p: p.timestamp, reverse=True)
            self.window.reset(len(self.posts))
            print(f"  └─ ✓ {source.display_name}: {added} posts")

        if self.on_update:
            self.on_update(result)

    def _schedule_avatar(self, result: LoadResult) -> list[asyncio.Task]:
        if not result.ok or not result.bundle.metadata:
            return []
        avatar_url = result.bundle.metadata.avatar_url
        if not avatar_url:
            return []

        feed_url = canonical_url(result.bundle.metadata, result.source.url)
        self.pending += 1
        return [asyncio.create_task(self._load_avatar(feed_url, avatar_url))]

    async def _load_avatar(self, feed_url: str, avatar_url: str) -> None:
        try:
            payload = await self.loader.fetcher.fetch_binary(avatar_url)
        except Exception as e:
            print(f"  └─ ⚠️  Avatar download failed: {e}")
            return
        finally:
            self.pending -= 1
        self.apply_avatar(feed_url, payload)

    def apply_avatar(self, feed_url: str, payload: bytes) -> int:
        """Patch the avatar of every post from `feed_url`.

        Returns:
            Number of posts patched
        """
        posts = self._by_source.get(feed_url, [])
        for post in posts:
            post.avatar = payload
        return len(posts)

    def find(self, post_hash: str) -> Optional[Post]:
        """Look up a merged post by its hash."""
        return self._by_hash.get(post_hash)

    def reply_parent(self, post: Post) -> Optional[Post]:
        """The post `post` replies to, if it is in the timeline."""
        if not post.reply_to:
            return None
        return self.find(post.reply_to)

    def profile(self, url: str) -> FeedProfile:
        """Profile header for a loaded feed."""
        return FeedProfile.from_metadata(self.metadata.get(url), url)

    def route_link(self, url: str) -> LinkAction:
        """Decide what a clicked link does.

        Links to twtxt documents become a redirect into the feed view;
        anything else is handed to the link opener.
        """
        if is_feed_link(url):
            return LinkAction(kind=LinkActionKind.VIEW_FEED, url=url)

        if self.link_opener:
            self.link_opener.open(url)
        return LinkAction(kind=LinkActionKind.OPEN_BROWSER, url=url)
