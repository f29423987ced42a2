"""Markdown timeline renderer."""

from typing import Callable, Optional

from twtfeed.core import FeedProfile, Post


class MarkdownTimelineRenderer:
    """Render a window of posts as Markdown."""

    def __init__(self, time_format: str = "%b %d %Y %I:%M %p") -> None:
        self.time_format = time_format

    def render(
        self,
        posts: list[Post],
        total: int,
        reply_parent: Optional[Callable[[Post], Optional[Post]]] = None,
        profile: Optional[FeedProfile] = None,
    ) -> str:
        """Render posts newest first.

        Args:
            posts: Revealed posts
            total: Number of posts in the whole timeline
            reply_parent: Lookup for the post a reply answers
            profile: Profile header when viewing a single feed
        """
        lines: list[str] = []

        if profile:
            lines.extend(self._format_profile(profile))

        if not posts:
            lines.append("No posts yet.")
            return "\n".join(lines)

        lines.extend([f"Showing {len(posts)} of {total} posts", ""])

        for post in posts:
            parent = reply_parent(post) if reply_parent else None
            lines.extend(self._format_post(post, parent))

        return "\n".join(lines)

    def _format_profile(self, profile: FeedProfile) -> list[str]:
        lines = [
            f"# {profile.nick}",
            "",
            profile.description,
            "",
            f"**Following:** {profile.following_count}",
            "",
        ]
        for link in profile.links:
            lines.append(f"- [{link.text}]({link.url})")
        if profile.links:
            lines.append("")
        return lines

    def _format_post(self, post: Post, parent: Optional[Post]) -> list[str]:
        """Format single post."""
        when = post.timestamp.astimezone().strftime(self.time_format)
        lines = []

        if parent:
            lines.append(f"> Reply to **{parent.author}**: {parent.content}")
            lines.append("")

        lines.extend([
            f"**[{post.author}]({post.source_url})** - {when} `{post.hash}`",
            "",
            self._link_mentions(post),
            "",
            "---",
            "",
        ])
        return lines

    def _link_mentions(self, post: Post) -> str:
        """Turn mention labels in the display text into Markdown links."""
        content = post.content
        parts = []
        pos = 0
        # Mentions are in display order, so one forward scan finds them all
        for mention in post.mentions:
            label = f"@{mention.text}" if mention.text is not None else mention.url
            start = content.find(label, pos)
            if start < 0:
                continue
            parts.append(content[pos:start])
            parts.append(f"[{label}]({mention.url})")
            pos = start + len(label)
        parts.append(content[pos:])
        return "".join(parts)
