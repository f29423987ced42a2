"""Tests for the Markdown timeline renderer."""

from datetime import datetime, timezone

from twtfeed.adapters.output import MarkdownTimelineRenderer
from twtfeed.core import FeedProfile, Link, OptLink, Post


def make_post(hash: str, content: str, **kwargs) -> Post:
    defaults = {
        "timestamp": datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        "source_url": "https://alice.example/twtxt.txt",
        "author": "alice",
    }
    defaults.update(kwargs)
    return Post(hash=hash, content=content, **defaults)


def test_empty_timeline() -> None:
    """Test the empty placeholder."""
    assert MarkdownTimelineRenderer().render([], 0) == "No posts yet."


def test_post_header_and_counts() -> None:
    """Test each post shows author link, hash and the window size."""
    posts = [make_post("aaaaaaa", "first"), make_post("bbbbbbb", "second")]

    text = MarkdownTimelineRenderer(time_format="%Y").render(posts, 10)

    assert text.startswith("Showing 2 of 10 posts")
    assert "**[alice](https://alice.example/twtxt.txt)** - 2024 `aaaaaaa`" in text
    assert text.index("first") < text.index("second")


def test_mentions_become_links() -> None:
    """Test named and bare mentions link to their feeds."""
    post = make_post(
        "aaaaaaa",
        "@bob and https://c.example/twtxt.txt, @bob",
        mentions=[
            OptLink(url="https://bob.example/twtxt.txt", text="bob"),
            OptLink(url="https://c.example/twtxt.txt"),
            OptLink(url="https://bob.example/twtxt.txt", text="bob"),
        ],
    )

    text = MarkdownTimelineRenderer().render([post], 1)

    assert (
        "[@bob](https://bob.example/twtxt.txt) and "
        "[https://c.example/twtxt.txt](https://c.example/twtxt.txt), "
        "[@bob](https://bob.example/twtxt.txt)"
    ) in text


def test_reply_quotes_parent() -> None:
    """Test replies quote the parent when it is known."""
    parent = make_post("ppppppp", "original", author="bob")
    reply = make_post("rrrrrrr", "answer", reply_to="ppppppp")
    lookup = {"ppppppp": parent}

    text = MarkdownTimelineRenderer().render(
        [reply, parent], 2, reply_parent=lambda p: lookup.get(p.reply_to)
    )

    assert "> Reply to **bob**: original" in text
    assert text.count("> Reply to") == 1


def test_profile_header() -> None:
    """Test the profile header precedes posts."""
    profile = FeedProfile(
        nick="alice",
        description="Hello",
        following_count=2,
        links=[Link(text="Blog", url="https://alice.example")],
    )

    text = MarkdownTimelineRenderer().render([], 0, profile=profile)

    assert text.startswith("# alice\n\nHello\n\n**Following:** 2")
    assert "- [Blog](https://alice.example)" in text
    assert text.endswith("No posts yet.")
