"""Post parsing: feed lines into posts, content into tokens."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from twtfeed.core.entities import OptLink, Post
from twtfeed.core.hashing import compute_hash
from twtfeed.core.metadata import iter_lines

# @<url> or @<nick url>
MENTION_RE = re.compile(r"@<(?P<first>[^\s>]+)(?:\s+(?P<second>[^>]+))?>")
# (#hash) subject marking a reply
REPLY_RE = re.compile(r"\(#(?P<hash>[^)]+)\)")
WHITESPACE_RE = re.compile(r"\s*")

RFC3339_RE = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt ]"
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})"
)


class TokenKind(str, Enum):
    """Kind of a content token."""

    REPLY = "reply"
    MENTION = "mention"
    TEXT = "text"


@dataclass
class Token:
    """Piece of post content with its display text."""

    kind: TokenKind
    text: str
    link: Optional[OptLink] = None
    reply_to: Optional[str] = None


@dataclass
class ParsedContent:
    """Structured view of raw post content."""

    reply_to: Optional[str]
    mentions: list[OptLink]
    display: str
    tokens: list[Token] = field(default_factory=list)


def tokenize_content(raw: str) -> ParsedContent:
    """Scan raw content once, left to right.

    The leading region may hold mentions and at most one `(#hash)` reply
    marker, in any order, separated by whitespace. The first other token
    starts the body, where only mentions are recognized. Named mentions
    display as `@nick`, bare ones as their url, the reply marker is dropped.
    """
    tokens: list[Token] = []
    reply_to: Optional[str] = None
    pos = WHITESPACE_RE.match(raw).end()

    # Leading region
    while pos < len(raw):
        match = MENTION_RE.match(raw, pos)
        if match:
            tokens.append(_mention_token(match))
        elif reply_to is None and (match := REPLY_RE.match(raw, pos)):
            reply_to = match.group("hash")
            tokens.append(Token(TokenKind.REPLY, "", reply_to=reply_to))
        else:
            break
        pos = WHITESPACE_RE.match(raw, match.end()).end()

    leading_display = [t.text for t in tokens if t.kind == TokenKind.MENTION]

    # Body
    body_display: list[str] = []
    last_end = pos
    for match in MENTION_RE.finditer(raw, pos):
        if match.start() > last_end:
            text = raw[last_end:match.start()]
            tokens.append(Token(TokenKind.TEXT, text))
            body_display.append(text)
        token = _mention_token(match)
        tokens.append(token)
        body_display.append(token.text)
        last_end = match.end()
    if last_end < len(raw):
        tokens.append(Token(TokenKind.TEXT, raw[last_end:]))
        body_display.append(raw[last_end:])

    display = " ".join(leading_display + ["".join(body_display)])

    return ParsedContent(
        reply_to=reply_to,
        mentions=[t.link for t in tokens if t.kind == TokenKind.MENTION],
        display=display.strip(),
        tokens=tokens,
    )


def _mention_token(match: re.Match) -> Token:
    first = match.group("first").strip()
    second = match.group("second")
    if second is None:
        return Token(TokenKind.MENTION, first, link=OptLink(url=first))
    return Token(
        TokenKind.MENTION,
        f"@{first}",
        link=OptLink(url=second.strip(), text=first),
    )


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an RFC3339 timestamp into an aware UTC datetime.

    Returns:
        None when `value` is not valid RFC3339
    """
    match = RFC3339_RE.fullmatch(value)
    if not match:
        return None

    offset = match.group("offset")
    if offset in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            return None
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    fraction = match.group("fraction") or ""
    try:
        year, month, day = (int(part) for part in match.group("date").split("-"))
        parsed = datetime(
            year,
            month,
            day,
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
            int(fraction[:6].ljust(6, "0")) if fraction else 0,
            tzinfo=tz,
        )
    except ValueError:
        return None

    return parsed.astimezone(timezone.utc)


def parse_post_line(line: str, feed_url: str, author: str) -> Optional[Post]:
    """Parse one `TIMESTAMP<TAB>CONTENT` line, or None if it is not a post."""
    if line.startswith("#"):
        return None

    timestamp_str, sep, raw_content = line.partition("\t")
    if not sep:
        return None

    timestamp = parse_timestamp(timestamp_str)
    if timestamp is None:
        return None

    content = tokenize_content(raw_content)

    return Post(
        hash=compute_hash(feed_url, timestamp_str, raw_content),
        timestamp=timestamp,
        source_url=feed_url,
        author=author,
        content=content.display,
        reply_to=content.reply_to,
        mentions=content.mentions,
    )


def parse_posts(text: str, feed_url: str, author: str) -> list[Post]:
    """Parse every post line of a feed document.

    Comment lines, lines without a tab and lines with an invalid timestamp
    are skipped.

    Args:
        text: Feed document
        feed_url: Canonical feed url, the hash input for every post
        author: Author name given to every post
    """
    posts = []
    for line in iter_lines(text):
        post = parse_post_line(line, feed_url, author)
        if post is not None:
            posts.append(post)
    return posts
