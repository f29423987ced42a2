"""Feed metadata parsing."""

from typing import Optional

from twtfeed.core.entities import FeedMetadata, Link

SCALAR_KEYS = {
    "nick": "nick",
    "avatar": "avatar_url",
    "description": "description",
    "type": "kind",
}

NUMBER_KEYS = {
    "following": "following_count",
    "refresh": "refresh_interval",
}


def parse_metadata(text: str) -> Optional[FeedMetadata]:
    """Parse `# key = value` lines of a feed.

    Returns:
        The metadata, or None if no recognized key was found anywhere
    """
    metadata = FeedMetadata()

    for line in iter_lines(text):
        if not line.startswith("#"):
            continue

        key, sep, value = line[1:].partition("=")
        if not sep:
            continue

        key = key.strip()
        value = value.strip()

        if key == "url":
            metadata.urls.append(value)
        elif key in SCALAR_KEYS:
            setattr(metadata, SCALAR_KEYS[key], value)
        elif key == "follow":
            link = _split_link(value)
            if link:
                metadata.follows.append(link)
        elif key == "link":
            link = _split_link(value)
            if link:
                metadata.links.append(link)
        elif key == "prev":
            metadata.prev.append(value)
        elif key in NUMBER_KEYS:
            number = _parse_unsigned(value)
            if number is not None:
                setattr(metadata, NUMBER_KEYS[key], number)
        # Unknown keys are left for other clients

    if metadata.is_empty():
        return None

    return metadata


def _split_link(value: str) -> Optional[Link]:
    """Split `text with spaces url` on the last space."""
    text, sep, url = value.rpartition(" ")
    if not sep:
        return None
    return Link(text=text.strip(), url=url.strip())


def _parse_unsigned(value: str) -> Optional[int]:
    if not value.isascii() or not value.isdigit():
        return None
    return int(value)


def iter_lines(text: str):
    """Yield lines split on `\\n`, dropping a trailing `\\r`.

    Unlike `str.splitlines`, other separators (form feed, U+2028, ...) stay
    inside the line so raw post content is kept verbatim.
    """
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        yield line
