"""Output adapters."""

from twtfeed.adapters.output.markdown_renderer import MarkdownTimelineRenderer

__all__ = ["MarkdownTimelineRenderer"]
