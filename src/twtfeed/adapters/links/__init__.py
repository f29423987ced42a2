"""Link opener adapters."""

from twtfeed.adapters.links.browser_opener import BrowserOpener

__all__ = ["BrowserOpener"]
