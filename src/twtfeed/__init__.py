"""twtxt feed loading, caching and timeline windowing."""

__version__ = "0.1.0"

DEFAULT_USER_AGENT = f"twtfeed/{__version__}"
