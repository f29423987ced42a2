"""System browser link opener."""

import webbrowser

from twtfeed.core import LinkOpener


class BrowserOpener(LinkOpener):
    """Open links in the default system browser."""

    def open(self, url: str) -> None:
        if not webbrowser.open(url):
            print(f"⚠️  Could not open {url} in a browser")
