"""Progressive reveal of long timelines."""

from typing import Sequence, TypeVar

T = TypeVar("T")

INITIAL_LOAD = 30
BATCH_SIZE = 25
LOAD_THRESHOLD = 200.0
TOP_THRESHOLD = 5.0


class WindowedFeed:
    """Track how many posts of a sorted list are revealed to the renderer.

    The count starts at `initial_load`, grows by `batch_size` when the
    viewport comes within `load_threshold` of the bottom, and collapses back
    to `initial_load` when scrolled to the top.
    """

    def __init__(
        self,
        total: int = 0,
        initial_load: int = INITIAL_LOAD,
        batch_size: int = BATCH_SIZE,
        load_threshold: float = LOAD_THRESHOLD,
        top_threshold: float = TOP_THRESHOLD,
    ) -> None:
        self.initial_load = initial_load
        self.batch_size = batch_size
        self.load_threshold = load_threshold
        self.top_threshold = top_threshold
        self.total = 0
        self.visible_count = 0
        self.reset(total)

    def reset(self, total: int) -> None:
        """Restart the window for a replaced list of `total` posts."""
        self.total = max(total, 0)
        self.visible_count = min(self.initial_load, self.total)

    def on_scroll(self, offset: float, viewport_height: float, content_height: float) -> None:
        """Apply a scroll report from the renderer."""
        if offset <= self.top_threshold:
            self.visible_count = min(self.initial_load, self.total)

        near_bottom = offset + viewport_height >= content_height - self.load_threshold
        if near_bottom and self.visible_count < self.total:
            self.visible_count = min(self.visible_count + self.batch_size, self.total)

    def visible(self, items: Sequence[T]) -> Sequence[T]:
        """The revealed prefix of `items`."""
        return items[: min(self.visible_count, len(items))]
