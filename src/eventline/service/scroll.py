# SPDX-License-Identifier: MIT

import logging
from typing import Callable, Literal, Optional, TypeAlias

from eventline.service.timeline import DateGrid

logger = logging.getLogger(__name__)

Axis: TypeAlias = Literal["x", "y"]

ScrollListener: TypeAlias = Callable[["Pane"], None]


class Pane:
    """
    A scrollable viewport.

    Setting ``scroll_left`` or ``scroll_top`` notifies every listener, the same
    way a browser fires a scroll event for programmatic scrolls. Offsets are
    clamped to the scrollable range when a content size is known.
    """

    def __init__(
        self,
        name: str,
        client_width: float = 0,
        client_height: float = 0,
        content_width: Optional[float] = None,
        content_height: Optional[float] = None,
    ) -> None:
        self.name = name
        self.client_width = client_width
        self.client_height = client_height
        self.content_width = content_width
        self.content_height = content_height
        self._scroll_left: float = 0
        self._scroll_top: float = 0
        self._listeners: list[ScrollListener] = []

    @property
    def scroll_left(self) -> float:
        return self._scroll_left

    @scroll_left.setter
    def scroll_left(self, value: float) -> None:
        self._scroll_left = self.__clamp(value, self.content_width, self.client_width)
        self.__notify()

    @property
    def scroll_top(self) -> float:
        return self._scroll_top

    @scroll_top.setter
    def scroll_top(self, value: float) -> None:
        self._scroll_top = self.__clamp(value, self.content_height, self.client_height)
        self.__notify()

    def add_listener(self, listener: ScrollListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ScrollListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def __notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    @staticmethod
    def __clamp(value: float, content: Optional[float], client: float) -> float:
        upper = None if content is None else max(0, content - client)
        value = max(0, value)
        if upper is not None:
            value = min(upper, value)
        return value


class SyncGuard:
    """Two-state guard (idle/syncing) for one synchronized pane pair."""

    def __init__(self) -> None:
        self.source: Optional[str] = None

    @property
    def state(self) -> Literal["idle", "syncing"]:
        return "idle" if self.source is None else "syncing"

    def run(self, source: str, sync: Callable[[], None]) -> bool:
        """Run ``sync`` on behalf of ``source`` unless another side is syncing.

        Returns False when the call was a re-entrant echo and nothing ran. The
        guard is released even when ``sync`` raises.
        """
        if self.source is not None:
            return False
        self.source = source
        try:
            sync()
        finally:
            self.source = None
        return True


class ScrollCoordinator:
    """
    Keeps the three timeline panes aligned.

    The header and the right body share their horizontal offset. The frozen
    left body and the right body share their vertical offset. Each pair has its
    own guard so a sync in one pair never suppresses the other.
    """

    def __init__(self, header: Pane, left_body: Pane, right_body: Pane) -> None:
        self.header = header
        self.left_body = left_body
        self.right_body = right_body
        self.horizontal_guard = SyncGuard()
        self.vertical_guard = SyncGuard()
        self._grid_key: Optional[tuple[int, str]] = None

        self.header.add_listener(self._on_header_scroll)
        self.left_body.add_listener(self._on_left_scroll)
        self.right_body.add_listener(self._on_right_scroll)

    def detach(self) -> None:
        self.header.remove_listener(self._on_header_scroll)
        self.left_body.remove_listener(self._on_left_scroll)
        self.right_body.remove_listener(self._on_right_scroll)

    def _on_header_scroll(self, pane: Pane) -> None:
        def sync() -> None:
            if self.right_body.scroll_left != pane.scroll_left:
                self.right_body.scroll_left = pane.scroll_left

        self.horizontal_guard.run("header", sync)

    def _on_left_scroll(self, pane: Pane) -> None:
        def sync() -> None:
            if self.right_body.scroll_top != pane.scroll_top:
                self.right_body.scroll_top = pane.scroll_top

        self.vertical_guard.run("left", sync)

    def _on_right_scroll(self, pane: Pane) -> None:
        def sync_x() -> None:
            if self.header.scroll_left != pane.scroll_left:
                self.header.scroll_left = pane.scroll_left

        def sync_y() -> None:
            if self.left_body.scroll_top != pane.scroll_top:
                self.left_body.scroll_top = pane.scroll_top

        # A single native scroll event on the right body may carry both axes
        try:
            self.horizontal_guard.run("right", sync_x)
        finally:
            self.vertical_guard.run("right", sync_y)

    def center_on(self, pos: Optional[float]) -> None:
        if pos is None:
            return
        for pane in (self.header, self.right_body):
            pane.scroll_left = max(0, pos - pane.client_width / 2)

    def center_on_today(self, grid: DateGrid) -> None:
        """Scroll so that today's column sits in the middle of the timeline."""
        self.center_on(grid.pos_for_date(grid.today))

    def on_grid_change(self, grid: DateGrid) -> bool:
        """Re-center when the grid width or scale changed since the last call."""
        key = (grid.grid_width, grid.scale)
        if key == self._grid_key:
            return False
        self._grid_key = key
        for pane in (self.header, self.right_body):
            pane.content_width = grid.grid_width
        logger.debug("grid changed to %s px at %s scale", *key)
        self.center_on_today(grid)
        return True
