"""Touch tracking — pointer phases to highlight changes and tap notifications.

A tap fires only for a clean began -> ended over the same element.  Moving
off the element removes the highlight but keeps the record, so returning to
it before release still counts as a tap.
"""

from __future__ import annotations
import enum
import logging
from typing import Callable

from .types import DetectedElement, ElementKind, Selection

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    BEGAN = "began"
    MOVED = "moved"
    ENDED = "ended"
    CANCELLED = "cancelled"
    STATIONARY = "stationary"


class TouchTracker:
    """Idle / Tracking(selection) state machine.

    ``highlight(selection, on)`` flips a span's look in the buffer and
    ``tap(element)`` delivers the generic notification.  Custom kinds with a
    registered handler get the handler instead.
    """

    __slots__ = ("_highlight", "_tap", "_selection", "custom_handlers")

    def __init__(
        self,
        highlight: Callable[[Selection, bool], None],
        tap: Callable[[DetectedElement], None],
    ) -> None:
        self._highlight = highlight
        self._tap = tap
        self._selection: Selection | None = None
        self.custom_handlers: dict[ElementKind, Callable[[str], None]] = {}

    @property
    def selection(self) -> Selection | None:
        return self._selection

    @property
    def tracking(self) -> bool:
        return self._selection is not None

    def handle(self, phase: Phase, hit: Selection | None) -> None:
        """Process one phase event; ``hit`` is the element under the pointer."""
        if phase is Phase.BEGAN:
            self.cancel()
            self._selection = hit
            if hit is not None:
                self._highlight(hit, True)
        elif phase is Phase.MOVED:
            selected = self._selection
            if selected is None:
                return
            if hit is not None and hit.element == selected.element:
                self._highlight(hit, True)
            else:
                self._highlight(selected, False)
        elif phase is Phase.ENDED:
            selected = self._selection
            if selected is not None:
                if hit is not None and hit.element == selected.element:
                    self._deliver(selected)
                self._highlight(selected, False)
            self._selection = None
        else:
            self.cancel()

    def cancel(self) -> None:
        """Unhighlight the tracked element and go back to Idle."""
        if self._selection is not None:
            self._highlight(self._selection, False)
        self._selection = None

    def reset(self) -> None:
        """Forget the tracked element without touching the buffer.

        Must be called whenever the buffer is rebuilt: the recorded range
        points into the old text.
        """
        self._selection = None

    def _deliver(self, selection: Selection) -> None:
        handler = self.custom_handlers.get(selection.kind) if selection.kind.is_custom else None
        if handler is not None:
            logger.debug("custom tap %s -> handler", selection.kind)
            handler(selection.element.text)
        else:
            self._tap(selection.element)
