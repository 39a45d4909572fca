"""InteractiveLabel — the main API.  Owns text, config and the tagged buffer.

Usage:
    from interactive_text import InteractiveLabel, ElementKind, LabelConfig, Phase

    label = InteractiveLabel(
        "Ping @alice about #release",
        enabled_kinds=[ElementKind.MENTION, ElementKind.HASHTAG],
        config=LabelConfig(hashtag_color="purple"),
    )
    label.on_tap(lambda element: print("tapped", element))

    label.touch_offset(Phase.BEGAN, 6)    # highlights " @alice"
    label.touch_offset(Phase.ENDED, 6)    # prints: tapped DetectedElement(kind='mention', ...)

Every change to text, style, config, enabled kinds, filters or the
customize hook rebuilds the buffer and drops any in-progress selection.
"""

from __future__ import annotations
import bisect
import contextlib
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator

from .buffer import TaggedBuffer
from .compositor import apply_hook, compose, highlight_attributes
from .hittest import Layout, Point, hit_test, locate
from .parser import parse
from .patterns import EMAIL_PATTERN, HASHTAG_PATTERN, MENTION_PATTERN, URL_PATTERN
from .touch import Phase, TouchTracker
from .types import (
    DEFAULT_COLOR,
    CustomizeHook,
    DetectedElement,
    ElementKind,
    FilterPredicate,
    FontResolver,
    Selection,
    Span,
    TextStyle,
)

logger = logging.getLogger(__name__)


class InvalidCustomKindError(ValueError):
    """A custom-only operation was given a built-in kind."""


@dataclass(frozen=True)
class LabelConfig:
    """Look and detection settings.  Replace, don't mutate: ``config.replace(...)``."""
    mention_pattern: str = MENTION_PATTERN
    hashtag_pattern: str = HASHTAG_PATTERN
    url_pattern: str = URL_PATTERN
    email_pattern: str = EMAIL_PATTERN

    mention_color: Any = DEFAULT_COLOR
    hashtag_color: Any = DEFAULT_COLOR
    url_color: Any = DEFAULT_COLOR
    email_color: Any = DEFAULT_COLOR
    custom_color: dict[ElementKind, Any] = field(default_factory=dict)

    # None = use the unselected color
    mention_selected_color: Any = None
    hashtag_selected_color: Any = None
    url_selected_color: Any = None
    email_selected_color: Any = None
    custom_selected_color: dict[ElementKind, Any] = field(default_factory=dict)

    highlight_font_name: str | None = None
    highlight_font_size: float | None = None

    line_spacing: float = 0
    minimum_line_height: float = 0
    url_maximum_length: int | None = None   # None = never trim

    def replace(self, **changes: Any) -> LabelConfig:
        return dataclasses.replace(self, **changes)


class InteractiveLabel:
    """Detects interactive elements in a text and tracks taps on them."""

    def __init__(
        self,
        text: str | TaggedBuffer = "",
        *,
        style: TextStyle | None = None,
        config: LabelConfig | None = None,
        enabled_kinds: Iterable[ElementKind] = (),
        customize_attributes: CustomizeHook | None = None,
        font_resolver: FontResolver | None = None,
        layout: Layout | None = None,
        bounds: tuple[float, float] = (0.0, 0.0),
        on_invalidate: Callable[[TaggedBuffer], None] | None = None,
    ) -> None:
        self._text = text
        self._style = style or TextStyle()
        self._config = config or LabelConfig()
        self._enabled_kinds = list(enabled_kinds)
        self._customize = customize_attributes
        self._filters: dict[ElementKind, FilterPredicate | None] = {}
        self._listeners: list[Callable[[DetectedElement], None]] = []
        self._customizing = False

        self.font_resolver = font_resolver
        self.layout = layout
        self.bounds = bounds
        self.on_invalidate = on_invalidate

        self._tracker = TouchTracker(self._highlight, self._emit_tap)
        self._buffer = TaggedBuffer()
        self._spans: list[Span] = []
        self._update()

    # ------------------------------------------------------------------
    # Properties that force a rebuild
    # ------------------------------------------------------------------

    @property
    def text(self) -> str:
        """Source text as set by the caller (before URL trimming)."""
        return self._text.text if isinstance(self._text, TaggedBuffer) else self._text

    @text.setter
    def text(self, value: str | TaggedBuffer) -> None:
        self._text = value
        self._update()

    @property
    def style(self) -> TextStyle:
        return self._style

    @style.setter
    def style(self, value: TextStyle) -> None:
        self._style = value
        self._update()

    @property
    def config(self) -> LabelConfig:
        return self._config

    @config.setter
    def config(self, value: LabelConfig) -> None:
        self._config = value
        self._update()

    @property
    def enabled_kinds(self) -> list[ElementKind]:
        return list(self._enabled_kinds)

    @enabled_kinds.setter
    def enabled_kinds(self, kinds: Iterable[ElementKind]) -> None:
        self._enabled_kinds = list(kinds)
        self._update()

    @property
    def customize_attributes(self) -> CustomizeHook | None:
        return self._customize

    @customize_attributes.setter
    def customize_attributes(self, hook: CustomizeHook | None) -> None:
        self._customize = hook
        self._update()

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def buffer(self) -> TaggedBuffer:
        return self._buffer

    @property
    def spans(self) -> list[Span]:
        return list(self._spans)

    @property
    def selection(self) -> Selection | None:
        return self._tracker.selection

    # ------------------------------------------------------------------
    # Custom kinds and listeners
    # ------------------------------------------------------------------

    def handle_custom(
        self,
        kind: ElementKind,
        filter: FilterPredicate | None = None,
        handler: Callable[[str], None] | None = None,
    ) -> None:
        """Register a filter and/or dedicated tap handler for a custom kind."""
        if not kind.is_custom:
            raise InvalidCustomKindError(f"{kind} is not a custom kind")
        self._filters[kind] = filter
        if handler is not None:
            self._tracker.custom_handlers[kind] = handler
        self._update()

    def remove_handle(self, kind: ElementKind) -> None:
        self._filters.pop(kind, None)
        self._tracker.custom_handlers.pop(kind, None)
        self._update()

    def set_filter(self, kind: ElementKind, predicate: FilterPredicate | None) -> None:
        """Filter predicate for any kind, built-in or custom."""
        if predicate is None:
            self._filters.pop(kind, None)
        else:
            self._filters[kind] = predicate
        self._update()

    def on_tap(self, callback: Callable[[DetectedElement], None]) -> Callable[[], None]:
        """Subscribe to tap notifications. Returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    @contextlib.contextmanager
    def customize(self) -> Iterator[InteractiveLabel]:
        """Batch several changes into a single rebuild."""
        self._customizing = True
        try:
            yield self
        finally:
            self._customizing = False
            self._update()

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------

    def touch(self, phase: Phase, point: Point) -> None:
        """Feed a pointer event in label coordinates (needs ``layout``)."""
        offset = None
        if self.layout is not None and self._buffer:
            offset = locate(point, self.bounds, self.layout)
        self.touch_offset(phase, offset)

    def touch_offset(self, phase: Phase, offset: int | None) -> None:
        """Feed a pointer event already resolved to a character offset."""
        self._tracker.handle(phase, self.element_at(offset))

    def element_at(self, offset: int | None) -> Selection | None:
        """Element under ``offset`` with the kind and range it was detected with.

        The buffer tags can be rewritten by the customize hook, so the kind
        and range come from the detected spans.
        """
        hit = hit_test(self._buffer, offset)
        if hit is None:
            return None
        span = self._span_at(offset)
        if span is None:
            return hit
        return Selection(element=span.element, kind=span.kind, offset=span.offset, length=span.length)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _update(self) -> None:
        if self._customizing:
            return
        self._tracker.reset()
        source = self._text
        raw = source.text if isinstance(source, TaggedBuffer) else source
        if not raw:
            self._spans = []
            self._buffer = TaggedBuffer()
            self._invalidate()
            return

        text, spans = parse(raw, self._enabled_kinds, self._config, self._filters)
        if text != raw:
            # URL trimming rewrote the text; caller style runs no longer line up
            source = text
        self._spans = spans
        self._buffer = compose(source, self._style, spans, self._config, self._customize)
        logger.debug("rebuilt buffer: %d chars, %d spans", len(self._buffer), len(spans))
        self._invalidate()

    def _span_at(self, offset: int) -> Span | None:
        i = bisect.bisect_right(self._spans, offset, key=lambda s: s.offset) - 1
        if i >= 0 and offset < self._spans[i].end:
            return self._spans[i]
        return None

    def _highlight(self, selection: Selection, highlighted: bool) -> None:
        span = self._span_at(selection.offset)
        if span is None or span.end != selection.end:
            logger.debug("no span at %d to highlight", selection.offset)
            return
        attributes = highlight_attributes(
            selection.kind,
            self._buffer.attributes_at(selection.offset),
            highlighted, self._style, self._config, self.font_resolver,
        )
        attributes = apply_hook(self._customize, selection.kind, attributes, highlighted)
        self._buffer.set_attributes(attributes, selection.offset, selection.end)
        self._invalidate()

    def _emit_tap(self, element: DetectedElement) -> None:
        for listener in list(self._listeners):
            listener(element)

    def _invalidate(self) -> None:
        if self.on_invalidate is not None:
            self.on_invalidate(self._buffer)
