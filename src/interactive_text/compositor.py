"""Attribute compositor — turns detected spans into a TaggedBuffer.

Steps, in order:
  1. base style (font, color, paragraph style) over the whole text
  2. clear interactive-only keys left over from a previous build
  3. per-span style and tags, passed through the customize hook if any

The buffer is always rebuilt from scratch; URL trimming can move every
span, so patching a previous buffer is never attempted.
"""

from __future__ import annotations
from typing import Any, Sequence

from .buffer import TaggedBuffer
from .parser import merge_spans
from .types import (
    DEFAULT_COLOR,
    FONT,
    FOREGROUND_COLOR,
    INTERACTIVE_COLOR,
    INTERACTIVE_ELEMENT,
    INTERACTIVE_KEYS,
    INTERACTIVE_KIND,
    INTERACTIVE_SELECTED_COLOR,
    PARAGRAPH_STYLE,
    UNDERLINE,
    UNDERLINE_SINGLE,
    CustomizeHook,
    ElementKind,
    Font,
    FontResolver,
    ParagraphStyle,
    Span,
    TextStyle,
)


def color_for(kind: ElementKind, config) -> Any:
    """Unhighlighted color for ``kind``."""
    if kind == ElementKind.MENTION:
        return config.mention_color
    if kind == ElementKind.HASHTAG:
        return config.hashtag_color
    if kind == ElementKind.URL:
        return config.url_color
    if kind == ElementKind.EMAIL:
        return config.email_color
    return config.custom_color.get(kind, DEFAULT_COLOR)


def selected_color_for(kind: ElementKind, config) -> Any:
    """Highlighted color for ``kind``, falling back to ``color_for``."""
    if kind == ElementKind.MENTION:
        selected = config.mention_selected_color
    elif kind == ElementKind.HASHTAG:
        selected = config.hashtag_selected_color
    elif kind == ElementKind.URL:
        selected = config.url_selected_color
    elif kind == ElementKind.EMAIL:
        selected = config.email_selected_color
    else:
        selected = config.custom_selected_color.get(kind)
    return selected if selected is not None else color_for(kind, config)


def base_attributes(style: TextStyle, config) -> dict[str, Any]:
    return {
        FONT: style.font,
        FOREGROUND_COLOR: style.color,
        PARAGRAPH_STYLE: ParagraphStyle(
            line_spacing=config.line_spacing,
            minimum_line_height=config.minimum_line_height,
            alignment=style.alignment,
            line_break_mode=style.line_break_mode,
        ),
    }


def span_attributes(span: Span, style: TextStyle, config) -> dict[str, Any]:
    """Proposed unhighlighted attributes for one span."""
    return {
        FONT: style.font,
        FOREGROUND_COLOR: color_for(span.kind, config),
        UNDERLINE: UNDERLINE_SINGLE,
        INTERACTIVE_ELEMENT: span.element,
        INTERACTIVE_KIND: span.kind,
        INTERACTIVE_COLOR: color_for(span.kind, config),
        INTERACTIVE_SELECTED_COLOR: selected_color_for(span.kind, config),
    }


def highlight_font(style: TextStyle, config, resolver: FontResolver | None = None) -> Font:
    """Font for a highlighted span.

    Name and size overrides are independent; whichever is unset comes from
    the base font.  An unresolvable font falls back to the base font.
    """
    name = config.highlight_font_name
    size = config.highlight_font_size
    if name is None and size is None:
        return style.font
    resolve = resolver or Font
    font = resolve(
        name if name is not None else style.font.name,
        size if size is not None else style.font.size,
    )
    return font if font is not None else style.font


def highlight_attributes(
    kind: ElementKind,
    attributes: dict[str, Any],
    highlighted: bool,
    style: TextStyle,
    config,
    resolver: FontResolver | None = None,
) -> dict[str, Any]:
    """Flip a tagged span's attributes to (or from) the highlighted look."""
    updated = dict(attributes)
    if highlighted:
        updated[FOREGROUND_COLOR] = selected_color_for(kind, config)
        updated[FONT] = highlight_font(style, config, resolver)
    else:
        updated[FOREGROUND_COLOR] = color_for(kind, config)
        updated[FONT] = style.font
    return updated


def apply_hook(
    hook: CustomizeHook | None,
    kind: ElementKind,
    attributes: dict[str, Any],
    selected: bool,
) -> dict[str, Any]:
    if hook is None:
        return attributes
    return dict(hook(kind, dict(attributes), selected))


def compose(
    text: str | TaggedBuffer,
    style: TextStyle,
    spans: Sequence[Span],
    config,
    customize: CustomizeHook | None = None,
) -> TaggedBuffer:
    """Build the tagged buffer for ``text`` and its detected ``spans``.

    ``text`` may be a TaggedBuffer carrying the caller's own style runs;
    those runs survive except where base style or span attributes
    override them.
    """
    if isinstance(text, TaggedBuffer):
        buffer = text.copy()
    else:
        buffer = TaggedBuffer(text)
    if not buffer:
        return TaggedBuffer()

    whole = len(buffer)
    buffer.add_attributes(base_attributes(style, config), 0, whole)
    for key in INTERACTIVE_KEYS:
        buffer.remove_attribute(key, 0, whole)

    for span in merge_spans(spans):
        proposed = span_attributes(span, style, config)
        final = apply_hook(customize, span.kind, proposed, False)
        for key in proposed.keys() - final.keys():
            buffer.remove_attribute(key, span.offset, span.end)
        buffer.add_attributes(final, span.offset, span.end)
    return buffer
