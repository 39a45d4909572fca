"""Hit-testing — which tagged element sits under a text offset or point.

The core never lays text out itself.  A ``Layout`` collaborator resolves a
point inside the text container to a character offset; ``locate`` only
centers the container inside the label bounds first.
"""

from __future__ import annotations
from typing import Protocol

from .buffer import TaggedBuffer
from .types import INTERACTIVE_ELEMENT, INTERACTIVE_KIND, ElementKind, Selection

Point = tuple[float, float]
Rect = tuple[float, float, float, float]   # x, y, width, height


class Layout(Protocol):
    def used_rect(self) -> Rect:
        """Bounding rectangle of the laid-out text."""
        ...

    def character_index(self, point: Point) -> int:
        """Character offset nearest to ``point`` in container coordinates."""
        ...


def hit_test(buffer: TaggedBuffer, offset: int | None) -> Selection | None:
    """Element covering ``offset`` and its effective range, if any."""
    if offset is None or offset < 0 or offset >= len(buffer):
        return None
    element, (start, end) = buffer.attribute_at(INTERACTIVE_ELEMENT, offset)
    if element is None:
        return None
    kind = buffer.attributes_at(offset).get(INTERACTIVE_KIND)
    if kind is None:
        kind = ElementKind(element.kind)
    return Selection(element=element, kind=kind, offset=start, length=end - start)


def locate(point: Point, bounds: tuple[float, float], layout: Layout) -> int:
    """Resolve a point in label coordinates to a character offset."""
    x, y, width, height = layout.used_rect()
    dx = (bounds[0] - width) * 0.5 - x
    dy = (bounds[1] - height) * 0.5 - y
    return layout.character_index((point[0] - dx, point[1] - dy))
