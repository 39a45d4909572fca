"""Core types."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Mapping

# Attribute keys carried by TaggedBuffer runs
FONT = "font"
FOREGROUND_COLOR = "foreground_color"
PARAGRAPH_STYLE = "paragraph_style"
UNDERLINE = "underline"
INTERACTIVE_ELEMENT = "interactive_element"
INTERACTIVE_KIND = "interactive_kind"
INTERACTIVE_COLOR = "interactive_color"
INTERACTIVE_SELECTED_COLOR = "interactive_selected_color"

# Keys that only make sense on a detected span; cleared before every rebuild.
INTERACTIVE_KEYS: tuple[str, ...] = (
    INTERACTIVE_ELEMENT,
    INTERACTIVE_KIND,
    INTERACTIVE_COLOR,
    INTERACTIVE_SELECTED_COLOR,
)

UNDERLINE_SINGLE = "single"
DEFAULT_COLOR = "blue"


@dataclass(frozen=True, slots=True)
class ElementKind:
    """Category of an interactive element.

    Built-in kinds are singletons (``ElementKind.MENTION`` ...); custom kinds
    carry their regex and compare equal iff the patterns are equal.
    """
    name: str                     # "mention" | "hashtag" | "url" | "email" | "custom"
    pattern: str | None = None    # only set for custom kinds

    MENTION: ClassVar[ElementKind]
    HASHTAG: ClassVar[ElementKind]
    URL: ClassVar[ElementKind]
    EMAIL: ClassVar[ElementKind]

    @classmethod
    def custom(cls, pattern: str) -> ElementKind:
        return cls("custom", pattern)

    @classmethod
    def parse(cls, name: str) -> ElementKind:
        """Return the built-in kind called ``name``."""
        try:
            return _BUILTIN_KINDS[name.strip().lower()]
        except KeyError:
            raise ValueError(f"unknown element kind: {name!r}") from None

    @property
    def is_custom(self) -> bool:
        return self.name == "custom"

    def __str__(self) -> str:
        return f"custom({self.pattern})" if self.is_custom else self.name


ElementKind.MENTION = ElementKind("mention")
ElementKind.HASHTAG = ElementKind("hashtag")
ElementKind.URL = ElementKind("url")
ElementKind.EMAIL = ElementKind("email")

_BUILTIN_KINDS: dict[str, ElementKind] = {
    k.name: k for k in (ElementKind.MENTION, ElementKind.HASHTAG, ElementKind.URL, ElementKind.EMAIL)
}


@dataclass(frozen=True, slots=True)
class DetectedElement:
    """Payload of a detected element.

    ``text`` is the extracted value (prefix-stripped for mentions and
    hashtags, the original match for URLs).  ``trimmed`` is only used by
    URLs and holds the display form, which may be shortened.
    """
    kind: str
    text: str
    trimmed: str | None = None

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError(f"empty {self.kind} element")

    @classmethod
    def mention(cls, text: str) -> DetectedElement:
        return cls("mention", text)

    @classmethod
    def hashtag(cls, text: str) -> DetectedElement:
        return cls("hashtag", text)

    @classmethod
    def email(cls, text: str) -> DetectedElement:
        return cls("email", text)

    @classmethod
    def url(cls, original: str, trimmed: str | None = None) -> DetectedElement:
        return cls("url", original, trimmed if trimmed is not None else original)

    @classmethod
    def custom(cls, text: str) -> DetectedElement:
        return cls("custom", text)

    @classmethod
    def create(cls, kind: ElementKind, text: str) -> DetectedElement:
        """Build the element matching ``kind``; URLs start untrimmed."""
        if kind == ElementKind.URL:
            return cls.url(text)
        return cls(kind.name, text)

    @property
    def original(self) -> str:
        return self.text

    @property
    def display(self) -> str:
        return self.trimmed if self.trimmed is not None else self.text


@dataclass(frozen=True, slots=True)
class Span:
    """A detected element positioned over the current text buffer."""
    offset: int
    length: int
    element: DetectedElement
    kind: ElementKind

    @property
    def end(self) -> int:
        return self.offset + self.length

    def overlaps(self, other: Span) -> bool:
        return self.offset < other.end and self.end > other.offset


@dataclass(frozen=True, slots=True)
class Selection:
    """Element currently under an in-progress pointer interaction."""
    element: DetectedElement
    kind: ElementKind
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


@dataclass(frozen=True, slots=True)
class Font:
    name: str
    size: float


@dataclass(frozen=True, slots=True)
class ParagraphStyle:
    line_spacing: float = 0
    minimum_line_height: float = 0
    alignment: str = "left"
    line_break_mode: str = "word_wrap"


@dataclass(frozen=True, slots=True)
class TextStyle:
    """Base style the host widget already knows about."""
    font: Font = Font("Helvetica", 17)
    color: Any = "black"
    alignment: str = "left"
    line_break_mode: str = "word_wrap"


# Filter predicate applied to an extracted payload string.
FilterPredicate = Callable[[str], bool]
# (kind, proposed attributes, is_selected) -> final attributes
CustomizeHook = Callable[[ElementKind, dict[str, Any], bool], Mapping[str, Any]]
# (font name, size) -> resolved font, or None when the name is unknown
FontResolver = Callable[[str, float], "Font | None"]
