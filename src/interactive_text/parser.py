"""Element parser — scans text for interactive elements.

Usage:
    from interactive_text import ElementKind, LabelConfig, parse

    text, spans = parse(
        "Ping @alice about #release, notes at https://example.com/notes",
        [ElementKind.MENTION, ElementKind.HASHTAG, ElementKind.URL],
        LabelConfig(url_maximum_length=20),
    )

Each kind runs its own pass over the text.  Mentions and hashtags keep the
full match (boundary character included) as their range but drop the
leading ``@``/``#`` from the payload.  URLs may be shortened for display,
which rewrites the text, so the URL pass runs first and every other pass
sees the rewritten buffer.
"""

from __future__ import annotations
import logging
from typing import Callable, Iterable, Mapping, Sequence

from .patterns import find_matches, pattern_for
from .types import DetectedElement, ElementKind, FilterPredicate, Span

logger = logging.getLogger(__name__)

# Matches must be strictly longer than this to count.
DEFAULT_MIN_LENGTH = 2
CUSTOM_MIN_LENGTH = 1

ELLIPSIS = "..."

PredicateLookup = Callable[[ElementKind], "FilterPredicate | None"]


def trim_to(word: str, maximum: int) -> str:
    """Shorten ``word`` to ``maximum`` characters plus an ellipsis."""
    if len(word) <= maximum:
        return word
    return word[:maximum] + ELLIPSIS


def _stripped(text: str, start: int, end: int) -> tuple[int, str]:
    """Whitespace-stripped slice of ``text`` with its new start offset."""
    raw = text[start:end]
    word = raw.strip()
    if not word:
        return start, ""
    return start + raw.index(word), word


def detect_kind(
    text: str,
    kind: ElementKind,
    config,
    predicate: FilterPredicate | None = None,
) -> list[Span]:
    """Run one kind's pass over ``text``. Returns spans in match order."""
    if kind in (ElementKind.MENTION, ElementKind.HASHTAG):
        return _detect_prefixed(text, kind, config, predicate)
    min_length = CUSTOM_MIN_LENGTH if kind.is_custom else DEFAULT_MIN_LENGTH
    return _detect_plain(text, kind, config, predicate, min_length)


def _detect_prefixed(
    text: str,
    kind: ElementKind,
    config,
    predicate: FilterPredicate | None,
) -> list[Span]:
    spans: list[Span] = []
    for m in find_matches(pattern_for(kind, config), text):
        if m.end() - m.start() <= DEFAULT_MIN_LENGTH:
            continue
        # Skip the boundary (or delimiter) character, then at most one prefix
        word = text[m.start() + 1:m.end()]
        if word[:1] in ("@", "#"):
            word = word[1:]
        if not word:
            continue
        if predicate is not None and not predicate(word):
            continue
        spans.append(Span(
            offset=m.start(),
            length=m.end() - m.start(),
            element=DetectedElement.create(kind, word),
            kind=kind,
        ))
    return spans


def _detect_plain(
    text: str,
    kind: ElementKind,
    config,
    predicate: FilterPredicate | None,
    min_length: int,
) -> list[Span]:
    spans: list[Span] = []
    for m in find_matches(pattern_for(kind, config), text):
        if m.end() - m.start() <= min_length:
            continue
        offset, word = _stripped(text, m.start(), m.end())
        if not word:
            continue
        if predicate is not None and not predicate(word):
            continue
        spans.append(Span(
            offset=offset,
            length=len(word),
            element=DetectedElement.create(kind, word),
            kind=kind,
        ))
    return spans


def trim_urls(
    text: str,
    config,
    predicate: FilterPredicate | None = None,
) -> tuple[list[Span], str]:
    """Detect URLs and shorten the ones over ``config.url_maximum_length``.

    Returns the URL spans and the (possibly rewritten) text.  Each URL is
    replaced at its own match position, so repeated or look-alike URLs
    elsewhere in the text are never touched by mistake.  Spans are
    positioned against the returned text.
    """
    maximum = config.url_maximum_length
    spans: list[Span] = []
    parts: list[str] = []
    cursor = 0      # read position in the original text
    delta = 0       # length change applied so far
    rewritten = False

    for m in find_matches(pattern_for(ElementKind.URL, config), text):
        if m.end() - m.start() <= DEFAULT_MIN_LENGTH:
            continue
        offset, word = _stripped(text, m.start(), m.end())
        if not word:
            continue
        if predicate is not None and not predicate(word):
            continue

        display = word if maximum is None else trim_to(word, maximum)
        parts.append(text[cursor:offset])
        parts.append(display)
        cursor = offset + len(word)

        spans.append(Span(
            offset=offset + delta,
            length=len(display),
            element=DetectedElement.url(word, display),
            kind=ElementKind.URL,
        ))
        delta += len(display) - len(word)
        rewritten = rewritten or display != word

    if not rewritten:
        return spans, text
    parts.append(text[cursor:])
    result = "".join(parts)
    logger.debug("trimmed urls: %d -> %d chars", len(text), len(result))
    return spans, result


def detect(
    text: str,
    kinds: Iterable[ElementKind],
    config,
    predicate_of: PredicateLookup | Mapping[ElementKind, FilterPredicate | None] | None = None,
) -> list[Span]:
    """Run every enabled kind's pass against ``text``.

    Order is match order within each pass, passes in ``kinds`` order.
    Nothing is rewritten here; see ``parse`` for the full pipeline.
    """
    lookup = _as_lookup(predicate_of)
    spans: list[Span] = []
    for kind in _unique(kinds):
        spans.extend(detect_kind(text, kind, config, lookup(kind)))
    return spans


def parse(
    text: str,
    kinds: Iterable[ElementKind],
    config,
    predicate_of: PredicateLookup | Mapping[ElementKind, FilterPredicate | None] | None = None,
) -> tuple[str, list[Span]]:
    """Full detection pipeline: trim URLs, detect the rest, merge.

    Returns the working text (rewritten when URLs were trimmed) and
    non-overlapping spans sorted by offset.
    """
    if not text:
        return text, []
    kinds = _unique(kinds)
    lookup = _as_lookup(predicate_of)

    url_spans: list[Span] = []
    if ElementKind.URL in kinds:
        url_spans, text = trim_urls(text, config, lookup(ElementKind.URL))

    spans = list(url_spans)
    for kind in kinds:
        if kind == ElementKind.URL:
            continue
        spans.extend(detect_kind(text, kind, config, lookup(kind)))
    return text, merge_spans(spans)


def merge_spans(spans: Sequence[Span]) -> list[Span]:
    """Drop overlapping spans (longer wins, then earlier) and sort by offset."""
    if not spans:
        return []
    ranked = sorted(spans, key=lambda s: (-s.length, s.offset))
    taken: list[Span] = []
    for span in ranked:
        if not any(span.overlaps(t) for t in taken):
            taken.append(span)
    return sorted(taken, key=lambda s: s.offset)


def _unique(kinds: Iterable[ElementKind]) -> list[ElementKind]:
    seen: list[ElementKind] = []
    for kind in kinds:
        if kind not in seen:
            seen.append(kind)
    return seen


def _as_lookup(predicate_of) -> PredicateLookup:
    if predicate_of is None:
        return lambda kind: None
    if isinstance(predicate_of, Mapping):
        return predicate_of.get
    return predicate_of
