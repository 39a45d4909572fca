"""TaggedBuffer — plain text plus attribute runs.

Runs are half-open ``[start, end)`` intervals that tile the whole text
without gaps or overlaps; each carries its own attribute mapping.  Writes
split runs at their boundaries and adjacent runs with equal attributes are
merged back, so ``runs()`` is always the minimal description.
"""

from __future__ import annotations
from typing import Any, Iterator, Mapping


class TaggedBuffer:
    """Attributed text the render collaborator draws."""

    __slots__ = ("_text", "_runs")

    def __init__(self, text: str = "", attributes: Mapping[str, Any] | None = None) -> None:
        self._text = text
        # Each run: [start, end, attributes]
        self._runs: list[list] = [[0, len(text), dict(attributes or {})]] if text else []

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def __bool__(self) -> bool:
        return bool(self._text)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaggedBuffer):
            return NotImplemented
        return self._text == other._text and self.runs() == other.runs()

    def __repr__(self) -> str:
        return f"TaggedBuffer({self._text!r}, runs={len(self._runs)})"

    def runs(self) -> list[tuple[int, int, dict[str, Any]]]:
        """Snapshot of ``(start, end, attributes)`` runs in text order."""
        return [(s, e, dict(a)) for s, e, a in self._runs]

    def attributes_at(self, offset: int) -> dict[str, Any]:
        """Copy of the attributes at ``offset``."""
        return dict(self._run_at(offset)[2])

    def attribute_at(self, key: str, offset: int) -> tuple[Any, tuple[int, int]]:
        """Value of ``key`` at ``offset`` and its effective range.

        The range is the maximal stretch of neighbouring runs carrying the
        exact same value (``None`` counts as a value, so an untagged gap is
        reported the same way).
        """
        idx = self._index_at(offset)
        value = self._runs[idx][2].get(key)
        lo = idx
        while lo > 0 and self._runs[lo - 1][2].get(key) == value:
            lo -= 1
        hi = idx
        while hi + 1 < len(self._runs) and self._runs[hi + 1][2].get(key) == value:
            hi += 1
        return value, (self._runs[lo][0], self._runs[hi][1])

    def iter_attribute(self, key: str) -> Iterator[tuple[int, int, Any]]:
        """Yield ``(start, end, value)`` for each stretch where ``key`` is set."""
        offset = 0
        while offset < len(self._text):
            value, (start, end) = self.attribute_at(key, offset)
            if value is not None:
                yield start, end, value
            offset = end

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def add_attributes(self, attributes: Mapping[str, Any], start: int, end: int) -> None:
        """Set ``attributes`` over ``[start, end)``, keeping other keys."""
        for run in self._slice(start, end):
            run[2].update(attributes)
        self._coalesce()

    def set_attributes(self, attributes: Mapping[str, Any], start: int, end: int) -> None:
        """Replace every attribute over ``[start, end)`` with ``attributes``."""
        for run in self._slice(start, end):
            run[2] = dict(attributes)
        self._coalesce()

    def remove_attribute(self, key: str, start: int, end: int) -> None:
        for run in self._slice(start, end):
            run[2].pop(key, None)
        self._coalesce()

    def copy(self) -> TaggedBuffer:
        clone = TaggedBuffer()
        clone._text = self._text
        clone._runs = [[s, e, dict(a)] for s, e, a in self._runs]
        return clone

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _index_at(self, offset: int) -> int:
        if not 0 <= offset < len(self._text):
            raise IndexError(f"offset {offset} out of range for length {len(self._text)}")
        lo, hi = 0, len(self._runs) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            if self._runs[mid][1] <= offset:
                lo = mid + 1
            else:
                hi = mid
        return lo

    def _run_at(self, offset: int) -> list:
        return self._runs[self._index_at(offset)]

    def _split(self, offset: int) -> int:
        """Ensure a run starts at ``offset``; return that run's index."""
        if offset >= len(self._text):
            return len(self._runs)
        idx = self._index_at(offset)
        start, end, attrs = self._runs[idx]
        if start == offset:
            return idx
        self._runs[idx] = [start, offset, attrs]
        self._runs.insert(idx + 1, [offset, end, dict(attrs)])
        return idx + 1

    def _slice(self, start: int, end: int) -> list[list]:
        start = max(start, 0)
        end = min(end, len(self._text))
        if start >= end:
            return []
        first = self._split(start)
        last = self._split(end)
        return self._runs[first:last]

    def _coalesce(self) -> None:
        merged: list[list] = []
        for run in self._runs:
            if merged and merged[-1][2] == run[2]:
                merged[-1][1] = run[1]
            else:
                merged.append(run)
        self._runs = merged
