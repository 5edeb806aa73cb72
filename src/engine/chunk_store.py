"""
Draw-ordered chunk storage.

Chunks are kept sorted ascending by y, which doubles as painter's-algorithm
draw order: smaller y is composited first and ends up underneath.
"""

import bisect
import logging
import re
from dataclasses import dataclass
from operator import attrgetter
from typing import Iterator, List, Tuple

from .planner import FeatureKind

log = logging.getLogger(__name__)

# Invalid numeric tokens a generator can leak into markup ("nan", "inf", "-inf")
INVALID_NUMBER = re.compile(r"-?\b(?:nan|inf(?:inity)?)\b", re.IGNORECASE)


@dataclass(slots=True)
class Chunk:
    kind: FeatureKind
    x: float
    y: float
    payload: str


def sanitize_payload(payload: str, sentinel: float = -1000.0) -> Tuple[str, int]:
    """
    Replace invalid numeric artifacts with an out-of-frame sentinel.

    Returns:
        Tuple of (clean_payload, number_of_replacements)
    """
    return INVALID_NUMBER.subn(f"{sentinel:g}", payload)


def has_invalid_numbers(payload: str) -> bool:
    return INVALID_NUMBER.search(payload) is not None


class ChunkStore:
    """
    Ordered sequence of chunks.

    Invariant: for chunks a before b, a.y <= b.y. Equal y keeps insertion order.
    """

    def __init__(self, nan_sentinel: float = -1000.0):
        self.nan_sentinel = nan_sentinel
        self._chunks: List[Chunk] = []

    def add(self, chunk: Chunk) -> Chunk:
        """Insert a chunk at its draw-order position, sanitizing its payload first."""

        payload, replaced = sanitize_payload(chunk.payload, self.nan_sentinel)
        if replaced:
            log.warning(
                "sanitized %d invalid numeric artifact(s) in %s chunk at x=%.1f",
                replaced, chunk.kind.value, chunk.x
            )
            chunk.payload = payload

        bisect.insort_right(self._chunks, chunk, key=attrgetter("y"))
        return chunk

    def extend(self, chunks: List[Chunk]):
        for chunk in chunks:
            self.add(chunk)

    def evict(self, view_min: float, view_max: float, max_distance: float) -> int:
        """
        Drop chunks whose x lies outside [view_min - max_distance, view_max + max_distance].

        Returns:
            Number of chunks removed
        """

        low = view_min - max_distance
        high = view_max + max_distance
        before = len(self._chunks)
        self._chunks = [c for c in self._chunks if low <= c.x <= high]
        removed = before - len(self._chunks)

        if removed > 0:
            log.info("evicted %d distant chunks (%d -> %d)", removed, before, len(self._chunks))

        return removed

    def compose(self, view_min: float, view_max: float, margin: float) -> str:
        """Concatenate payloads of chunks near the viewport, in draw order."""

        return "".join(c.payload for c in self.visible(view_min, view_max, margin))

    def visible(self, view_min: float, view_max: float, margin: float) -> List[Chunk]:
        """Chunks whose x lies in [view_min - margin, view_max + margin], in draw order."""
        low = view_min - margin
        high = view_max + margin
        return [c for c in self._chunks if low <= c.x <= high]

    def is_sorted(self) -> bool:
        return all(a.y <= b.y for a, b in zip(self._chunks, self._chunks[1:]))

    def __iter__(self) -> Iterator[Chunk]:
        return iter(self._chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def __getitem__(self, index: int) -> Chunk:
        return self._chunks[index]
