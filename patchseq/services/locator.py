# patchseq/services/locator.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

FOUND = "found"
NOT_FOUND = "not_found"
AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class Location:
    status: str
    offset: Optional[int] = None
    matches: int = 0

    @property
    def found(self) -> bool:
        return self.status == FOUND

    @classmethod
    def from_offsets(cls, offsets: List[int]) -> "Location":
        if not offsets:
            return cls(NOT_FOUND)
        if len(offsets) > 1:
            return cls(AMBIGUOUS, matches=len(offsets))
        return cls(FOUND, offset=offsets[0], matches=1)


def scan(buf: bytes, pattern: bytes, limit: Optional[int] = None) -> List[int]:
    """
    Every offset where `pattern` starts in `buf`.
    Overlapping occurrences count separately: b"AA" in b"AAA" -> [0, 1].
    `limit` stops the scan once that many hits are collected.
    """
    if not pattern:
        raise ValueError("pattern must not be empty")
    hits: List[int] = []
    i = buf.find(pattern)
    while i != -1:
        hits.append(i)
        if limit is not None and len(hits) >= limit:
            break
        i = buf.find(pattern, i + 1)
    return hits


def locate(buf: bytes, pattern: bytes) -> Location:
    # two hits are enough to know the signature is not unique
    hits = scan(buf, pattern, limit=2)
    if len(hits) > 1:
        hits = scan(buf, pattern)
    return Location.from_offsets(hits)
