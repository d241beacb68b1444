"""Competency score arithmetic shared by the API and the client.

A gap is ``required - actual``: positive values are shortfalls, zero or
negative values mean the requirement is met. Unscored competencies count
as an actual score of 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

MIN_SCORE = 0
DEFAULT_MAX_SCORE = 3


def score_gap(required_score: int, actual_score: Optional[int]) -> int:
    return required_score - (actual_score or 0)


def gap_tier(gap: int) -> Optional[int]:
    """Severity tier 1, 2 or 3 for a shortfall; None when the requirement is met."""
    if gap <= 0:
        return None
    return min(gap, 3)


def clamp_score(value: int, *, maximum: int = DEFAULT_MAX_SCORE) -> int:
    """Pin ``value`` to ``0..maximum``; pass the server limit from the session."""
    return min(max(value, MIN_SCORE), maximum)


@dataclass
class GapBuckets:
    """Counts of scored competencies per severity tier."""

    gap1: int = 0
    gap2: int = 0
    gap3: int = 0

    def add(self, gap: int) -> None:
        tier = gap_tier(gap)
        if tier is not None:
            setattr(self, f"gap{tier}", getattr(self, f"gap{tier}") + 1)

    def __iadd__(self, other: "GapBuckets") -> "GapBuckets":
        self.gap1 += other.gap1
        self.gap2 += other.gap2
        self.gap3 += other.gap3
        return self

    @property
    def total(self) -> int:
        return self.gap1 + self.gap2 + self.gap3

    def as_dict(self) -> dict[str, int]:
        return {"gap1": self.gap1, "gap2": self.gap2, "gap3": self.gap3}


def bucket_gaps(rows: Iterable[tuple[int, Optional[int]]]) -> GapBuckets:
    """Bucket ``(required, actual)`` pairs; rows without an actual score are skipped."""
    buckets = GapBuckets()
    for required, actual in rows:
        if actual is None:
            continue
        buckets.add(score_gap(required, actual))
    return buckets
