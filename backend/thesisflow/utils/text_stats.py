"""Derived counters shown on the dashboard and the defense-prep page."""

from typing import Iterable, Literal

MasteryBucket = Literal["new", "learning", "mastered"]

MASTERED_LEVEL = 3


def count_words(content: str | None) -> int:
    """Number of whitespace-delimited non-empty tokens."""
    if not content:
        return 0
    return len(content.split())


def progress_percentage(completed: int, total: int) -> int:
    """Whole-number percentage, halves rounded up; 0 when there is nothing to complete."""
    if total <= 0:
        return 0
    # Integer form of floor(100 * completed / total + 0.5)
    return (200 * completed + total) // (2 * total)


def mastery_bucket(level: int) -> MasteryBucket:
    if level <= 0:
        return "new"
    if level < MASTERED_LEVEL:
        return "learning"
    return "mastered"


def mastery_counts(levels: Iterable[int]) -> dict[str, int]:
    counts = {"total": 0, "new": 0, "learning": 0, "mastered": 0}
    for level in levels:
        counts["total"] += 1
        counts[mastery_bucket(level or 0)] += 1
    return counts
