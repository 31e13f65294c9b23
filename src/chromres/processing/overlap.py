from typing import Iterable

from chromres.processing.range_mapping import PeakRange

DEFAULT_OVERLAP_TOLERANCE = 3.0
DEFAULT_OVERLAP_LOOKBACK = 10


def _overlap_length(a: PeakRange, b: PeakRange) -> float:
    """Length of the intersection of two closed ranges, 0 if they are disjoint."""
    return max(0.0, min(a.end, b.end) - max(a.start, b.start))


def resolve_overlaps(
    ranges: Iterable[PeakRange],
    overlap_tolerance: float = DEFAULT_OVERLAP_TOLERANCE,
    lookback: int = DEFAULT_OVERLAP_LOOKBACK,
) -> list[PeakRange]:
    """Drop duplicate peak ranges.

    Ranges are sorted by start time, keeping window/rank order for equal starts. Each
    range is then compared with the last ``lookback`` accepted ranges and discarded if
    it overlaps any of them by more than ``overlap_tolerance`` time units.

    Args:
        ranges: Candidate ranges gathered from all windows, in window then rank order.
        overlap_tolerance: Largest intersection allowed between two accepted ranges.
        lookback: Number of most recently accepted ranges each candidate is compared to.

    Returns:
        Accepted ranges in ascending start order.

    Raises:
        ValueError: If lookback is smaller than 1.
    """
    if lookback < 1:
        raise ValueError(f"lookback must be at least 1, got {lookback}")

    ordered = sorted(ranges, key=lambda r: r.start)

    accepted: list[PeakRange] = []
    for candidate in ordered:
        recent = accepted[-lookback:]
        if any(_overlap_length(candidate, other) > overlap_tolerance for other in recent):
            continue
        accepted.append(candidate)

    return accepted
