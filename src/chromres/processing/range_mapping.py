import logging
import warnings
from dataclasses import dataclass

import numpy as np

from chromres.errors import DecodeWarning
from chromres.processing.decoding import Candidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeakRange:
    """Closed retention-time interval of one detected peak.

    Attributes:
        start: Retention time of the left boundary.
        end: Retention time of the right boundary, never before ``start``.
        window_index: Index of the window the peak was proposed in.
        rank: Position of the candidate in the oracle's output for that window.
    """

    start: float
    end: float
    window_index: int
    rank: int

    @property
    def width(self) -> float:
        return self.end - self.start


def to_peak_range(
    candidate: Candidate,
    window_time: np.ndarray,
    window_index: int,
    rank: int,
    n_valid: int | None = None,
) -> PeakRange:
    """Map a window-local peak candidate to a retention-time interval.

    Inverted candidates (left index after right index) are normalized by swapping the
    two boundaries, with a DecodeWarning.

    Args:
        candidate: Decoded candidate flagged as a peak.
        window_time: Time values of the window the candidate belongs to.
        window_index: Index of that window.
        rank: Position of the candidate within the window's prediction.
        n_valid: Number of non-padding values in the window. Boundary indices pointing
            into the zero padding are pulled back to the last real time value.

    Raises:
        ValueError: If the candidate is not flagged as a peak.
    """
    if not candidate.is_peak:
        raise ValueError("Only candidates flagged as peaks can be mapped to a range")

    left, right = candidate.left, candidate.right
    if n_valid is not None:
        left = min(left, n_valid - 1)
        right = min(right, n_valid - 1)

    if left > right:
        warnings.warn(
            f"Swapped inverted boundaries ({left} > {right}) in window {window_index}, "
            f"candidate {rank}",
            DecodeWarning,
            stacklevel=2,
        )
        logger.warning(
            "Inverted candidate %d in window %d: %d > %d", rank, window_index, left, right
        )
        left, right = right, left

    return PeakRange(
        start=float(window_time[left]),
        end=float(window_time[right]),
        window_index=window_index,
        rank=rank,
    )
