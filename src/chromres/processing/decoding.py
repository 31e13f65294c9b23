from dataclasses import dataclass

import numpy as np

from chromres.oracles.base import DEFAULT_WINDOW_LENGTH, RawPrediction
from chromres.utils.validation import validate_window_length

DEFAULT_PEAK_THRESHOLD = 0.5


@dataclass(frozen=True)
class Candidate:
    """Decoded peak proposal, local to one window.

    Both indices lie in ``[0, window_length - 1]``; ``left <= right`` is not
    guaranteed.
    """

    is_peak: bool
    left: int
    right: int


def _round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to the nearest integer, ties toward positive infinity."""
    floored = np.floor(values)
    return floored + (values - floored >= 0.5)


def _to_window_indices(values: np.ndarray, window_length: int) -> np.ndarray:
    return np.clip(_round_half_up(values), 0, window_length - 1).astype(int)


def decode_prediction(
    raw: RawPrediction,
    threshold: float = DEFAULT_PEAK_THRESHOLD,
    window_length: int = DEFAULT_WINDOW_LENGTH,
) -> list[Candidate]:
    """Decode a raw oracle prediction into window-local candidates.

    A candidate is a peak only if its probability is strictly greater than
    ``threshold``. Boundary estimates are rounded half up and clamped into the window.

    Args:
        raw: Oracle output for one window.
        threshold: Probability a candidate must exceed to be flagged as a peak.
        window_length: Length of the window the prediction was made for.

    Returns:
        One Candidate per oracle candidate, in oracle rank order.
    """
    window_length = validate_window_length(window_length)

    is_peak = raw.probability > threshold
    left = _to_window_indices(raw.left, window_length)
    right = _to_window_indices(raw.right, window_length)

    return [
        Candidate(is_peak=bool(p), left=int(lo), right=int(hi))
        for p, lo, hi in zip(is_peak, left, right)
    ]
