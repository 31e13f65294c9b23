"""Deterministic signal-profile oracle.

Proposes peak candidates for a window from its intensity profile alone, using
scipy.signal instead of a trained network. Its output has the same shape as a
neural oracle's, so it can stand in for one wherever no model file is available.
Each window goes through three stages:

1. Signal Characterization — dynamic range and flat detection
2. Peak Detection — scipy.signal.find_peaks with a relative prominence constraint
3. Boundary Estimation — scipy.signal.peak_widths near the peak base, giving
   fractional left/right indices like a regression head would
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy.signal import find_peaks, peak_widths

from chromres.errors import InferenceError
from chromres.oracles.base import DEFAULT_WINDOW_LENGTH, PredictionOracle, RawPrediction

# Windows whose dynamic range is below this are treated as containing no signal.
FLAT_WINDOW_EPSILON = 1e-10


@dataclass(frozen=True)
class ProfileOracleConfig:
    """Configuration for the profile oracle.

    Attributes:
        max_candidates: Number of candidates K returned per window. Windows with fewer
            peaks are padded with zero-probability candidates.
        min_prominence_fraction: Min peak prominence as fraction of the window's
            dynamic range.
        boundary_rel_height: Relative height, measured down from the apex, at which
            peak boundaries are taken (1.0 is the full base).
    """

    max_candidates: int = 4
    min_prominence_fraction: float = 0.10
    boundary_rel_height: float = 0.95


def _window_range(window: np.ndarray) -> float:
    """Stage 1: Dynamic range of the window, max - min."""
    return float(np.max(window) - np.min(window))


def _detect_window_peaks(
    window: np.ndarray, dynamic_range: float, config: ProfileOracleConfig
) -> tuple[np.ndarray, np.ndarray]:
    """Stage 2: Peak indices and prominences, most prominent first."""
    peak_indices, properties = find_peaks(
        window, prominence=config.min_prominence_fraction * dynamic_range
    )
    prominences = properties["prominences"]

    order = np.argsort(prominences, kind="stable")[::-1][: config.max_candidates]
    return peak_indices[order], prominences[order]


def _predict_window(window: np.ndarray, config: ProfileOracleConfig) -> RawPrediction:
    k = config.max_candidates
    probability = np.zeros(k)
    left = np.zeros(k)
    right = np.zeros(k)

    dynamic_range = _window_range(window)
    if dynamic_range < FLAT_WINDOW_EPSILON:
        return RawPrediction.from_arrays(probability, left, right)

    peak_indices, prominences = _detect_window_peaks(window, dynamic_range, config)
    if peak_indices.size > 0:
        # Stage 3: Boundary Estimation
        _, _, left_ips, right_ips = peak_widths(
            window, peak_indices, rel_height=config.boundary_rel_height
        )
        n = peak_indices.size
        probability[:n] = np.clip(prominences / dynamic_range, 0.0, 1.0)
        left[:n] = left_ips
        right[:n] = right_ips

    return RawPrediction.from_arrays(probability, left, right)


class ProfileOracle(PredictionOracle):
    """Oracle proposing candidates from find_peaks / peak_widths on each window."""

    def __init__(
        self,
        window_length: int = DEFAULT_WINDOW_LENGTH,
        config: ProfileOracleConfig | None = None,
    ):
        super().__init__(window_length)
        self.config = config if config is not None else ProfileOracleConfig()

    def batch_predict(self, windows: Sequence[np.ndarray]) -> list[RawPrediction]:
        predictions = []
        for window in windows:
            values = np.asarray(window, dtype=float)
            if values.shape != (self.window_length,):
                raise InferenceError(
                    f"Expected windows of shape ({self.window_length},), got {values.shape}"
                )
            if not np.all(np.isfinite(values)):
                raise InferenceError("Window contains non-finite values")
            predictions.append(_predict_window(values, self.config))
        return predictions
