"""Neural-oracle chromatographic peak resolution.

Resolves peaks in a 1-D chromatographic trace by asking a fixed-input-length
prediction oracle where the peaks are. A trace goes through five stages:

1. Windowing — intensity and time are split into aligned, zero-padded windows
2. Prediction — the oracle proposes K candidates per intensity window in one batch
3. Decoding — probabilities are thresholded, boundaries rounded and clamped
4. Range Mapping — peak-flagged candidates become retention-time intervals
5. Overlap Resolution — duplicates across candidates and windows are removed
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Hashable, Mapping, Sequence

import numpy as np
import pandas as pd

from chromres.errors import InferenceError, InputError, ResolverClosedError
from chromres.models import TraceInput
from chromres.oracles.base import PredictionOracle, RawPrediction
from chromres.processing.decoding import DEFAULT_PEAK_THRESHOLD, decode_prediction
from chromres.processing.overlap import (
    DEFAULT_OVERLAP_LOOKBACK,
    DEFAULT_OVERLAP_TOLERANCE,
    resolve_overlaps,
)
from chromres.processing.range_mapping import PeakRange, to_peak_range
from chromres.processing.windowing import Window, split_series
from chromres.utils.reformatting import peaks_to_frame
from chromres.utils.validation import validate_rt_range, validate_trace, validate_window_length

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolverConfig:
    """Configuration for peak resolution.

    Attributes:
        window_length: Number of points per window fed to the oracle. None uses the
            oracle's own window length; any other value must agree with it.
        peak_threshold: A candidate is a peak only if its probability is strictly
            greater than this.
        overlap_tolerance: Largest intersection, in time units, allowed between two
            accepted peaks before the later one is dropped as a duplicate.
        overlap_lookback: Number of most recently accepted peaks each candidate is
            compared against.
    """

    window_length: int | None = None
    peak_threshold: float = DEFAULT_PEAK_THRESHOLD
    overlap_tolerance: float = DEFAULT_OVERLAP_TOLERANCE
    overlap_lookback: int = DEFAULT_OVERLAP_LOOKBACK


class PeakResolver:
    """Resolve chromatographic peaks with a prediction oracle.

    The resolver owns its oracle and releases it in :meth:`close`, which is also called
    when the resolver is used as a context manager. Calls on one resolver are
    serialized, so a single oracle is never invoked concurrently.
    """

    def __init__(self, oracle: PredictionOracle, config: ResolverConfig | None = None):
        self._oracle: PredictionOracle | None = oracle
        self._lock = threading.Lock()
        self._closed = False

        if config is None:
            config = ResolverConfig()
        self.config = config

        try:
            self.window_length = self._resolve_window_length(oracle, config)
            if config.overlap_lookback < 1:
                raise InputError(
                    f"overlap_lookback must be at least 1, got {config.overlap_lookback}"
                )
        except Exception:
            self.close()
            raise

    @classmethod
    def from_torchscript(
        cls,
        model_path: Path | str,
        config: ResolverConfig | None = None,
        device: str = "cpu",
    ) -> "PeakResolver":
        """Create a resolver backed by a TorchScript model file."""
        from chromres.oracles.torchscript_oracle import TorchScriptOracle

        if config is not None and config.window_length is not None:
            oracle = TorchScriptOracle(model_path, window_length=config.window_length, device=device)
        else:
            oracle = TorchScriptOracle(model_path, device=device)
        return cls(oracle, config)

    @staticmethod
    def _resolve_window_length(oracle: PredictionOracle, config: ResolverConfig) -> int:
        oracle_length = validate_window_length(oracle.window_length)
        if config.window_length is None:
            return oracle_length
        if validate_window_length(config.window_length) != oracle_length:
            raise InputError(
                f"Configured window length {config.window_length} does not match the "
                f"oracle's window length {oracle_length}"
            )
        return oracle_length

    @property
    def closed(self) -> bool:
        return self._closed

    def resolve(
        self,
        intensity: Sequence[float] | np.ndarray,
        time: Sequence[float] | np.ndarray,
        rt_range: tuple[float | None, float | None] | None = None,
    ) -> list[PeakRange]:
        """Resolve the peaks of one trace.

        Args:
            intensity: Intensity values of the trace.
            time: Retention times, same length as intensity, non-decreasing.
            rt_range: Optional (min_rt, max_rt). Only points with min_rt <= time <= max_rt
                are resolved; a None bound leaves that side open.

        Returns:
            Non-overlapping peak ranges in ascending start order. Empty for an empty trace.

        Raises:
            LengthMismatchError: If intensity and time differ in length.
            InputError: If the trace is not one-dimensional or rt_range is invalid.
            InferenceError: If the oracle fails or returns malformed output.
            ResolverClosedError: If the resolver has been closed.
        """
        with self._lock:
            return self._resolve(intensity, time, rt_range)

    def resolve_frame(
        self, trace: pd.DataFrame, rt_range: tuple[float | None, float | None] | None = None
    ) -> pd.DataFrame:
        """Resolve a trace given as a DataFrame with ``time`` and ``intensity`` columns.

        Returns:
            DataFrame with columns ``start``, ``end``, ``window_index``, ``rank``.
        """
        trace = TraceInput.validate(trace)
        peaks = self.resolve(trace["intensity"].to_numpy(), trace["time"].to_numpy(), rt_range)
        return peaks_to_frame(peaks)

    def resolve_many(
        self,
        traces: Mapping[Hashable, tuple[Sequence[float], Sequence[float]]],
        rt_range: tuple[float | None, float | None] | None = None,
    ) -> dict[Hashable, list[PeakRange]]:
        """Resolve several traces one after another through the same oracle.

        Args:
            traces: Mapping from a caller-chosen key (e.g. a feature row id) to an
                ``(intensity, time)`` pair.
            rt_range: Optional (min_rt, max_rt) applied to every trace.

        Returns:
            Mapping from the same keys to the resolved peaks of each trace.
        """
        resolved = {}
        with self._lock:
            for key, (intensity, time) in traces.items():
                logger.debug("Resolving trace %s", key)
                resolved[key] = self._resolve(intensity, time, rt_range)
        return resolved

    def _resolve(self, intensity, time, rt_range) -> list[PeakRange]:
        if self._closed or self._oracle is None:
            raise ResolverClosedError("Resolver has been closed")

        intensity = np.asarray(intensity, dtype=float)
        time = np.asarray(time, dtype=float)
        validate_trace(intensity, time)

        if rt_range is not None:
            min_rt, max_rt = rt_range
            validate_rt_range(min_rt, max_rt)
            # Either bound may be None, leaving that side open
            mask = np.ones(time.shape, dtype=bool)
            if min_rt is not None:
                mask &= time >= min_rt
            if max_rt is not None:
                mask &= time <= max_rt
            intensity, time = intensity[mask], time[mask]

        if intensity.size == 0:
            return []

        # Stage 1: Windowing
        intensity_windows = split_series(intensity, self.window_length)
        time_windows = split_series(time, self.window_length)

        # Stage 2: Prediction
        predictions = self._predict(intensity_windows)

        # Stages 3-4: Decoding and Range Mapping
        ranges = []
        for prediction, time_window in zip(predictions, time_windows):
            ranges.extend(self._map_window(prediction, time_window))

        # Stage 5: Overlap Resolution
        peaks = resolve_overlaps(
            ranges,
            overlap_tolerance=self.config.overlap_tolerance,
            lookback=self.config.overlap_lookback,
        )
        logger.debug(
            "Resolved %d peaks from %d candidates in %d windows",
            len(peaks),
            len(ranges),
            len(intensity_windows),
        )
        return peaks

    def _predict(self, windows: list[Window]) -> list[RawPrediction]:
        batch = [window.values for window in windows]
        try:
            predictions = self._oracle.batch_predict(batch)
        except InferenceError:
            raise
        except Exception as e:
            raise InferenceError(f"Oracle failed on a batch of {len(batch)} windows") from e

        if not isinstance(predictions, Sequence) or isinstance(predictions, (str, bytes)):
            raise InferenceError(
                f"Oracle returned {type(predictions).__name__} instead of a list of predictions"
            )
        if len(predictions) != len(batch):
            raise InferenceError(
                f"Oracle returned {len(predictions)} predictions for {len(batch)} windows"
            )
        # Oracles may hand back the raw named outputs of a model
        converted = []
        for prediction in predictions:
            if isinstance(prediction, Mapping):
                prediction = RawPrediction.from_mapping(prediction)
            elif not isinstance(prediction, RawPrediction):
                raise InferenceError(
                    f"Oracle returned {type(prediction).__name__} instead of a prediction"
                )
            converted.append(prediction)
        predictions = converted
        n_candidates = {prediction.n_candidates for prediction in predictions}
        if len(n_candidates) > 1:
            raise InferenceError(
                f"Oracle returned inconsistent candidate counts {sorted(n_candidates)}"
            )
        return predictions

    def _map_window(self, prediction: RawPrediction, time_window: Window) -> list[PeakRange]:
        candidates = decode_prediction(
            prediction, threshold=self.config.peak_threshold, window_length=self.window_length
        )
        return [
            to_peak_range(
                candidate,
                time_window.values,
                window_index=time_window.index,
                rank=rank,
                n_valid=time_window.n_valid,
            )
            for rank, candidate in enumerate(candidates)
            if candidate.is_peak
        ]

    def close(self) -> None:
        """Release the oracle. Later calls do nothing."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            oracle, self._oracle = self._oracle, None
            if oracle is not None:
                oracle.close()

    def __enter__(self) -> "PeakResolver":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
