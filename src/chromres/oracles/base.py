from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Sequence

import numpy as np

from chromres.errors import InferenceError

DEFAULT_WINDOW_LENGTH = 128

# Output names of the traced peak-picking network.
DEFAULT_OUTPUT_KEYS = ("probs", "left", "right")


@dataclass(frozen=True)
class RawPrediction:
    """Raw oracle output for one window.

    Attributes:
        probability: Peak probability for each of the K candidates.
        left: Fractional left boundary index of each candidate, local to the window.
        right: Fractional right boundary index of each candidate, local to the window.
    """

    probability: np.ndarray
    left: np.ndarray
    right: np.ndarray

    def __post_init__(self) -> None:
        arrays = []
        for name in ("probability", "left", "right"):
            try:
                array = np.asarray(getattr(self, name), dtype=float)
            except (TypeError, ValueError) as e:
                raise InferenceError(f"Oracle output '{name}' is not numeric") from e
            if array.ndim != 1:
                raise InferenceError(
                    f"Oracle output '{name}' must be one-dimensional, got shape {array.shape}"
                )
            if not np.all(np.isfinite(array)):
                raise InferenceError(f"Oracle output '{name}' contains non-finite values")
            object.__setattr__(self, name, array)
            arrays.append(array)

        lengths = {array.size for array in arrays}
        if len(lengths) != 1:
            raise InferenceError(
                f"Oracle outputs differ in length: {[array.size for array in arrays]}"
            )
        if 0 in lengths:
            raise InferenceError("Oracle returned no candidates for a window")

    @property
    def n_candidates(self) -> int:
        return int(self.probability.size)

    @classmethod
    def from_arrays(cls, probability, left, right) -> "RawPrediction":
        """Build a prediction from three array-likes, rejecting malformed output.

        Raises:
            InferenceError: If the arrays are not 1-D, differ in length, are empty or
                hold non-finite values.
        """
        return cls(probability=probability, left=left, right=right)

    @classmethod
    def from_mapping(
        cls, outputs: Mapping[str, Sequence[float]], keys: Sequence[str] = DEFAULT_OUTPUT_KEYS
    ) -> "RawPrediction":
        """Build a prediction from named outputs, e.g. ``{"probs": ..., "left": ..., "right": ...}``."""
        missing = [key for key in keys if key not in outputs]
        if missing:
            raise InferenceError(f"Oracle output is missing {missing}")
        probability_key, left_key, right_key = keys
        return cls.from_arrays(outputs[probability_key], outputs[left_key], outputs[right_key])


class PredictionOracle(ABC):
    """Batch predictor proposing peak candidates for fixed-length windows.

    Implementations may hold heavy resources (model weights, device memory) and are not
    assumed to be safe for concurrent calls.
    """

    def __init__(self, window_length: int = DEFAULT_WINDOW_LENGTH):
        self.window_length = window_length

    @abstractmethod
    def batch_predict(self, windows: Sequence[np.ndarray]) -> list[RawPrediction]:
        """Predict one RawPrediction per window, in input order.

        Raises:
            InferenceError: If inference fails.
        """

    def predict(self, window: np.ndarray) -> RawPrediction:
        """Predict a single window."""
        return self.batch_predict([window])[0]

    def close(self) -> None:
        """Release resources held by the oracle. Safe to call more than once."""

    def __enter__(self) -> "PredictionOracle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
