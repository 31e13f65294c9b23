from typing import Callable, Sequence

import numpy as np
import pandas as pd
import pytest

from chromres.oracles.base import PredictionOracle, RawPrediction


class StubOracle(PredictionOracle):
    """Oracle returning predictions from a fixed list, or computed per window."""

    def __init__(
        self,
        predictions: Sequence[RawPrediction] | Callable[[np.ndarray], RawPrediction],
        window_length: int = 128,
    ):
        super().__init__(window_length)
        self.predictions = predictions
        self.calls: list[list[np.ndarray]] = []
        self.close_count = 0

    def batch_predict(self, windows: Sequence[np.ndarray]) -> list[RawPrediction]:
        self.calls.append([np.array(w) for w in windows])
        if callable(self.predictions):
            return [self.predictions(np.asarray(w)) for w in windows]
        return list(self.predictions[: len(windows)])

    def close(self) -> None:
        self.close_count += 1


def apex_prediction(window: np.ndarray, half_width: int = 10, min_height: float = 10.0):
    """Propose one candidate centred on the window maximum."""
    apex = int(np.argmax(window))
    probability = 0.9 if window[apex] > min_height else 0.1
    return RawPrediction.from_arrays([probability], [apex - half_width], [apex + half_width])


@pytest.fixture
def sample_time() -> np.ndarray:
    """Retention times 0..299, one unit apart."""
    return np.arange(300, dtype=float)


@pytest.fixture
def sample_intensity(sample_time: np.ndarray) -> np.ndarray:
    """Two well-separated Gaussian bumps at t=60 and t=200."""
    return 100 * np.exp(-((sample_time - 60) ** 2) / 50) + 80 * np.exp(
        -((sample_time - 200) ** 2) / 50
    )


@pytest.fixture
def two_bump_predictions() -> list[RawPrediction]:
    """Fixed oracle output for the three windows of the two-bump trace."""
    return [
        RawPrediction.from_arrays([0.9, 0.1], [50.4, 3.0], [70.6, 10.0]),
        RawPrediction.from_arrays([0.2, 0.95], [0.0, 62.5], [5.0, 82.2]),
        RawPrediction.from_arrays([0.1, 0.3], [1.0, 2.0], [3.0, 4.0]),
    ]


@pytest.fixture
def stub_oracle(two_bump_predictions: list[RawPrediction]) -> StubOracle:
    return StubOracle(two_bump_predictions)


@pytest.fixture
def apex_oracle() -> StubOracle:
    return StubOracle(apex_prediction)


@pytest.fixture
def sample_trace_frame(sample_time: np.ndarray, sample_intensity: np.ndarray) -> pd.DataFrame:
    return pd.DataFrame({"time": sample_time, "intensity": sample_intensity})


@pytest.fixture
def make_stub_oracle() -> type[StubOracle]:
    return StubOracle
