from dataclasses import dataclass
from typing import Sequence

import numpy as np

from chromres.errors import InputError
from chromres.utils.validation import validate_window_length


@dataclass(frozen=True)
class Window:
    """Fixed-length slice of a trace.

    Attributes:
        index: Position of the window in the trace, starting at 0.
        origin: Index of the window's first element in the source trace.
        values: Exactly ``window_length`` values; zero-padded on the right when the
            trace ran short.
        n_valid: Number of leading values taken from the trace.
    """

    index: int
    origin: int
    values: np.ndarray
    n_valid: int

    @property
    def is_padded(self) -> bool:
        return self.n_valid < len(self.values)


def split_series(series: Sequence[float] | np.ndarray, window_length: int) -> list[Window]:
    """Split a 1-D series into contiguous, non-overlapping windows.

    The last window is right-padded with zeros if the series length is not a multiple
    of ``window_length``. Splitting the intensity and time axes of one trace with the
    same ``window_length`` gives windows that correspond element for element.

    Args:
        series: Values to split.
        window_length: Number of values per window.

    Returns:
        ``ceil(len(series) / window_length)`` windows in trace order. An empty series
        gives an empty list.

    Raises:
        InputError: If ``window_length`` is not a positive integer or the series is not
            one-dimensional.
    """
    window_length = validate_window_length(window_length)
    values = np.asarray(series, dtype=float)
    if values.ndim != 1:
        raise InputError(f"Series must be one-dimensional, got shape {values.shape}")

    n_windows = -(-values.size // window_length)
    padded = np.zeros(n_windows * window_length, dtype=float)
    padded[: values.size] = values

    windows = []
    for i in range(n_windows):
        origin = i * window_length
        windows.append(
            Window(
                index=i,
                origin=origin,
                values=padded[origin : origin + window_length].copy(),
                n_valid=min(window_length, values.size - origin),
            )
        )
    return windows
