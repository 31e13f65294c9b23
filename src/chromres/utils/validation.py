import numpy as np

from chromres.errors import InputError, LengthMismatchError


def validate_rt_range(min_rt: float | None, max_rt: float | None) -> bool:
    """Validate min and max retention time values.

    Args:
        min_rt: Minimum retention time or None
        max_rt: Maximum retention time or None

    Returns:
        bool: True if both values are provided and valid, False otherwise

    Raises:
        InputError: If both values are provided but min_rt >= max_rt
    """
    if min_rt is not None and max_rt is not None:
        if min_rt >= max_rt:
            raise InputError("min_rt must be less than max_rt")
        return True
    return False


def validate_window_length(window_length: int) -> int:
    """Check that a window length is a positive integer and return it as int."""
    if isinstance(window_length, bool) or not isinstance(window_length, (int, np.integer)):
        raise InputError(f"Window length must be an integer, got {window_length!r}")
    if window_length <= 0:
        raise InputError(f"Window length must be positive, got {window_length}")
    return int(window_length)


def validate_trace(intensity: np.ndarray, time: np.ndarray) -> None:
    """Check that intensity and time form a 1-D trace of matching length.

    Raises:
        LengthMismatchError: If the two arrays differ in length
        InputError: If either array is not one-dimensional
    """
    if intensity.ndim != 1 or time.ndim != 1:
        raise InputError(
            f"Trace arrays must be one-dimensional, got shapes {intensity.shape} and {time.shape}"
        )
    if intensity.shape[0] != time.shape[0]:
        raise LengthMismatchError(intensity.shape[0], time.shape[0])
