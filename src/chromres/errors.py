class ResolveError(Exception):
    """Base class for all errors raised while resolving a trace."""


class InputError(ResolveError, ValueError):
    """The trace or a parameter passed alongside it is invalid."""


class LengthMismatchError(InputError):
    """Intensity and time sequences differ in length."""

    def __init__(self, n_intensity: int, n_time: int):
        super().__init__(
            f"Lengths of intensity ({n_intensity}) and time ({n_time}) do not match"
        )
        self.n_intensity = n_intensity
        self.n_time = n_time


class InferenceError(ResolveError, RuntimeError):
    """The prediction oracle failed or returned malformed output."""


class OracleLoadError(ResolveError):
    """A model file could not be found or loaded."""


class ResolverClosedError(ResolveError):
    """The resolver was used after its oracle had been released."""


class DecodeWarning(UserWarning):
    """A decoded candidate had its left boundary after its right boundary."""
