from chromres import models, oracles, processing
from chromres.errors import (
    DecodeWarning,
    InferenceError,
    InputError,
    LengthMismatchError,
    OracleLoadError,
    ResolveError,
    ResolverClosedError,
)
from chromres.processing import PeakRange, PeakResolver, ResolverConfig

__version__ = "0.1.0"

__all__ = [
    "DecodeWarning",
    "InferenceError",
    "InputError",
    "LengthMismatchError",
    "OracleLoadError",
    "PeakRange",
    "PeakResolver",
    "ResolveError",
    "ResolverClosedError",
    "ResolverConfig",
    "models",
    "oracles",
    "processing",
]
