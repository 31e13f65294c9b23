from chromres.processing.decoding import Candidate, decode_prediction
from chromres.processing.overlap import resolve_overlaps
from chromres.processing.range_mapping import PeakRange, to_peak_range
from chromres.processing.windowing import Window, split_series
from chromres.processing.resolver import PeakResolver, ResolverConfig

__all__ = [
    "Candidate",
    "PeakRange",
    "PeakResolver",
    "ResolverConfig",
    "Window",
    "decode_prediction",
    "resolve_overlaps",
    "split_series",
    "to_peak_range",
]
