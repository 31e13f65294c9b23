from typing import Sequence

import pandas as pd

from chromres.models import ResolvedPeakTable
from chromres.processing.range_mapping import PeakRange


def peaks_to_frame(peaks: Sequence[PeakRange]) -> pd.DataFrame:
    """Convert resolved peak ranges to a validated DataFrame, one row per peak."""
    df = pd.DataFrame(
        {
            "start": pd.Series([p.start for p in peaks], dtype="float64"),
            "end": pd.Series([p.end for p in peaks], dtype="float64"),
            "window_index": pd.Series([p.window_index for p in peaks], dtype="int64"),
            "rank": pd.Series([p.rank for p in peaks], dtype="int64"),
        }
    )

    return ResolvedPeakTable.validate(df)


def frame_to_peaks(df: pd.DataFrame) -> list[PeakRange]:
    """Convert a resolved-peak DataFrame back to PeakRange objects."""
    df = ResolvedPeakTable.validate(df)

    return [
        PeakRange(
            start=float(row.start),
            end=float(row.end),
            window_index=int(row.window_index),
            rank=int(row.rank),
        )
        for row in df.itertuples(index=False)
    ]
