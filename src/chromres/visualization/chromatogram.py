from typing import Sequence

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from chromres.processing.range_mapping import PeakRange
from chromres.utils.reformatting import frame_to_peaks
from chromres.utils.validation import validate_rt_range, validate_trace


def plot_resolved_peaks(
    time: np.ndarray | Sequence[float],
    intensity: np.ndarray | Sequence[float],
    peaks: Sequence[PeakRange] | pd.DataFrame,
    title: str = "Resolved peaks",
    min_rt: float | None = None,
    max_rt: float | None = None,
) -> go.Figure:
    """Create a chromatogram plot with one shaded band per resolved peak.

    Args:
        time: Retention times of the trace
        intensity: Intensity values of the trace
        peaks: Resolved peaks, as PeakRange objects or a resolved-peak DataFrame
        title: Figure title
        min_rt: Optional minimum retention time to highlight
        max_rt: Optional maximum retention time to highlight

    Returns:
        plotly.graph_objects.Figure
    """
    time = np.asarray(time, dtype=float)
    intensity = np.asarray(intensity, dtype=float)
    validate_trace(intensity, time)
    show_rt_range = validate_rt_range(min_rt, max_rt)

    if isinstance(peaks, pd.DataFrame):
        peaks = frame_to_peaks(peaks)

    fig = go.Figure()

    fig.add_trace(go.Scatter(x=time, y=intensity, name="Intensity", mode="lines"))

    for i, peak in enumerate(peaks):
        fig.add_vrect(
            x0=peak.start,
            x1=peak.end,
            fillcolor="orange",
            opacity=0.25,
            line_width=0,
            annotation_text=f"Peak {i + 1}",
            annotation_position="top left",
        )

    if show_rt_range:
        # we know min_rt and max_rt are not None if show_rt_range is True
        fig = _add_rt_range_indicators(fig, min_rt, max_rt)  # type: ignore

    fig.update_layout(
        title={"text": title, "x": 0.5, "xanchor": "center"},
        height=500,
        showlegend=True,
        xaxis_title="Retention time",
        yaxis_title="Intensity",
        plot_bgcolor="white",
    )

    return fig


def _add_rt_range_indicators(fig: go.Figure, min_rt: float, max_rt: float) -> go.Figure:
    """Add minimum and maximum retention time indicator lines to the figure."""
    fig.add_vline(
        x=min_rt, line_dash="dash", line_color="red", annotation_text=f"Min RT = {min_rt:.2f}"
    )
    fig.add_vline(
        x=max_rt, line_dash="dash", line_color="red", annotation_text=f"Max RT = {max_rt:.2f}"
    )

    return fig
