from chromres.models.resolved_peaks_model import ResolvedPeakTable
from chromres.models.trace_input_model import TraceInput

__all__ = ["ResolvedPeakTable", "TraceInput"]
