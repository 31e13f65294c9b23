from chromres.visualization.chromatogram import plot_resolved_peaks

__all__ = ["plot_resolved_peaks"]
