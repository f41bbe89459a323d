"""Signal strength monitoring for OCT frame streams: frame grabbing, ROI metrics, plot and display models."""

__version__ = "0.1.0"

__all__ = ["bitdepth", "display", "metrics", "monitor", "overlay", "parameters", "plot"]