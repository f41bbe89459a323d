"""Statistics and scalar metrics over the region of interest of a frame."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

import numpy as np

from .bitdepth import _sample_view
from .parameters import ImageMetric, Rect

_MIN_START = 999999999.0
_MAX_BIT_DEPTH = 32


@dataclass
class ImageStatistics:
    """Statistics of the pixels inside a region of interest."""

    pixels: int = 0
    max: float = 0.0
    min: float = 0.0
    sum: float = 0.0
    average: float = 0.0
    std_deviation: float = 0.0
    coeff_of_variation: float = 0.0
    roi_x: int = 0
    roi_y: int = 0
    roi_width: int = 1024
    roi_height: int = 1024


def _divide(numerator: float, denominator: float) -> float:
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def standard_deviation(samples, mean: float) -> float:
    """Population standard deviation of samples around the given mean."""
    values = np.asarray(samples, dtype=np.float64).reshape(-1)
    if values.size == 0:
        return math.nan
    return float(np.sqrt(np.mean((values - mean) ** 2)))


def compute_statistics(frame, samples_per_line: int, lines_per_frame: int, roi: Rect) -> ImageStatistics:
    """Compute statistics of the frame samples whose position lies inside the ROI."""
    length = max(samples_per_line, 0) * max(lines_per_frame, 0)
    values = np.asarray(frame, dtype=np.float64).reshape(-1)
    if values.size < length:
        raise ValueError(f"Frame holds {values.size} samples, {length} needed")
    if length:
        index = np.arange(length)
        selected = values[:length][roi.contains(index % samples_per_line, index // samples_per_line)]
    else:
        selected = values[:0]

    pixels = int(selected.size)
    total = float(selected.sum())
    maximum = max(0.0, float(selected.max())) if pixels else 0.0
    minimum = min(_MIN_START, float(selected.min())) if pixels else _MIN_START
    average = _divide(total, pixels)
    deviation = standard_deviation(selected, average)
    return ImageStatistics(
        pixels=pixels,
        max=maximum,
        min=minimum,
        sum=total,
        average=average,
        std_deviation=deviation,
        coeff_of_variation=_divide(deviation, average),
        roi_x=roi.x,
        roi_y=roi.y,
        roi_width=roi.width,
        roi_height=roi.height,
    )


class ImageMetricCalculator:
    """Computes the selected metric for incoming frames."""

    def __init__(self, on_metric: Optional[Callable[[float], None]] = None) -> None:
        self.on_metric = on_metric
        self.stats = ImageStatistics()
        self.roi = Rect(0, 0, 1024, 1024)
        self.metric = ImageMetric.SUM

    def set_roi(self, roi: Rect) -> None:
        self.roi = roi

    def set_metric(self, metric: int) -> None:
        """Select a metric; unknown values fall back to the sum."""
        try:
            self.metric = ImageMetric(metric)
        except ValueError:
            self.metric = ImageMetric.SUM

    def calculate(
        self, frame: Any, bit_depth: int, samples_per_line: int, lines_per_frame: int
    ) -> Optional[float]:
        """Compute statistics of a raw frame and return the selected metric.

        Frames deeper than 32 bits are ignored and yield None.
        """
        if bit_depth > _MAX_BIT_DEPTH:
            return None
        length = max(samples_per_line, 0) * max(lines_per_frame, 0)
        samples = _sample_view(frame, bit_depth, length)
        self.stats = compute_statistics(samples, samples_per_line, lines_per_frame, self.roi)
        value = {
            ImageMetric.SUM: self.stats.sum,
            ImageMetric.AVERAGE: self.stats.average,
            ImageMetric.STDDEV: self.stats.std_deviation,
            ImageMetric.COEFFVAR: self.stats.coeff_of_variation,
        }[self.metric]
        if self.on_metric is not None:
            self.on_metric(value)
        return value