"""Signal monitor settings: buffer source, image metric, region of interest and stored parameters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping

SAMPLES_IN_PLOT = "visible_samples"
SOURCE = "image_source"
METRIC = "metric"
FRAME = "frame_number"
BUFFER = "buffer_number"
NTH_BUFFER = "nth_buffer_to_use"
ROI_X = "roi_x"
ROI_Y = "roi_y"
ROI_WIDTH = "roi_width"
ROI_HEIGHT = "roi_height"
WINDOW_STATE = "window_state"


class BufferSource(IntEnum):
    """Which data stream frames are taken from."""

    RAW = 0
    PROCESSED = 1


class ImageMetric(IntEnum):
    """Scalar metric computed over the region of interest."""

    SUM = 0
    AVERAGE = 1
    STDDEV = 2
    COEFFVAR = 3


def _span(first: int, last: int) -> tuple[int, int]:
    if last < first - 1:
        return last, first
    return first, last


@dataclass(frozen=True)
class Rect:
    """Integer rectangle whose right and bottom edges are inclusive."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def left(self) -> int:
        return self.x

    @property
    def top(self) -> int:
        return self.y

    @property
    def right(self) -> int:
        return self.x + self.width - 1

    @property
    def bottom(self) -> int:
        return self.y + self.height - 1

    @classmethod
    def from_corners(cls, left: int, top: int, right: int, bottom: int) -> "Rect":
        """Build a rectangle from its inclusive top-left and bottom-right corners."""
        return cls(left, top, right - left + 1, bottom - top + 1)

    def contains(self, x, y):
        """Tell whether a point lies inside; accepts scalars or numpy arrays."""
        left, right = _span(self.left, self.right)
        top, bottom = _span(self.top, self.bottom)
        return (x >= left) & (x <= right) & (y >= top) & (y <= bottom)


def _to_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, float):
        return int(round(value))
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    return b""


@dataclass
class SignalMonitorParameters:
    """User-adjustable parameters of the signal monitor."""

    buffer_source: BufferSource = BufferSource.PROCESSED
    image_metric: ImageMetric = ImageMetric.AVERAGE
    roi: Rect = Rect(50, 50, 400, 800)
    frame_nr: int = 0
    buffer_nr: int = -1
    nth_buffer_to_use: int = 10
    visible_samples: int = 256
    window_state: bytes = b""

    def apply_settings(self, settings: Mapping[str, Any]) -> None:
        """Update from stored settings; an empty mapping leaves everything as is."""
        if not settings:
            return
        self.buffer_nr = _to_int(settings.get(BUFFER))
        self.buffer_source = BufferSource(_to_int(settings.get(SOURCE)))
        self.image_metric = ImageMetric(_to_int(settings.get(METRIC)))
        self.frame_nr = _to_int(settings.get(FRAME))
        self.nth_buffer_to_use = _to_int(settings.get(NTH_BUFFER))
        self.roi = Rect(
            _to_int(settings.get(ROI_X)),
            _to_int(settings.get(ROI_Y)),
            _to_int(settings.get(ROI_WIDTH)),
            _to_int(settings.get(ROI_HEIGHT)),
        )
        self.window_state = _to_bytes(settings.get(WINDOW_STATE))

    def to_settings(self) -> dict[str, Any]:
        """Return the parameters as a settings mapping for storage."""
        return {
            BUFFER: self.buffer_nr,
            SOURCE: int(self.buffer_source),
            METRIC: int(self.image_metric),
            FRAME: self.frame_nr,
            NTH_BUFFER: self.nth_buffer_to_use,
            ROI_X: self.roi.x,
            ROI_Y: self.roi.y,
            ROI_WIDTH: self.roi.width,
            ROI_HEIGHT: self.roi.height,
            WINDOW_STATE: self.window_state,
        }