"""Frame display model: shows 8-bit frames, zooms and carries the region-of-interest overlay."""

from __future__ import annotations

from typing import Any, Callable, Optional

import numpy as np

from .bitdepth import BitDepthConverter, _sample_view
from .overlay import OverlayItem, RectOverlay
from .parameters import Rect

MIN_ZOOM = 0.07
MAX_ZOOM = 100.0
ZOOM_STEP = 1.2


class ImageDisplay:
    """Holds the latest frame as an 8-bit image, the view zoom and the ROI rectangle.

    The view is rotated by 90 degrees, so frame samples run vertically and
    frame lines horizontally.
    """

    def __init__(
        self,
        viewport_width: int = 512,
        viewport_height: int = 512,
        on_roi_changed: Optional[Callable[[Rect], None]] = None,
        on_info: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.on_roi_changed = on_roi_changed
        self.on_info = on_info
        self.on_error = on_error
        self.visible = True
        self.zoom = 1.0
        self.image: Optional[np.ndarray] = None
        self.frame_width = 0
        self.frame_height = 0
        self.current_roi = Rect()
        self.roi_overlay = RectOverlay(on_position_changed=self._overlay_moved)
        self.converter = BitDepthConverter(on_converted=self.display_frame, on_error=self._forward_error)

    @property
    def roi(self) -> Rect:
        return self.current_roi

    def _overlay_moved(self, _item: OverlayItem) -> None:
        self.commit_roi()

    def _forward_error(self, message: str) -> None:
        if self.on_error is not None:
            self.on_error(message)

    def _fit_in_view(self) -> None:
        self.zoom = min(
            self.viewport_width / self.frame_height,
            self.viewport_height / self.frame_width,
        )

    def receive_frame(
        self, frame: Any, bit_depth: int, samples_per_line: int, lines_per_frame: int
    ) -> Optional[np.ndarray]:
        """Show a frame of any bit depth; ignored while the display is hidden."""
        if not self.visible:
            return None
        if bit_depth != 8:
            if self.converter.convert(frame, bit_depth, samples_per_line, lines_per_frame) is None:
                return None
            return self.image
        return self.display_frame(frame, samples_per_line, lines_per_frame)

    def display_frame(self, frame: Any, samples_per_line: int, lines_per_frame: int) -> np.ndarray:
        """Show an 8-bit frame; a change of frame size refits the view."""
        if samples_per_line <= 0 or lines_per_frame <= 0:
            raise ValueError("Invalid data dimensions!")
        samples = _sample_view(frame, 8, samples_per_line * lines_per_frame)
        self.image = samples.reshape(lines_per_frame, samples_per_line).copy()
        if self.frame_width != samples_per_line or self.frame_height != lines_per_frame:
            self.frame_width = samples_per_line
            self.frame_height = lines_per_frame
            self._fit_in_view()
        return self.image

    def scale_view(self, factor: float) -> None:
        """Zoom by factor unless the result leaves the allowed zoom range."""
        scaled = self.zoom * factor
        if scaled < MIN_ZOOM or scaled > MAX_ZOOM:
            return
        self.zoom = scaled

    def zoom_in(self) -> None:
        self.scale_view(ZOOM_STEP)

    def zoom_out(self) -> None:
        self.scale_view(1 / ZOOM_STEP)

    def set_roi(self, roi: Rect) -> None:
        """Place the ROI overlay on a rectangle without reporting a change."""
        self.roi_overlay.set_rect(roi)

    def commit_roi(self) -> Rect:
        """Take the ROI from the overlay's current anchors and report it."""
        rect = self.roi_overlay.rect()
        self.current_roi = rect
        if self.on_roi_changed is not None:
            self.on_roi_changed(rect)
        return rect