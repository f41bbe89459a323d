"""Signal monitor: grabs single frames from incoming buffers and tracks an image metric."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

import numpy as np

from .display import ImageDisplay
from .metrics import ImageMetricCalculator
from .parameters import BufferSource, ImageMetric, Rect, SignalMonitorParameters
from .plot import ScrollingPlot

NUMBER_OF_BUFFERS = 2
_INT_MAX = 2**31 - 1


@dataclass
class _FrameStore:
    buffers: list = field(default_factory=lambda: [None] * NUMBER_OF_BUFFERS)
    bytes_per_frame: int = 0


def _byte_view(buffer: Any) -> memoryview:
    if isinstance(buffer, np.ndarray):
        return memoryview(np.ascontiguousarray(buffer).view(np.uint8).reshape(-1))
    return memoryview(buffer).cast("B")


class SignalMonitor:
    """Picks every nth buffer of the selected stream, copies one frame and evaluates it."""

    name = "Signal Monitor"
    tool_tip = "OCT signal strength monitor"

    def __init__(
        self,
        on_info: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        on_store_settings: Optional[Callable[[str, dict], None]] = None,
        on_max_frames: Optional[Callable[[int], None]] = None,
        on_max_buffers: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.on_info = on_info
        self.on_error = on_error
        self.on_store_settings = on_store_settings
        self.on_max_frames = on_max_frames
        self.on_max_buffers = on_max_buffers

        self.parameters = SignalMonitorParameters()
        self.settings_map: dict[str, Any] = {}
        self.plot = ScrollingPlot()
        self.plot.curve_color = (55, 100, 250, 255)
        self.display = ImageDisplay(
            on_roi_changed=self._roi_changed, on_info=self._info, on_error=self._error
        )
        self.calculator = ImageMetricCalculator(on_metric=self._metric_calculated)
        self.current_value: Optional[float] = None

        self.active = False
        self.is_calculating = False
        self.raw_grabbing_allowed = True
        self.processed_grabbing_allowed = True
        self.buffer_source = BufferSource.PROCESSED
        self.frame_nr = 0
        self.buffer_nr = 0
        self.nth_buffer = 10
        self.buffer_counter = 0
        self.copy_buffer_id = -1
        self.raw_store = _FrameStore()
        self.processed_store = _FrameStore()
        self.lost_buffers_raw = 0
        self.lost_buffers_processed = 0
        self.frames_per_buffer = 0
        self.buffers_per_volume = 0

    def _info(self, message: str) -> None:
        if self.on_info is not None:
            self.on_info(message)

    def _error(self, message: str) -> None:
        if self.on_error is not None:
            self.on_error(message)

    def _metric_calculated(self, value: float) -> None:
        self.current_value = value
        self.plot.add_data_to_curve(value)

    def _roi_changed(self, rect: Rect) -> None:
        self.parameters.roi = rect
        self.calculator.set_roi(rect)
        self._info(f"ROI: {rect.x}, {rect.y}, {rect.width}, {rect.height}")
        self.store_parameters()

    def activate(self) -> None:
        self.active = True

    def deactivate(self) -> None:
        self.active = False

    def settings_loaded(self, settings: Mapping[str, Any]) -> None:
        """Apply stored settings to the parameters and everything driven by them."""
        self.parameters.apply_settings(settings)
        params = self.parameters
        self.plot.set_number_of_visible_data_points(params.visible_samples)
        self.buffer_nr = params.buffer_nr
        self.buffer_source = params.buffer_source
        if ImageMetric(params.image_metric) != self.calculator.metric:
            self.calculator.set_metric(int(params.image_metric))
            self.plot.clear()
        self.frame_nr = params.frame_nr
        self.nth_buffer = params.nth_buffer_to_use
        self.display.set_roi(params.roi)

    def store_parameters(self) -> dict[str, Any]:
        """Refresh the settings map from the parameters and hand it over for storage."""
        self.settings_map.update(self.parameters.to_settings())
        if self.on_store_settings is not None:
            self.on_store_settings(self.name, dict(self.settings_map))
        return self.settings_map

    def _is_nth_buffer(self) -> bool:
        self.buffer_counter += 1
        if self.buffer_counter < self.nth_buffer:
            return False
        self.buffer_counter = 0
        return True

    def _buffer_selected(self, buffers_per_volume: int, current_buffer_nr: int) -> bool:
        self.buffer_nr = min(self.buffer_nr, buffers_per_volume - 1)
        return self.buffer_nr == -1 or self.buffer_nr == current_buffer_nr

    def _update_maxima(self, frames_per_buffer: int, buffers_per_volume: int) -> None:
        if self.frames_per_buffer != frames_per_buffer:
            if self.on_max_frames is not None:
                self.on_max_frames(frames_per_buffer - 1)
            self.frames_per_buffer = frames_per_buffer
        if self.buffers_per_volume != buffers_per_volume:
            if self.on_max_buffers is not None:
                self.on_max_buffers(buffers_per_volume - 1)
            self.buffers_per_volume = buffers_per_volume

    def _grab(
        self,
        store: _FrameStore,
        buffer: Any,
        bit_depth: int,
        samples_per_line: int,
        lines_per_frame: int,
        frames_per_buffer: int,
        buffers_per_volume: int,
        select: Optional[int],
    ) -> None:
        """Copy the selected frame into the next copy buffer and pass it on."""
        self.is_calculating = True
        try:
            bytes_per_sample = math.ceil(bit_depth / 8.0)
            bytes_per_frame = samples_per_line * lines_per_frame * bytes_per_sample
            self._update_maxima(frames_per_buffer, buffers_per_volume)

            if store.buffers[0] is None or store.bytes_per_frame != bytes_per_frame:
                if 0 in (bit_depth, samples_per_line, lines_per_frame, frames_per_buffer):
                    self._error(f"{self.name}:  Invalid data dimensions!")
                    return
                store.buffers = [bytearray(bytes_per_frame) for _ in range(NUMBER_OF_BUFFERS)]
                store.bytes_per_frame = bytes_per_frame

            self.copy_buffer_id = (self.copy_buffer_id + 1) % NUMBER_OF_BUFFERS
            self.frame_nr = min(self.frame_nr, frames_per_buffer - 1)
            if select is not None and not self._buffer_selected(buffers_per_volume, select):
                return

            data = _byte_view(buffer)
            start = bytes_per_frame * self.frame_nr
            end = start + bytes_per_frame
            if start < 0 or end > len(data):
                raise ValueError(f"Buffer holds {len(data)} bytes, frame needs bytes {start} to {end}")
            target = store.buffers[self.copy_buffer_id]
            target[:] = data[start:end]
            self._emit_frame(target, bit_depth, samples_per_line, lines_per_frame)
        finally:
            self.is_calculating = False

    def _emit_frame(self, frame: bytearray, bit_depth: int, samples_per_line: int, lines_per_frame: int) -> None:
        self.display.receive_frame(frame, bit_depth, samples_per_line, lines_per_frame)
        self.calculator.calculate(frame, bit_depth, samples_per_line, lines_per_frame)

    def _lose_buffer(self, raw: bool) -> None:
        if raw:
            self.lost_buffers_raw += 1
            self._info(f"{self.name}: Raw buffer lost. Total lost raw buffers: {self.lost_buffers_raw}")
            if self.lost_buffers_raw >= _INT_MAX:
                self.lost_buffers_raw = 0
                self._info(f"{self.name}: Lost raw buffer counter overflow. Counter set to zero.")
        else:
            self.lost_buffers_processed += 1
            self._info(
                f"{self.name}: Processed buffer lost. Total lost buffers: {self.lost_buffers_processed}"
            )
            if self.lost_buffers_processed >= _INT_MAX:
                self.lost_buffers_processed = 0
                self._info(f"{self.name}: Lost processed buffer counter overflow. Counter set to zero.")

    def raw_data_received(
        self,
        buffer: Any,
        bit_depth: int,
        samples_per_line: int,
        lines_per_frame: int,
        frames_per_buffer: int,
        buffers_per_volume: int,
        current_buffer_nr: int,
    ) -> None:
        """Handle a raw buffer; counts it as lost if a frame is still being handled."""
        if self.buffer_source != BufferSource.RAW or not self.active:
            return
        if self.is_calculating or not self.raw_grabbing_allowed:
            self._lose_buffer(raw=True)
            return
        if not self._is_nth_buffer():
            return
        self._grab(
            self.raw_store, buffer, bit_depth, samples_per_line, lines_per_frame,
            frames_per_buffer, buffers_per_volume, current_buffer_nr,
        )

    def processed_data_received(
        self,
        buffer: Any,
        bit_depth: int,
        samples_per_line: int,
        lines_per_frame: int,
        frames_per_buffer: int,
        buffers_per_volume: int,
        current_buffer_nr: int,
    ) -> None:
        """Handle a processed buffer; unselected buffers are skipped before counting."""
        if self.buffer_source != BufferSource.PROCESSED or not self.active:
            return
        if self.is_calculating or not self.processed_grabbing_allowed:
            self._lose_buffer(raw=False)
            return
        if not self._buffer_selected(buffers_per_volume, current_buffer_nr):
            return
        if not self._is_nth_buffer():
            return
        self._grab(
            self.processed_store, buffer, bit_depth, samples_per_line, lines_per_frame,
            frames_per_buffer, buffers_per_volume, None,
        )