"""Conversion of frames of any supported bit depth to 8-bit grayscale."""

from __future__ import annotations

from typing import Any, Callable, Optional

import numpy as np

_SAMPLE_TYPES = ((8, np.uint8), (16, np.uint16), (32, np.uint32))


def _sample_dtype(bit_depth: int) -> np.dtype:
    for limit, dtype in _SAMPLE_TYPES:
        if bit_depth <= limit:
            return np.dtype(dtype)
    raise ValueError(f"Unsupported bit depth: {bit_depth}")


def _sample_view(data: Any, bit_depth: int, length: int) -> np.ndarray:
    """Interpret raw frame data as `length` samples of the type the bit depth needs."""
    dtype = _sample_dtype(bit_depth)
    if isinstance(data, np.ndarray):
        raw = np.ascontiguousarray(data).view(np.uint8).reshape(-1)
    else:
        raw = np.frombuffer(data, dtype=np.uint8)
    needed = length * dtype.itemsize
    if raw.size < needed:
        raise ValueError(f"Frame holds {raw.size} bytes, {needed} needed")
    return raw[:needed].view(dtype)


def to_8bit(data: Any, bit_depth: int, samples_per_line: int, lines_per_frame: int) -> np.ndarray:
    """Scale a frame to 8 bits per sample; data of 8 bits or fewer is copied unchanged."""
    if bit_depth <= 0 or samples_per_line <= 0 or lines_per_frame <= 0:
        raise ValueError("Invalid data dimensions!")
    samples = _sample_view(data, bit_depth, samples_per_line * lines_per_frame)
    if bit_depth <= 8:
        return samples.copy()
    factor = np.float32(255.0 / (2.0**bit_depth - 1))
    scaled = samples.astype(np.float32) * factor
    return np.clip(scaled, 0, 255).astype(np.uint8)


class BitDepthConverter:
    """Converts frames to 8 bits and hands the result to a listener."""

    def __init__(
        self,
        on_converted: Optional[Callable[[np.ndarray, int, int], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.on_converted = on_converted
        self.on_error = on_error
        self.output: Optional[np.ndarray] = None

    def convert(
        self, data: Any, bit_depth: int, samples_per_line: int, lines_per_frame: int
    ) -> Optional[np.ndarray]:
        """Convert a frame; errors go to `on_error` if set, otherwise they are raised."""
        try:
            converted = to_8bit(data, bit_depth, samples_per_line, lines_per_frame)
        except ValueError as exc:
            if self.on_error is None:
                raise
            self.on_error(f"BitDepthConverter: {exc}")
            return None
        self.output = converted
        if self.on_converted is not None:
            self.on_converted(converted, samples_per_line, lines_per_frame)
        return converted