"""Scrolling plot model: curve data, automatic axis ranges and CSV export."""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from typing import Iterable, Union

_MIN_RANGE = 1e-280
_MAX_RANGE = 1e250
_ZOOM_OUT = 1.1
_PADDING = 0.1


def _valid(lower: float, upper: float) -> bool:
    span = abs(lower - upper)
    return lower > -_MAX_RANGE and upper < _MAX_RANGE and _MIN_RANGE < span < _MAX_RANGE


@dataclass(frozen=True)
class AxisRange:
    """Visible interval of an axis."""

    lower: float
    upper: float

    @property
    def size(self) -> float:
        return self.upper - self.lower

    @property
    def center(self) -> float:
        return (self.upper + self.lower) * 0.5

    def normalized(self) -> "AxisRange":
        if self.lower > self.upper:
            return AxisRange(self.upper, self.lower)
        return self

    def scaled(self, factor: float, center: float) -> "AxisRange":
        """Return the range stretched by factor around center."""
        return AxisRange(
            (self.lower - center) * factor + center,
            (self.upper - center) * factor + center,
        ).normalized()


def _set_range(current: AxisRange, lower: float, upper: float) -> AxisRange:
    if (lower, upper) == (current.lower, current.upper) or not _valid(lower, upper):
        return current
    return AxisRange(lower, upper).normalized()


def _scale_range(current: AxisRange, factor: float, center: float) -> AxisRange:
    scaled = current.scaled(factor, center)
    return scaled if _valid(scaled.lower, scaled.upper) else current


def _fit_range(current: AxisRange, values: Iterable[float]) -> AxisRange:
    values = list(values)
    if not values:
        return current
    lower, upper = min(values), max(values)
    if not _valid(lower, upper):
        center = (lower + upper) * 0.5
        half = current.size / 2.0
        lower, upper = center - half, center + half
    return _set_range(current, lower, upper)


def _number(value: float) -> str:
    return f"{value:.6g}"


class ScrollingPlot:
    """A value curve and a reference curve that scroll along a growing sample counter."""

    def __init__(self) -> None:
        self.curve: list[tuple[float, float]] = []
        self.reference_curve: list[tuple[float, float]] = []
        self.curve_name = ""
        self.reference_curve_name = ""
        self.curve_color = (250, 100, 55, 255)
        self.reference_curve_color = (55, 250, 100, 255)
        self.legend_visible = False
        self.axis_visible = False
        self.x_range = AxisRange(0.0, 5.0)
        self.y_range = AxisRange(0.0, 5.0)
        self.max_data_points = 1000000
        self.visible_data_points = 512
        self.custom_range = False
        self.custom_range_lower = 0.0
        self.custom_range_upper = 0.0
        self.auto_y_axis_scaling = False
        self.data_point_counter = 0

    def set_max_number_of_data_points(self, max_data_points: int) -> None:
        self.max_data_points = max_data_points

    def set_number_of_visible_data_points(self, visible_data_points: int) -> None:
        self.visible_data_points = visible_data_points

    def _advance(self) -> None:
        self.data_point_counter += 1
        if self.data_point_counter > self.max_data_points:
            self.clear()

    def _scroll_x(self) -> None:
        counter = self.data_point_counter
        self.x_range = _set_range(self.x_range, counter - self.visible_data_points, counter)

    def _rescale_axes(self) -> None:
        points = self.curve + self.reference_curve
        self.x_range = _fit_range(self.x_range, (key for key, _ in points))
        self.y_range = _fit_range(self.y_range, (value for _, value in points))

    def _zoom_out_slightly(self) -> None:
        self.y_range = _scale_range(self.y_range, _ZOOM_OUT, self.y_range.center)
        self.x_range = _scale_range(self.x_range, _ZOOM_OUT, self.x_range.center)

    def add_data_to_curve(self, value: float) -> None:
        """Append a value; the y axis fits the curve with 10 % padding on each side."""
        self._advance()
        self.curve.append((float(self.data_point_counter), float(value)))
        self._scroll_x()
        values = [v for _, v in self.curve]
        lower, upper = min(values), max(values)
        padding = (upper - lower) * _PADDING
        self.y_range = _set_range(self.y_range, lower - padding, upper + padding)

    def add_data_to_curves(self, value: float, reference_value: float) -> None:
        """Append a value to both curves and refit the axes to all data."""
        self._advance()
        key = float(self.data_point_counter)
        self.curve.append((key, float(value)))
        self.reference_curve.append((key, float(reference_value)))
        self._rescale_axes()
        self._scroll_x()
        self._zoom_out_slightly()

    def clear(self) -> None:
        self.curve.clear()
        self.reference_curve.clear()
        self.data_point_counter = 0

    def scale_y_axis(self, minimum: float, maximum: float) -> None:
        """Fix the y axis to a custom range, slightly widened."""
        self.custom_range = True
        self.custom_range_lower = minimum
        self.custom_range_upper = maximum
        self.y_range = _set_range(self.y_range, minimum, maximum)
        self._zoom_out_slightly()

    def reset_view(self) -> None:
        """Fit both axes to the data again, keeping a custom y range if one was set."""
        self._rescale_axes()
        self._zoom_out_slightly()
        if self.custom_range:
            self.scale_y_axis(self.custom_range_lower, self.custom_range_upper)
        self.auto_y_axis_scaling = True

    def save_curve_data_to_file(self, path: Union[str, PathLike]) -> bool:
        """Write the main curve as semicolon separated values; False if the file cannot be opened."""
        try:
            with open(path, "w", encoding="utf-8", newline="") as stream:
                stream.write("Sample Number;Sample Value\n")
                for key, value in self.curve:
                    stream.write(f"{_number(key)};{_number(value)}\n")
        except OSError:
            return False
        return True

    def save_all_curves_to_file(self, path: Union[str, PathLike]) -> bool:
        """Write both curves side by side, or only the main curve if their lengths differ."""
        if len(self.curve) != len(self.reference_curve):
            return self.save_curve_data_to_file(path)
        try:
            with open(path, "w", encoding="utf-8", newline="") as stream:
                stream.write(f"Sample Number;{self.curve_name};{self.reference_curve_name}\n")
                for (key, value), (_, reference) in zip(self.curve, self.reference_curve):
                    stream.write(f"{_number(key)};{_number(value)};{_number(reference)}\n")
        except OSError:
            return False
        return True