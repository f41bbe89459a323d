"""Movable overlay items held by anchor points, such as the rectangular region of interest."""

from __future__ import annotations

import abc
import logging
import math
from typing import Any, Callable, Mapping, Optional

from .parameters import Rect

logger = logging.getLogger(__name__)

_ANCHOR_RADIUS = 45.0


def _qround(value: float) -> int:
    return math.floor(value + 0.5)


def _rect_contains(rect: tuple[float, float, float, float], x: float, y: float) -> bool:
    """Tell whether a point lies in a (left, top, width, height) rectangle, edges included."""
    left, top, width, height = rect
    x_low, x_high = sorted((left, left + width))
    y_low, y_high = sorted((top, top + height))
    if x_low == x_high or y_low == y_high:
        return False
    return x_low <= x <= x_high and y_low <= y <= y_high


def _to_real(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class AnchorPoint:
    """Round handle whose position defines the shape of its parent overlay."""

    def __init__(self, parent: Optional["OverlayItem"] = None) -> None:
        self.parent = parent
        self.x = 0.0
        self.y = 0.0
        self.visible = True
        self.opacity = 0.01

    @property
    def pos(self) -> tuple[float, float]:
        return (self.x, self.y)

    def bounding_rect(self) -> tuple[float, float, float, float]:
        """Return (left, top, width, height) in the anchor's own coordinates."""
        return (-_ANCHOR_RADIUS, -_ANCHOR_RADIUS, 2 * _ANCHOR_RADIUS, 2 * _ANCHOR_RADIUS)

    def contains(self, x: float, y: float) -> bool:
        """Tell whether a point in the anchor's own coordinates lies on the handle."""
        return (x / _ANCHOR_RADIUS) ** 2 + (y / _ANCHOR_RADIUS) ** 2 <= 1.0

    def move_to(self, x: float, y: float) -> None:
        """Move the handle as a user drag would; a real move notifies the parent overlay."""
        moved = (float(x), float(y)) != self.pos
        self.x, self.y = float(x), float(y)
        if moved and isinstance(self.parent, OverlayItem):
            self.parent.on_anchor_point_position_changed()


class OverlayItem(abc.ABC):
    """Base of overlay items that can be moved, hidden, saved and restored."""

    def __init__(
        self,
        parent: Any = None,
        on_position_changed: Optional[Callable[["OverlayItem"], None]] = None,
        on_visibility_changed: Optional[Callable[["OverlayItem"], None]] = None,
    ) -> None:
        self.parent = parent
        self.on_position_changed = on_position_changed
        self.on_visibility_changed = on_visibility_changed
        self.name = ""
        self.x = 0.0
        self.y = 0.0
        self.visible = True
        self.anchor_points: list[AnchorPoint] = []

    @property
    def pos(self) -> tuple[float, float]:
        return (self.x, self.y)

    @abc.abstractmethod
    def bounding_rect(self) -> tuple[float, float, float, float]:
        """Return (left, top, width, height) of the area the item paints."""

    def add_anchor_point(self, anchor: AnchorPoint) -> None:
        self.anchor_points.append(anchor)

    def _emit_position_changed(self) -> None:
        if self.on_position_changed is not None:
            self.on_position_changed(self)

    def on_anchor_point_position_changed(self) -> None:
        self._emit_position_changed()

    def save_state(self) -> dict[str, Any]:
        """Return anchor positions, visibility and position as a plain mapping."""
        return {
            "anchors": [{"x": anchor.x, "y": anchor.y} for anchor in self.anchor_points],
            "isVisible": self.visible,
            "x_position": self.x,
            "y_position": self.y,
        }

    def load_state(self, state: Mapping[str, Any]) -> None:
        """Restore a saved state; a state with a wrong number of anchors is ignored."""
        anchors = state.get("anchors")
        if not isinstance(anchors, (list, tuple)) or not anchors:
            return
        if len(anchors) != len(self.anchor_points):
            logger.warning(
                "Number of anchor points does not match. Expected: %d, loaded: %d",
                len(self.anchor_points),
                len(anchors),
            )
            return
        for anchor, data in zip(self.anchor_points, anchors):
            data = data if isinstance(data, Mapping) else {}
            anchor.x = _to_real(data.get("x"))
            anchor.y = _to_real(data.get("y"))
        self.set_visible(bool(state.get("isVisible", False)))
        self.x = _to_real(state.get("x_position"))
        self.y = _to_real(state.get("y_position"))

    def is_click_on_anchor_point(self, x: float, y: float) -> bool:
        """Tell whether a point in item coordinates hits a visible anchor's bounds."""
        for anchor in self.anchor_points:
            left, top, width, height = anchor.bounding_rect()
            if anchor.visible and _rect_contains((left + anchor.x, top + anchor.y, width, height), x, y):
                return True
        return False

    def move_to(self, x: float, y: float) -> None:
        """Move the item as a user drag would; a real move is reported."""
        moved = (float(x), float(y)) != self.pos
        self.x, self.y = float(x), float(y)
        if moved:
            self._emit_position_changed()

    def set_visible(self, visible: bool) -> None:
        visible = bool(visible)
        if visible == self.visible:
            return
        self.visible = visible
        if self.on_visibility_changed is not None:
            self.on_visibility_changed(self)


class RectOverlay(OverlayItem):
    """Rectangle spanned by a top-left and a bottom-right anchor."""

    def __init__(
        self,
        parent: Any = None,
        on_position_changed: Optional[Callable[[OverlayItem], None]] = None,
        on_visibility_changed: Optional[Callable[[OverlayItem], None]] = None,
    ) -> None:
        super().__init__(parent, on_position_changed, on_visibility_changed)
        self.pen_width = 13.0
        self.top_left_anchor = AnchorPoint(self)
        self.top_left_anchor.x, self.top_left_anchor.y = 50.0, 50.0
        self.bottom_right_anchor = AnchorPoint(self)
        self.bottom_right_anchor.x, self.bottom_right_anchor.y = 800.0, 400.0
        self.add_anchor_point(self.top_left_anchor)
        self.add_anchor_point(self.bottom_right_anchor)

    def bounding_rect(self) -> tuple[float, float, float, float]:
        extra = self.pen_width / 2.0 + 0.5
        first, second = self.top_left_anchor, self.bottom_right_anchor
        min_x, max_x = sorted((first.x, second.x))
        min_y, max_y = sorted((first.y, second.y))
        return (
            min_x - extra,
            min_y - extra,
            max_x - min_x + self.pen_width + 1.0,
            max_y - min_y + self.pen_width + 1.0,
        )

    def set_rect(self, rect: Rect) -> None:
        """Place the anchors on the rectangle's inclusive corners."""
        first, second = self.anchor_points[0], self.anchor_points[1]
        first.x, first.y = float(rect.left), float(rect.top)
        second.x, second.y = float(rect.right), float(rect.bottom)

    def rect(self) -> Rect:
        """Integer rectangle between the anchors, in the coordinates of the overlay's parent."""
        x1 = self.x + self.top_left_anchor.x
        y1 = self.y + self.top_left_anchor.y
        x2 = self.x + self.bottom_right_anchor.x
        y2 = self.y + self.bottom_right_anchor.y
        return Rect.from_corners(_qround(x1), _qround(y1), _qround(x2) - 1, _qround(y2) - 1)