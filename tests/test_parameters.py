import numpy as np
import pytest

from signalmonitor.parameters import (
    BufferSource,
    ImageMetric,
    Rect,
    SignalMonitorParameters,
)


def test_defaults():
    params = SignalMonitorParameters()
    assert params.buffer_nr == -1
    assert params.buffer_source is BufferSource.PROCESSED
    assert params.frame_nr == 0
    assert params.image_metric is ImageMetric.AVERAGE
    assert params.nth_buffer_to_use == 10
    assert params.roi == Rect(50, 50, 400, 800)
    assert params.visible_samples == 256


def test_settings_round_trip():
    original = SignalMonitorParameters(
        buffer_source=BufferSource.RAW,
        image_metric=ImageMetric.COEFFVAR,
        roi=Rect(3, 4, 30, 40),
        frame_nr=5,
        buffer_nr=2,
        nth_buffer_to_use=7,
        window_state=b"\x01\x02geometry",
    )
    restored = SignalMonitorParameters()
    restored.apply_settings(original.to_settings())
    assert restored == original


def test_settings_keys():
    keys = set(SignalMonitorParameters().to_settings())
    assert keys == {
        "buffer_number",
        "image_source",
        "metric",
        "frame_number",
        "nth_buffer_to_use",
        "roi_x",
        "roi_y",
        "roi_width",
        "roi_height",
        "window_state",
    }


def test_empty_settings_leave_parameters_unchanged():
    params = SignalMonitorParameters(frame_nr=9, roi=Rect(1, 1, 2, 2))
    params.apply_settings({})
    assert params == SignalMonitorParameters(frame_nr=9, roi=Rect(1, 1, 2, 2))


def test_missing_keys_become_zero():
    params = SignalMonitorParameters()
    params.apply_settings({"frame_number": 4})
    assert params.frame_nr == 4
    assert params.buffer_nr == 0
    assert params.buffer_source is BufferSource.RAW
    assert params.image_metric is ImageMetric.SUM
    assert params.roi == Rect(0, 0, 0, 0)
    assert params.window_state == b""


def test_string_values_are_converted():
    params = SignalMonitorParameters()
    params.apply_settings({"frame_number": "7", "metric": "2", "nth_buffer_to_use": "x"})
    assert params.frame_nr == 7
    assert params.image_metric is ImageMetric.STDDEV
    assert params.nth_buffer_to_use == 0


def test_invalid_source_raises():
    params = SignalMonitorParameters()
    with pytest.raises(ValueError):
        params.apply_settings({"image_source": 5})


def test_rect_from_corners_keeps_inclusive_corners():
    rect = Rect.from_corners(1, 2, 3, 4)
    assert (rect.left, rect.top, rect.right, rect.bottom) == (1, 2, 3, 4)


def test_rect_contains_edges():
    rect = Rect(0, 0, 2, 3)
    assert rect.contains(0, 0)
    assert rect.contains(rect.right, rect.bottom)
    assert not rect.contains(rect.right + 1, 0)
    assert not rect.contains(0, rect.bottom + 1)
    assert not rect.contains(-1, 0)


def test_empty_rect_contains_nothing():
    rect = Rect(5, 5, 0, 10)
    assert not rect.contains(5, 5)


def test_rect_contains_arrays():
    rect = Rect(1, 1, 2, 2)
    xs = np.array([0, 1, 2, 3])
    ys = np.array([1, 1, 2, 2])
    assert rect.contains(xs, ys).tolist() == [False, True, True, False]