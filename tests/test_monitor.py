import pytest

from signalmonitor.metrics import ImageMetricCalculator
from signalmonitor.monitor import SignalMonitor
from signalmonitor.parameters import BufferSource, ImageMetric, Rect

BUFFER = bytes(range(24))  # 3 frames of 4 x 2 samples, 8 bit


def make_monitor(**callbacks):
    monitor = SignalMonitor(**callbacks)
    monitor.activate()
    monitor.nth_buffer = 1
    return monitor


def test_inactive_monitor_ignores_buffers():
    monitor = SignalMonitor()
    monitor.nth_buffer = 1
    monitor.processed_data_received(BUFFER, 8, 4, 2, 3, 1, 0)
    assert monitor.display.image is None
    assert monitor.current_value is None


def test_processed_frame_reaches_display_and_metric():
    monitor = make_monitor()
    monitor.frame_nr = 1
    monitor.processed_data_received(BUFFER, 8, 4, 2, 3, 1, 0)
    assert monitor.display.image.tolist() == [list(range(8, 12)), list(range(12, 16))]
    expected = ImageMetricCalculator().calculate(BUFFER[8:16], 8, 4, 2)
    assert monitor.current_value == expected
    assert monitor.plot.curve[-1][1] == expected


def test_frame_number_is_clamped():
    monitor = make_monitor()
    monitor.frame_nr = 10
    monitor.processed_data_received(BUFFER, 8, 4, 2, 3, 1, 0)
    assert monitor.frame_nr == 2
    assert monitor.display.image.tolist() == [list(range(16, 20)), list(range(20, 24))]


def test_only_every_nth_buffer_is_used():
    monitor = make_monitor()
    monitor.nth_buffer = 3
    monitor.processed_data_received(BUFFER, 8, 4, 2, 3, 1, 0)
    monitor.processed_data_received(BUFFER, 8, 4, 2, 3, 1, 0)
    assert monitor.plot.curve == []
    monitor.processed_data_received(BUFFER, 8, 4, 2, 3, 1, 0)
    assert len(monitor.plot.curve) == 1
    assert monitor.buffer_counter == 0


def test_raw_buffer_selection():
    monitor = make_monitor()
    monitor.buffer_source = BufferSource.RAW
    monitor.buffer_nr = 2
    monitor.raw_data_received(BUFFER, 8, 4, 2, 3, 4, 1)
    assert monitor.display.image is None
    monitor.raw_data_received(BUFFER, 8, 4, 2, 3, 4, 2)
    assert monitor.display.image.tolist() == [list(range(0, 4)), list(range(4, 8))]


def test_raw_buffers_ignored_when_processed_selected():
    monitor = make_monitor()
    monitor.raw_data_received(BUFFER, 8, 4, 2, 3, 1, 0)
    assert monitor.display.image is None


def test_maxima_reported_once():
    frames, buffers = [], []
    monitor = make_monitor(on_max_frames=frames.append, on_max_buffers=buffers.append)
    monitor.buffer_nr = -1
    monitor.processed_data_received(BUFFER, 8, 4, 2, 3, 5, 0)
    monitor.processed_data_received(BUFFER, 8, 4, 2, 3, 5, 1)
    assert frames == [2]
    assert buffers == [4]


def test_invalid_dimensions_report_error():
    errors = []
    monitor = make_monitor(on_error=errors.append)
    monitor.processed_data_received(BUFFER, 8, 0, 2, 3, 1, 0)
    assert errors == ["Signal Monitor:  Invalid data dimensions!"]
    assert monitor.is_calculating is False


def test_too_small_buffer_raises():
    monitor = make_monitor()
    monitor.frame_nr = 2
    with pytest.raises(ValueError):
        monitor.processed_data_received(bytes(10), 8, 4, 2, 3, 1, 0)
    assert monitor.is_calculating is False


def test_lost_buffers_are_counted():
    infos = []
    monitor = make_monitor(on_info=infos.append)
    monitor.processed_grabbing_allowed = False
    monitor.processed_data_received(BUFFER, 8, 4, 2, 3, 1, 0)
    monitor.processed_data_received(BUFFER, 8, 4, 2, 3, 1, 0)
    assert infos == [
        "Signal Monitor: Processed buffer lost. Total lost buffers: 1",
        "Signal Monitor: Processed buffer lost. Total lost buffers: 2",
    ]


def test_store_parameters_hands_over_settings():
    stored = []
    monitor = SignalMonitor(on_store_settings=lambda name, settings: stored.append((name, settings)))
    monitor.parameters.frame_nr = 7
    settings = monitor.store_parameters()
    assert stored == [("Signal Monitor", settings)]
    assert settings["frame_number"] == 7


def test_settings_loaded_syncs_state():
    monitor = SignalMonitor()
    monitor.plot.add_data_to_curve(1.0)
    source = SignalMonitor()
    source.parameters.buffer_nr = 1
    source.parameters.buffer_source = BufferSource.RAW
    source.parameters.image_metric = ImageMetric.STDDEV
    source.parameters.frame_nr = 3
    source.parameters.nth_buffer_to_use = 4
    monitor.settings_loaded(source.parameters.to_settings())
    assert monitor.buffer_nr == 1
    assert monitor.buffer_source == BufferSource.RAW
    assert monitor.calculator.metric == ImageMetric.STDDEV
    assert monitor.frame_nr == 3
    assert monitor.nth_buffer == 4
    assert monitor.plot.curve == []


def test_roi_change_updates_calculator_and_stores():
    infos, stored = [], []
    monitor = SignalMonitor(
        on_info=infos.append,
        on_store_settings=lambda name, settings: stored.append(settings),
    )
    monitor.display.roi_overlay.top_left_anchor.move_to(10, 20)
    roi = monitor.display.roi
    assert monitor.calculator.roi == roi
    assert monitor.parameters.roi == roi
    assert infos[-1] == f"ROI: {roi.x}, {roi.y}, {roi.width}, {roi.height}"
    assert stored[-1]["roi_x"] == 10


def test_settings_loaded_places_roi_overlay():
    monitor = SignalMonitor()
    monitor.settings_loaded({"roi_x": 5, "roi_y": 6, "roi_width": 100, "roi_height": 50})
    assert monitor.parameters.roi == Rect(5, 6, 100, 50)
    assert monitor.display.roi_overlay.top_left_anchor.pos == (5.0, 6.0)