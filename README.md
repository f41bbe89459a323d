# signalmonitor

Monitor the signal strength of an OCT (optical coherence tomography) data
stream. Every n-th buffer arriving from the raw or the processed stream is
sampled. One frame of it is copied out and reduced to a single image metric
inside a region of interest (ROI). The value is appended to a scrolling
history.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `signalmonitor.parameters` holds the settings types:
  - `BufferSource` is `RAW` or `PROCESSED`.
  - `ImageMetric` is `SUM`, `AVERAGE`, `STDDEV` or `COEFFVAR`.
  - `Rect` is an integer rectangle whose right and bottom edges are inclusive. It has `contains`, which also works on numpy arrays, and `from_corners`.
  - `SignalMonitorParameters` converts to a flat settings mapping with `to_settings` and back with `apply_settings`. The mapping has keys such as `"buffer_number"`, `"metric"` and `"roi_x"`.
- `signalmonitor.bitdepth` scales frames down to 8 bit:
  - `to_8bit` scales 9–32 bit samples to 8 bit. Data of 8 bits or fewer is copied unchanged. Invalid dimensions or an unsupported bit depth raise `ValueError`.
  - `BitDepthConverter.convert` does the same. It passes the result to an `on_converted` callback and errors to an `on_error` callback.
- `signalmonitor.metrics` computes values over the ROI:
  - `compute_statistics` returns `ImageStatistics` for the pixels inside the ROI: pixel count, min, max, sum, average, standard deviation and coefficient of variation.
  - `standard_deviation` gives the population standard deviation.
  - `ImageMetricCalculator` keeps a ROI (`set_roi`) and a selected metric (`set_metric`). Its `calculate` returns the metric for a frame. Unknown metric values fall back to the sum. Frames deeper than 32 bits yield `None`.
- `signalmonitor.overlay` holds the overlay model:
  - `AnchorPoint` and `OverlayItem` are the building blocks.
  - `RectOverlay` is the draggable ROI rectangle. It provides `set_rect`, `rect`, `bounding_rect`, `move_to`, `set_visible`, `save_state` and `load_state`. Position and visibility changes are reported through callbacks.
- `signalmonitor.plot` holds `ScrollingPlot`:
  - It keeps a value curve and a reference curve against a growing sample counter, and clears itself after `max_data_points`.
  - It scrolls the x range over the last `visible_data_points` samples and fits the y range: `add_data_to_curve`, `add_data_to_curves`, `scale_y_axis`, `reset_view`, `clear`.
  - It writes curves as `;`-separated text files with `save_curve_data_to_file` and `save_all_curves_to_file`.
- `signalmonitor.display` holds `ImageDisplay`:
  - It receives frames of any bit depth with `receive_frame` and keeps the current 8-bit image as a numpy array.
  - It fits the zoom when the frame size changes. `zoom_in`, `zoom_out` and `scale_view` zoom within the range 0.07–100.
  - It carries the ROI overlay: `set_roi` places it, and `commit_roi` reports it.
- `signalmonitor.monitor` holds `SignalMonitor`, which ties the parts together:
  - `raw_data_received` and `processed_data_received` take whole buffers and pick the selected frame and buffer number.
  - The copied frame goes to the display and the metric calculator. The metric goes to the plot, and the latest one is kept in `current_value`.
  - Stored settings are applied with `settings_loaded` and written back with `store_parameters`.
  - Buffers that arrive while a frame is still being handled are counted as lost and reported through `on_info`.

## Examples

Computing a metric directly:

```python
import numpy as np
from signalmonitor.metrics import ImageMetricCalculator
from signalmonitor.parameters import ImageMetric, Rect

calculator = ImageMetricCalculator()
calculator.set_roi(Rect(0, 0, 4, 4))
calculator.set_metric(ImageMetric.AVERAGE)

frame = np.arange(64, dtype=np.uint16)
value = calculator.calculate(frame, 12, 8, 8)
print(value, calculator.stats.pixels)
```

Feeding buffers to the monitor:

```python
import numpy as np
from signalmonitor.monitor import SignalMonitor

monitor = SignalMonitor(on_info=print, on_error=print)
monitor.activate()

# two frames of 64 x 64 8-bit samples in one buffer, one buffer per volume
buffer = np.random.default_rng(0).integers(0, 256, 2 * 64 * 64, dtype=np.uint8)
for _ in range(10):  # by default every 10th buffer is used
    monitor.processed_data_received(buffer, 8, 64, 64, 2, 1, 0)

print(monitor.current_value, len(monitor.plot.curve))
```

## What this package does not do

There is no window, plot widget or image view. `ScrollingPlot` and
`ImageDisplay` are data models: they hold curves, axis ranges, the current
image, the zoom level and the ROI, but draw nothing and react to no mouse or
keyboard input. Plots can only be saved as text files, not as PNG or PDF.
`SignalMonitor` is driven by calling its methods. It does not attach itself to
an acquisition program and does not persist settings itself. Settings leave
through the `on_store_settings` callback and come back through
`settings_loaded`. There is no command-line entry point.