import numpy as np

from beatvis.beat_detector import BeatResult
from beatvis.canvas import CanvasSurface
from beatvis.foreground import (
    draw_center_foreground,
    draw_wave_foreground,
    pulse_center,
    pulse_radius,
    spectrum_bars,
    waveform_points,
)


def test_new_canvas_is_background():
    canvas = CanvasSurface(64, 32, bg_color=(1, 2, 3))
    assert canvas.frame.shape == (32, 64, 3)
    assert (canvas.frame == (1, 2, 3)).all()
    assert canvas.is_ready


def test_empty_canvas_is_not_ready():
    canvas = CanvasSurface(0, 100)
    assert not canvas.is_ready
    assert canvas.width == 0


def test_wash_fades_towards_color():
    canvas = CanvasSurface(8, 8, bg_color=(200, 200, 200))
    canvas.wash((0, 0, 0), 0.5)
    assert (canvas.frame == 100).all()


def test_fill_circle_blends_only_nearby_pixels():
    canvas = CanvasSurface(100, 100, bg_color=(0, 0, 0))
    canvas.fill_circle((50, 50), 5, (0, 0, 200), 0.5)
    assert canvas.frame[50, 50, 2] == 100
    assert not canvas.frame[:30].any()


def test_circle_outside_canvas_is_ignored():
    canvas = CanvasSurface(100, 100, bg_color=(0, 0, 0))
    canvas.fill_circle((-40, -40), 3, (255, 255, 255), 1.0)
    assert not canvas.frame.any()


def test_fill_rects():
    canvas = CanvasSurface(20, 20, bg_color=(0, 0, 0))
    canvas.fill_rects([(2, 2, 4, 4)], (255, 255, 255), 1.0)
    assert (canvas.frame[2:6, 2:6] == 255).all()
    assert not canvas.frame[7:].any()


def test_to_rgb_swaps_channels():
    canvas = CanvasSurface(4, 4, bg_color=(10, 20, 30))
    assert tuple(canvas.to_rgb()[0, 0]) == (30, 20, 10)


def test_pulse_geometry():
    assert pulse_center(640, 360) == (320, 216)
    assert pulse_radius(BeatResult(False, 0.0)) == 50
    assert pulse_radius(BeatResult(True, 2.0)) == 80


def test_spectrum_bars_stop_at_canvas_edge():
    freq = np.full(512, 255, dtype=np.uint8)
    bars = spectrum_bars(freq, 640, 360)
    assert 0 < len(bars) < 512
    assert all(x < 640 for x, _, _, _ in bars)
    x, y, w, h = bars[0]
    assert (x, y, h) == (0, 360 * 0.05, 90)
    assert w == 640 / 512 * 1.5


def test_silent_bins_have_no_bars():
    assert spectrum_bars(np.zeros(512, dtype=np.uint8), 640, 360) == []


def test_waveform_points_span_width():
    points = waveform_points(np.array([0, 128, 255], dtype=np.uint8), 100, 200)
    assert points[0] == (0, 50)
    assert points[-1] == (100, 150)


def test_foregrounds_draw():
    canvas = CanvasSurface(320, 180, bg_color=(0, 0, 0))
    draw_center_foreground(canvas, BeatResult(True, 1.5), np.full(256, 200, dtype=np.uint8))
    assert canvas.frame.any()

    canvas.clear()
    draw_wave_foreground(canvas, (np.sin(np.linspace(0, 6, 512)) * 100 + 128).astype(np.uint8))
    assert canvas.frame.any()
