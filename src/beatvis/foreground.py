"""
Mode-specific foreground drawing.
Each routine paints straight onto the canvas; none of them keeps state.
"""

from beatvis.constants import (
    PULSE_COLOR_BEAT,
    PULSE_COLOR_IDLE,
    SPECTRUM_COLOR,
    WAVEFORM_COLOR,
)


def pulse_center(width, height):
    """Origin of the pulse ring and of center bursts, slightly below the middle."""
    return width / 2, height / 2 + height * 0.1


def pulse_radius(beat):
    return 40 + (20 * beat.strength if beat.is_beat else 10)


def draw_pulse(canvas, beat):
    """Ring that grows with the beat strength."""
    if beat.is_beat:
        canvas.stroke_circle(pulse_center(canvas.width, canvas.height), pulse_radius(beat), PULSE_COLOR_BEAT, 0.9, 3)
    else:
        canvas.stroke_circle(pulse_center(canvas.width, canvas.height), pulse_radius(beat), PULSE_COLOR_IDLE, 0.6, 2)


def spectrum_bars(freq_data, width, height):
    """Bar rectangles (x, y, w, h) for the spectrum strip across the top of the canvas."""
    n = len(freq_data)
    if n == 0:
        return []

    bar_width = (width / n) * 1.5
    strip_height = height * 0.25
    top = height * 0.05

    rects = []
    x = 0.0
    for value in freq_data:
        if x >= width:
            break
        bar_height = (value / 255) * strip_height
        if bar_height > 0:
            rects.append((x, top + (strip_height - bar_height), bar_width, bar_height))
        x += bar_width + 1
    return rects


def draw_spectrum(canvas, freq_data):
    canvas.fill_rects(spectrum_bars(freq_data, canvas.width, canvas.height), SPECTRUM_COLOR, 0.7)


def waveform_points(time_data, width, height):
    n = len(time_data)
    if n < 2:
        return []

    mid_y = height * 0.5
    amplitude = height * 0.25
    points = []
    for i, sample in enumerate(time_data):
        t = i / (n - 1)
        points.append((t * width, mid_y + (sample / 255 - 0.5) * 2 * amplitude))
    return points


def draw_waveform(canvas, time_data):
    canvas.polyline(waveform_points(time_data, canvas.width, canvas.height), WAVEFORM_COLOR, 0.9, 2)


def draw_center_foreground(canvas, beat, freq_data):
    draw_pulse(canvas, beat)
    draw_spectrum(canvas, freq_data)


def draw_wave_foreground(canvas, time_data):
    draw_waveform(canvas, time_data)
