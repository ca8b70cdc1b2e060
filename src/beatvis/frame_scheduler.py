import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import numpy as np

from beatvis.beat_detector import BeatDetector
from beatvis.config import VisualizerConfig
from beatvis.constants import BASS_BINS, BG_COLOR, BG_WASH_ALPHA
from beatvis.foreground import (
    draw_center_foreground,
    draw_wave_foreground,
    pulse_center,
)
from beatvis.particle_system import ParticleSystem

logger = logging.getLogger(__name__)


class VisualMode(Enum):
    CENTER = "center"
    WAVE = "wave"


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class FrameTimer(ABC):
    """Schedules the next frame callback, independent of any display loop."""

    @abstractmethod
    def schedule_next(self, callback):
        """Register `callback(now_ms)` to run on the next frame, replacing any pending one."""

    @abstractmethod
    def cancel(self):
        """Drop the pending callback, if any."""

    @abstractmethod
    def now_ms(self):
        """Current frame timestamp in milliseconds."""


class ManualFrameTimer(FrameTimer):
    """
    A frame timer fired explicitly by its owner.
    The renderer fires it once per video or preview frame; tests fire it with synthetic timestamps.
    """

    def __init__(self, start_ms=0.0):
        self._now = start_ms
        self._pending = None

    @property
    def pending(self):
        return self._pending is not None

    def schedule_next(self, callback):
        self._pending = callback

    def cancel(self):
        self._pending = None

    def now_ms(self):
        return self._now

    def fire(self, now_ms):
        """Run the pending callback at `now_ms`. Returns False when nothing was scheduled."""
        self._now = now_ms
        callback, self._pending = self._pending, None
        if callback is None:
            return False
        callback(now_ms)
        return True


def bass_energy(freq_data):
    """Mean magnitude of the lowest frequency bins."""
    bins = min(BASS_BINS, len(freq_data))
    return float(np.mean(freq_data[:bins], dtype=np.float64))


@dataclass
class AnimationContext:
    """All mutable animation state for one active audio source."""

    source: object
    config: VisualizerConfig
    beat_detector: BeatDetector
    particle_system: ParticleSystem
    last_frame_ms: float


class FrameScheduler:
    """
    Drives the per-frame cadence: acquire samples, detect a beat, spawn, update and draw.

    Idle until a source is activated; Running while one frame is pending. Activating a new
    source always cancels the pending frame and releases the previous source before any
    state is reset.
    """

    def __init__(self, canvas, timer, config=None, rng=None, mode=VisualMode.CENTER):
        self.canvas = canvas
        self.timer = timer
        self.config = config if config is not None else VisualizerConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.state = SchedulerState.IDLE
        self.context = None
        self._mode = VisualMode(mode)

    @property
    def visual_mode(self):
        return self._mode

    def set_visual_mode(self, mode):
        """Takes effect on the next frame. Existing particles are left alone."""
        self._mode = VisualMode(mode)
        logger.info(f"[i] Visual mode: {self._mode.value}")

    @property
    def particle_system(self):
        return self.context.particle_system if self.context is not None else None

    @property
    def beat_detector(self):
        return self.context.beat_detector if self.context is not None else None

    def activate(self, source, config=None):
        """Start animating `source`, tearing down whatever was running before."""
        # Validate first so a bad config leaves the running animation untouched
        config = config if config is not None else self.config
        if not isinstance(config, VisualizerConfig):
            config = VisualizerConfig.from_dict(config)

        self.timer.cancel()
        self._release_source()
        self.config = config

        self.context = AnimationContext(
            source=source,
            config=config,
            beat_detector=BeatDetector.from_config(config),
            particle_system=ParticleSystem.from_config(config, rng=self.rng),
            last_frame_ms=self.timer.now_ms(),
        )

        try:
            source.start()
        except Exception as e:
            # Playback may be refused; frames only need readable samples
            logger.debug(f"Audio source did not start playback: {e}")

        if not self.canvas.is_ready or source.get_frequency_data() is None:
            logger.debug("Canvas or sample buffers not ready, not scheduling frames")
            self.state = SchedulerState.IDLE
            return

        self.state = SchedulerState.RUNNING
        self.timer.schedule_next(self._on_frame)

    def deactivate(self):
        self.timer.cancel()
        self._release_source()
        self.context = None
        self.state = SchedulerState.IDLE

    def _release_source(self):
        if self.context is None or self.context.source is None:
            return
        source, self.context.source = self.context.source, None
        try:
            source.close()
        except Exception as e:
            logger.warning(f"[!] Error closing audio source: {e}")

    def _on_frame(self, now_ms):
        # One mode snapshot for the whole frame
        mode = self._mode
        ctx = self.context
        if ctx is None or ctx.source is None or not self.canvas.is_ready:
            self.state = SchedulerState.IDLE
            return

        delta_ms = max(now_ms - ctx.last_frame_ms, 0.0)
        ctx.last_frame_ms = now_ms

        freq_data = ctx.source.get_frequency_data()
        time_data = ctx.source.get_time_domain_data()
        if freq_data is None or time_data is None or len(freq_data) == 0:
            logger.debug("Sample buffers unavailable, stopping frame loop")
            self.state = SchedulerState.IDLE
            return

        self.render_frame(ctx, mode, freq_data, time_data, delta_ms, now_ms)
        self.timer.schedule_next(self._on_frame)

    def render_frame(self, ctx, mode, freq_data, time_data, delta_ms, now_ms):
        canvas = self.canvas

        # Translucent wash rather than a clear, so particles leave trails
        canvas.wash(BG_COLOR, BG_WASH_ALPHA)

        beat = ctx.beat_detector.detect(bass_energy(freq_data), now_ms)

        if mode is VisualMode.CENTER:
            draw_center_foreground(canvas, beat, freq_data)
            if beat.is_beat:
                cx, cy = pulse_center(canvas.width, canvas.height)
                ctx.particle_system.spawn_center(cx, cy, beat.strength)
        elif mode is VisualMode.WAVE:
            draw_wave_foreground(canvas, time_data)
            if beat.is_beat:
                ctx.particle_system.spawn_wave(time_data, beat.strength, canvas.width, canvas.height)

        # Particles from either mode keep ageing
        ctx.particle_system.update_and_draw(canvas, delta_ms)
        return beat
