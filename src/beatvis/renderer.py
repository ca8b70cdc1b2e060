import logging
import time

import cv2
import numpy as np

from beatvis.canvas import CanvasSurface
from beatvis.frame_scheduler import (
    FrameScheduler,
    ManualFrameTimer,
    SchedulerState,
    VisualMode,
)

logger = logging.getLogger(__name__)

WINDOW_NAME = "beatvis"


class VisualiserRenderer:
    """
    Wires a canvas, a frame timer and the scheduler to one audio source.
    Frames are pulled either by MoviePy (`make_frame`) or by a live OpenCV window (`run_preview`).
    """

    def __init__(self, source, width, height, fps, config=None, mode=VisualMode.CENTER, seed=None):
        self.source = source
        self.fps = fps
        self.canvas = CanvasSurface(width, height)
        self.timer = ManualFrameTimer()
        self.scheduler = FrameScheduler(
            self.canvas,
            self.timer,
            config=config,
            rng=np.random.default_rng(seed),
            mode=mode,
        )
        self.scheduler.activate(source)

    def make_frame(self, t):
        """
        The callback function for MoviePy.
        Generates a single RGB video frame at time t.
        """
        self.source.seek(t)
        self.timer.fire(t * 1000)
        return self.canvas.to_rgb()

    def toggle_mode(self):
        if self.scheduler.visual_mode is VisualMode.CENTER:
            self.scheduler.set_visual_mode(VisualMode.WAVE)
        else:
            self.scheduler.set_visual_mode(VisualMode.CENTER)

    def run_preview(self, duration):
        """
        Show the animation in an OpenCV window in real time (no sound).
        'm' toggles the visual mode, 'q' or Esc quits.
        """
        logger.info("[+] Preview running. Press 'm' to switch mode, 'q' to quit.")
        frame_interval = 1 / self.fps
        started = time.perf_counter()

        try:
            while self.scheduler.state is SchedulerState.RUNNING:
                elapsed = time.perf_counter() - started
                if elapsed >= duration:
                    break

                self.source.seek(elapsed)
                self.timer.fire(elapsed * 1000)
                cv2.imshow(WINDOW_NAME, self.canvas.frame)

                # Sleep off whatever is left of this frame's budget
                frame_time = time.perf_counter() - started - elapsed
                key = cv2.waitKey(max(1, int((frame_interval - frame_time) * 1000))) & 0xFF
                if key in (ord("q"), 27):
                    break
                if key == ord("m"):
                    self.toggle_mode()
        finally:
            cv2.destroyAllWindows()

    def close(self):
        self.scheduler.deactivate()
