import logging
from collections import deque
from typing import NamedTuple

from beatvis.constants import (
    DEFAULT_BEAT_SENSITIVITY,
    DEFAULT_HISTORY_SIZE,
    DEFAULT_MIN_BEAT_GAP_MS,
)

logger = logging.getLogger(__name__)

NEVER = float("-inf")


class BeatResult(NamedTuple):
    is_beat: bool
    strength: float


class BeatState:
    """Rolling bass-energy history and the time of the last confirmed beat."""

    def __init__(self, history_size):
        self.history = deque(maxlen=history_size)
        self.last_beat_time = NEVER


class BeatDetector:
    """
    Detects beats from bass energy using an adaptive threshold.

    The threshold follows the moving average of recent energy, so the detector works
    across quiet and loud passages. A refractory gap stops one sustained transient
    from firing several beats.
    """

    def __init__(
        self,
        sensitivity=DEFAULT_BEAT_SENSITIVITY,
        history_size=DEFAULT_HISTORY_SIZE,
        min_beat_gap_ms=DEFAULT_MIN_BEAT_GAP_MS,
    ):
        self.sensitivity = sensitivity
        self.history_size = history_size
        self.min_beat_gap_ms = min_beat_gap_ms
        self.state = BeatState(history_size)

    @classmethod
    def from_config(cls, config):
        return cls(
            sensitivity=config.beat_sensitivity,
            history_size=config.history_size,
            min_beat_gap_ms=config.min_beat_gap_ms,
        )

    @property
    def history(self):
        return tuple(self.state.history)

    def reset(self):
        self.state = BeatState(self.history_size)

    def detect(self, bass_energy, now):
        """
        Decide whether `bass_energy` at time `now` (ms) is a beat.
        Returns a BeatResult; strength is energy relative to the moving average, 0 when no beat.
        """
        state = self.state
        history = state.history

        # An empty history averages to the sample itself, so the first frame never fires
        avg = sum(history) / len(history) if history else bass_energy

        threshold = avg * self.sensitivity
        is_above = bass_energy > threshold
        enough_time_passed = now - state.last_beat_time > self.min_beat_gap_ms

        is_beat = False
        strength = 0.0

        if is_above and enough_time_passed:
            is_beat = True
            state.last_beat_time = now
            strength = bass_energy / avg if avg > 0 else 1.0
            logger.debug(f"Beat at {now:.0f}ms (energy={bass_energy:.1f}, strength={strength:.2f})")

        # The beat sample itself goes into the average too; deque evicts the oldest
        history.append(bass_energy)

        return BeatResult(is_beat, strength)
