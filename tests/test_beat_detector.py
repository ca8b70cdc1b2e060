import pytest

from beatvis.beat_detector import NEVER, BeatDetector
from beatvis.config import VisualizerConfig


def test_first_sample_never_triggers():
    detector = BeatDetector()
    result = detector.detect(100, 0)
    assert result.is_beat is False
    assert result.strength == 0
    assert detector.history == (100,)


def test_first_sample_triggers_only_with_sensitivity_below_one():
    detector = BeatDetector(sensitivity=0.5)
    assert detector.detect(100, 0).is_beat is True


def test_threshold_arithmetic():
    detector = BeatDetector(sensitivity=1.4, history_size=60, min_beat_gap_ms=150)
    detector.state.history.extend([40, 60])

    result = detector.detect(80, 1000)

    assert result.is_beat is True
    assert result.strength == pytest.approx(1.6)
    assert detector.state.last_beat_time == 1000


def test_below_threshold_is_not_a_beat():
    detector = BeatDetector(sensitivity=1.4)
    detector.state.history.extend([40, 60])
    # 70 is exactly the threshold, not above it
    assert detector.detect(70, 1000) == (False, 0.0)


def test_refractory_period():
    detector = BeatDetector(sensitivity=1.4, min_beat_gap_ms=150)
    detector.state.history.extend([10] * 10)

    assert detector.detect(100, 1000).is_beat is True
    assert detector.detect(1000, 1100).is_beat is False
    assert detector.detect(1000, 1150).is_beat is False
    assert detector.detect(10000, 1151).is_beat is True


def test_history_is_bounded_and_keeps_latest_values():
    detector = BeatDetector(history_size=5)
    for i in range(1, 13):
        detector.detect(float(i), i * 10)
        assert len(detector.history) <= 5

    assert detector.history == (8.0, 9.0, 10.0, 11.0, 12.0)


def test_history_includes_beat_samples():
    detector = BeatDetector(sensitivity=1.4)
    detector.state.history.extend([10, 10])
    detector.detect(50, 1000)
    assert detector.history[-1] == 50


def test_zero_average_gives_unit_strength():
    detector = BeatDetector(sensitivity=1.4)
    detector.state.history.extend([0, 0])
    result = detector.detect(5, 1000)
    assert result.is_beat is True
    assert result.strength == 1.0


def test_reset_clears_state():
    detector = BeatDetector(sensitivity=1.4)
    detector.state.history.extend([10, 10])
    detector.detect(50, 1000)

    detector.reset()

    assert detector.history == ()
    assert detector.state.last_beat_time == NEVER


def test_from_config():
    config = VisualizerConfig(beat_sensitivity=2.0, history_size=8, min_beat_gap_ms=300)
    detector = BeatDetector.from_config(config)
    assert detector.sensitivity == 2.0
    assert detector.state.history.maxlen == 8
    assert detector.min_beat_gap_ms == 300
