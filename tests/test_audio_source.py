import numpy as np
import pytest

from beatvis.audio_source import LibrosaFrameSource
from beatvis.constants import FREQUENCY_BIN_COUNT, TIME_DOMAIN_SAMPLES

SR = 22050


def sine(freq, seconds=1.0, amplitude=0.8):
    t = np.arange(int(SR * seconds)) / SR
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


@pytest.fixture
def bass_source():
    return LibrosaFrameSource(sine(60), SR)


def test_duration(bass_source):
    assert bass_source.duration == pytest.approx(1.0)


def test_frequency_data_shape(bass_source):
    bass_source.seek(0.5)
    data = bass_source.get_frequency_data()
    assert data.dtype == np.uint8
    assert len(data) == FREQUENCY_BIN_COUNT


def test_bass_tone_lands_in_low_bins(bass_source):
    bass_source.seek(0.5)
    data = bass_source.get_frequency_data()
    assert data[:32].mean() > data[-128:].mean()
    assert data[:8].max() == 255


def test_silence_is_zero():
    source = LibrosaFrameSource(np.zeros(SR, dtype=np.float32), SR)
    source.seek(0.5)
    assert not source.get_frequency_data().any()
    assert (source.get_time_domain_data() == 128).all()


def test_time_domain_data_is_centred_bytes(bass_source):
    bass_source.seek(0.5)
    data = bass_source.get_time_domain_data()
    assert data.dtype == np.uint8
    assert len(data) == TIME_DOMAIN_SAMPLES
    assert data.min() < 128 < data.max()


def test_time_domain_data_is_padded_at_the_end(bass_source):
    bass_source.seek(bass_source.duration)
    data = bass_source.get_time_domain_data()
    assert len(data) == TIME_DOMAIN_SAMPLES
    assert (data[-100:] == 128).all()


def test_seek_is_clamped(bass_source):
    bass_source.seek(-3)
    assert bass_source.position == 0
    bass_source.seek(99)
    assert bass_source.position == pytest.approx(bass_source.duration)
    assert bass_source.get_frequency_data() is not None


def test_start_rewinds(bass_source):
    bass_source.seek(0.7)
    bass_source.start()
    assert bass_source.position == 0


def test_closed_source_has_no_buffers(bass_source):
    bass_source.close()
    assert bass_source.get_frequency_data() is None
    assert bass_source.get_time_domain_data() is None
