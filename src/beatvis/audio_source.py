import logging
from abc import ABC, abstractmethod

import librosa
import numpy as np

from beatvis.constants import (
    FFT_SIZE,
    FREQUENCY_BIN_COUNT,
    HOP_LENGTH,
    MAX_DECIBELS,
    MIN_DECIBELS,
    SMOOTHING_TIME_CONSTANT,
    TIME_DOMAIN_SAMPLES,
)

logger = logging.getLogger(__name__)


class AudioFrameSource(ABC):
    """
    Produces the frequency and time-domain byte arrays for the current playback position.
    Both getters return None once the source has been closed.
    """

    @abstractmethod
    def get_frequency_data(self):
        """Byte magnitudes (0-255), one per frequency bin."""

    @abstractmethod
    def get_time_domain_data(self):
        """Byte waveform samples (0-255) centred at 128."""

    def start(self):
        """Begin playback. May fail; callers carry on regardless."""

    def close(self):
        """Release any audio processing resources."""


class LibrosaFrameSource(AudioFrameSource):
    """
    Loads an audio file with librosa and serves analyser-style byte frames.
    The frequency data is precomputed for the whole track; the position is set with `seek`.
    """

    def __init__(self, y, sr):
        self.y = y
        self.sr = sr
        self.duration = librosa.get_duration(y=y, sr=sr)
        self.position = 0.0

        self._calculate_frequency_frames()

    @classmethod
    def load(cls, filepath):
        logger.info(f"[+] Loading audio: {filepath}...")
        # Load audio with original sampling rate
        y, sr = librosa.load(filepath, sr=None)
        logger.info("[+] Analyzing audio frequencies...")
        return cls(y, sr)

    def _calculate_frequency_frames(self):
        """
        Compute smoothed byte magnitudes the way a browser AnalyserNode reports them:
        Blackman window, magnitudes scaled by 1/N, exponential smoothing over time,
        then decibels mapped linearly onto 0-255.
        """
        stft = librosa.stft(self.y, n_fft=FFT_SIZE, hop_length=HOP_LENGTH, window="blackman")
        # Drop the Nyquist bin to match the analyser's bin count
        magnitude = np.abs(stft[:FREQUENCY_BIN_COUNT]) / FFT_SIZE

        smoothed = np.empty_like(magnitude)
        previous = np.zeros(magnitude.shape[0], dtype=magnitude.dtype)
        for i in range(magnitude.shape[1]):
            previous = SMOOTHING_TIME_CONSTANT * previous + (1 - SMOOTHING_TIME_CONSTANT) * magnitude[:, i]
            smoothed[:, i] = previous

        db = librosa.amplitude_to_db(smoothed, ref=1.0, amin=1e-10, top_db=None)
        scaled = (db - MIN_DECIBELS) * (255 / (MAX_DECIBELS - MIN_DECIBELS))

        # One row per frame for cheap lookups
        self.frequency_frames = np.ascontiguousarray(np.clip(scaled, 0, 255).astype(np.uint8).T)

    def seek(self, t):
        """Set the playback position in seconds."""
        self.position = min(max(t, 0.0), self.duration)

    def start(self):
        self.position = 0.0

    def close(self):
        self.y = None
        self.frequency_frames = None

    def get_frequency_data(self):
        if self.frequency_frames is None or len(self.frequency_frames) == 0:
            return None

        # Convert time to frame index
        frame_index = int(librosa.time_to_frames(self.position, sr=self.sr, hop_length=HOP_LENGTH))

        # Boundary checks
        frame_index = min(max(frame_index, 0), len(self.frequency_frames) - 1)
        return self.frequency_frames[frame_index]

    def get_time_domain_data(self):
        """A window of the waveform around the current position, as bytes."""
        if self.y is None:
            return None

        # Calculate sample index
        sample_index = int(self.position * self.sr)

        # Get window of samples around this point
        half_window = TIME_DOMAIN_SAMPLES // 2
        start = max(0, sample_index - half_window)
        end = min(len(self.y), sample_index + half_window)
        waveform_slice = self.y[start:end]

        # Pad if needed
        if len(waveform_slice) < TIME_DOMAIN_SAMPLES:
            waveform_slice = np.pad(waveform_slice, (0, TIME_DOMAIN_SAMPLES - len(waveform_slice)))

        samples = np.floor(128 * (1 + waveform_slice[:TIME_DOMAIN_SAMPLES]))
        return np.clip(samples, 0, 255).astype(np.uint8)
