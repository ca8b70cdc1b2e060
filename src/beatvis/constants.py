# --- Configuration Constants ---
DEFAULT_FPS = 60  # physics is tuned per frame at a nominal 60 Hz
DEFAULT_RESOLUTION = (960, 360)

# Visualiser config defaults (used when no config source is available)
DEFAULT_BEAT_SENSITIVITY = 1.4
DEFAULT_HISTORY_SIZE = 60
DEFAULT_MIN_BEAT_GAP_MS = 150
DEFAULT_PARTICLE_BURST_COUNT = 50
DEFAULT_PARTICLE_MAX_LIFE = 1200  # milliseconds
CONFIG_TIMEOUT = 5  # seconds

# Analyser settings (mirrors a browser AnalyserNode)
FFT_SIZE = 1024
FREQUENCY_BIN_COUNT = FFT_SIZE // 2
HOP_LENGTH = 512
MIN_DECIBELS = -100
MAX_DECIBELS = -30
SMOOTHING_TIME_CONSTANT = 0.8
TIME_DOMAIN_SAMPLES = 512

# Beat detection
BASS_BINS = 32

# Particle system settings
WAVE_STEPS = 40
WAVE_BURST_FACTOR = 0.7
MAX_STRENGTH = 3
PARTICLE_MARGIN = 50  # pixels outside the canvas before a particle is culled
PARTICLE_DRAG = 0.99
PARTICLE_GRAVITY = 0.01
NOMINAL_FRAME_MS = 16.67

# Colors (BGR format for OpenCV)
BG_COLOR = (20, 8, 5)
BG_WASH_ALPHA = 0.45  # < 1 leaves a fading trail instead of a hard clear
PULSE_COLOR_BEAT = (255, 255, 255)
PULSE_COLOR_IDLE = (230, 150, 140)
SPECTRUM_COLOR = (255, 180, 140)
WAVEFORM_COLOR = (255, 190, 150)
