import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path

import requests

from beatvis.constants import (
    CONFIG_TIMEOUT,
    DEFAULT_BEAT_SENSITIVITY,
    DEFAULT_HISTORY_SIZE,
    DEFAULT_MIN_BEAT_GAP_MS,
    DEFAULT_PARTICLE_BURST_COUNT,
    DEFAULT_PARTICLE_MAX_LIFE,
)

logger = logging.getLogger(__name__)

# Wire keys used by the config endpoint
WIRE_KEYS = {
    "beat_sensitivity": "beatSensitivity",
    "history_size": "historySize",
    "min_beat_gap_ms": "minBeatGapMs",
    "particle_burst_count": "particleBurstCount",
    "particle_max_life": "particleMaxLife",
}


class ConfigError(ValueError):
    """Raised when a config payload cannot be turned into a VisualizerConfig."""


@dataclass(frozen=True)
class VisualizerConfig:
    """
    Immutable snapshot of the tunable visualiser parameters.
    Supplied once per audio source activation.
    """

    beat_sensitivity: float = DEFAULT_BEAT_SENSITIVITY
    history_size: int = DEFAULT_HISTORY_SIZE
    min_beat_gap_ms: int = DEFAULT_MIN_BEAT_GAP_MS
    particle_burst_count: int = DEFAULT_PARTICLE_BURST_COUNT
    particle_max_life: int = DEFAULT_PARTICLE_MAX_LIFE

    def __post_init__(self):
        if not _is_number(self.beat_sensitivity) or self.beat_sensitivity <= 0:
            raise ConfigError(f"beat_sensitivity must be a positive number, got {self.beat_sensitivity!r}")
        if not _is_int(self.history_size) or self.history_size < 1:
            raise ConfigError(f"history_size must be a positive integer, got {self.history_size!r}")
        if not _is_int(self.min_beat_gap_ms) or self.min_beat_gap_ms < 0:
            raise ConfigError(f"min_beat_gap_ms must be a non-negative integer, got {self.min_beat_gap_ms!r}")
        if not _is_int(self.particle_burst_count) or self.particle_burst_count < 0:
            raise ConfigError(
                f"particle_burst_count must be a non-negative integer, got {self.particle_burst_count!r}"
            )
        if not _is_int(self.particle_max_life) or self.particle_max_life < 1:
            raise ConfigError(f"particle_max_life must be a positive integer, got {self.particle_max_life!r}")

    @classmethod
    def from_dict(cls, payload):
        """
        Build a config from a payload as served by the config endpoint.
        Accepts camelCase wire keys or snake_case field names; missing keys keep their default.
        """
        if not isinstance(payload, dict):
            raise ConfigError(f"Config payload must be an object, got {type(payload).__name__}")

        values = {}
        for field in fields(cls):
            wire_key = WIRE_KEYS[field.name]
            if wire_key in payload:
                values[field.name] = payload[wire_key]
            elif field.name in payload:
                values[field.name] = payload[field.name]
            else:
                continue

            # JSON has a single number type, so 60.0 is a valid integer setting
            value = values[field.name]
            if field.type is int and isinstance(value, float) and value.is_integer():
                values[field.name] = int(value)
        return cls(**values)


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def fetch_config(url, timeout=CONFIG_TIMEOUT):
    """Fetch a config payload from an HTTP endpoint."""
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return VisualizerConfig.from_dict(response.json())


def read_config(path):
    """Read a config payload from a local JSON file."""
    with open(path, encoding="utf-8") as f:
        return VisualizerConfig.from_dict(json.load(f))


def load_config(location=None):
    """
    Load the visualiser config from a URL or JSON file.
    Falls back to the defaults on any failure so the visualiser can always start.
    """
    if location is None:
        return VisualizerConfig()

    location = str(location)
    try:
        if location.startswith(("http://", "https://")):
            config = fetch_config(location)
        else:
            config = read_config(Path(location))
    except (requests.RequestException, OSError, ValueError) as e:
        # ValueError also covers JSONDecodeError and ConfigError
        logger.warning(f"[!] Could not load config from {location}: {e}. Using defaults.")
        return VisualizerConfig()

    logger.info(f"[+] Loaded config from {location}")
    return config
