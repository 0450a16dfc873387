"""Configuration management for pipertts.

Loads configuration from ~/.config/pipertts/config.toml.
Priority chain: CLI flags > env vars > config file > defaults.
"""

import os
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .tts.errors import ConfigError
from .tts.models import Voice
from .tts.voices import PIPER_VOICES

CONFIG_DIR = Path.home() / ".config" / "pipertts"
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_SAMPLE_RATES = (16000, 22050, 24000, 48000)
MIN_SPEED = 0.5
MAX_SPEED = 2.0

DEFAULT_IMAGE = "rhasspy/piper:latest"
DEFAULT_VOICE = "en_US-lessac-medium"
DEFAULT_SAMPLE_RATE = 22050
DEFAULT_SPEED = 1.0

DEFAULT_CONFIG = """\
# pipertts configuration

[piper]
# Docker image that provides the piper binary
image = "rhasspy/piper:latest"

# Default voice model (see `pipertts voices`)
voice = "en_US-lessac-medium"

# Output sample rate in Hz: 16000, 22050, 24000 or 48000
sample_rate = 22050

# Speed multiplier (0.5 - 2.0)
speed = 1.0

# Host directory for downloaded voice models (defaults to <tmpdir>/piper-models)
# model_cache_path = "~/.cache/pipertts/models"

# Seconds to wait for a container before killing it (waits forever if unset)
# timeout = 120

# Container engine executable
# docker = "docker"
"""


@dataclass(frozen=True)
class PiperConfig:
    """Piper provider configuration."""

    image: str = DEFAULT_IMAGE
    voice: str = DEFAULT_VOICE
    sample_rate: int = DEFAULT_SAMPLE_RATE
    speed: float = DEFAULT_SPEED
    model_cache_path: Path | None = None
    timeout: float | None = None
    docker: str = "docker"


def generate_config(path: Path = CONFIG_PATH) -> Path:
    """Generate default config file at ~/.config/pipertts/config.toml."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def _coerce(field: str, value: Any, kind: type) -> Any:
    if isinstance(value, bool):
        raise ConfigError(f"Invalid {field}: {value!r}", field, value)
    # int() would silently truncate 22050.9 to an allowed rate
    if kind is int and isinstance(value, float) and not value.is_integer():
        raise ConfigError(
            f"Invalid {field}: {value!r} is not a whole number", field, value
        )
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(
            f"Invalid {field}: {value!r} is not a valid {kind.__name__}", field, value
        ) from e


def config_from_mapping(data: Mapping[str, Any] | None) -> PiperConfig:
    """Build a PiperConfig from a plain mapping such as a host plugin config.

    Accepts snake_case keys and the camelCase spellings hosts commonly
    use (sampleRate, modelCachePath). Missing keys take default values.

    Raises:
        ConfigError: If a value has the wrong type
    """
    data = dict(data or {})
    sample_rate = data.get("sample_rate", data.get("sampleRate", DEFAULT_SAMPLE_RATE))
    cache_path = data.get("model_cache_path", data.get("modelCachePath"))
    timeout = data.get("timeout")

    return PiperConfig(
        image=str(data.get("image") or DEFAULT_IMAGE),
        voice=str(data.get("voice") or DEFAULT_VOICE),
        sample_rate=_coerce("sample_rate", sample_rate, int),
        speed=_coerce("speed", data.get("speed", DEFAULT_SPEED), float),
        model_cache_path=Path(cache_path).expanduser() if cache_path else None,
        timeout=_coerce("timeout", timeout, float) if timeout is not None else None,
        docker=str(data.get("docker") or "docker"),
    )


def load_config(path: Path | None = None) -> PiperConfig:
    """Load configuration from the config file with env var overrides.

    A missing file is not an error: the provider usually runs inside a
    host that supplies its own configuration, so defaults apply.

    Args:
        path: Config file to read. Defaults to CONFIG_PATH.

    Returns:
        Loaded PiperConfig (not yet validated against the voice catalog)

    Raises:
        ConfigError: If the file cannot be parsed or values have the wrong type
    """
    path = path or CONFIG_PATH
    piper: dict[str, Any] = {}

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Cannot parse {path}: {e}", "file", str(path)) from e
        piper = dict(data.get("piper", {}))

    # Env vars override config file values
    overrides = {
        "image": os.getenv("PIPER_TTS_IMAGE"),
        "voice": os.getenv("PIPER_TTS_VOICE"),
        "sample_rate": os.getenv("PIPER_TTS_SAMPLE_RATE"),
        "speed": os.getenv("PIPER_TTS_SPEED"),
        "model_cache_path": os.getenv("PIPER_TTS_MODEL_CACHE"),
        "timeout": os.getenv("PIPER_TTS_TIMEOUT"),
        "docker": os.getenv("PIPER_TTS_DOCKER"),
    }
    piper.update({key: value for key, value in overrides.items() if value})

    return config_from_mapping(piper)


def check_voice(voice: str, voices: Iterable[Voice] = PIPER_VOICES) -> str | None:
    """Return an error message if voice is not in the catalog."""
    ids = [v.id for v in voices]
    if voice not in ids:
        return f"Invalid voice: {voice}. Use one of: {', '.join(ids)}"
    return None


def check_sample_rate(sample_rate: int) -> str | None:
    """Return an error message if sample_rate is not an allowed rate."""
    if sample_rate not in VALID_SAMPLE_RATES:
        valid = ", ".join(str(rate) for rate in VALID_SAMPLE_RATES)
        return f"Invalid sample rate: {sample_rate}. Valid: {valid}"
    return None


def check_speed(speed: float) -> str | None:
    """Return an error message if speed is outside [0.5, 2.0]."""
    if not MIN_SPEED <= speed <= MAX_SPEED:
        return f"Invalid speed: {speed}. Must be {MIN_SPEED}-{MAX_SPEED}"
    return None


def validate_config(
    config: PiperConfig, voices: Iterable[Voice] = PIPER_VOICES
) -> None:
    """Check the configured defaults against the catalog and allowed ranges.

    Raises:
        ConfigError: Naming the first invalid field and its value
    """
    if error := check_voice(config.voice, voices):
        raise ConfigError(error, "voice", config.voice)
    if error := check_sample_rate(config.sample_rate):
        raise ConfigError(error, "sample_rate", config.sample_rate)
    if error := check_speed(config.speed):
        raise ConfigError(error, "speed", config.speed)
    if config.timeout is not None and config.timeout <= 0:
        raise ConfigError(
            f"Invalid timeout: {config.timeout}. Must be positive", "timeout", config.timeout
        )
