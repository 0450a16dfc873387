"""TTS (Text-to-Speech) package for pipertts.

This package holds the data models, error types and voice catalog shared
by the container runner and the Piper provider.
"""

from .errors import (
    ConfigError,
    EnvironmentUnavailableError,
    FormatError,
    InvalidRequestError,
    JobFailedError,
    JobTimeoutError,
    RunnerError,
    SynthesisError,
    TTSError,
)
from .models import PluginMetadata, SynthesisOptions, SynthesisResult, Voice
from .voices import PIPER_VOICES, filter_voices, find_voice

__all__ = [
    "PIPER_VOICES",
    "ConfigError",
    "EnvironmentUnavailableError",
    "FormatError",
    "InvalidRequestError",
    "JobFailedError",
    "JobTimeoutError",
    "PluginMetadata",
    "RunnerError",
    "SynthesisError",
    "SynthesisOptions",
    "SynthesisResult",
    "TTSError",
    "Voice",
    "filter_voices",
    "find_voice",
]
