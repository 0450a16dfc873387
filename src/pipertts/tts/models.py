"""TTS data models."""

from dataclasses import dataclass, field
from typing import Any, Literal

AudioFormat = Literal[
    "pcm_s16le",
    "pcm_f32le",
    "opus",
    "ogg_opus",
    "mp3",
    "wav",
    "webm_opus",
    "mulaw",
    "alaw",
]

Gender = Literal["male", "female", "neutral"]


@dataclass(frozen=True)
class Voice:
    """A voice from the static Piper catalog.

    Args:
        id: Piper model name, also the unique key (e.g. "en_US-lessac-medium")
        name: Human-readable name of the voice
        language: Optional BCP-47 style language tag (e.g. "en-US")
        gender: Optional gender tag
        description: Optional voice description
    """

    id: str
    name: str
    language: str | None = None
    gender: Gender | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        """Validate voice information."""
        if not self.id or not self.id.strip():
            raise ValueError("id cannot be empty")
        if not self.name or not self.name.strip():
            raise ValueError("name cannot be empty")

    def to_dict(self) -> dict[str, Any]:
        """Convert the voice to a dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "language": self.language,
            "gender": self.gender,
            "description": self.description,
        }


@dataclass(frozen=True)
class SynthesisOptions:
    """Per-request overrides. Anything left as None falls back to config.

    Args:
        voice: Voice ID to synthesize with
        speed: Speed multiplier (0.5-2.0)
        sample_rate: Output sample rate in Hz
        format: Output format hint; the result is always raw PCM
    """

    voice: str | None = None
    speed: float | None = None
    sample_rate: int | None = None
    format: AudioFormat | None = None


@dataclass(frozen=True)
class SynthesisResult:
    """Audio produced by one synthesis request."""

    audio: bytes
    format: AudioFormat
    sample_rate: int
    duration_ms: int


@dataclass(frozen=True)
class InstallMethod:
    """How to install something a plugin depends on."""

    kind: str
    image: str
    tag: str | None = None
    label: str | None = None


@dataclass(frozen=True)
class PluginMetadata:
    """Static description of a voice plugin."""

    name: str
    version: str
    type: Literal["stt", "tts"]
    description: str
    capabilities: tuple[str, ...]
    local: bool
    docker: bool = False
    emoji: str | None = None
    homepage: str | None = None
    requires_docker: tuple[str, ...] = ()
    install: tuple[InstallMethod, ...] = field(default_factory=tuple)
