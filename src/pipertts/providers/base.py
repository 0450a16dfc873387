"""Abstract base class for text-to-speech providers.

This module defines the interface that all TTS providers must implement,
ensuring consistent behavior for whichever host registers them.
"""

from abc import ABC, abstractmethod

from ..tts.models import PluginMetadata, SynthesisOptions, SynthesisResult, Voice


class TTSProvider(ABC):
    """Abstract base class for text-to-speech providers.

    All TTS providers must inherit from this class and implement
    the required methods for synthesizing speech and listing voices.
    The lifecycle hooks (validate_config, health_check, shutdown) have
    permissive defaults.

    Voice Dictionary Structure:
        Each voice returned by list_voices() should follow this structure:
        {
            "id": str,            # Unique identifier for the voice
            "name": str,          # Human-readable name for the voice
            "provider": str,      # Name of the provider (e.g., "piper-tts")
            "language": str|None,
            "gender": str|None,
            "description": str|None,
        }
    """

    metadata: PluginMetadata
    voices: tuple[Voice, ...] = ()

    @abstractmethod
    async def synthesize(
        self, text: str, options: SynthesisOptions | None = None
    ) -> SynthesisResult:
        """Convert text to audio.

        Args:
            text: The text to convert to speech
            options: Optional per-request overrides

        Returns:
            SynthesisResult holding the audio payload

        Raises:
            TTSError: If synthesis fails
        """
        pass

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Return available voices for this provider.

        Returns:
            List of voice dictionaries (see class docstring)
        """
        pass

    def validate_config(self) -> None:
        """Raise ConfigError if the provider cannot be used as configured."""
        return None

    async def health_check(self) -> bool:
        """Report whether the provider's backend is reachable."""
        return True

    async def shutdown(self) -> None:
        """Release any resources held by the provider."""
        return None
