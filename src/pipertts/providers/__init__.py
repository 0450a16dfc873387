"""TTS providers and the name-to-class registry hosts build them from."""

from typing import TYPE_CHECKING, ClassVar

from .base import TTSProvider
from .piper import PiperTTSProvider

if TYPE_CHECKING:
    from ..config import PiperConfig

__all__ = ["PiperTTSProvider", "ProviderRegistry", "TTSProvider"]


class ProviderRegistry:
    """Maps short provider names (as used in plugin config) to classes."""

    _providers: ClassVar[dict[str, type[TTSProvider]]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type[TTSProvider]) -> None:
        cls._providers[name] = provider_class

    @classmethod
    def get(cls, name: str) -> type[TTSProvider]:
        """Look up a provider class.

        Raises:
            KeyError: If nothing is registered under name
        """
        try:
            return cls._providers[name]
        except KeyError:
            available = ", ".join(cls._providers) or "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {available}"
            ) from None

    @classmethod
    def create(cls, name: str, config: "PiperConfig") -> TTSProvider:
        """Instantiate the provider registered under name with config."""
        return cls.get(name)(config)  # type: ignore[call-arg]

    @classmethod
    def names(cls) -> list[str]:
        return list(cls._providers)


ProviderRegistry.register("piper", PiperTTSProvider)
