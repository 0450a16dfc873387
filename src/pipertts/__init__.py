"""pipertts - local text-to-speech with Piper running in Docker."""

__version__ = "1.0.0"
__all__ = ["PiperTTSProvider"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "PiperTTSProvider":
        from .providers.piper import PiperTTSProvider

        return PiperTTSProvider
    raise AttributeError(f"module 'pipertts' has no attribute {name!r}")
