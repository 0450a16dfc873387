"""Audio container conversion for pipertts."""

from .wav import WAV_HEADER_SIZE, pcm_to_wav, wav_to_pcm

__all__ = ["WAV_HEADER_SIZE", "pcm_to_wav", "wav_to_pcm"]
