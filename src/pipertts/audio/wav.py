"""WAV container handling for Piper output."""

import io
import wave

from ..tts.errors import FormatError

# RIFF (4) + size (4) + WAVE (4) + "fmt " (4) + fmt size (4) + fmt data (16)
# + "data" (4) + data size (4)
WAV_HEADER_SIZE = 44


def wav_to_pcm(data: bytes) -> bytes:
    """Strip the canonical 44-byte WAV header and return the raw samples.

    Interior chunks are not parsed. Containers that carry extra chunks
    before "data" will be sliced at the wrong offset.

    Args:
        data: Complete WAV file contents

    Returns:
        Everything after the header, byte for byte

    Raises:
        FormatError: If the buffer is shorter than the header or the
            RIFF/WAVE markers are missing
    """
    if len(data) < WAV_HEADER_SIZE:
        raise FormatError("Invalid WAV file: too small")

    if data[0:4] != b"RIFF" or data[8:12] != b"WAVE":
        raise FormatError("Invalid WAV file: bad container markers (RIFF/WAVE)")

    return bytes(data[WAV_HEADER_SIZE:])


def pcm_to_wav(
    pcm: bytes, sample_rate: int, channels: int = 1, sample_width: int = 2
) -> bytes:
    """Wrap raw PCM samples in a canonical WAV container."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as out:
        out.setnchannels(channels)
        out.setsampwidth(sample_width)
        out.setframerate(sample_rate)
        out.writeframes(pcm)
    return buf.getvalue()
