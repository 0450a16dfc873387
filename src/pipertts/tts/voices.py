"""Static catalog of Piper voices.

Models are fetched from the official Piper voice repository on first use
of each voice.
"""

from collections.abc import Iterable

from .models import Voice

PIPER_VOICES: tuple[Voice, ...] = (
    Voice(
        id="en_US-lessac-medium",
        name="Lessac (US English)",
        language="en-US",
        gender="male",
        description="Clear American English voice",
    ),
    Voice(
        id="en_GB-alan-medium",
        name="Alan (British English)",
        language="en-GB",
        gender="male",
        description="Clear British English voice",
    ),
    Voice(
        id="en_US-amy-medium",
        name="Amy (US English)",
        language="en-US",
        gender="female",
        description="Natural American English female voice",
    ),
    Voice(
        id="en_GB-northern_english_male-medium",
        name="Northern English Male",
        language="en-GB",
        gender="male",
        description="Northern British accent",
    ),
    Voice(
        id="en_US-joe-medium",
        name="Joe (US English)",
        language="en-US",
        gender="male",
        description="Warm American English voice",
    ),
    Voice(
        id="en_US-kathleen-low",
        name="Kathleen (US English)",
        language="en-US",
        gender="female",
        description="Low quality but fast American English female voice",
    ),
    Voice(
        id="de_DE-thorsten-medium",
        name="Thorsten (German)",
        language="de-DE",
        gender="male",
        description="Clear German voice",
    ),
    Voice(
        id="es_ES-carlfm-x_low",
        name="Carlfm (Spanish)",
        language="es-ES",
        gender="male",
        description="Fast Spanish voice",
    ),
    Voice(
        id="fr_FR-upmc-medium",
        name="UPMC (French)",
        language="fr-FR",
        gender="male",
        description="Clear French voice",
    ),
    Voice(
        id="it_IT-riccardo-x_low",
        name="Riccardo (Italian)",
        language="it-IT",
        gender="male",
        description="Fast Italian voice",
    ),
)


def find_voice(voice_id: str, voices: Iterable[Voice] = PIPER_VOICES) -> Voice | None:
    """Look up a voice by ID, returning None when it is not in the catalog."""
    for voice in voices:
        if voice.id == voice_id:
            return voice
    return None


def filter_voices(
    voices: Iterable[Voice], language: str | None = None
) -> list[Voice]:
    """Filter voices by a case-insensitive language tag prefix.

    Args:
        voices: Voices to filter, in catalog order
        language: Language prefix such as "en" or "de-DE". Empty or None
            returns every voice.

    Returns:
        New list of matching voices; the input is never modified.
    """
    if not language:
        return list(voices)

    prefix = language.lower()
    return [
        voice
        for voice in voices
        if voice.language is not None and voice.language.lower().startswith(prefix)
    ]
