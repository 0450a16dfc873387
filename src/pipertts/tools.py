"""Tool declarations for Piper TTS.

Exposes the read-only getStatus and listVoices tools, pure projections over
the provider's metadata and voice catalog, and the synthesize tool that
agent hosts call through an agent-to-agent server.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .providers.base import TTSProvider
from .tts.errors import TTSError
from .tts.models import SynthesisOptions
from .tts.voices import filter_voices

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def get_tool_declarations() -> list[dict[str, Any]]:
    """Return JSON-schema declarations for the read-only tools."""
    return [
        {
            "name": "piper-tts.getStatus",
            "description": "Get status of the Piper local TTS provider",
            "inputSchema": {"type": "object", "properties": {}},
            "annotations": {"readOnlyHint": True},
        },
        {
            "name": "piper-tts.listVoices",
            "description": "List available Piper TTS voices",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "language": {
                        "type": "string",
                        "description": "Filter by language code (e.g. 'en-US'). Omit for all.",
                    },
                },
            },
            "annotations": {"readOnlyHint": True},
        },
    ]


async def get_status(provider: TTSProvider) -> dict[str, Any]:
    """Summarize provider identity, health and voice count."""
    meta = provider.metadata
    return {
        "provider": meta.name,
        "type": meta.type,
        "version": meta.version,
        "description": meta.description,
        "local": meta.local,
        "capabilities": list(meta.capabilities),
        "healthy": await provider.health_check(),
        "voiceCount": len(provider.voices),
    }


def list_voices(provider: TTSProvider, language: str | None = None) -> dict[str, Any]:
    """List catalog voices, optionally filtered by language tag prefix."""
    voices = filter_voices(provider.voices, language)
    return {
        "provider": provider.metadata.name,
        "count": len(voices),
        "voices": [voice.to_dict() for voice in voices],
    }


SYNTHESIZE_TOOL = {
    "name": "synthesize",
    "description": "Convert text to speech audio",
    "inputSchema": {
        "type": "object",
        "properties": {
            "text": {"type": "string", "description": "Text to synthesize"},
            "voice": {"type": "string", "description": "Voice model ID (optional)"},
            "speed": {"type": "number", "description": "Speed 0.5-2.0 (optional)"},
        },
        "required": ["text"],
    },
}


def _text_content(text: str) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


async def synthesize(
    provider: TTSProvider | None, args: dict[str, Any]
) -> dict[str, Any]:
    """Synthesize text and describe the result instead of returning audio.

    Failures come back as a text message so a calling agent can read them.

    Returns:
        Tool result whose text is a JSON summary (format, sampleRate,
        durationMs, audioBytes) or a "Synthesis failed: ..." message
    """
    if provider is None:
        return _text_content("TTS provider not initialized")

    text = args.get("text")
    voice = args.get("voice")
    speed = args.get("speed")
    options = SynthesisOptions(
        voice=voice if isinstance(voice, str) else None,
        speed=speed
        if isinstance(speed, (int, float)) and not isinstance(speed, bool)
        else None,
    )

    try:
        if not isinstance(text, str):
            raise ValueError("Text cannot be empty")
        result = await provider.synthesize(text, options)
    except (TTSError, ValueError) as e:
        logger.warning(f"synthesize tool failed: {e}")
        return _text_content(f"Synthesis failed: {e}")

    summary = {
        "format": result.format,
        "sampleRate": result.sample_rate,
        "durationMs": result.duration_ms,
        "audioBytes": len(result.audio),
    }
    return _text_content(json.dumps(summary))


def get_agent_server(provider: TTSProvider | None) -> dict[str, Any]:
    """Describe the agent-to-agent server carrying the synthesize tool."""

    async def _synthesize(args: dict[str, Any]) -> dict[str, Any]:
        return await synthesize(provider, args)

    return {
        "name": "piper-tts",
        "tools": [{**SYNTHESIZE_TOOL, "handler": _synthesize}],
    }


def get_tool_handlers(provider: TTSProvider) -> dict[str, ToolHandler]:
    """Bind the tool handlers to a provider instance."""

    async def _get_status(_input: dict[str, Any]) -> dict[str, Any]:
        return await get_status(provider)

    async def _list_voices(input: dict[str, Any]) -> dict[str, Any]:
        language = input.get("language")
        return list_voices(provider, language if isinstance(language, str) else None)

    return {
        "piper-tts.getStatus": _get_status,
        "piper-tts.listVoices": _list_voices,
    }
