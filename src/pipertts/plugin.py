"""Host plugin entry points for pipertts.

A host runtime calls `plugin.init(ctx)` once at startup. The plugin builds
a PiperTTSProvider from the host's configuration, validates it and
registers it as the TTS provider. An invalid configuration is logged and
the provider is withheld; the host keeps running.

Hosts may also offer extension, config-schema and agent-server
registration. The plugin uses whichever of those the context provides and
undoes them in reverse order on shutdown.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import asdict
from pathlib import Path
from typing import Any, Protocol

from . import __version__
from .config import (
    DEFAULT_IMAGE,
    DEFAULT_SAMPLE_RATE,
    DEFAULT_SPEED,
    DEFAULT_VOICE,
    PiperConfig,
    config_from_mapping,
    load_config,
)
from .providers import ProviderRegistry
from .providers.base import TTSProvider
from .tools import get_agent_server
from .tts.errors import ConfigError

logger = logging.getLogger(__name__)

PLUGIN_NAME = "voice-piper-tts"
DESCRIPTION = "Local TTS using Piper in Docker"

CONFIG_SCHEMA: dict[str, Any] = {
    "title": "Piper TTS Configuration",
    "description": DESCRIPTION,
    "fields": [
        {
            "name": "image",
            "type": "text",
            "label": "Docker Image",
            "default": DEFAULT_IMAGE,
            "description": "Docker image to use for Piper TTS",
        },
        {
            "name": "voice",
            "type": "text",
            "label": "Default Voice",
            "default": DEFAULT_VOICE,
            "description": "Default voice model ID",
        },
        {
            "name": "sampleRate",
            "type": "number",
            "label": "Sample Rate (Hz)",
            "default": DEFAULT_SAMPLE_RATE,
            "description": "Audio sample rate: 16000, 22050, 24000, or 48000",
        },
        {
            "name": "speed",
            "type": "number",
            "label": "Speed",
            "default": DEFAULT_SPEED,
            "description": "Speed multiplier (0.5-2.0)",
        },
        {
            "name": "modelCachePath",
            "type": "text",
            "label": "Model Cache Directory",
            "description": "Host path to cache downloaded voice models (optional)",
        },
    ],
}

MANIFEST: dict[str, Any] = {
    "name": PLUGIN_NAME,
    "version": __version__,
    "description": DESCRIPTION,
    "capabilities": ["tts"],
    "category": "voice",
    "tags": ["tts", "voice", "piper", "local", "docker", "offline"],
    "icon": "🔊",
    "requires": {"docker": [DEFAULT_IMAGE]},
    "provides": {
        "capabilities": [
            {
                "type": "tts",
                "id": "piper-tts",
                "displayName": "Piper TTS (Local Docker)",
                "configSchema": CONFIG_SCHEMA,
            }
        ]
    },
    "lifecycle": {"shutdownBehavior": "graceful"},
    "configSchema": CONFIG_SCHEMA,
}

Cleanup = Callable[[], Awaitable[None] | None]


class PluginContext(Protocol):
    """What the plugin needs from its host.

    Optional hooks, used when present: register_extension(name, obj) /
    unregister_extension(name), register_config_schema(plugin, schema) /
    unregister_config_schema(plugin), register_agent_server(server).
    """

    log: logging.Logger

    def get_config(self) -> Mapping[str, Any] | None: ...

    def register_tts_provider(self, provider: TTSProvider) -> None: ...


class LocalPluginContext:
    """Stand-alone host used by the CLI and tests.

    Reads configuration from the pipertts config file (or uses the config
    it was given) and keeps everything registered with it in memory.
    """

    def __init__(
        self, config: PiperConfig | None = None, config_path: Path | None = None
    ) -> None:
        self._config = config
        self._config_path = config_path
        self.log = logging.getLogger("pipertts.host")
        self.tts: TTSProvider | None = None
        self.extensions: dict[str, Any] = {}
        self.config_schemas: dict[str, dict[str, Any]] = {}
        self.agent_servers: list[dict[str, Any]] = []

    def get_config(self) -> Mapping[str, Any]:
        config = self._config or load_config(self._config_path)
        return asdict(config)

    def register_tts_provider(self, provider: TTSProvider) -> None:
        self.tts = provider

    def get_tts(self) -> TTSProvider | None:
        return self.tts

    def register_extension(self, name: str, extension: Any) -> None:
        self.extensions[name] = extension

    def unregister_extension(self, name: str) -> None:
        self.extensions.pop(name, None)

    def register_config_schema(self, plugin_name: str, schema: dict[str, Any]) -> None:
        self.config_schemas[plugin_name] = schema

    def unregister_config_schema(self, plugin_name: str) -> None:
        self.config_schemas.pop(plugin_name, None)

    def register_agent_server(self, server: dict[str, Any]) -> None:
        self.agent_servers.append(server)


class PiperPlugin:
    """Registers the Piper TTS provider with a host runtime."""

    name = PLUGIN_NAME
    version = __version__
    description = DESCRIPTION
    manifest = MANIFEST

    def __init__(self, provider_name: str = "piper") -> None:
        self.provider_name = provider_name
        self.provider: TTSProvider | None = None
        self._cleanups: list[Cleanup] = []

    async def init(self, ctx: PluginContext) -> TTSProvider | None:
        """Build, validate and register the provider.

        Returns:
            The registered provider, or None if configuration was invalid
        """
        try:
            provider = ProviderRegistry.create(
                self.provider_name, config_from_mapping(ctx.get_config())
            )
            provider.validate_config()
        except ConfigError as e:
            ctx.log.error(f"Failed to register Piper TTS: {e}")
            return None

        ctx.register_tts_provider(provider)
        self.provider = provider

        if register_extension := getattr(ctx, "register_extension", None):
            register_extension("tts", provider)
            if unregister := getattr(ctx, "unregister_extension", None):
                self._cleanups.append(lambda: unregister("tts"))

        if register_schema := getattr(ctx, "register_config_schema", None):
            register_schema(PLUGIN_NAME, CONFIG_SCHEMA)
            if unregister_schema := getattr(ctx, "unregister_config_schema", None):
                self._cleanups.append(lambda: unregister_schema(PLUGIN_NAME))

        if register_server := getattr(ctx, "register_agent_server", None):
            register_server(get_agent_server(provider))

        ctx.log.info("Piper TTS provider registered")
        return provider

    async def shutdown(self) -> None:
        """Undo registrations in reverse order, then shut down the provider.

        Each undo step is best effort; a failing step is logged and the rest
        still run. Idempotent.
        """
        cleanups, self._cleanups = self._cleanups, []
        for cleanup in reversed(cleanups):
            try:
                result = cleanup()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"Plugin cleanup step failed: {e!r}")

        if self.provider is not None:
            await self.provider.shutdown()
            self.provider = None


plugin = PiperPlugin()
