"""Unit tests for the host plugin entry point."""

import logging
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pipertts.config import PiperConfig
from pipertts.plugin import (
    CONFIG_SCHEMA,
    MANIFEST,
    LocalPluginContext,
    PiperPlugin,
    plugin,
)
from pipertts.providers.piper import PiperTTSProvider


def host_context(config: dict | None) -> MagicMock:
    """Build a host context double that returns the given config."""
    ctx = MagicMock()
    ctx.get_config.return_value = config
    ctx.log = MagicMock(spec=logging.Logger)
    return ctx


class TestPiperPluginInit:
    """Test provider registration."""

    def test_module_level_plugin(self) -> None:
        """Test the module exposes a ready plugin instance."""
        assert isinstance(plugin, PiperPlugin)
        assert plugin.name == "voice-piper-tts"

    @pytest.mark.asyncio
    async def test_registers_validated_provider(self) -> None:
        """Test a valid config registers a validated provider."""
        ctx = host_context({"voice": "en_GB-alan-medium", "sampleRate": 16000})

        provider = await PiperPlugin().init(ctx)

        assert isinstance(provider, PiperTTSProvider)
        assert provider.validated
        assert provider.config.voice == "en_GB-alan-medium"
        assert provider.config.sample_rate == 16000
        ctx.register_tts_provider.assert_called_once_with(provider)
        ctx.log.info.assert_called_once_with("Piper TTS provider registered")

    @pytest.mark.asyncio
    async def test_missing_config_uses_defaults(self) -> None:
        """Test a host without config still gets a provider."""
        ctx = host_context(None)

        provider = await PiperPlugin().init(ctx)

        assert provider is not None
        assert provider.config == PiperConfig()

    @pytest.mark.parametrize(
        "config,message",
        [
            ({"voice": "xx_XX-nobody"}, "Invalid voice"),
            ({"speed": 3.0}, "Invalid speed"),
            ({"sample_rate": 44100}, "Invalid sample rate"),
            ({"sample_rate": "fast"}, "Invalid sample_rate"),
        ],
    )
    @pytest.mark.asyncio
    async def test_invalid_config_is_logged_not_raised(
        self, config: dict, message: str
    ) -> None:
        """Test an invalid config logs an error and registers nothing."""
        ctx = host_context(config)
        piper = PiperPlugin()

        result = await piper.init(ctx)

        assert result is None
        assert piper.provider is None
        ctx.register_tts_provider.assert_not_called()
        logged = ctx.log.error.call_args.args[0]
        assert logged.startswith("Failed to register Piper TTS:")
        assert message in logged


class TestPiperPluginShutdown:
    """Test plugin shutdown."""

    @pytest.mark.asyncio
    async def test_shutdown_is_idempotent(self) -> None:
        """Test shutdown closes the provider once and tolerates repeats."""
        piper = PiperPlugin()
        provider = await piper.init(host_context({}))

        with patch.object(provider, "shutdown", AsyncMock()) as mock_shutdown:
            await piper.shutdown()
            await piper.shutdown()

        mock_shutdown.assert_awaited_once()
        assert piper.provider is None

    @pytest.mark.asyncio
    async def test_shutdown_without_init(self) -> None:
        """Test shutdown before init is a no-op."""
        await PiperPlugin().shutdown()


class TestPluginRegistrations:
    """Test manifest, config schema, extension and agent-server registration."""

    def test_manifest_describes_plugin(self) -> None:
        """Test the manifest advertises the tts capability and Docker image."""
        assert MANIFEST["name"] == "voice-piper-tts"
        assert MANIFEST["capabilities"] == ["tts"]
        assert "offline" in MANIFEST["tags"]
        assert MANIFEST["requires"] == {"docker": ["rhasspy/piper:latest"]}
        assert MANIFEST["provides"]["capabilities"][0]["id"] == "piper-tts"
        assert PiperPlugin.manifest is MANIFEST

    def test_config_schema_defaults(self) -> None:
        """Test schema fields and defaults match the configuration defaults."""
        fields = {field["name"]: field for field in CONFIG_SCHEMA["fields"]}

        assert list(fields) == ["image", "voice", "sampleRate", "speed", "modelCachePath"]
        assert fields["image"]["default"] == PiperConfig().image
        assert fields["voice"]["default"] == PiperConfig().voice
        assert fields["sampleRate"]["default"] == PiperConfig().sample_rate
        assert fields["speed"]["default"] == PiperConfig().speed
        assert "default" not in fields["modelCachePath"]

    @pytest.mark.asyncio
    async def test_init_registers_with_optional_hooks(self) -> None:
        """Test a full-featured host receives extension, schema and agent server."""
        ctx = LocalPluginContext(config=PiperConfig())

        provider = await PiperPlugin().init(ctx)

        assert ctx.extensions == {"tts": provider}
        assert ctx.config_schemas == {"voice-piper-tts": CONFIG_SCHEMA}
        assert ctx.agent_servers[0]["name"] == "piper-tts"
        assert [tool["name"] for tool in ctx.agent_servers[0]["tools"]] == ["synthesize"]

    @pytest.mark.asyncio
    async def test_minimal_host_without_optional_hooks(self) -> None:
        """Test a host offering only the required calls still gets a provider."""
        ctx = MagicMock(spec=["log", "get_config", "register_tts_provider"])
        ctx.get_config.return_value = {}
        piper = PiperPlugin()

        provider = await piper.init(ctx)
        await piper.shutdown()

        assert provider is not None
        ctx.register_tts_provider.assert_called_once_with(provider)

    @pytest.mark.asyncio
    async def test_shutdown_undoes_registrations_in_reverse(self) -> None:
        """Test schema is unregistered before the extension, then the provider stops."""
        ctx = host_context({})
        order = []
        ctx.unregister_extension.side_effect = lambda name: order.append(("ext", name))
        ctx.unregister_config_schema.side_effect = lambda name: order.append(
            ("schema", name)
        )
        piper = PiperPlugin()
        provider = await piper.init(ctx)

        with patch.object(
            provider, "shutdown", AsyncMock(side_effect=lambda: order.append(("provider",)))
        ):
            await piper.shutdown()
            await piper.shutdown()

        assert order == [("schema", "voice-piper-tts"), ("ext", "tts"), ("provider",)]

    @pytest.mark.asyncio
    async def test_failing_undo_step_does_not_stop_shutdown(self) -> None:
        """Test a raising undo step is logged and the remaining steps still run."""
        ctx = host_context({})
        ctx.unregister_config_schema.side_effect = RuntimeError("host gone")
        piper = PiperPlugin()
        provider = await piper.init(ctx)

        with patch.object(provider, "shutdown", AsyncMock()) as mock_shutdown:
            await piper.shutdown()

        ctx.unregister_extension.assert_called_once_with("tts")
        mock_shutdown.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_config_registers_nothing_extra(self) -> None:
        """Test a withheld provider leaves no extension or schema behind."""
        ctx = LocalPluginContext(config=PiperConfig(speed=5.0))

        assert await PiperPlugin().init(ctx) is None
        assert ctx.extensions == {}
        assert ctx.config_schemas == {}
        assert ctx.agent_servers == []


class TestLocalPluginContext:
    """Test the stand-alone host context."""

    @pytest.mark.asyncio
    async def test_round_trip_through_plugin(self) -> None:
        """Test a given config flows through init into the registered provider."""
        ctx = LocalPluginContext(config=PiperConfig(voice="fr_FR-upmc-medium", speed=1.2))

        provider = await PiperPlugin().init(ctx)

        assert ctx.get_tts() is provider
        assert provider.config.voice == "fr_FR-upmc-medium"
        assert provider.config.speed == 1.2

    def test_reads_config_file(self, tmp_path: Path) -> None:
        """Test the context loads the config file when no config is given."""
        path = tmp_path / "config.toml"
        path.write_text('[piper]\nvoice = "it_IT-riccardo-x_low"\n')

        config = LocalPluginContext(config_path=path).get_config()

        assert config["voice"] == "it_IT-riccardo-x_low"
        assert config["image"] == "rhasspy/piper:latest"
