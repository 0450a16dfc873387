"""Typer CLI definition for pipertts."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import typer

from .audio.wav import pcm_to_wav
from .config import CONFIG_PATH, generate_config
from .plugin import LocalPluginContext, PiperPlugin
from .providers.piper import PiperTTSProvider
from .tools import get_status, list_voices
from .tts.errors import (
    ConfigError,
    EnvironmentUnavailableError,
    FormatError,
    SynthesisError,
    TTSError,
)
from .tts.models import SynthesisOptions, SynthesisResult

app = typer.Typer(
    help="Local text-to-speech with Piper running in Docker", no_args_is_help=True
)


def configure_logging(debug: bool) -> None:
    """Send log records to stderr; verbose only when debugging."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")


def process_text_input(text: str | None) -> str:
    """Process text input and return the text to synthesize.

    Args:
        text: Optional text input from CLI argument, file or stdin

    Returns:
        The text to synthesize

    Raises:
        ValueError: If no text is provided
    """
    if text is None or not text.strip():
        raise ValueError("No text provided")

    return text


async def synthesize_text(
    text: str, options: SynthesisOptions, config_path: Path | None = None
) -> SynthesisResult:
    """Register the plugin with a local host, synthesize once, shut down.

    Raises:
        ConfigError: If the configuration is invalid
        TTSError: If synthesis fails
    """
    ctx = LocalPluginContext(config_path=config_path)
    piper = PiperPlugin()
    provider = await piper.init(ctx)
    if provider is None:
        raise ConfigError(
            f"Piper TTS provider was not registered. Check {config_path or CONFIG_PATH}",
            "config",
        )
    try:
        return await provider.synthesize(text, options)
    finally:
        await piper.shutdown()


async def provider_status(config_path: Path | None = None) -> dict:
    """Report provider status the way the getStatus tool does."""
    ctx = LocalPluginContext(config_path=config_path)
    piper = PiperPlugin()
    provider = await piper.init(ctx)
    if provider is None:
        # Unvalidated provider always reports unhealthy
        provider = PiperTTSProvider()
    try:
        return await get_status(provider)
    finally:
        await piper.shutdown()


@app.command()
def speak(
    text: str | None = typer.Argument(None, help="Text to convert to speech"),
    output: Path = typer.Option(..., "-o", "--output", help="File to write audio to"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read text from file"),
    voice: str | None = typer.Option(
        None, "-v", "--voice", help="Voice ID (from config if omitted)"
    ),
    speed: float | None = typer.Option(
        None, "-s", "--speed", help="Speed multiplier 0.5-2.0 (from config if omitted)"
    ),
    sample_rate: int | None = typer.Option(
        None, "-r", "--sample-rate", help="Sample rate in Hz (from config if omitted)"
    ),
    raw: bool = typer.Option(
        False, "--raw", help="Write raw pcm_s16le samples instead of a WAV file"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", help="Config file (defaults to ~/.config/pipertts/config.toml)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Show verbose error messages"),
) -> None:
    """Convert text to speech and save it to a file."""
    configure_logging(debug)

    # Get text from argument, file, or stdin (in priority order)
    if text is None:
        if file:
            try:
                text = file.read_text()
            except (OSError, UnicodeDecodeError) as e:
                if debug:
                    typer.echo(f"Debug - Cannot read {file} ({e!r})", err=True)
                else:
                    typer.echo(f"Error: Cannot read file: {file}", err=True)
                raise typer.Exit(1) from None
        elif not sys.stdin.isatty():
            text = sys.stdin.read().strip()

    try:
        text = process_text_input(text)
    except ValueError:
        typer.echo("Error: No text provided", err=True)
        raise typer.Exit(1) from None

    options = SynthesisOptions(voice=voice, speed=speed, sample_rate=sample_rate)

    try:
        result = asyncio.run(synthesize_text(text, options, config_path))
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except EnvironmentUnavailableError as e:
        typer.echo(f"Error: Docker is not available: {e}", err=True)
        raise typer.Exit(1) from None
    except (SynthesisError, FormatError) as e:
        if debug:
            typer.echo(f"Debug - Synthesis failed: {e!r}", err=True)
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except TTSError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    data = result.audio if raw else pcm_to_wav(result.audio, result.sample_rate)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(data)
    except OSError as e:
        typer.echo(f"Error: Cannot write {output}: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(
        f"Wrote {len(data)} bytes to {output} "
        f"({result.sample_rate} Hz, {result.duration_ms}ms)"
    )


@app.command()
def voices(
    language: str | None = typer.Option(
        None, "-l", "--language", help="Filter by language prefix (e.g. en, de-DE)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """List available Piper voices."""
    listing = list_voices(PiperTTSProvider(), language)

    if as_json:
        typer.echo(json.dumps(listing, indent=2))
        return

    for voice in listing["voices"]:
        typer.echo(f"{voice['id']}: {voice['name']} ({voice['language'] or 'unknown'})")


@app.command()
def status(
    config_path: Path | None = typer.Option(None, "--config", help="Config file"),
    debug: bool = typer.Option(False, "--debug", help="Show verbose log output"),
) -> None:
    """Show provider status and whether Docker is reachable."""
    configure_logging(debug)
    report = asyncio.run(provider_status(config_path))
    typer.echo(json.dumps(report, indent=2))
    if not report["healthy"]:
        raise typer.Exit(1)


@app.command("init-config")
def init_config(
    path: Path = typer.Option(CONFIG_PATH, "--path", help="Where to write the config"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a commented default config file."""
    if path.exists() and not force:
        typer.echo(f"Config already exists: {path} (use --force to overwrite)", err=True)
        raise typer.Exit(1)

    written = generate_config(path)
    typer.echo(f"Generated {written}")
