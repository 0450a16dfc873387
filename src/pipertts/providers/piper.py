"""Piper text-to-speech provider running in Docker."""

import asyncio
import logging
import tempfile
import time
import uuid
from pathlib import Path

from ..audio.wav import wav_to_pcm
from ..cache import ModelCacheTracker, get_model_cache_dir
from ..config import (
    PiperConfig,
    check_sample_rate,
    check_speed,
    check_voice,
    validate_config,
)
from ..container.client import DockerClient
from ..container.runner import ContainerRunner
from ..tts.errors import (
    InvalidRequestError,
    JobFailedError,
    RunnerError,
    SynthesisError,
)
from ..tts.models import (
    AudioFormat,
    InstallMethod,
    PluginMetadata,
    SynthesisOptions,
    SynthesisResult,
)
from ..tts.voices import PIPER_VOICES
from .base import TTSProvider

logger = logging.getLogger(__name__)

OUTPUT_FORMAT: AudioFormat = "pcm_s16le"

PIPER_METADATA = PluginMetadata(
    name="piper-tts",
    version="1.0.0",
    type="tts",
    description="Local TTS using Piper in Docker",
    capabilities=("voice-selection", "speed-control"),
    local=True,
    docker=True,
    emoji="🔊",
    homepage="https://github.com/rhasspy/piper",
    requires_docker=("rhasspy/piper:latest",),
    install=(
        InstallMethod(
            kind="docker",
            image="rhasspy/piper",
            tag="latest",
            label="Pull Piper TTS image",
        ),
    ),
)


def _remove_temp_file(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to remove temporary file {path}: {e}")


class PiperTTSProvider(TTSProvider):
    """Piper TTS provider running each request in a fresh container.

    Voice models are downloaded into a host cache directory the first time
    each voice is used in this process. Output is raw 16-bit little-endian
    PCM at the requested sample rate.

    Safe to share between concurrent tasks: requests only share the model
    tracker, and two first uses of the same voice may both download it.
    """

    metadata = PIPER_METADATA
    voices = PIPER_VOICES

    def __init__(
        self,
        config: PiperConfig | None = None,
        runner: ContainerRunner | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            config: Provider configuration. Defaults are used when omitted.
            runner: Container runner, mainly for tests. Built from config
                when omitted.
        """
        self._config = config or PiperConfig()
        self._runner = runner or ContainerRunner(
            image=self._config.image,
            executable=self._config.docker,
            timeout=self._config.timeout,
        )
        self._models = ModelCacheTracker()
        self._validated = False

    @property
    def config(self) -> PiperConfig:
        return self._config

    @property
    def models(self) -> ModelCacheTracker:
        return self._models

    @property
    def validated(self) -> bool:
        return self._validated

    def validate_config(self) -> None:
        """Validate the default voice, sample rate and speed.

        Raises:
            ConfigError: If any configured default is invalid
        """
        self._validated = False
        validate_config(self._config, self.voices)
        self._validated = True

    def ensure_client(self) -> DockerClient:
        """Return the shared Docker client, creating it on first use."""
        return self._runner.ensure_client()

    def _resolve_options(
        self, options: SynthesisOptions | None
    ) -> tuple[str, float, int]:
        options = options or SynthesisOptions()
        voice = options.voice or self._config.voice
        speed = options.speed if options.speed is not None else self._config.speed
        sample_rate = (
            options.sample_rate
            if options.sample_rate is not None
            else self._config.sample_rate
        )

        if error := check_voice(voice, self.voices):
            raise InvalidRequestError(error, "voice", voice)
        if error := check_speed(speed):
            raise InvalidRequestError(error, "speed", speed)
        if error := check_sample_rate(sample_rate):
            raise InvalidRequestError(error, "sample_rate", sample_rate)

        return voice, speed, sample_rate

    async def _ensure_model(self, voice: str, cache_dir: Path) -> None:
        if self._models.is_ready(voice):
            return

        logger.info(f"Downloading voice model: {voice}...")

        try:
            await self._runner.pull_image()
        except RunnerError as e:
            logger.warning(f"Image pull warning: {e}")

        # The model may already be on disk from an earlier run, so a failed
        # download is left for the synthesis job to report.
        try:
            await self._runner.prepare_model(voice, cache_dir)
        except RunnerError as e:
            logger.warning(f"Voice model preparation failed for {voice}: {e}")
            return

        self._models.mark_ready(voice)
        logger.info(f"Voice model downloaded: {voice}")

    async def synthesize(
        self, text: str, options: SynthesisOptions | None = None
    ) -> SynthesisResult:
        """Convert text to speech with Piper.

        Args:
            text: Text to convert to speech
            options: Optional voice, speed and sample rate overrides

        Returns:
            SynthesisResult with raw pcm_s16le audio

        Raises:
            ValueError: If text is empty
            InvalidRequestError: If voice, speed or sample rate is invalid
            EnvironmentUnavailableError: If Docker cannot be reached
            SynthesisError: If the Piper container fails
            FormatError: If Piper's output is not a WAV file
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        voice, speed, sample_rate = self._resolve_options(options)
        cache_dir = get_model_cache_dir(self._config.model_cache_path)

        await self._ensure_model(voice, cache_dir)

        token = uuid.uuid4().hex
        temp_dir = Path(tempfile.gettempdir())
        text_file = temp_dir / f"piper-input-{token}.txt"
        wav_file = temp_dir / f"piper-output-{token}.wav"

        try:
            await asyncio.to_thread(text_file.write_text, text, encoding="utf-8")

            start_time = time.monotonic()
            try:
                await self._runner.run_synthesis(
                    text_file, wav_file, voice, speed, sample_rate, cache_dir
                )
            except JobFailedError as e:
                raise SynthesisError(
                    f"Piper synthesis failed for voice {voice}: {e}", e
                ) from e

            pcm = wav_to_pcm(await asyncio.to_thread(wav_file.read_bytes))
            duration_ms = int((time.monotonic() - start_time) * 1000)

            logger.debug(
                f"Synthesized {len(pcm)} bytes with {voice} in {duration_ms}ms"
            )
            return SynthesisResult(
                audio=pcm,
                format=OUTPUT_FORMAT,
                sample_rate=sample_rate,
                duration_ms=duration_ms,
            )
        finally:
            _remove_temp_file(text_file)
            _remove_temp_file(wav_file)

    async def list_voices(self) -> list[dict]:
        """List the voices in the Piper catalog.

        Returns:
            List of voice dictionaries with id, name, provider, language,
            gender and description fields.
        """
        return [
            {**voice.to_dict(), "provider": self.metadata.name}
            for voice in self.voices
        ]

    async def health_check(self) -> bool:
        """Report whether the provider is usable.

        Returns:
            False if validate_config() has not succeeded or Docker is
            unreachable, True otherwise
        """
        if not self._validated:
            return False
        return await self._runner.health_check()

    async def shutdown(self) -> None:
        """Forget prepared models and release the Docker client. Idempotent."""
        self._models.reset()
        self._runner.release()
