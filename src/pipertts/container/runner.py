"""Runs Piper in throwaway containers."""

import asyncio
import logging
import threading
from pathlib import Path

from ..tts.errors import EnvironmentUnavailableError, JobFailedError
from .client import DockerClient
from .models import Bind, ContainerJob

logger = logging.getLogger(__name__)

MODELS_MOUNT = "/models"
INPUT_MOUNT = "/input/input.txt"
OUTPUT_MOUNT = "/output"


def length_scale(speed: float) -> float:
    """Convert a speed multiplier to Piper's length scale (its inverse)."""
    return 1 / speed


class ContainerRunner:
    """Executes model downloads and synthesis jobs for one Piper image.

    Each job runs in a fresh container started with --rm. The Docker
    client is created lazily, at most once, the first time it is needed.
    """

    def __init__(
        self,
        image: str,
        executable: str = "docker",
        timeout: float | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            image: Piper image reference, e.g. "rhasspy/piper:latest"
            executable: Container engine CLI used to run jobs
            timeout: Optional deadline in seconds for each job. None waits
                until the container exits.
        """
        self.image = image
        self.executable = executable
        self.timeout = timeout
        self._client: DockerClient | None = None
        self._client_lock = threading.Lock()

    def ensure_client(self) -> DockerClient:
        """Return the Docker client, creating it on first use.

        Raises:
            EnvironmentUnavailableError: If the docker executable is missing
        """
        with self._client_lock:
            if self._client is None:
                self._client = DockerClient(self.executable)
            return self._client

    def release(self) -> None:
        """Drop the Docker client handle. A later call re-creates it."""
        with self._client_lock:
            self._client = None

    @property
    def has_client(self) -> bool:
        return self._client is not None

    async def pull_image(self) -> None:
        """Pull the Piper image so the first job does not stall on it."""
        await self.ensure_client().pull(self.image)

    async def prepare_model(self, voice_id: str, cache_dir: Path) -> None:
        """Download a voice model into the host cache directory.

        Piper fetches the model as a side effect of resolving --model, so the
        job just asks for --help with the download directory mounted.

        Raises:
            EnvironmentUnavailableError: If the engine cannot be reached
            JobFailedError: If the container exits non-zero
        """
        cache_dir.mkdir(parents=True, exist_ok=True)
        job = ContainerJob(
            image=self.image,
            args=["--model", voice_id, "--download-dir", MODELS_MOUNT, "--help"],
            binds=[Bind(cache_dir, MODELS_MOUNT)],
            timeout=self.timeout,
        )

        result = await self.ensure_client().run(job)
        if not result.ok:
            raise JobFailedError(
                f"Model preparation for {voice_id} exited with status "
                f"{result.exit_code}: {result.stderr_text}",
                exit_code=result.exit_code,
                stderr=result.stderr_text,
            )

    async def run_synthesis(
        self,
        input_path: Path,
        output_path: Path,
        voice_id: str,
        speed: float,
        sample_rate: int,
        cache_dir: Path,
    ) -> None:
        """Synthesize the text in input_path into a WAV file at output_path.

        The text is mounted read-only and also streamed on stdin. The output
        file's parent directory is mounted so Piper can write next to it.

        Raises:
            EnvironmentUnavailableError: If the engine cannot be reached
            JobFailedError: If Piper fails or produces no output file
        """
        job = ContainerJob(
            image=self.image,
            args=[
                "--model",
                voice_id,
                "--output_file",
                f"{OUTPUT_MOUNT}/{output_path.name}",
                "--length_scale",
                str(length_scale(speed)),
                "--sample_rate",
                str(sample_rate),
            ],
            binds=[
                Bind(cache_dir, MODELS_MOUNT),
                Bind(input_path, INPUT_MOUNT, read_only=True),
                Bind(output_path.parent, OUTPUT_MOUNT),
            ],
            stdin=await asyncio.to_thread(input_path.read_bytes),
            timeout=self.timeout,
        )

        result = await self.ensure_client().run(job)
        if not result.ok:
            raise JobFailedError(
                f"Piper exited with status {result.exit_code}: {result.stderr_text}",
                exit_code=result.exit_code,
                stderr=result.stderr_text,
            )

        if not output_path.exists():
            raise JobFailedError(
                f"Piper finished but did not write {output_path}",
                exit_code=result.exit_code,
                stderr=result.stderr_text,
            )

    async def health_check(self) -> bool:
        """Check that the container engine answers a listing query.

        Returns:
            True if the engine is reachable, False on any failure
        """
        try:
            await self.ensure_client().ping()
            return True
        except EnvironmentUnavailableError as e:
            logger.debug(f"Container engine health check failed: {e}")
            return False
        except Exception as e:
            logger.debug(f"Unexpected health check failure: {e!r}")
            return False
