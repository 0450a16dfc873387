"""Async wrapper around the docker command line client."""

import asyncio
import logging
import shutil

from ..tts.errors import EnvironmentUnavailableError, JobTimeoutError, RunnerError
from .models import ContainerJob, JobResult, JobState

logger = logging.getLogger(__name__)

# `docker run` reserves 125 for failures of the engine itself. The CLI
# prefixes its own error messages with "docker:", which a program running
# inside the container does not.
ENGINE_ERROR_EXIT_CODE = 125
ENGINE_ERROR_PREFIX = "docker:"

# Seconds `docker ps` may take before the engine counts as down
PING_TIMEOUT = 10.0


class DockerClient:
    """Runs docker subcommands without blocking the event loop.

    Every call spawns the docker CLI with asyncio subprocesses. Failure to
    reach the engine is reported as EnvironmentUnavailableError so callers
    can tell it apart from a container that ran and failed.
    """

    def __init__(self, executable: str = "docker") -> None:
        """Resolve the docker executable.

        Args:
            executable: Name or path of the container engine CLI

        Raises:
            EnvironmentUnavailableError: If the executable cannot be found
        """
        path = shutil.which(executable)
        if path is None:
            raise EnvironmentUnavailableError(
                f"Container engine '{executable}' not found. Install Docker "
                "or set PIPER_TTS_DOCKER to the engine executable."
            )
        self.executable = path

    async def _spawn(
        self, args: list[str], with_stdin: bool = False
    ) -> asyncio.subprocess.Process:
        logger.debug(f"Executing: docker {' '.join(args)}")
        try:
            return await asyncio.create_subprocess_exec(
                self.executable,
                *args,
                stdin=asyncio.subprocess.PIPE if with_stdin else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise EnvironmentUnavailableError(
                f"Failed to execute {self.executable}: {e}", e
            ) from e

    async def _exec(self, args: list[str], timeout: float | None = None) -> JobResult:
        proc = await self._spawn(args)
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
        except TimeoutError as e:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
            raise EnvironmentUnavailableError(
                f"docker {args[0]} did not answer within {timeout}s", e
            ) from e
        return JobResult(exit_code=proc.returncode or 0, stdout=stdout, stderr=stderr)

    async def ping(self) -> None:
        """List at most one container to prove the engine is reachable.

        Raises:
            EnvironmentUnavailableError: If the engine does not answer
                within PING_TIMEOUT seconds or answers with an error
        """
        result = await self._exec(["ps", "--limit", "1", "--quiet"], PING_TIMEOUT)
        if not result.ok:
            raise EnvironmentUnavailableError(
                f"Container engine not reachable: {result.stderr_text}"
            )

    def _is_engine_error(self, result: JobResult) -> bool:
        return (
            result.exit_code == ENGINE_ERROR_EXIT_CODE
            and result.stderr_text.startswith(ENGINE_ERROR_PREFIX)
        )

    async def pull(self, image: str) -> None:
        """Pull an image, logging progress lines at debug level.

        Raises:
            RunnerError: If the pull fails
        """
        result = await self._exec(["pull", image])
        for line in result.stdout.decode("utf-8", errors="replace").splitlines():
            logger.debug(f"[pull] {line}")
        if not result.ok:
            raise RunnerError(f"Failed to pull {image}: {result.stderr_text}")

    async def remove(self, name: str) -> None:
        """Force-remove a container, ignoring containers that are already gone."""
        try:
            result = await self._exec(["rm", "-f", name])
        except EnvironmentUnavailableError as e:
            logger.warning(f"Could not remove container {name}: {e}")
            return
        if not result.ok:
            logger.debug(f"docker rm -f {name}: {result.stderr_text}")

    async def _abort(self, proc: asyncio.subprocess.Process, name: str) -> None:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
        await self.remove(name)

    async def run(self, job: ContainerJob) -> JobResult:
        """Run a container to completion and collect its output.

        If the wait times out or the calling task is cancelled, the docker
        client process is killed and the container is force-removed before
        the exception propagates.

        Args:
            job: The container job to run

        Returns:
            JobResult with the container's exit code and output

        Raises:
            EnvironmentUnavailableError: If the engine is unreachable or refuses
                to start the container (exit 125 with a "docker:" error)
            JobTimeoutError: If the job outlives job.timeout
        """
        proc = await self._spawn(job.to_argv(), with_stdin=job.stdin is not None)
        job.state = JobState.STARTED

        finished = False
        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(job.stdin), timeout=job.timeout
            )
            finished = True
        except TimeoutError as e:
            raise JobTimeoutError(
                f"Container {job.name} did not finish within {job.timeout}s",
                original_error=e,
            ) from e
        finally:
            if not finished:
                job.state = JobState.FAILED
                await self._abort(proc, job.name)

        result = JobResult(exit_code=proc.returncode or 0, stdout=stdout, stderr=stderr)
        if result.ok:
            job.state = JobState.COMPLETED
            return result

        job.state = JobState.FAILED
        # A non-zero exit only counts as a job failure if the engine is up
        await self.ping()
        if self._is_engine_error(result):
            raise EnvironmentUnavailableError(
                f"Container engine could not run {job.image}: {result.stderr_text}"
            )
        return result
