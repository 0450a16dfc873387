"""Unit tests for ContainerRunner job construction."""

import threading
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pipertts.container.models import Bind, ContainerJob, JobResult
from pipertts.container.runner import ContainerRunner, length_scale
from pipertts.tts.errors import EnvironmentUnavailableError, JobFailedError

IMAGE = "rhasspy/piper:latest"


def ok_result(stderr: bytes = b"") -> JobResult:
    return JobResult(exit_code=0, stdout=b"", stderr=stderr)


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock()
    client.run = AsyncMock(return_value=ok_result())
    client.pull = AsyncMock()
    client.ping = AsyncMock()
    return client


@pytest.fixture
def runner(client: MagicMock) -> ContainerRunner:
    runner = ContainerRunner(IMAGE, timeout=30.0)
    runner._client = client
    return runner


class TestJobModels:
    """Test bind and job rendering."""

    def test_bind_volume_spec(self) -> None:
        """Test read-write and read-only mounts render as -v specs."""
        assert Bind(Path("/cache"), "/models").to_volume_spec() == "/cache:/models"
        assert (
            Bind(Path("/tmp/a.txt"), "/input/input.txt", read_only=True).to_volume_spec()
            == "/tmp/a.txt:/input/input.txt:ro"
        )

    def test_jobs_get_unique_names(self) -> None:
        """Test each job gets its own container name."""
        first = ContainerJob(image=IMAGE, args=[])
        second = ContainerJob(image=IMAGE, args=[])

        assert first.name.startswith("piper-tts-")
        assert first.name != second.name

    @pytest.mark.parametrize(
        "speed,expected", [(1.0, 1.0), (2.0, 0.5), (0.5, 2.0), (1.25, 0.8)]
    )
    def test_length_scale_is_inverse_speed(self, speed: float, expected: float) -> None:
        """Test speed maps to Piper's length scale as 1/speed."""
        assert length_scale(speed) == pytest.approx(expected)


class TestPrepareModel:
    """Test model download jobs."""

    @pytest.mark.asyncio
    async def test_prepare_model_job(
        self, runner: ContainerRunner, client: MagicMock, tmp_path: Path
    ) -> None:
        """Test the download job mounts the cache dir and asks for --help."""
        cache_dir = tmp_path / "models"

        await runner.prepare_model("en_US-amy-medium", cache_dir)

        job = client.run.await_args.args[0]
        assert job.image == IMAGE
        assert job.args == [
            "--model",
            "en_US-amy-medium",
            "--download-dir",
            "/models",
            "--help",
        ]
        assert job.binds == [Bind(cache_dir, "/models")]
        assert job.timeout == 30.0
        assert cache_dir.is_dir()

    @pytest.mark.asyncio
    async def test_prepare_model_failure_raises(
        self, runner: ContainerRunner, client: MagicMock, tmp_path: Path
    ) -> None:
        """Test a failed download raises JobFailedError with the exit code."""
        client.run.return_value = JobResult(exit_code=1, stdout=b"", stderr=b"404")

        with pytest.raises(JobFailedError, match="404") as exc_info:
            await runner.prepare_model("en_US-amy-medium", tmp_path)

        assert exc_info.value.exit_code == 1


class TestRunSynthesis:
    """Test synthesis jobs."""

    @pytest.fixture
    def paths(self, tmp_path: Path) -> tuple[Path, Path, Path]:
        input_path = tmp_path / "piper-input-abc.txt"
        input_path.write_text("Hello world", encoding="utf-8")
        output_path = tmp_path / "piper-output-abc.wav"
        cache_dir = tmp_path / "models"
        return input_path, output_path, cache_dir

    @pytest.mark.asyncio
    async def test_synthesis_job_arguments(
        self, runner: ContainerRunner, client: MagicMock, paths
    ) -> None:
        """Test the synthesis job passes model, output, length scale and rate."""
        input_path, output_path, cache_dir = paths

        async def _run(job: ContainerJob) -> JobResult:
            output_path.write_bytes(b"RIFF")
            return ok_result()

        client.run.side_effect = _run

        await runner.run_synthesis(
            input_path, output_path, "en_US-lessac-medium", 2.0, 48000, cache_dir
        )

        job = client.run.await_args.args[0]
        assert job.args == [
            "--model",
            "en_US-lessac-medium",
            "--output_file",
            "/output/piper-output-abc.wav",
            "--length_scale",
            "0.5",
            "--sample_rate",
            "48000",
        ]
        assert job.binds == [
            Bind(cache_dir, "/models"),
            Bind(input_path, "/input/input.txt", read_only=True),
            Bind(output_path.parent, "/output"),
        ]
        assert job.stdin == b"Hello world"
        assert "-i" in job.to_argv()

    @pytest.mark.asyncio
    async def test_nonzero_exit_raises_job_failed(
        self, runner: ContainerRunner, client: MagicMock, paths
    ) -> None:
        """Test a failing container raises JobFailedError carrying stderr."""
        input_path, output_path, cache_dir = paths
        client.run.return_value = JobResult(
            exit_code=1, stdout=b"", stderr=b"Unable to find voice"
        )

        with pytest.raises(JobFailedError, match="status 1") as exc_info:
            await runner.run_synthesis(
                input_path, output_path, "en_US-lessac-medium", 1.0, 22050, cache_dir
            )

        assert exc_info.value.stderr == "Unable to find voice"

    @pytest.mark.asyncio
    async def test_missing_output_raises_job_failed(
        self, runner: ContainerRunner, paths
    ) -> None:
        """Test a clean exit without an output file is still a failure."""
        input_path, output_path, cache_dir = paths

        with pytest.raises(JobFailedError, match="did not write"):
            await runner.run_synthesis(
                input_path, output_path, "en_US-lessac-medium", 1.0, 22050, cache_dir
            )


class TestClientLifecycle:
    """Test lazy client creation, release and health checks."""

    def test_client_created_once_across_threads(self) -> None:
        """Test concurrent first use creates exactly one client."""
        runner = ContainerRunner(IMAGE)
        clients = []

        with patch("pipertts.container.runner.DockerClient") as mock_client:
            threads = [
                threading.Thread(target=lambda: clients.append(runner.ensure_client()))
                for _ in range(16)
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        mock_client.assert_called_once_with("docker")
        assert len({id(c) for c in clients}) == 1

    def test_release_drops_client(self) -> None:
        """Test release forgets the client and a later call rebuilds it."""
        runner = ContainerRunner(IMAGE)

        with patch("pipertts.container.runner.DockerClient") as mock_client:
            runner.ensure_client()
            assert runner.has_client

            runner.release()
            assert not runner.has_client

            runner.ensure_client()

        assert mock_client.call_count == 2

    @pytest.mark.asyncio
    async def test_pull_image_uses_configured_image(
        self, runner: ContainerRunner, client: MagicMock
    ) -> None:
        """Test pulling targets the runner's image."""
        await runner.pull_image()

        client.pull.assert_awaited_once_with(IMAGE)

    @pytest.mark.asyncio
    async def test_health_check_reachable(self, runner: ContainerRunner) -> None:
        """Test a successful ping reports healthy."""
        assert await runner.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_unreachable(
        self, runner: ContainerRunner, client: MagicMock
    ) -> None:
        """Test an unreachable engine reports unhealthy instead of raising."""
        client.ping.side_effect = EnvironmentUnavailableError("daemon down")

        assert await runner.health_check() is False

    @pytest.mark.asyncio
    async def test_health_check_missing_executable(self) -> None:
        """Test a missing docker binary reports unhealthy."""
        runner = ContainerRunner(IMAGE)

        with patch("pipertts.container.client.shutil.which", return_value=None):
            assert await runner.health_check() is False
