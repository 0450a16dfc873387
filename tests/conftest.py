"""Pytest configuration and fixtures for pipertts tests."""

import sys
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pipertts.container.runner import ContainerRunner
from test_helpers import make_wav


@pytest.fixture(autouse=True)
def clear_piper_env(monkeypatch) -> None:
    """Keep PIPER_TTS_* variables from the developer's shell out of tests."""
    for name in (
        "PIPER_TTS_IMAGE",
        "PIPER_TTS_VOICE",
        "PIPER_TTS_SAMPLE_RATE",
        "PIPER_TTS_SPEED",
        "PIPER_TTS_MODEL_CACHE",
        "PIPER_TTS_TIMEOUT",
        "PIPER_TTS_DOCKER",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_dir(monkeypatch, tmp_path: Path) -> Generator[Path, None, None]:
    """Point tempfile.gettempdir() at a per-test directory."""
    work = tmp_path / "tmp"
    work.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(work))
    yield work


@pytest.fixture
def fake_runner() -> MagicMock:
    """ContainerRunner double whose synthesis job writes a valid WAV file.

    The payload written is available as fake_runner.payload.
    """
    runner = MagicMock(spec=ContainerRunner)
    runner.payload = b"\x01\x02" * 64
    runner.pull_image = AsyncMock()
    runner.prepare_model = AsyncMock()
    runner.health_check = AsyncMock(return_value=True)

    async def _write_output(
        input_path: Path,
        output_path: Path,
        voice_id: str,
        speed: float,
        sample_rate: int,
        cache_dir: Path,
    ) -> None:
        output_path.write_bytes(make_wav(runner.payload, sample_rate))

    runner.run_synthesis = AsyncMock(side_effect=_write_output)
    return runner
