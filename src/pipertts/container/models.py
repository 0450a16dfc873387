"""Data models for ephemeral container jobs."""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class JobState(Enum):
    """Lifecycle of a single container job. There is no pause or retry."""

    CREATED = "created"
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Bind:
    """A host path mounted into the container.

    Attributes:
        host_path: Absolute path on the host
        job_path: Mount point inside the container
        read_only: Mount read-only when True
    """

    host_path: Path
    job_path: str
    read_only: bool = False

    def to_volume_spec(self) -> str:
        """Render as a `docker run -v` argument."""
        spec = f"{self.host_path}:{self.job_path}"
        if self.read_only:
            spec += ":ro"
        return spec


@dataclass
class ContainerJob:
    """One single-shot container invocation.

    The container is always started with --rm so the engine removes it
    when the process exits.
    """

    image: str
    args: list[str]
    binds: list[Bind] = field(default_factory=list)
    stdin: bytes | None = None
    timeout: float | None = None
    name: str = field(default_factory=lambda: f"piper-tts-{uuid.uuid4().hex[:12]}")
    state: JobState = JobState.CREATED

    def to_argv(self) -> list[str]:
        """Build the `docker run` argument list for this job."""
        argv = ["run", "--rm", "--name", self.name]
        if self.stdin is not None:
            argv.append("-i")
        for bind in self.binds:
            argv.extend(["-v", bind.to_volume_spec()])
        argv.append(self.image)
        argv.extend(self.args)
        return argv


@dataclass(frozen=True)
class JobResult:
    """Exit status and captured output of a finished container."""

    exit_code: int
    stdout: bytes
    stderr: bytes

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace").strip()
