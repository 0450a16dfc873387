"""Container execution for Piper jobs."""

from .client import DockerClient
from .models import Bind, ContainerJob, JobResult, JobState
from .runner import ContainerRunner

__all__ = [
    "Bind",
    "ContainerJob",
    "ContainerRunner",
    "DockerClient",
    "JobResult",
    "JobState",
]
