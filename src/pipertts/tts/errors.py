"""Custom TTS exceptions."""


class TTSError(Exception):
    """Base exception for TTS-related errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class ConfigError(TTSError):
    """Exception raised when configuration values are invalid.

    Carries the offending field name and value so callers can report
    exactly which constraint was violated.
    """

    def __init__(self, message: str, field: str, value: object = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class FormatError(TTSError):
    """Exception raised when Piper returns a malformed audio container."""

    pass


class RunnerError(TTSError):
    """Base exception for container execution failures."""

    pass


class EnvironmentUnavailableError(RunnerError):
    """Exception raised when the container engine cannot be reached.

    This typically occurs when:
    - The docker executable is not installed or not on PATH
    - The Docker daemon is not running
    - The engine refuses to create the container (exit status 125)
    """

    pass


class JobFailedError(RunnerError):
    """Exception raised when a container ran but did not succeed.

    This typically occurs when:
    - Piper exits with a non-zero status
    - The expected output file was never written
    """

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        stderr: str = "",
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.exit_code = exit_code
        self.stderr = stderr


class JobTimeoutError(JobFailedError):
    """Exception raised when a container exceeds its deadline."""

    pass


class SynthesisError(TTSError):
    """Exception raised when a synthesis request cannot be fulfilled."""

    pass


class InvalidRequestError(SynthesisError):
    """Exception raised when per-request options are invalid."""

    def __init__(self, message: str, field: str, value: object = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value
