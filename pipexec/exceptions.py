"""pipexec exceptions."""

from typing import List, Optional
from dataclasses import dataclass


class ExecError(Exception):
    """Base class for every failure raised while executing a pipeline."""


class ExecutionError(ExecError):
    """Generic execution failure carrying a diagnostic message."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"error during execution: {message}")


class IoError(ExecError):
    """Spawning a process or handling one of its pipes failed."""

    def __init__(self, error: OSError):
        self.error = error
        super().__init__(str(error))


class Utf8Error(ExecError):
    """Captured output is not valid UTF-8."""

    def __init__(self, error: UnicodeDecodeError):
        self.error = error
        super().__init__(str(error))


class ChainingError(ExecError):
    """The output of the preceding command could not be attached.

    Raised for an empty pipeline and when a predecessor's stdout pipe is
    missing or has already been consumed.
    """

    def __init__(self, message: str = "error getting output of preceding command"):
        super().__init__(message)


class TerminationBySignal(ExecError):
    """The command ended without an exit code."""

    def __init__(self, signal: Optional[int] = None):
        self.signal = signal
        super().__init__("command was terminated by signal")


class TerminationWithErrorCode(ExecError):
    """The command exited non-zero and stderr could not be decoded."""

    def __init__(self, code: int):
        self.code = code
        super().__init__(f"command finished with status code {code}")


class TerminationWithError(TerminationWithErrorCode):
    """The command exited non-zero; ``message`` is its decoded stderr."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        ExecError.__init__(self, f"command finished with status code {code}: {message}")


@dataclass
class ValidationError:
    """Single validation error."""
    message: str
    path: str = ""
    exit_code: int = 2


class PipelineValidationError(Exception):
    """Raised when a pipeline file fails validation.

    This exception is raised by the loader when validation errors occur,
    allowing the CLI to catch it and map to appropriate exit codes.
    """

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors
        self.exit_code = 2  # Default validation exit code

        # Construct error message
        messages = []
        for error in errors:
            messages.append(f"Validation error: {error.message}")

        super().__init__("\n".join(messages))
