"""
pipexec: run commands and pipelines directly, as another local user, or on
a remote host, behind one interface.
"""

from .context import (
    ContextRegistry,
    ContextResolver,
    Direct,
    ExecutionContext,
    Invocation,
    LocalImpersonated,
    Remote,
    Stage,
)
from .exceptions import (
    ChainingError,
    ExecError,
    ExecutionError,
    IoError,
    PipelineValidationError,
    TerminationBySignal,
    TerminationWithError,
    TerminationWithErrorCode,
    Utf8Error,
    ValidationError,
)
from .exec import CommandExec, Exec, exec_command, exec_piped
from .loader import Pipeline, PipelineLoader

__version__ = "0.1.0"

__all__ = [
    "ContextRegistry",
    "ContextResolver",
    "Direct",
    "ExecutionContext",
    "Invocation",
    "LocalImpersonated",
    "Remote",
    "Stage",
    "ChainingError",
    "ExecError",
    "ExecutionError",
    "IoError",
    "PipelineValidationError",
    "TerminationBySignal",
    "TerminationWithError",
    "TerminationWithErrorCode",
    "Utf8Error",
    "ValidationError",
    "CommandExec",
    "Exec",
    "exec_command",
    "exec_piped",
    "Pipeline",
    "PipelineLoader",
]
