"""
Execution module for pipexec.
Handles process spawning, pipe chaining, and output collection.
"""

from .pipeline import PipelineExecutor, RunningProcess, PipeHandle
from .output_collector import OutputCollector, CollectedOutput
from .command_exec import Exec, CommandExec, exec_command, exec_piped

__all__ = [
    "PipelineExecutor",
    "RunningProcess",
    "PipeHandle",
    "OutputCollector",
    "CollectedOutput",
    "Exec",
    "CommandExec",
    "exec_command",
    "exec_piped",
]
