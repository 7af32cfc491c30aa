"""
Command execution entry points.

A single command is a pipeline with one stage.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Union

from .output_collector import OutputCollector
from .pipeline import PipelineExecutor
from ..context.resolver import ContextResolver
from ..context.types import ExecutionContext, Stage


logger = logging.getLogger(__name__)


class Exec(ABC):
    """Interface for running commands in an execution context."""

    @abstractmethod
    def exec(
        self,
        command: str,
        args: Sequence[str] = (),
        context: Optional[ExecutionContext] = None,
    ) -> str:
        """
        Run a command in the provided context.

        Args:
            command: Program to run
            args: Arguments for the program
            context: Direct, LocalImpersonated or Remote (None means Direct)

        Returns:
            The command's stdout
        """

    @abstractmethod
    def exec_piped(self, stages: Sequence[Union[Stage, tuple]]) -> str:
        """
        Run several commands, piping stdout of one into stdin of the next.

        Args:
            stages: Stages or (command, args, context) tuples

        Returns:
            stdout of the last command
        """


class CommandExec(Exec):
    """Runs commands as local OS processes."""

    def __init__(self, resolver: Optional[ContextResolver] = None):
        """
        Initialize command executor.

        Args:
            resolver: Context resolver shared by every stage
        """
        self.resolver = resolver or ContextResolver()
        self.pipeline_executor = PipelineExecutor(self.resolver)
        self.output_collector = OutputCollector()

    def exec(
        self,
        command: str,
        args: Sequence[str] = (),
        context: Optional[ExecutionContext] = None,
    ) -> str:
        return self.exec_piped([Stage(command, args, context)])

    def exec_piped(self, stages: Sequence[Union[Stage, tuple]]) -> str:
        stages = [Stage.coerce(stage) for stage in stages]
        logger.debug(f"Running pipeline of {len(stages)} stage(s)")

        final = self.pipeline_executor.run(stages)
        return self.output_collector.collect(final)


def exec_command(
    command: str,
    args: Sequence[str] = (),
    context: Optional[ExecutionContext] = None,
) -> str:
    """Run a single command with a default CommandExec."""
    return CommandExec().exec(command, args, context)


def exec_piped(stages: Sequence[Union[Stage, tuple]]) -> str:
    """Run a pipeline with a default CommandExec."""
    return CommandExec().exec_piped(stages)
