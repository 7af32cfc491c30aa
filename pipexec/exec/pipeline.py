"""
Pipeline executor module for spawning chained processes.

Each stage's stdout pipe is handed to the next stage as its stdin, so data
flows between processes through OS pipes and never through this process.
"""

import logging
import subprocess
from typing import IO, List, Optional, Sequence, Union

from ..context.resolver import ContextResolver
from ..context.types import Invocation, Stage
from ..exceptions import ChainingError, IoError


logger = logging.getLogger(__name__)


class PipeHandle:
    """
    Single-owner handle for one readable pipe endpoint.

    The endpoint can be taken exactly once; afterwards the handle is empty.
    """

    def __init__(self, pipe: Optional[IO[bytes]]):
        self._pipe = pipe
        self._taken = False

    @property
    def taken(self) -> bool:
        return self._taken

    def take(self) -> IO[bytes]:
        """
        Transfer ownership of the endpoint to the caller.

        Raises:
            ChainingError: If the endpoint was already taken or never existed
        """
        if self._taken or self._pipe is None:
            raise ChainingError()
        pipe = self._pipe
        self._pipe = None
        self._taken = True
        return pipe

    def close(self) -> None:
        """Close the endpoint if it is still owned here."""
        if self._pipe is not None:
            self._pipe.close()
            self._pipe = None


class RunningProcess:
    """
    A spawned pipeline stage.

    Attributes:
        process: OS process handle
        invocation: Resolved invocation that started it
        index: Position of the stage in the pipeline
        stdout: Handle to the stage's stdout pipe (taken by the next stage)
        predecessors: Earlier stages, kept only so they can be reaped
    """

    def __init__(
        self,
        process: subprocess.Popen,
        invocation: Invocation,
        index: int,
        predecessors: Optional[List[subprocess.Popen]] = None,
    ):
        self.process = process
        self.invocation = invocation
        self.index = index
        self.stdout = PipeHandle(process.stdout)
        self.predecessors = predecessors or []

    def take_stdout(self) -> IO[bytes]:
        return self.stdout.take()

    @property
    def pid(self) -> int:
        return self.process.pid


class PipelineExecutor:
    """
    Spawns a sequence of stages left to right.

    Handles context resolution and pipe wiring; waiting and output
    collection are left to OutputCollector.
    """

    def __init__(self, resolver: Optional[ContextResolver] = None):
        """
        Initialize pipeline executor.

        Args:
            resolver: Context resolver (default: ContextResolver())
        """
        self.resolver = resolver or ContextResolver()

    def run(self, stages: Sequence[Union[Stage, tuple]]) -> RunningProcess:
        """
        Spawn every stage, chaining stdout to stdin.

        Args:
            stages: Ordered stages or (command, args, context) tuples

        Returns:
            Handle to the still-running final stage

        Raises:
            ChainingError: If stages is empty or a predecessor pipe is missing
            IoError: If a stage could not be spawned
        """
        stages = [Stage.coerce(stage) for stage in stages]
        if not stages:
            raise ChainingError("cannot run an empty pipeline")

        current: Optional[RunningProcess] = None
        spawned: List[subprocess.Popen] = []
        last_index = len(stages) - 1

        for index, stage in enumerate(stages):
            invocation = self.resolver.resolve(stage)

            stdin = None
            if current is not None:
                stdin = current.take_stdout()

            try:
                current = self._spawn(invocation, index, stdin, capture_stderr=index == last_index, predecessors=spawned)
            except IoError:
                # Reap any upstream stage that already exited
                for process in spawned:
                    process.poll()
                raise
            spawned = spawned + [current.process]

        assert current is not None
        return current

    def _spawn(
        self,
        invocation: Invocation,
        index: int,
        stdin: Optional[IO[bytes]],
        capture_stderr: bool,
        predecessors: List[subprocess.Popen],
    ) -> RunningProcess:
        logger.debug(f"Spawning stage {index}: {invocation.argv}")

        try:
            # argv mode, never shell=True
            process = subprocess.Popen(
                invocation.argv,
                stdin=stdin,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE if capture_stderr else None,
            )
        except OSError as e:
            logger.debug(f"Stage {index} failed to spawn: {e}")
            raise IoError(e) from e
        finally:
            # The child holds its own copy; closing ours lets upstream see EPIPE
            if stdin is not None:
                stdin.close()

        logger.debug(f"Stage {index} running with pid {process.pid}")
        return RunningProcess(process, invocation, index, predecessors)
