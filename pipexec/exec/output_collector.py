"""
Output collector module for the final pipeline stage.

Waits for the last process, then turns its exit status and captured bytes
into decoded text or a typed ExecError.
"""

import logging
from dataclasses import dataclass

from .pipeline import RunningProcess
from ..exceptions import (
    ChainingError,
    TerminationBySignal,
    TerminationWithError,
    TerminationWithErrorCode,
    Utf8Error,
)


logger = logging.getLogger(__name__)


@dataclass
class CollectedOutput:
    """Raw result of waiting on a process."""
    returncode: int
    stdout: bytes
    stderr: bytes


class OutputCollector:
    """
    Collects and classifies the output of a finished stage.

    stderr is only used to describe a failure; it is never returned on
    success.
    """

    def collect(self, process: RunningProcess) -> str:
        """
        Block until the process exits and return its decoded stdout.

        Args:
            process: Final stage returned by PipelineExecutor.run

        Returns:
            stdout decoded as UTF-8

        Raises:
            ChainingError: If the process's stdout was handed to another stage
            TerminationBySignal: If the process was killed by a signal
            TerminationWithError: Non-zero exit with UTF-8 stderr
            TerminationWithErrorCode: Non-zero exit with undecodable stderr
            Utf8Error: If stdout is not valid UTF-8
        """
        output = self.wait(process)
        return self.classify(output.returncode, output.stdout, output.stderr)

    def wait(self, process: RunningProcess) -> CollectedOutput:
        """Wait for the process and gather stdout, stderr and status together."""
        # Only the final stage still owns its stdout
        if process.stdout.taken:
            raise ChainingError(f"stdout of stage {process.index} was already consumed")
        stdout, stderr = process.process.communicate()
        self._reap(process)

        returncode = process.process.returncode
        logger.debug(
            f"Stage {process.index} exited with {returncode} "
            f"({len(stdout or b'')} bytes stdout, {len(stderr or b'')} bytes stderr)"
        )
        return CollectedOutput(
            returncode=returncode,
            stdout=stdout or b"",
            stderr=stderr or b"",
        )

    def classify(self, returncode: int, stdout: bytes, stderr: bytes) -> str:
        """
        Convert a raw exit status and captured bytes into text.

        Args:
            returncode: Exit status as reported by subprocess (negative for signals)
            stdout: Captured stdout bytes
            stderr: Captured stderr bytes

        Returns:
            stdout decoded as UTF-8
        """
        if returncode < 0:
            raise TerminationBySignal(-returncode)

        if returncode == 0:
            try:
                return stdout.decode("utf-8")
            except UnicodeDecodeError as e:
                raise Utf8Error(e) from e

        try:
            message = stderr.decode("utf-8")
        except UnicodeDecodeError:
            raise TerminationWithErrorCode(returncode) from None
        raise TerminationWithError(returncode, message)

    def _reap(self, process: RunningProcess) -> None:
        for predecessor in process.predecessors:
            if predecessor.poll() is None:
                logger.debug(f"Upstream pid {predecessor.pid} still running after final stage exited")
