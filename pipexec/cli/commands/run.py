"""Run command implementation."""

import logging
import sys
from argparse import Namespace
from pathlib import Path

from pipexec.exceptions import (
    ExecError,
    PipelineValidationError,
    TerminationBySignal,
    TerminationWithError,
    TerminationWithErrorCode,
)
from pipexec.exec import CommandExec
from pipexec.loader import PipelineLoader


logger = logging.getLogger(__name__)


def setup_logging(args: Namespace) -> None:
    """Configure root logging from the common CLI flags."""
    log_level = getattr(logging, args.log_level.upper())
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR
    elif args.verbose:
        log_level = logging.DEBUG

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def exit_code_for(error: ExecError) -> int:
    """
    Map an execution failure to a process exit code.

    Non-zero exits of the final stage are passed through, signals become
    128+N, anything else is 1.
    """
    if isinstance(error, TerminationWithErrorCode):
        return error.code
    if isinstance(error, TerminationBySignal) and error.signal:
        return 128 + error.signal
    return 1


def report_failure(error: ExecError) -> int:
    """Log an execution failure and return the exit code for it."""
    if isinstance(error, TerminationWithError):
        if error.message:
            sys.stderr.write(error.message)
            if not error.message.endswith('\n'):
                sys.stderr.write('\n')
        logger.error(f"Command finished with status code {error.code}")
    else:
        logger.error(f"Execution failed: {error}")
    return exit_code_for(error)


def run_pipeline(args: Namespace) -> int:
    """Load a pipeline file and execute it."""
    setup_logging(args)

    pipeline_path = Path(args.pipeline).resolve()
    if not pipeline_path.exists():
        logger.error(f"Pipeline file not found: {pipeline_path}")
        return 1

    logger.info(f"Loading pipeline: {pipeline_path}")
    loader = PipelineLoader()
    try:
        pipeline = loader.load(pipeline_path)
    except PipelineValidationError as e:
        for error in e.errors:
            logger.error(f"Validation error: {error.message}")
        return e.exit_code

    if args.dry_run:
        for index, stage in enumerate(pipeline.stages):
            invocation = pipeline.resolver.resolve(stage)
            logger.info(f"[DRY RUN] Stage {index}: {invocation.argv}")
        logger.info("[DRY RUN] Pipeline validation successful")
        return 0

    executor = CommandExec(pipeline.resolver)
    try:
        output = executor.exec_piped(pipeline.stages)
    except ExecError as e:
        return report_failure(e)

    sys.stdout.write(output)
    sys.stdout.flush()
    return 0
