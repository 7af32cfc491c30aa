"""Exec command implementation: run one command in a chosen context."""

import logging
import sys
from argparse import Namespace
from pathlib import Path
from typing import Optional

from pipexec.context import Direct, ExecutionContext, LocalImpersonated, Remote
from pipexec.context.resolver import ContextResolver
from pipexec.exceptions import ExecError, PipelineValidationError
from pipexec.exec import CommandExec
from pipexec.loader import PipelineLoader

from .run import report_failure, setup_logging


logger = logging.getLogger(__name__)


def context_from_args(args: Namespace) -> ExecutionContext:
    """
    Build the execution context from command-line flags.

    Raises:
        ValueError: If the flags are inconsistent
    """
    if args.user and args.host:
        raise ValueError("--user and --host are mutually exclusive")

    remote_only = {
        '--ssh-config': args.ssh_config,
        '--ssh-user': args.ssh_user,
        '--identity': args.identity,
    }
    if not args.host:
        given = [flag for flag, value in remote_only.items() if value]
        if given:
            raise ValueError(f"{', '.join(given)} require --host")

    if args.user:
        return LocalImpersonated(args.user)
    if args.host:
        return Remote(
            host=args.host,
            config=args.ssh_config,
            user=args.ssh_user,
            identity=args.identity,
        )
    return Direct()


def exec_command(args: Namespace) -> int:
    """Run a single command and print its output."""
    setup_logging(args)

    resolver: Optional[ContextResolver] = None
    try:
        if args.context:
            if not args.config:
                logger.error("--context requires --config")
                return 2
            if args.user or args.host:
                logger.error("--context cannot be combined with --user or --host")
                return 2
            if args.ssh_config or args.ssh_user or args.identity:
                logger.error("--context cannot be combined with --ssh-config, --ssh-user or --identity")
                return 2
            pipeline = PipelineLoader().load(Path(args.config), require_stages=False)
            context = pipeline.registry.lookup(args.context)
            resolver = pipeline.resolver
        else:
            if args.config:
                logger.error("--config requires --context")
                return 2
            context = context_from_args(args)
    except PipelineValidationError as e:
        for error in e.errors:
            logger.error(f"Validation error: {error.message}")
        return e.exit_code
    except ValueError as e:
        logger.error(str(e))
        return 2

    executor = CommandExec(resolver)
    try:
        output = executor.exec(args.cmd, args.args, context)
    except ExecError as e:
        return report_failure(e)

    sys.stdout.write(output)
    sys.stdout.flush()
    return 0
