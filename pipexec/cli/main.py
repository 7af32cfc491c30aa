"""Main CLI entry point for pipexec."""

import argparse
import sys
from typing import Optional

from .commands import exec_command, run_pipeline


def add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the logging flags shared by every command."""
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default='warn',
        help='Set log level'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the pipexec CLI."""
    parser = argparse.ArgumentParser(
        prog='pipexec',
        description='Run commands and pipelines directly, as another user, or on remote hosts'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Run command
    run_parser = subparsers.add_parser('run', help='Run a pipeline file')
    run_parser.add_argument(
        'pipeline',
        type=str,
        help='Path to pipeline YAML file'
    )
    run_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Validate and show resolved commands without execution'
    )
    add_logging_arguments(run_parser)

    # Exec command
    exec_parser = subparsers.add_parser('exec', help='Run a single command')
    exec_parser.add_argument(
        '--user',
        type=str,
        help='Run as this local user'
    )
    exec_parser.add_argument(
        '--host',
        type=str,
        help='Run on this remote host'
    )
    exec_parser.add_argument(
        '--ssh-config',
        type=str,
        metavar='FILE',
        help='ssh configuration file for --host'
    )
    exec_parser.add_argument(
        '--ssh-user',
        type=str,
        help='Login name on the remote host'
    )
    exec_parser.add_argument(
        '--identity',
        type=str,
        metavar='FILE',
        help='ssh identity file for --host'
    )
    exec_parser.add_argument(
        '--context',
        type=str,
        metavar='NAME',
        help='Named context from --config'
    )
    exec_parser.add_argument(
        '--config',
        type=str,
        metavar='FILE',
        help='Pipeline YAML file providing contexts and settings'
    )
    add_logging_arguments(exec_parser)
    exec_parser.add_argument(
        'cmd',
        type=str,
        help='Command to run'
    )
    exec_parser.add_argument(
        'args',
        nargs=argparse.REMAINDER,
        help='Arguments for the command'
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'run':
        return run_pipeline(parsed_args)
    elif parsed_args.command == 'exec':
        return exec_command(parsed_args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
