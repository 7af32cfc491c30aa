"""CLI command handlers."""

from .run import run_pipeline
from .exec import exec_command

__all__ = ['run_pipeline', 'exec_command']
