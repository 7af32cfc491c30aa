"""
Context resolver.

Maps an execution context plus command and arguments to the concrete
program and argument list that realizes it.
"""

from typing import List, Optional, Sequence

from .types import Direct, ExecutionContext, Invocation, LocalImpersonated, Remote, Stage


class ContextResolver:
    """
    Resolves stages into invocations.

    Privilege switch: ``sudo -n -u USER -- COMMAND ARGS...``; the whole
    command vector follows the ``--`` separator.

    Remote shell: ``ssh [-F CONFIG] [-i IDENTITY] [USER@]HOST COMMAND ARGS...``.
    The payload words follow the host unchanged; the remote login shell
    interprets them, so globs and pipes expand on the remote side.
    """

    DEFAULT_PRIVILEGE_PROGRAM = "sudo"
    DEFAULT_REMOTE_PROGRAM = "ssh"

    def __init__(
        self,
        privilege_program: Optional[str] = None,
        remote_program: Optional[str] = None,
    ):
        """
        Initialize resolver.

        Args:
            privilege_program: Program used to switch user (default: sudo)
            remote_program: Program used to reach remote hosts (default: ssh)
        """
        self.privilege_program = privilege_program or self.DEFAULT_PRIVILEGE_PROGRAM
        self.remote_program = remote_program or self.DEFAULT_REMOTE_PROGRAM

    def resolve(self, stage: Stage) -> Invocation:
        """Resolve a stage into the invocation to spawn."""
        return self.resolve_command(stage.command, stage.args, stage.context)

    def resolve_command(
        self,
        command: str,
        args: Sequence[str],
        context: Optional[ExecutionContext] = None,
    ) -> Invocation:
        """
        Resolve command, args and context.

        Args:
            command: Program to run inside the context
            args: Arguments for the program
            context: Execution context (None means Direct)

        Returns:
            Invocation with program and ordered arguments

        Raises:
            TypeError: If context is not a known context type
        """
        args = list(args)

        if context is None or isinstance(context, Direct):
            return Invocation(command, tuple(args))

        if isinstance(context, LocalImpersonated):
            prefix = ["-n", "-u", context.user, "--"]
            return Invocation(self.privilege_program, tuple(prefix + [command] + args))

        if isinstance(context, Remote):
            return Invocation(self.remote_program, tuple(self._remote_args(context, command, args)))

        raise TypeError(f"Unknown execution context: {context!r}")

    def _remote_args(self, context: Remote, command: str, args: List[str]) -> List[str]:
        result = []
        if context.config is not None:
            result.extend(["-F", context.config])
        if context.identity is not None:
            result.extend(["-i", context.identity])

        if context.user is not None:
            result.append(f"{context.user}@{context.host}")
        else:
            result.append(context.host)

        result.append(command)
        result.extend(args)
        return result
