"""
Execution context type definitions.

Defines where, and as whom, a pipeline stage runs, plus the stage and
resolved invocation value types.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union


@dataclass(frozen=True)
class Direct:
    """Run the command exactly as given."""


@dataclass(frozen=True)
class LocalImpersonated:
    """
    Run the command locally as another user.

    Attributes:
        user: Name of the local user who will execute the command
    """
    user: str

    def __post_init__(self):
        if not isinstance(self.user, str) or not self.user:
            raise ValueError("LocalImpersonated context requires a non-empty user")


@dataclass(frozen=True)
class Remote:
    """
    Run the command on a remote host.

    Attributes:
        host: Name of the remote host
        config: Path to an ssh configuration file (passed verbatim)
        user: Login name on the remote host
        identity: Path to the ssh identity file (passed verbatim)
    """
    host: str
    config: Optional[str] = None
    user: Optional[str] = None
    identity: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.host, str) or not self.host:
            raise ValueError("Remote context requires a non-empty host")
        # a leading dash would be read as a remote-shell option
        if self.host.startswith("-"):
            raise ValueError(f"Remote host must not start with '-': {self.host!r}")
        for name in ("config", "user", "identity"):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, str) or not value):
                raise ValueError(f"Remote context '{name}' must be a non-empty string when set")


ExecutionContext = Union[Direct, LocalImpersonated, Remote]


@dataclass(frozen=True)
class Stage:
    """
    One command-plus-context unit within a pipeline.

    Attributes:
        command: Program to run
        args: Ordered arguments
        context: Execution context (None means Direct)
    """
    command: str
    args: Tuple[str, ...] = ()
    context: Optional[ExecutionContext] = None

    def __post_init__(self):
        if not isinstance(self.command, str) or not self.command:
            raise ValueError("Stage command must be a non-empty string")
        if isinstance(self.args, str):
            raise ValueError(f"Stage '{self.command}': args must be a sequence of strings, not a string")
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "args", tuple(self.args))
        for arg in self.args:
            if not isinstance(arg, str):
                raise ValueError(f"Stage '{self.command}': every argument must be a string, got {arg!r}")
        if self.context is None:
            object.__setattr__(self, "context", Direct())
        elif not isinstance(self.context, (Direct, LocalImpersonated, Remote)):
            raise TypeError(f"Stage '{self.command}': unknown execution context {self.context!r}")

    @classmethod
    def coerce(cls, value: Union["Stage", Sequence]) -> "Stage":
        """Build a Stage from a Stage or a (command, args[, context]) tuple."""
        if isinstance(value, Stage):
            return value
        if isinstance(value, (tuple, list)) and len(value) in (2, 3):
            return cls(*value)
        raise TypeError(
            f"Expected Stage or (command, args, context) tuple, got {value!r}"
        )


@dataclass(frozen=True)
class Invocation:
    """
    Concrete program and arguments to spawn.

    Attributes:
        program: Program name or path
        args: Ordered argument list
    """
    program: str
    args: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def argv(self) -> List[str]:
        return [self.program, *self.args]
