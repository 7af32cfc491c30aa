"""
Execution context module for pipexec.

Provides context types, the context resolver, and the named-context registry.
"""

from .types import (
    Direct,
    LocalImpersonated,
    Remote,
    ExecutionContext,
    Stage,
    Invocation,
)
from .resolver import ContextResolver
from .registry import ContextRegistry, context_from_config


__all__ = [
    "Direct",
    "LocalImpersonated",
    "Remote",
    "ExecutionContext",
    "Stage",
    "Invocation",
    "ContextResolver",
    "ContextRegistry",
    "context_from_config",
]
