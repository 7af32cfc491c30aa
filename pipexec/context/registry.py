"""
Context registry for named execution contexts.

Implements context storage, lookup, and construction from pipeline
configuration.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from .types import Direct, ExecutionContext, LocalImpersonated, Remote


logger = logging.getLogger(__name__)


CONTEXT_TYPES = ("direct", "local", "remote")
CONTEXT_FIELDS = {
    "direct": {"type"},
    "local": {"type", "user"},
    "remote": {"type", "host", "config", "user", "identity"},
}


def context_from_config(config: Dict[str, Any]) -> ExecutionContext:
    """
    Build an execution context from a configuration mapping.

    Args:
        config: Mapping with 'type' and the fields for that type

    Returns:
        The matching context value

    Raises:
        ValueError: If the type is unknown or fields are invalid
    """
    context_type = config.get("type", "direct")

    if context_type == "direct":
        return Direct()
    if context_type == "local":
        return LocalImpersonated(user=config.get("user", ""))
    if context_type == "remote":
        return Remote(
            host=config.get("host", ""),
            config=config.get("config"),
            user=config.get("user"),
            identity=config.get("identity"),
        )

    raise ValueError(f"Unknown context type '{context_type}'. Expected one of {list(CONTEXT_TYPES)}")


class ContextRegistry:
    """
    Registry for named execution contexts.

    A built-in 'direct' context is always available; configured contexts
    take precedence over it.
    """

    def __init__(self):
        """Initialize registry with the built-in contexts."""
        self._contexts: Dict[str, ExecutionContext] = {}
        self._builtin_contexts: Dict[str, ExecutionContext] = {"direct": Direct()}

    def register(self, name: str, context: ExecutionContext) -> None:
        """
        Register a named context.

        Args:
            name: Context name
            context: Context value

        Raises:
            ValueError: If name is empty or context is not a context type
        """
        if not name:
            raise ValueError("Context name cannot be empty")
        if not isinstance(context, (Direct, LocalImpersonated, Remote)):
            raise ValueError(f"Context '{name}' is not an execution context: {context!r}")

        self._contexts[name] = context
        logger.debug(f"Registered context: {name} -> {context!r}")

    def register_from_config(self, contexts_config: Dict[str, Dict[str, Any]]) -> List[str]:
        """
        Register contexts from pipeline configuration.

        Args:
            contexts_config: Context definitions from pipeline YAML

        Returns:
            List of errors (empty if all valid)
        """
        errors = []

        for name, config in contexts_config.items():
            try:
                self.register(name, context_from_config(config))
            except ValueError as e:
                errors.append(f"Context '{name}': {e}")

        return errors

    def get(self, name: str) -> Optional[ExecutionContext]:
        """
        Get a context by name.

        Args:
            name: Context name

        Returns:
            The context or None if not found
        """
        return self._contexts.get(name) or self._builtin_contexts.get(name)

    def exists(self, name: str) -> bool:
        return name in self._contexts or name in self._builtin_contexts

    def list_contexts(self) -> List[str]:
        """List all registered context names."""
        return sorted(set(self._contexts.keys()) | set(self._builtin_contexts.keys()))

    def lookup(self, reference: Union[None, str, Dict[str, Any]]) -> ExecutionContext:
        """
        Resolve a stage's context reference.

        Args:
            reference: None (direct), a registered name, or an inline mapping

        Returns:
            The referenced context

        Raises:
            ValueError: If the name is unknown or the mapping is invalid
        """
        if reference is None:
            return Direct()
        if isinstance(reference, dict):
            return context_from_config(reference)

        context = self.get(reference)
        if context is None:
            raise ValueError(f"Unknown context '{reference}'")
        return context
