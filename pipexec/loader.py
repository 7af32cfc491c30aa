"""Pipeline file loader and strict validation."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from pipexec.context.registry import CONTEXT_FIELDS, CONTEXT_TYPES, ContextRegistry
from pipexec.context.resolver import ContextResolver
from pipexec.context.types import Stage
from pipexec.exceptions import ValidationError, PipelineValidationError


@dataclass
class Pipeline:
    """A loaded and validated pipeline definition."""
    stages: List[Stage]
    resolver: ContextResolver
    registry: ContextRegistry
    name: Optional[str] = None
    source: Optional[Path] = None


class PipelineLoader:
    """Loads and validates pipeline YAML files."""

    SUPPORTED_VERSIONS = {"1"}
    TOP_LEVEL_FIELDS = {'version', 'name', 'settings', 'contexts', 'stages'}
    SETTINGS_FIELDS = {'privilege_program', 'remote_program'}
    STAGE_FIELDS = {'command', 'args', 'context'}
    PATH_FIELDS = ('config', 'identity')

    def __init__(self):
        """Initialize loader."""
        self.errors: List[ValidationError] = []

    def load(self, pipeline_path: Path, require_stages: bool = True) -> Pipeline:
        """
        Load and validate a pipeline file.

        Args:
            pipeline_path: Path to the YAML file
            require_stages: Whether an empty or missing 'stages' list is an error

        Returns:
            Pipeline with stages, resolver and context registry

        Raises:
            PipelineValidationError: If the file is unreadable or invalid
        """
        self.errors = []

        try:
            with open(pipeline_path, 'r') as f:
                document = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            self._add_error(f"Failed to load pipeline: {e}")
            self._raise_validation_errors()

        pipeline = self.load_dict(document, require_stages=require_stages)
        pipeline.source = Path(pipeline_path)
        return pipeline

    def load_dict(self, document: Any, require_stages: bool = True) -> Pipeline:
        """Validate an already parsed pipeline document."""
        self.errors = []

        if document is None or not isinstance(document, dict):
            self._add_error("Pipeline must be a YAML object/dictionary")
            self._raise_validation_errors()

        version = document.get('version')
        if version is None:
            self._add_error("'version' field is required")
        elif str(version) not in self.SUPPORTED_VERSIONS:
            self._add_error(f"Unsupported version '{version}'. Supported: {sorted(self.SUPPORTED_VERSIONS)}")

        for key in document.keys():
            if key not in self.TOP_LEVEL_FIELDS:
                self._add_error(f"Unknown field '{key}'", path=str(key))

        resolver = self._build_resolver(document.get('settings') or {})
        registry = self._build_registry(document.get('contexts') or {})

        stages_config = document.get('stages')
        stages: List[Stage] = []
        if stages_config is None or stages_config == []:
            if require_stages:
                self._add_error("'stages' field is required and must not be empty")
        elif not isinstance(stages_config, list):
            self._add_error("'stages' must be a list")
        else:
            stages = self._build_stages(stages_config, registry)

        if self.errors:
            self._raise_validation_errors()

        return Pipeline(
            stages=stages,
            resolver=resolver,
            registry=registry,
            name=document.get('name'),
        )

    def _build_resolver(self, settings: Any) -> ContextResolver:
        if not isinstance(settings, dict):
            self._add_error("'settings' must be a dictionary", path="settings")
            return ContextResolver()

        for key, value in settings.items():
            if key not in self.SETTINGS_FIELDS:
                self._add_error(f"Unknown setting '{key}'", path=f"settings.{key}")
            elif not isinstance(value, str) or not value:
                self._add_error(f"Setting '{key}' must be a non-empty string", path=f"settings.{key}")

        return ContextResolver(
            privilege_program=settings.get('privilege_program') or None,
            remote_program=settings.get('remote_program') or None,
        )

    def _build_registry(self, contexts: Any) -> ContextRegistry:
        registry = ContextRegistry()
        if not isinstance(contexts, dict):
            self._add_error("'contexts' must be a dictionary", path="contexts")
            return registry

        valid = {}
        for name, config in contexts.items():
            normalized = self._validate_context(config, f"contexts.{name}")
            if normalized is not None:
                valid[name] = normalized

        for error in registry.register_from_config(valid):
            self._add_error(error, path="contexts")
        return registry

    def _validate_context(self, config: Any, path: str) -> Optional[Dict[str, Any]]:
        """Check a context mapping's shape; returns it with paths expanded."""
        if not isinstance(config, dict):
            self._add_error(f"{path} must be a dictionary", path=path)
            return None

        context_type = config.get('type', 'direct')
        if context_type not in CONTEXT_TYPES:
            self._add_error(
                f"{path}: type must be one of {list(CONTEXT_TYPES)}, got '{context_type}'",
                path=path,
            )
            return None

        ok = True
        for key, value in config.items():
            if key not in CONTEXT_FIELDS[context_type]:
                self._add_error(f"{path}: unknown field '{key}' for {context_type} context", path=path)
                ok = False
            elif key != 'type' and not isinstance(value, str):
                self._add_error(f"{path}.{key} must be a string", path=f"{path}.{key}")
                ok = False
        if not ok:
            return None

        normalized = dict(config)
        for key in self.PATH_FIELDS:
            if normalized.get(key):
                normalized[key] = os.path.expanduser(normalized[key])
        return normalized

    def _build_stages(self, stages_config: List[Any], registry: ContextRegistry) -> List[Stage]:
        stages = []

        for i, stage_config in enumerate(stages_config):
            path = f"stages[{i}]"
            if not isinstance(stage_config, dict):
                self._add_error(f"Stage {i} must be a dictionary", path=path)
                continue

            for key in stage_config.keys():
                if key not in self.STAGE_FIELDS:
                    self._add_error(f"Stage {i}: unknown field '{key}'", path=path)

            command = stage_config.get('command')
            if not command or not isinstance(command, str):
                self._add_error(f"Stage {i} missing required 'command' string", path=f"{path}.command")
                continue

            args = stage_config.get('args', [])
            if not isinstance(args, list):
                self._add_error(f"Stage {i} ('{command}'): 'args' must be a list", path=f"{path}.args")
                continue
            # YAML scalars such as 10 or true become their string form
            args = [self._stringify(arg) for arg in args]

            reference = stage_config.get('context')
            if isinstance(reference, dict):
                reference = self._validate_context(reference, f"{path}.context")
                if reference is None:
                    continue
            elif reference is not None and not isinstance(reference, str):
                self._add_error(
                    f"Stage {i} ('{command}'): 'context' must be a name or a mapping",
                    path=f"{path}.context",
                )
                continue

            try:
                context = registry.lookup(reference)
            except ValueError as e:
                self._add_error(f"Stage {i} ('{command}'): {e}", path=f"{path}.context")
                continue

            stages.append(Stage(command, tuple(args), context))

        return stages

    @staticmethod
    def _stringify(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def _add_error(self, message: str, path: str = "", exit_code: int = 2):
        """Add validation error."""
        self.errors.append(ValidationError(message, path, exit_code))

    def _raise_validation_errors(self):
        """Raise PipelineValidationError with accumulated errors."""
        raise PipelineValidationError(self.errors)
