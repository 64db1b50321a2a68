"""Re-derive whether session state is complete enough for downstream generation.

Nothing is cached: state may have been assembled from many partial merges
and is re-checked against the field specs on every call.
"""

from collections.abc import Mapping
from typing import Any

from quote_pipeline.core.exceptions import RegistryError
from quote_pipeline.schema.builtin import default_registry
from quote_pipeline.schema.models import SchemaVersionSpec
from quote_pipeline.schema.registry import SchemaRegistry


class CompletenessChecker:
    """Gate on the version's ``required_for_completion`` fields."""

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        *,
        version: int | None = None,
        max_string_length: int | None = None,
    ) -> None:
        """Initialize the checker.

        Args:
            registry: Schema registry. Defaults to the built-in quote registry.
            version: Version whose required fields apply. Defaults to the latest.
            max_string_length: Global string cap, as used by the validator.

        Raises:
            RegistryError: If `version` is not registered.
        """
        registry = registry if registry is not None else default_registry()
        if version is None:
            self.spec: SchemaVersionSpec = registry.latest
        else:
            spec = registry.get(version)
            if spec is None:
                raise RegistryError(f"schema version {version!r} is not registered")
            self.spec = spec
        self.max_string_length = max_string_length

    def missing_fields(self, state: Mapping[str, Any]) -> tuple[str, ...]:
        """Required field names that are absent, null, or no longer valid."""
        missing = []
        for name in self.spec.completion_fields:
            field_spec = self.spec.fields[name]
            value = state.get(name)
            if value is None:
                missing.append(name)
                continue
            if field_spec.violation(value, max_string_length=self.max_string_length):
                missing.append(name)
                continue
            floor = field_spec.completion_exclusive_minimum
            if floor is not None and not value > floor:
                missing.append(name)
        return tuple(missing)

    def is_complete(self, state: Mapping[str, Any]) -> bool:
        """True when every required field holds a valid value."""
        if not isinstance(state, Mapping):
            return False
        return not self.missing_fields(state)
