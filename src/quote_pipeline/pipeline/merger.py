"""Fold validated payload fields into session state."""

from collections.abc import Iterable, Mapping
import logging
from typing import Any

from quote_pipeline.core.types import Payload, SessionState
from quote_pipeline.schema.builtin import default_registry
from quote_pipeline.schema.registry import SchemaRegistry

log = logging.getLogger(__name__)


def merge_state(
    existing: Mapping[str, Any],
    payload: Payload,
    allowed_fields: Iterable[str],
) -> SessionState:
    """Return a new state with the payload's non-null fields applied.

    For every allow-listed name, a non-null value in ``payload.fields``
    overwrites the prior value; an absent or null value leaves it untouched.
    Keys outside the allow-list are ignored. Values are copied as-is, since
    the validator has already type-checked them. `existing` is never mutated.
    """
    allowed = tuple(allowed_fields)
    merged: SessionState = dict(existing)
    incoming = payload.fields
    for name in allowed:
        value = incoming.get(name)
        if value is not None:
            merged[name] = value

    ignored = set(incoming) - set(allowed)
    if ignored:
        log.warning("Ignoring non-allow-listed fields during merge: %s", sorted(ignored))
    return merged


class StateMerger:
    """Merge payloads using the allow-list of the payload's own schema version."""

    def __init__(self, registry: SchemaRegistry | None = None) -> None:
        self.registry = registry if registry is not None else default_registry()

    def merge(self, existing: Mapping[str, Any], payload: Payload) -> SessionState:
        """Merge one validated payload into `existing`.

        A payload whose version is not registered merges nothing; the
        validator never produces one.
        """
        spec = self.registry.get(payload.schema_version)
        if spec is None:
            log.warning(
                "Refusing to merge payload with unregistered schemaVersion %r",
                payload.schema_version,
            )
            return dict(existing)
        return merge_state(existing, payload, spec.fields)
