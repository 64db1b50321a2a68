"""Structured, redacted audit records for merge events."""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
import logging
from typing import Any

from quote_pipeline.config.types import DEFAULT_REDACTED_FIELDS
from quote_pipeline.core.excerpts import REDACTED, bounded_excerpt
from quote_pipeline.core.types import AuditRecord, ValidationResult

audit_log = logging.getLogger("quote_pipeline.audit")

_MISSING = object()


def changed_field_names(
    previous: Mapping[str, Any], current: Mapping[str, Any]
) -> tuple[str, ...]:
    """Sorted names whose value differs between the two states."""
    names = set(previous) | set(current)
    return tuple(
        sorted(
            name
            for name in names
            if previous.get(name, _MISSING) != current.get(name, _MISSING)
        )
    )


class AuditLogger:
    """Build and emit an `AuditRecord` for every validated turn.

    Values of fields named in `redacted_fields` never appear in a record or a
    log line; error text is cut to `excerpt_length`.
    """

    def __init__(
        self,
        redacted_fields: Iterable[str] = DEFAULT_REDACTED_FIELDS,
        *,
        excerpt_length: int = 120,
        logger: logging.Logger | None = None,
    ) -> None:
        self.redacted_fields = frozenset(redacted_fields)
        self.excerpt_length = excerpt_length
        self._log = logger if logger is not None else audit_log

    def redact(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Copy `values` with sensitive entries replaced by a marker."""
        return {
            name: REDACTED if name in self.redacted_fields else self._bounded(value)
            for name, value in values.items()
        }

    def record(
        self,
        previous: Mapping[str, Any],
        current: Mapping[str, Any],
        validation: ValidationResult,
        *,
        complete: bool | None = None,
    ) -> AuditRecord:
        """Record one merge event and emit it through the audit logger."""
        changed = changed_field_names(previous, current)
        error = validation.error
        if error is not None:
            # Constraint messages may name the field but must not carry its value
            if validation.field in self.redacted_fields:
                error = f"{validation.field}: {REDACTED}"
            error = bounded_excerpt(error, self.excerpt_length)

        record = AuditRecord(
            timestamp=datetime.now(UTC).isoformat(),
            changed_fields=changed,
            passed=validation.valid,
            error_type=validation.error_type,
            error=error,
            excerpt=self.redact({name: current.get(name) for name in changed}),
            complete=complete,
        )

        if record.passed:
            self._log.info(
                "Quote state updated: changed=%s complete=%s excerpt=%s",
                list(record.changed_fields),
                record.complete,
                dict(record.excerpt),
            )
        else:
            self._log.warning(
                "Quote update rejected: %s: %s", record.error_type, record.error
            )
        return record

    def _bounded(self, value: Any) -> Any:
        if isinstance(value, str):
            return bounded_excerpt(value, self.excerpt_length)
        return value
