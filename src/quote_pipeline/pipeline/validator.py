"""Strict, allow-listed validation of candidate payloads.

Each check below is a terminal rejection point. The first failure discards
the whole candidate, so there is no partially valid result:

1. byte length (before any parsing)
2. strict JSON parse
3. object shape and nesting depth
4. ``type`` discriminator and exact ``schemaVersion``
5. top-level keys and ``quoteId``
6. ``fields``: count, allow-list, per-field constraints
7. ``metadata``: count, allow-list, per-key constraints

Rejections are returned as `Failure` values and logged at DEBUG; the audit
logger reports them at WARNING. Excerpts are bounded and the values of
redacted fields are masked. Malformed input never raises out of this module.
"""

from collections.abc import Callable, Iterable
import json
import logging
from typing import Any

from quote_pipeline.config.types import DEFAULT_REDACTED_FIELDS, ValidationLimits
from quote_pipeline.core.exceptions import (
    FieldConstraintError,
    ParseError,
    PayloadRejectedError,
    ShapeError,
    SizeExceeded,
    UnknownFieldError,
    VersionError,
)
from quote_pipeline.core.excerpts import (
    bounded_excerpt,
    masked_excerpt,
    short_repr,
    value_masker,
)
from quote_pipeline.core.types import (
    Candidate,
    Failure,
    Payload,
    Result,
    Success,
    ValidationResult,
)
from quote_pipeline.schema.builtin import default_registry
from quote_pipeline.schema.models import FieldSpec, SchemaVersionSpec
from quote_pipeline.schema.registry import SchemaRegistry

from .base import BaseHandler

log = logging.getLogger(__name__)

TOP_LEVEL_KEYS = frozenset({"type", "schemaVersion", "quoteId", "fields", "metadata"})


class _Rejected(Exception):
    """Internal control flow: carries a rejection out of nested checks."""

    def __init__(self, error: PayloadRejectedError) -> None:
        self.error = error
        super().__init__(error.message)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    for key, value in pairs:
        if key in obj:
            raise ValueError(f"duplicate key {key!r}")
        obj[key] = value
    return obj


def strict_loads(text: str) -> Any:
    """Parse strict JSON: no NaN/Infinity, no duplicate object keys."""
    return json.loads(
        text,
        parse_constant=_reject_constant,
        object_pairs_hook=_reject_duplicate_keys,
    )


def nesting_depth(value: Any) -> int:
    """Container depth of a parsed JSON value; scalars are depth 0."""
    depth = 0
    stack: list[tuple[Any, int]] = [(value, 1)]
    while stack:
        node, level = stack.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue
        depth = max(depth, level)
        stack.extend((child, level + 1) for child in children)
    return depth


class SchemaValidator(
    BaseHandler[Candidate | str, Payload, PayloadRejectedError]
):
    """Validate candidates against a versioned, allow-listed registry.

    Attributes:
        registry: Supported schema versions and their field specs.
        limits: Size, count, depth and excerpt bounds.
    """

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        limits: ValidationLimits | None = None,
        *,
        parser: Callable[[str], Any] | None = None,
        redacted_fields: Iterable[str] = DEFAULT_REDACTED_FIELDS,
    ) -> None:
        """Initialize the validator.

        Args:
            registry: Schema registry. Defaults to the built-in quote registry.
            limits: Validation bounds. Defaults to `ValidationLimits()`.
            parser: JSON parser, replaceable for instrumentation. Defaults to
                `strict_loads`.
            redacted_fields: Field names whose values are masked in every
                excerpt the validator produces.
        """
        self.registry = registry if registry is not None else default_registry()
        self.limits = limits if limits is not None else ValidationLimits()
        self._parse = parser if parser is not None else strict_loads
        self._mask = value_masker(redacted_fields)

    def validate(self, candidate: Candidate | str) -> ValidationResult:
        """Validate one candidate and return an all-or-nothing result."""
        result = self.handle(candidate)
        if isinstance(result, Success):
            return ValidationResult.accepted(result.value)
        return ValidationResult.rejected(result.error)

    def handle(self, command: Candidate | str) -> Result[Payload, PayloadRejectedError]:
        """Run every check in order and stop at the first rejection."""
        text = command.text if isinstance(command, Candidate) else command
        try:
            payload = self._check(text)
        except _Rejected as rejected:
            error = rejected.error
            log.debug(
                "Quote payload rejected (%s, field=%s, rule=%s): %s | excerpt=%r",
                type(error).__name__,
                error.field,
                error.rule,
                error.message,
                error.excerpt,
            )
            return Failure(error)
        log.debug(
            "Quote payload accepted: version=%d fields=%s",
            payload.schema_version,
            sorted(payload.fields),
        )
        return Success(payload)

    # --- Checks ---

    def _excerpt(self, text: str, pos: int | None = None) -> str:
        return masked_excerpt(text, self.limits.excerpt_length, self._mask, pos)

    def _check(self, text: Any) -> Payload:
        limit = self.limits.excerpt_length
        if not isinstance(text, str):
            raise _Rejected(
                ParseError(f"candidate must be text, got {type(text).__name__}")
            )

        self._check_size(text)

        try:
            data = self._parse(text)
        except json.JSONDecodeError as e:
            raise _Rejected(
                ParseError(
                    f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}",
                    rule="syntax",
                    excerpt=self._excerpt(text, e.pos),
                )
            ) from e
        except (ValueError, RecursionError) as e:
            raise _Rejected(
                ParseError(
                    bounded_excerpt(f"invalid JSON: {e}", limit),
                    rule="syntax",
                    excerpt=self._excerpt(text),
                )
            ) from e

        if not isinstance(data, dict):
            raise _Rejected(
                ShapeError(
                    f"payload must be a JSON object, got {type(data).__name__}",
                    rule="object",
                    excerpt=self._excerpt(text),
                )
            )
        depth = nesting_depth(data)
        if depth > self.limits.max_nesting_depth:
            raise _Rejected(
                ShapeError(
                    f"nesting depth {depth} exceeds {self.limits.max_nesting_depth}",
                    rule="max_nesting_depth",
                )
            )

        spec = self._check_version(data)

        for key in data:
            if key not in TOP_LEVEL_KEYS:
                raise _Rejected(
                    UnknownFieldError(
                        f"unknown top-level key {short_repr(key)}", field=str(key)
                    )
                )

        quote_id = data.get("quoteId")
        if quote_id is not None:
            self._check_quote_id(quote_id)

        fields = self._check_section(
            data, "fields", spec.fields, self.limits.max_field_count
        )
        metadata = self._check_section(
            data, "metadata", spec.metadata, self.limits.max_metadata_keys
        )

        return Payload(
            type=data["type"],
            schema_version=spec.version,
            fields=fields,
            metadata=metadata,
            quote_id=quote_id,
        )

    def _check_size(self, text: str) -> None:
        max_bytes = self.limits.max_payload_bytes
        # Every character is at least one byte; skip encoding huge inputs
        size = (
            len(text)
            if len(text) > max_bytes
            else len(text.encode("utf-8", errors="surrogatepass"))
        )
        if size > max_bytes:
            raise _Rejected(
                SizeExceeded(
                    f"payload is {size} bytes; limit is {max_bytes}",
                    rule="max_payload_bytes",
                    excerpt=self._excerpt(text),
                )
            )

    def _check_version(self, data: dict[str, Any]) -> SchemaVersionSpec:
        discriminator = data.get("type")
        if discriminator != self.registry.discriminator:
            raise _Rejected(
                VersionError(
                    f"type must be {self.registry.discriminator!r}, "
                    f"got {short_repr(discriminator)}",
                    field="type",
                    rule="discriminator",
                )
            )
        version = data.get("schemaVersion")
        spec = self.registry.get(version)
        if spec is None:
            raise _Rejected(
                VersionError(
                    f"schemaVersion {short_repr(version)} is not supported; "
                    f"supported: {sorted(self.registry.supported_versions)}",
                    field="schemaVersion",
                    rule="supported_versions",
                )
            )
        return spec

    def _check_quote_id(self, quote_id: Any) -> None:
        if not isinstance(quote_id, str) or not quote_id.strip():
            raise _Rejected(
                FieldConstraintError(
                    "quoteId: expected a non-empty string", field="quoteId", rule="type"
                )
            )
        if len(quote_id) > self.limits.max_string_length:
            raise _Rejected(
                FieldConstraintError(
                    f"quoteId: length exceeds {self.limits.max_string_length}",
                    field="quoteId",
                    rule="max_length",
                )
            )

    def _check_section(
        self,
        data: dict[str, Any],
        section: str,
        specs: dict[str, FieldSpec],
        max_keys: int,
    ) -> dict[str, Any]:
        """Validate `fields` or `metadata`; both follow the same rules."""
        if section not in data:
            return {}
        values = data[section]
        if not isinstance(values, dict):
            raise _Rejected(
                ShapeError(
                    f"{section} must be an object, got {type(values).__name__}",
                    field=section,
                    rule="object",
                )
            )
        if len(values) > max_keys:
            raise _Rejected(
                SizeExceeded(
                    f"{section} has {len(values)} keys; limit is {max_keys}",
                    field=section,
                    rule="max_keys",
                )
            )

        prefix = "" if section == "fields" else f"{section}."
        for name in values:
            if name not in specs:
                raise _Rejected(
                    UnknownFieldError(
                        f"{section} key {short_repr(name)} is not allowed",
                        field=f"{prefix}{name}",
                    )
                )

        for name, value in values.items():
            if value is None:
                continue
            problem = specs[name].violation(
                value, max_string_length=self.limits.max_string_length
            )
            if problem is not None:
                rule, detail = problem
                raise _Rejected(
                    FieldConstraintError(
                        f"{prefix}{name}: {detail}", field=f"{prefix}{name}", rule=rule
                    )
                )
        return dict(values)
