"""Core data types that flow through the quote pipeline.

This module defines the immutable data structures handed from one stage to
the next: the extracted `Candidate`, the validated `Payload`, the caller-facing
`ValidationResult`, and the per-turn `TurnOutcome`. Stages never mutate their
inputs; each produces a new value.
"""

from __future__ import annotations

import dataclasses
from types import MappingProxyType
import typing

if typing.TYPE_CHECKING:
    from quote_pipeline.core.exceptions import QuotePipelineError

# --- Minimal guard helpers ---

T = typing.TypeVar("T")


def _freeze_mapping(
    m: dict[str, T] | typing.Mapping[str, T] | None,
) -> typing.Mapping[str, T]:
    """Return an immutable mapping view, empty when `m` is None."""
    if isinstance(m, MappingProxyType):
        return m
    return MappingProxyType(dict(m or {}))


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Result Monad ---
# Stages report rejections as values so malformed model output never
# surfaces as an exception in caller code.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful result in the pipeline."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failure in the pipeline, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- Session state ---

# Field name -> validated value, owned by the calling conversation.
SessionState = dict[str, typing.Any]

ExtractionStrategyName = typing.Literal["fenced_code", "html_pre", "brace_object"]


@dataclasses.dataclass(frozen=True, slots=True)
class Candidate:
    """A substring that may hold a payload, plus where it was found.

    `start`/`end` delimit the whole matched block in the source text,
    including fences or tags, so the sanitizer can remove it regardless of
    which strategy matched. `text` is the inner content handed to the
    validator.
    """

    text: str
    strategy: ExtractionStrategyName
    start: int
    end: int

    def __post_init__(self) -> None:
        """Validate span invariants."""
        _require(
            condition=isinstance(self.text, str),
            message="must be str",
            field_name="text",
            exc=TypeError,
        )
        _require(
            condition=0 <= self.start <= self.end,
            message=f"invalid span ({self.start}, {self.end})",
            field_name="start/end",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class Payload:
    """A validated state update. Only `SchemaValidator` constructs these."""

    type: str
    schema_version: int
    fields: typing.Mapping[str, typing.Any] = dataclasses.field(
        default_factory=lambda: MappingProxyType({})
    )
    metadata: typing.Mapping[str, typing.Any] = dataclasses.field(
        default_factory=lambda: MappingProxyType({})
    )
    quote_id: str | None = None

    def __post_init__(self) -> None:
        """Freeze nested mappings."""
        object.__setattr__(self, "fields", _freeze_mapping(self.fields))
        object.__setattr__(self, "metadata", _freeze_mapping(self.metadata))

    def to_dict(self) -> dict[str, typing.Any]:
        """Return the wire-shaped form of the payload."""
        data: dict[str, typing.Any] = {
            "type": self.type,
            "schemaVersion": self.schema_version,
        }
        if self.quote_id is not None:
            data["quoteId"] = self.quote_id
        if self.fields:
            data["fields"] = dict(self.fields)
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data


@dataclasses.dataclass(frozen=True, slots=True)
class ValidationResult:
    """All-or-nothing outcome of validating one candidate.

    Exactly one of `data` and `error` is set. `error_type` carries the
    taxonomy class name (e.g. ``"FieldConstraintError"``) so callers can branch
    without importing exception classes.
    """

    valid: bool
    data: Payload | None = None
    error: str | None = None
    error_type: str | None = None
    field: str | None = None

    def __post_init__(self) -> None:
        """Enforce that valid results carry data and invalid ones an error."""
        if self.valid:
            _require(
                condition=self.data is not None and self.error is None,
                message="valid result requires data and no error",
            )
        else:
            _require(
                condition=self.data is None and bool(self.error),
                message="invalid result requires an error and no data",
            )

    @classmethod
    def accepted(cls, payload: Payload) -> ValidationResult:
        """Build a passing result."""
        return cls(valid=True, data=payload)

    @classmethod
    def rejected(cls, error: QuotePipelineError) -> ValidationResult:
        """Build a failing result from a taxonomy error."""
        return cls(
            valid=False,
            error=error.message,
            error_type=type(error).__name__,
            field=error.field,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class AuditRecord:
    """Structured, redacted record of one merge event."""

    timestamp: str
    changed_fields: tuple[str, ...]
    passed: bool
    error_type: str | None = None
    error: str | None = None
    excerpt: typing.Mapping[str, typing.Any] = dataclasses.field(
        default_factory=lambda: MappingProxyType({})
    )
    complete: bool | None = None

    def __post_init__(self) -> None:
        """Freeze the excerpt mapping."""
        object.__setattr__(self, "excerpt", _freeze_mapping(self.excerpt))

    def to_dict(self) -> dict[str, typing.Any]:
        """Return a JSON-ready representation."""
        return {
            "timestamp": self.timestamp,
            "changed_fields": list(self.changed_fields),
            "passed": self.passed,
            "error_type": self.error_type,
            "error": self.error,
            "excerpt": dict(self.excerpt),
            "complete": self.complete,
        }


@dataclasses.dataclass(frozen=True, slots=True)
class TurnOutcome:
    """Everything one assistant turn produced.

    `state` is always a fresh dict; on rejection it equals the prior state.
    `audit` is None when no candidate was found, since nothing was validated.
    """

    validation: ValidationResult
    state: SessionState
    display_text: str
    complete: bool
    candidate: Candidate | None = None
    audit: AuditRecord | None = None

    @property
    def updated(self) -> bool:
        """True when a payload was accepted this turn."""
        return self.validation.valid
