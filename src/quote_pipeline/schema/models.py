"""Field and version specifications for quote payloads.

A `SchemaVersionSpec` is configuration data, not code: it names the
allow-listed fields of one schema version and the constraints each value must
satisfy. Each `FieldSpec` renders to a JSON Schema fragment, and
`FieldSpec.violation` checks values against it with a strict Draft 7
validator. The same check is shared by the validator (before merge) and the
completeness checker (at read time).
"""

from datetime import datetime
from functools import lru_cache
import math
from typing import Any, Literal

from jsonschema import Draft7Validator, FormatChecker
from jsonschema.exceptions import ValidationError as SchemaViolation
from jsonschema.validators import extend
from pydantic import BaseModel, ConfigDict, Field, model_validator

from quote_pipeline.core.excerpts import short_repr

FieldKind = Literal["number", "integer", "string", "enum", "string_list"]

Choice = str | int | float

# Most specific rule first; only one violation is reported per value
RULE_NAMES = {
    "type": "type",
    "enum": "enum",
    "minimum": "minimum",
    "maximum": "maximum",
    "minLength": "min_length",
    "maxLength": "max_length",
    "maxItems": "max_items",
    "format": "format",
}
_RULE_ORDER = tuple(RULE_NAMES)


def _is_number(checker: Any, instance: Any) -> bool:
    # bool is an int subclass; ints are exact and never overflow a check
    if isinstance(instance, bool):
        return False
    if isinstance(instance, int):
        return True
    return isinstance(instance, float) and math.isfinite(instance)


def _is_integer(checker: Any, instance: Any) -> bool:
    # 1.0 is not an integer here; values are never coerced
    return isinstance(instance, int) and not isinstance(instance, bool)


StrictValidator = extend(
    Draft7Validator,
    type_checker=Draft7Validator.TYPE_CHECKER.redefine_many(
        {"number": _is_number, "integer": _is_integer}
    ),
)

format_checker = FormatChecker(formats=())


@format_checker.checks("date-time", raises=ValueError)
def is_rfc3339_datetime(value: object) -> bool:
    """RFC 3339 date-time: a date, a ``T`` separator, a time and an offset."""
    if not isinstance(value, str):
        return True
    if len(value) < 19 or value[10] not in "Tt":
        return False
    return datetime.fromisoformat(value).tzinfo is not None


@lru_cache(maxsize=256)
def _compiled(spec: "FieldSpec", max_string_length: int | None) -> Draft7Validator:
    return StrictValidator(
        spec.to_json_schema(max_string_length=max_string_length),
        format_checker=format_checker,
    )


def _describe(error: SchemaViolation) -> str:
    """Explain a violation without echoing string values."""
    rule = error.validator
    bound = error.validator_value
    instance = error.instance
    if rule == "type":
        return f"expected {bound}, got {type(instance).__name__}"
    if rule == "enum":
        return f"value not in allowed values {list(bound)}"
    if rule in ("minimum", "maximum"):
        side = "below" if rule == "minimum" else "above"
        return f"{short_repr(instance)} is {side} {rule} {bound}"
    if rule in ("minLength", "maxLength"):
        return f"length {len(instance)} violates {RULE_NAMES[rule]} {bound}"
    if rule == "maxItems":
        return f"{len(instance)} items exceeds max_items {bound}"
    if rule == "format":
        return "not an RFC 3339 date-time"
    return f"violates {rule}"


class FieldSpec(BaseModel):
    """Constraints for one allow-listed field.

    The field's name is its key in the owning version's mapping.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: FieldKind
    minimum: float | None = None
    maximum: float | None = None
    choices: tuple[Choice, ...] | None = None
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    max_items: int | None = Field(default=None, ge=0)
    format: Literal["date-time"] | None = None
    required_for_completion: bool = False
    completion_exclusive_minimum: float | None = None
    description: str = ""

    @model_validator(mode="after")
    def check_consistency(self) -> "FieldSpec":
        """Reject specs that no value could ever satisfy."""
        if self.kind == "enum" and not self.choices:
            raise ValueError("enum fields require non-empty choices")
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise ValueError(f"minimum {self.minimum} exceeds maximum {self.maximum}")
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError(
                f"min_length {self.min_length} exceeds max_length {self.max_length}"
            )
        if self.format is not None and self.kind != "string":
            raise ValueError("format applies to string fields only")
        if self.completion_exclusive_minimum is not None and self.kind not in (
            "number",
            "integer",
        ):
            raise ValueError("completion_exclusive_minimum applies to numeric fields")
        return self

    def to_json_schema(
        self, *, max_string_length: int | None = None
    ) -> dict[str, Any]:
        """Render this spec as a JSON Schema (Draft 7) fragment.

        Args:
            max_string_length: Global cap applied on top of `max_length`.
        """
        schema: dict[str, Any] = {}
        if self.kind in ("number", "integer"):
            schema["type"] = self.kind
            if self.minimum is not None:
                schema["minimum"] = self.minimum
            if self.maximum is not None:
                schema["maximum"] = self.maximum
        elif self.kind == "string":
            schema["type"] = "string"
            if self.min_length is not None:
                schema["minLength"] = self.min_length
            caps = [c for c in (self.max_length, max_string_length) if c is not None]
            if caps:
                schema["maxLength"] = min(caps)
            if self.format is not None:
                schema["format"] = self.format
        elif self.kind == "string_list":
            item: dict[str, Any] = {"type": "string"}
            if max_string_length is not None:
                item["maxLength"] = max_string_length
            schema.update(type="array", items=item)
            if self.max_items is not None:
                schema["maxItems"] = self.max_items
        if self.choices is not None:
            schema["enum"] = list(self.choices)
        if self.description:
            schema["description"] = self.description
        return schema

    def violation(
        self, value: Any, *, max_string_length: int | None = None
    ) -> tuple[str, str] | None:
        """Check one non-null value against this spec.

        Args:
            value: The candidate value. Callers handle ``None`` themselves.
            max_string_length: Global cap applied on top of `max_length`.

        Returns:
            ``(rule, message)`` for the most specific violated rule, or None.
            Messages never echo string values.
        """
        errors = list(_compiled(self, max_string_length).iter_errors(value))
        if not errors:
            return None
        error = min(
            errors,
            key=lambda e: (
                _RULE_ORDER.index(e.validator)
                if e.validator in _RULE_ORDER
                else len(_RULE_ORDER)
            ),
        )
        return RULE_NAMES.get(error.validator, str(error.validator)), _describe(error)


class SchemaVersionSpec(BaseModel):
    """The fixed field set of one schema version."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: int = Field(ge=1, strict=True)
    description: str = ""
    fields: dict[str, FieldSpec] = Field(default_factory=dict)
    metadata: dict[str, FieldSpec] = Field(default_factory=dict)

    @property
    def allowed_fields(self) -> frozenset[str]:
        """Names permitted inside `fields`."""
        return frozenset(self.fields)

    @property
    def allowed_metadata(self) -> frozenset[str]:
        """Names permitted inside `metadata`."""
        return frozenset(self.metadata)

    @property
    def completion_fields(self) -> tuple[str, ...]:
        """Names that must hold valid values before the state counts as complete."""
        return tuple(
            name for name, spec in self.fields.items() if spec.required_for_completion
        )
