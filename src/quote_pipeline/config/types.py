"""Core configuration data types for the quote pipeline."""

from dataclasses import dataclass

DEFAULT_REDACTED_FIELDS = ("clientName", "projectName")


@dataclass(frozen=True, slots=True)
class ValidationLimits:
    """Immutable bounds handed to the validator.

    This is the frozen form of `PipelineSettings` that flows into
    `SchemaValidator`; it carries no environment or file provenance.
    """

    max_payload_bytes: int = 5000
    max_string_length: int = 500
    max_nesting_depth: int = 5
    max_field_count: int = 25
    max_metadata_keys: int = 10
    excerpt_length: int = 120

    def __post_init__(self) -> None:
        """Reject non-positive limits."""
        for name in (
            "max_payload_bytes",
            "max_string_length",
            "max_nesting_depth",
            "max_field_count",
            "max_metadata_keys",
            "excerpt_length",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ValueError(f"{name}: must be a positive int, got {value!r}")
