"""Settings schema and validation using Pydantic.

This module defines the settings that bound the pipeline's work per turn:
payload size, nesting and count limits, the diagnostic excerpt length, and
the audit redaction list. Values come from programmatic overrides,
``QUOTE_PIPELINE_*`` environment variables, an optional .env file, or the
defaults below.
"""

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import DEFAULT_REDACTED_FIELDS, ValidationLimits


class PipelineSettings(BaseSettings):
    """Pydantic settings schema for the quote pipeline.

    Complex values (``redacted_fields``) are read from the environment as
    JSON, e.g. ``QUOTE_PIPELINE_REDACTED_FIELDS='["clientName"]'``.
    """

    model_config = SettingsConfigDict(
        env_prefix="QUOTE_PIPELINE_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # --- Validator limits ---

    max_payload_bytes: int = Field(
        default=5000,
        description="Maximum UTF-8 byte length of a candidate before parsing",
        ge=1,
    )

    max_string_length: int = Field(
        default=500,
        description="Hard cap on any string value, on top of per-field bounds",
        ge=1,
    )

    max_nesting_depth: int = Field(
        default=5,
        description="Maximum container nesting depth of a parsed payload",
        ge=1,
    )

    max_field_count: int = Field(
        default=25,
        description="Maximum number of keys inside `fields`",
        ge=1,
    )

    max_metadata_keys: int = Field(
        default=10,
        description="Maximum number of keys inside `metadata`",
        ge=1,
    )

    excerpt_length: int = Field(
        default=120,
        description="Maximum length of any diagnostic excerpt that is logged",
        ge=16,
    )

    # --- Audit and session ---

    redacted_fields: tuple[str, ...] = Field(
        default=DEFAULT_REDACTED_FIELDS,
        description="Field names whose values never appear in audit output",
    )

    history_window: int = Field(
        default=5,
        description="How many trailing messages a session replay scans",
        ge=1,
    )

    registry_path: Path | None = Field(
        default=None,
        description="Optional TOML/JSON schema registry file",
    )

    # --- Validation Rules ---

    @field_validator("redacted_fields", mode="before")
    @classmethod
    def parse_redacted_fields(cls, v: Any) -> Any:
        """Accept a comma-separated string when passed programmatically."""
        if isinstance(v, str):
            return tuple(part.strip() for part in v.split(",") if part.strip())
        return v

    @model_validator(mode="after")
    def validate_string_cap_fits_payload(self) -> "PipelineSettings":
        """A single string may not be allowed to outgrow the whole payload."""
        if self.max_string_length > self.max_payload_bytes:
            raise ValueError(
                "max_string_length cannot exceed max_payload_bytes "
                f"({self.max_string_length} > {self.max_payload_bytes})"
            )
        return self

    def to_limits(self) -> ValidationLimits:
        """Freeze the validator-facing subset of the settings."""
        return ValidationLimits(
            max_payload_bytes=self.max_payload_bytes,
            max_string_length=self.max_string_length,
            max_nesting_depth=self.max_nesting_depth,
            max_field_count=self.max_field_count,
            max_metadata_keys=self.max_metadata_keys,
            excerpt_length=self.excerpt_length,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return self.model_dump()
