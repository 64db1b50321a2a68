"""The primary entry point for processing one assistant turn.

`QuotePipeline` runs extraction, validation and merge in-process with no I/O,
then derives display text, completeness and an audit record from the same
turn. The input state is never mutated; every outcome carries a new dict.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from quote_pipeline.config import PipelineSettings, resolve_settings
from quote_pipeline.core.exceptions import NoCandidateFound
from quote_pipeline.core.types import (
    Failure,
    TurnOutcome,
    ValidationResult,
)
from quote_pipeline.schema.builtin import default_registry
from quote_pipeline.schema.loader import load_registry
from quote_pipeline.schema.registry import SchemaRegistry

from .audit import AuditLogger
from .completeness import CompletenessChecker
from .extractor import PayloadExtractor
from .merger import StateMerger
from .sanitizer import strip_payload
from .validator import SchemaValidator

log = logging.getLogger(__name__)


class QuotePipeline:
    """Turn raw assistant text into a validated, merged state update.

    Stage instances are exposed as attributes so callers can reuse them
    individually (e.g. `pipeline.completeness.is_complete(state)`).
    """

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        settings: PipelineSettings | None = None,
        *,
        extractor: PayloadExtractor | None = None,
        audit: AuditLogger | None = None,
    ) -> None:
        """Wire the stages.

        Args:
            registry: Schema registry. Defaults to the file named by
                `settings.registry_path`, else the built-in quote registry.
            settings: Pipeline settings. Resolved from the environment when None.
            extractor: Optional extractor with custom strategies.
            audit: Optional audit logger.
        """
        self.settings = settings if settings is not None else resolve_settings()
        if registry is None:
            registry = (
                load_registry(self.settings.registry_path)
                if self.settings.registry_path is not None
                else default_registry()
            )
        self.registry = registry
        limits = self.settings.to_limits()

        self.extractor = extractor if extractor is not None else PayloadExtractor()
        self.validator = SchemaValidator(
            registry, limits, redacted_fields=self.settings.redacted_fields
        )
        self.merger = StateMerger(registry)
        self.completeness = CompletenessChecker(
            registry, max_string_length=limits.max_string_length
        )
        self.audit = (
            audit
            if audit is not None
            else AuditLogger(
                self.settings.redacted_fields, excerpt_length=limits.excerpt_length
            )
        )

    def process_turn(self, text: str, state: Mapping[str, Any]) -> TurnOutcome:
        """Process one assistant message against the current state.

        Args:
            text: Raw assistant text, possibly containing a payload block.
            state: The conversation's current state. Not mutated.

        Returns:
            A `TurnOutcome`. On any rejection its `state` equals `state`.
        """
        previous = dict(state)
        extracted = self.extractor.handle(text)

        if isinstance(extracted, Failure):
            error: NoCandidateFound = extracted.error
            log.debug("No quote payload in turn: %s", error.message)
            return TurnOutcome(
                validation=ValidationResult.rejected(error),
                state=previous,
                display_text=text,
                complete=self.completeness.is_complete(previous),
            )

        candidate = extracted.value
        validation = self.validator.validate(candidate)
        current = (
            self.merger.merge(previous, validation.data)
            if validation.valid
            else dict(previous)
        )
        complete = self.completeness.is_complete(current)
        record = self.audit.record(previous, current, validation, complete=complete)

        return TurnOutcome(
            validation=validation,
            state=current,
            display_text=strip_payload(text, candidate),
            complete=complete,
            candidate=candidate,
            audit=record,
        )


def create_pipeline(
    registry: SchemaRegistry | None = None,
    settings: PipelineSettings | None = None,
) -> QuotePipeline:
    """Create a pipeline, resolving settings from the environment if needed."""
    return QuotePipeline(registry, settings)
