"""Validated, fail-closed quote state updates from language model output."""

import importlib.metadata
import logging

from quote_pipeline.config import PipelineSettings, ValidationLimits, resolve_settings
from quote_pipeline.core.exceptions import (
    FieldConstraintError,
    NoCandidateFound,
    ParseError,
    PayloadRejectedError,
    QuotePipelineError,
    RegistryError,
    RegistryFileError,
    ShapeError,
    SizeExceeded,
    UnknownFieldError,
    VersionError,
)
from quote_pipeline.core.types import (
    AuditRecord,
    Candidate,
    Failure,
    Payload,
    Result,
    SessionState,
    Success,
    TurnOutcome,
    ValidationResult,
)
from quote_pipeline.pipeline import (
    AuditLogger,
    CompletenessChecker,
    PayloadExtractor,
    QuotePipeline,
    SchemaValidator,
    StateMerger,
    create_pipeline,
    merge_state,
    sanitize_text,
    strip_payload,
)
from quote_pipeline.schema import (
    FieldSpec,
    SchemaRegistry,
    SchemaVersionSpec,
    default_registry,
    load_registry,
)
from quote_pipeline.session import QuoteSession

try:
    __version__ = importlib.metadata.version("quote-pipeline")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library code never configures handlers
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Entry points
    "QuotePipeline",
    "QuoteSession",
    "create_pipeline",
    # Stages
    "PayloadExtractor",
    "SchemaValidator",
    "StateMerger",
    "merge_state",
    "CompletenessChecker",
    "strip_payload",
    "sanitize_text",
    "AuditLogger",
    # Core types
    "Candidate",
    "Payload",
    "ValidationResult",
    "TurnOutcome",
    "AuditRecord",
    "SessionState",
    "Result",
    "Success",
    "Failure",
    # Schema registry
    "SchemaRegistry",
    "SchemaVersionSpec",
    "FieldSpec",
    "default_registry",
    "load_registry",
    # Settings
    "PipelineSettings",
    "ValidationLimits",
    "resolve_settings",
    # Exceptions
    "QuotePipelineError",
    "NoCandidateFound",
    "PayloadRejectedError",
    "SizeExceeded",
    "ParseError",
    "ShapeError",
    "VersionError",
    "UnknownFieldError",
    "FieldConstraintError",
    "RegistryError",
    "RegistryFileError",
]
