"""Pipeline stages: extract, validate, merge, and their read-side companions."""

from .audit import AuditLogger
from .completeness import CompletenessChecker
from .extractor import ExtractionStrategy, PayloadExtractor, default_strategies
from .merger import StateMerger, merge_state
from .runner import QuotePipeline, create_pipeline
from .sanitizer import sanitize_text, strip_payload
from .validator import SchemaValidator

__all__ = [
    "AuditLogger",
    "CompletenessChecker",
    "ExtractionStrategy",
    "PayloadExtractor",
    "QuotePipeline",
    "SchemaValidator",
    "StateMerger",
    "create_pipeline",
    "default_strategies",
    "merge_state",
    "sanitize_text",
    "strip_payload",
]
