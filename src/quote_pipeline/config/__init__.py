"""Settings for the quote pipeline.

Key components:
- PipelineSettings: Pydantic settings read from overrides and QUOTE_PIPELINE_* env vars
- ValidationLimits: Frozen validator bounds derived from the settings
- resolve_settings: The one place settings are resolved
"""

from .api import resolve_settings
from .schema import PipelineSettings
from .types import ValidationLimits
from .validation import ConfigValidationError

__all__ = [
    "ConfigValidationError",
    "PipelineSettings",
    "ValidationLimits",
    "resolve_settings",
]
