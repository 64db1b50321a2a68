"""Public API for resolving pipeline settings."""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .schema import PipelineSettings
from .validation import ConfigValidationError

log = logging.getLogger(__name__)


def resolve_settings(
    programmatic: dict[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
) -> PipelineSettings:
    """Resolve settings with precedence Programmatic > Environment > .env > Defaults.

    Args:
        programmatic: Dictionary of overrides (highest precedence). Unknown
            keys are ignored with a debug log.
        env_file: Optional .env file read in addition to the process
            environment.

    Returns:
        A frozen `PipelineSettings`.

    Raises:
        ConfigValidationError: If any resolved value is invalid.

    Example:
        settings = resolve_settings({"max_payload_bytes": 8000})
    """
    overrides = dict(programmatic or {})
    known = set(PipelineSettings.model_fields)
    unknown = sorted(set(overrides) - known)
    if unknown:
        log.debug("Ignoring unknown settings overrides: %s", unknown)
        for key in unknown:
            overrides.pop(key)

    try:
        if env_file is not None:
            return PipelineSettings(_env_file=env_file, **overrides)
        return PipelineSettings(**overrides)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        loc = first.get("loc") or ("<multiple>",)
        field = str(loc[0])
        raise ConfigValidationError(
            field=field,
            value=overrides.get(field, first.get("input")),
            message=first.get("msg", str(e)),
            suggestion="Check QUOTE_PIPELINE_* environment variables and overrides",
        ) from e
