"""
Global test configuration for the quote pipeline test suite.
"""

import json
import os
from typing import Any

import pytest

from quote_pipeline.config import PipelineSettings
from quote_pipeline.pipeline import QuotePipeline
from quote_pipeline.schema import default_registry

MARKERS = (
    "unit: fast, isolated tests of a single stage",
    "contract: behavioral guarantees that must hold across stages",
    "security: redaction and leakage guarantees",
    "integration: end-to-end turns through the full pipeline",
)


def pytest_configure(config):
    for marker in MARKERS:
        config.addinivalue_line("markers", marker)


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_pipeline_env(request, monkeypatch):
    """Ensure a clean QUOTE_PIPELINE_* environment for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the environment.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("QUOTE_PIPELINE_"):
            monkeypatch.delenv(key, raising=False)


# --- Builders ---

BASE_FIELDS: dict[str, Any] = {
    "width": 40,
    "height": 20,
    "environment": "Indoor",
    "pixelPitch": 4,
    "finalPrice": 52000,
}


def build_payload(**overrides: Any) -> dict[str, Any]:
    """A schema-conformant payload dict; keyword overrides replace top-level keys."""
    payload: dict[str, Any] = {
        "type": "anc_quote_update",
        "schemaVersion": 1,
        "fields": dict(BASE_FIELDS),
    }
    payload.update(overrides)
    return payload


def fenced(payload: dict[str, Any] | str, tag: str = "json") -> str:
    body = payload if isinstance(payload, str) else json.dumps(payload)
    return f"```{tag}\n{body}\n```"


@pytest.fixture
def payload_factory():
    """Return the payload builder."""
    return build_payload


@pytest.fixture
def fence():
    """Return the fenced-block formatter."""
    return fenced


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def settings():
    return PipelineSettings()


@pytest.fixture
def pipeline(registry, settings):
    return QuotePipeline(registry, settings)
