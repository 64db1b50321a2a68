"""Schema registry: versioned, allow-listed field specifications."""

from .builtin import ANC_QUOTE_DISCRIMINATOR, default_registry
from .loader import load_registry
from .models import FieldSpec, SchemaVersionSpec
from .registry import SchemaRegistry

__all__ = [
    "ANC_QUOTE_DISCRIMINATOR",
    "FieldSpec",
    "SchemaRegistry",
    "SchemaVersionSpec",
    "default_registry",
    "load_registry",
]
