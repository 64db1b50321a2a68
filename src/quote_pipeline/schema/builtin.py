"""Built-in schema for ANC LED display quote updates.

Version 1 mirrors the quote form: display geometry, product choices, cost
breakdown and status. Fields flagged ``required_for_completion`` gate the
downstream price and document generation.
"""

from functools import cache
from typing import Any

from .registry import SchemaRegistry

ANC_QUOTE_DISCRIMINATOR = "anc_quote_update"


def _number(minimum=None, maximum=None, **extra: Any) -> dict[str, Any]:
    spec: dict[str, Any] = {"kind": "number", **extra}
    if minimum is not None:
        spec["minimum"] = minimum
    if maximum is not None:
        spec["maximum"] = maximum
    return spec


def _enum(*choices: Any, **extra: Any) -> dict[str, Any]:
    return {"kind": "enum", "choices": list(choices), **extra}


def _text(min_length: int, max_length: int) -> dict[str, Any]:
    return {"kind": "string", "min_length": min_length, "max_length": max_length}


ANC_QUOTE_REGISTRY_DATA: dict[str, Any] = {
    "discriminator": ANC_QUOTE_DISCRIMINATOR,
    "versions": {
        "1": {
            "description": "Initial version with core quote fields",
            "fields": {
                "width": _number(
                    5,
                    500,
                    description="Display width in feet",
                    required_for_completion=True,
                    completion_exclusive_minimum=0,
                ),
                "height": _number(
                    5,
                    500,
                    description="Display height in feet",
                    required_for_completion=True,
                    completion_exclusive_minimum=0,
                ),
                "environment": _enum(
                    "Indoor",
                    "Outdoor",
                    "Mixed",
                    description="Installation environment",
                    required_for_completion=True,
                ),
                "pixelPitch": _enum(
                    1.5,
                    2,
                    3,
                    4,
                    6,
                    8,
                    10,
                    12,
                    description="LED pixel pitch in millimeters",
                    required_for_completion=True,
                ),
                "screenArea": _number(0, description="Screen area in square feet"),
                "clientName": _text(2, 100),
                "projectName": _text(2, 100),
                "productCategory": _enum(
                    "LED Display", "Scoreboard", "Ribbon Board", "Custom"
                ),
                "serviceLevel": _enum("Self-Install", "Partial Service", "Full Service"),
                "steelType": _enum("New", "Existing"),
                "powerDistanceFeet": _number(0, 1000),
                "budget": _number(0),
                "hardwareCost": _number(0),
                "structuralCost": _number(0),
                "laborCost": _number(0),
                "pmFee": _number(0),
                "contingency": _number(0),
                "totalCost": _number(0),
                "finalPrice": _number(
                    0,
                    description="Final client-facing price",
                    required_for_completion=True,
                    completion_exclusive_minimum=0,
                ),
                "grossProfit": _number(),
                "marginPercent": _number(0, 100),
                "status": _enum("partial", "complete", "revision"),
            },
            "metadata": {
                "timestamp": {"kind": "string", "format": "date-time"},
                "turnNumber": {"kind": "integer", "minimum": 0},
                "changedFields": {"kind": "string_list", "max_items": 25},
            },
        },
    },
}


@cache
def default_registry() -> SchemaRegistry:
    """Return the built-in ANC quote registry."""
    return SchemaRegistry.from_mapping(ANC_QUOTE_REGISTRY_DATA)
