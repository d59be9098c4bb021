from __future__ import annotations

from typing import Any

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "reply": {"type": "string"},
        "summary": {"type": "string"},
        "followUps": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["reply"],
    "additionalProperties": False,
}


def response_format(name: str = "assistant_response") -> dict[str, Any]:
    """`response_format` block asking the endpoint for schema-constrained JSON."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": name,
            "strict": True,
            "schema": RESPONSE_SCHEMA,
        },
    }


__all__ = ["RESPONSE_SCHEMA", "response_format"]
