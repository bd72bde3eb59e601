"""Schema validation for rhodibot JSON artifacts, loaded from package data."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib.resources import files
from typing import Any

from jsonschema.validators import Draft202012Validator

SCHEMA_PACKAGE = "rhodibot.schemas"
REPORT_SCHEMA = "report"


class SchemaValidationError(ValueError):
    """Raised when an artifact does not satisfy its packaged schema."""

    def __init__(self, schema_name: str, errors: list[str]) -> None:
        super().__init__(
            f"Schema validation failed for '{schema_name}':\n"
            + "\n".join(f"  - {msg}" for msg in errors)
        )
        self.schema_name = schema_name
        self.errors = errors


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict[str, Any]:
    """Load ``<name>.schema.json`` from package data.

    Raises:
        KeyError: If no such schema is bundled
    """
    resource = files(SCHEMA_PACKAGE) / f"{name}.schema.json"
    if not resource.is_file():
        raise KeyError(f"Schema '{name}' not found in rhodibot package data")
    return json.loads(resource.read_text(encoding="utf-8"))


def validate_data(data: dict[str, Any], schema_name: str, strict: bool = True) -> tuple[bool, list[str]]:
    """Validate ``data`` against a packaged schema.

    Args:
        data: JSON-compatible payload
        schema_name: Schema name without the ``.schema.json`` suffix
        strict: Raise on failure instead of returning the error list

    Returns:
        Tuple of (is_valid, error_messages)

    Raises:
        SchemaValidationError: If validation fails and strict=True
    """
    validator = Draft202012Validator(load_schema(schema_name))
    errors = [
        f"{'.'.join(str(p) for p in e.path)}: {e.message}" if e.path else e.message
        for e in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    ]

    if errors and strict:
        raise SchemaValidationError(schema_name, errors)
    return not errors, errors
