"""Schema validation for reference data records."""

from __future__ import annotations

import json
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from jsonschema import Draft202012Validator

SCHEMA_DIR = Path(__file__).resolve().parent / "schema"

# Logical schema name -> file in ``SCHEMA_DIR``.
SCHEMA_FILES: dict[str, str] = {
    "units": "units.schema.json",
    "products": "products.schema.json",
    "recipes": "recipes.schema.json",
    "ingredient_profiles": "ingredient_profiles.schema.json",
}

__all__ = [
    "MalformedReferenceDataError",
    "SCHEMA_FILES",
    "load_schema",
    "validate_records",
]


class MalformedReferenceDataError(ValueError):
    """Raised when units, catalog or recipe records are missing required data."""

    def __init__(self, source: str, issues: Iterable[str]) -> None:
        self.source = source
        self.issues = list(issues)
        detail = "; ".join(self.issues) or "invalid data"
        super().__init__(f"Malformed reference data in {source}: {detail}")


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict[str, Any]:
    """Return the JSON schema registered as ``name``."""

    if name not in SCHEMA_FILES:
        raise KeyError(f"Unknown schema '{name}'")
    with (SCHEMA_DIR / SCHEMA_FILES[name]).open("r", encoding="utf-8") as f:
        return json.load(f)


def _format_errors(payload: Any, schema: Mapping[str, Any]) -> list[str]:
    validator = Draft202012Validator(schema)
    issues: list[str] = []
    for err in sorted(validator.iter_errors(payload), key=lambda e: list(map(str, e.absolute_path))):
        location = ".".join(str(part) for part in err.absolute_path) or "<root>"
        issues.append(f"{location}: {err.message}")
    return issues


def validate_records(payload: Any, schema: str | Mapping[str, Any]) -> list[str]:
    """Return a list of human-readable errors (empty if valid).

    ``schema`` is either a schema mapping or the name of a bundled schema
    listed in :data:`SCHEMA_FILES`.
    """

    if isinstance(schema, str):
        schema = load_schema(schema)
    return _format_errors(payload, schema)
