"""Validation of CLI layout payloads against the bundled JSON schemas."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import jsonschema
from jsonschema.exceptions import best_match


SCHEMA_VERSION = "v1"
_SCHEMA_FILENAMES: Mapping[str, str] = {
    "layout": "layout.schema.json",
}


class SchemaValidationError(RuntimeError):
    """Raised when a payload fails validation against a JSON schema."""

    def __init__(self, schema: str, message: str, path: str | None = None) -> None:
        detail = f"{schema} payload failed validation: {message}"
        if path:
            detail = f"{detail} (path: {path})"
        super().__init__(detail)
        self.schema = schema
        self.message = message
        self.path = path


class SchemaValidator:
    """Validate CLI payloads using the schemas shipped with the package.

    Only the most relevant error (``jsonschema``'s ``best_match``) is reported,
    together with the dotted path of the offending value.
    """

    def __init__(self, *, schema_version: str = SCHEMA_VERSION) -> None:
        self.schema_version = schema_version

    def validate(self, schema: str, payload: Mapping[str, object]) -> None:
        validator = jsonschema.Draft202012Validator(load_schema(schema, self.schema_version))
        error = best_match(validator.iter_errors(payload))
        if error is None:
            return
        path = ".".join(str(part) for part in error.absolute_path) or None
        raise SchemaValidationError(schema, error.message, path)


@lru_cache(maxsize=None)
def load_schema(schema: str, schema_version: str = SCHEMA_VERSION) -> Mapping[str, Any]:
    """Read and check one bundled schema document."""

    try:
        filename = _SCHEMA_FILENAMES[schema]
    except KeyError:
        raise ValueError(f"Unknown schema type '{schema}'") from None

    path = schema_directory(schema_version) / filename
    if not path.is_file():
        raise FileNotFoundError(f"Schema file '{path}' was not found")

    document = json.loads(path.read_text(encoding="utf-8"))
    jsonschema.Draft202012Validator.check_schema(document)
    return document


@lru_cache(maxsize=None)
def schema_directory(schema_version: str) -> Path:
    """Locate ``schema/<version>`` in the nearest package directory above this module."""

    here = Path(__file__).resolve()
    candidates = [parent / "schema" / schema_version for parent in here.parents]
    for candidate in candidates:
        if candidate.is_dir():
            return candidate
    raise FileNotFoundError(
        f"Could not locate schema directory for version '{schema_version}' starting from '{here}'"
    )


__all__ = [
    "SCHEMA_VERSION",
    "SchemaValidationError",
    "SchemaValidator",
    "load_schema",
    "schema_directory",
]
