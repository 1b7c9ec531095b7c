"""JSON Schema inference for content files."""

from __future__ import annotations

import json
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")


class SchemaGenerationError(ValueError):
    """Raised when a schema cannot be generated for a file."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


def infer_schema(value: Any) -> dict[str, Any]:
    """Infer a JSON Schema describing ``value``."""
    if value is None:
        return {"type": "null"}
    if isinstance(value, bool):
        return {"type": "boolean"}
    if isinstance(value, int):
        return {"type": "integer"}
    if isinstance(value, float):
        return {"type": "integer" if value.is_integer() else "number"}
    if isinstance(value, str):
        return _string_schema(value)
    if isinstance(value, list):
        if not value:
            return {"type": "array", "items": {}}
        return {"type": "array", "items": unify_schemas([infer_schema(item) for item in value])}
    if isinstance(value, dict):
        properties = {str(key): infer_schema(item) for key, item in value.items()}
        return {"type": "object", "properties": properties, "required": list(properties)}
    return {"type": "string"}


def _string_schema(value: str) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "string"}
    fmt = _string_format(value)
    if fmt:
        schema["format"] = fmt
    return schema


def _string_format(value: str) -> str | None:
    parts = urlsplit(value)
    if parts.scheme and parts.netloc:
        return "uri"
    if "@" in value and "." in value:
        return "email"
    if _DATE_RE.match(value):
        try:
            date.fromisoformat(value)
        except ValueError:
            return None
        return "date"
    if _DATETIME_RE.match(value):
        try:
            datetime.fromisoformat(value)
        except ValueError:
            return None
        return "date-time"
    return None


def unify_schemas(schemas: list[dict[str, Any]]) -> dict[str, Any]:
    """Combine item schemas of an array into one.

    Objects merge their properties; a key stays required only when every
    item has it. Mixed types become ``anyOf``.
    """
    if not schemas:
        return {}

    types = {schema.get("type") for schema in schemas}
    if len(types) == 1:
        if types == {"object"}:
            return _merge_objects(schemas)
        if types == {"array"}:
            return {"type": "array", "items": unify_schemas([s["items"] for s in schemas if s.get("items")])}
        first = dict(schemas[0])
        if any(schema.get("format") != first.get("format") for schema in schemas):
            first.pop("format", None)
        return first

    unique: list[dict[str, Any]] = []
    for schema in schemas:
        if schema not in unique:
            unique.append(schema)
    return {"anyOf": unique}


def _merge_objects(schemas: list[dict[str, Any]]) -> dict[str, Any]:
    grouped: dict[str, list[dict[str, Any]]] = {}
    required: list[str] | None = None
    for schema in schemas:
        for key, prop in schema.get("properties", {}).items():
            grouped.setdefault(key, []).append(prop)
        keys = list(schema.get("required", []))
        required = keys if required is None else [key for key in required if key in keys]
    properties = {key: unify_schemas(props) for key, props in grouped.items()}
    return {"type": "object", "properties": properties, "required": required or []}


def generate_schema(path: Path) -> dict[str, Any]:
    """Read the JSON file at ``path`` and infer its schema."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SchemaGenerationError(f"File '{path}' not found", path=path) from exc
    except json.JSONDecodeError as exc:
        raise SchemaGenerationError(f"Invalid JSON in '{path}': {exc}", path=path) from exc
    except UnicodeDecodeError as exc:
        raise SchemaGenerationError(f"File '{path}' is not UTF-8 text: {exc}", path=path) from exc

    schema = infer_schema(data)
    if schema.get("type") == "object":
        schema["description"] = f"Schema for {path.name}"
    return schema


def schema_source_path(raw: str) -> Path:
    """Append ``.json`` to ``raw`` when it has another (or no) extension."""
    path = Path(raw)
    if path.suffix.lower() != ".json":
        path = path.with_name(f"{path.name}.json")
    return path


def default_schema_output(source: Path) -> Path:
    return source.with_name(f"{source.stem}-schema.json")
