"""Utilities for scaffolding site content and manifest entries."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined

from .config import Config
from .discovery import file_extension
from .manifest import (
    ComboContains,
    DirectoryAsset,
    FlatContains,
    ImageAsset,
    JsonAsset,
    TextAsset,
    read_manifest,
    upsert_manifest_asset,
)
from .manifest.models import AssetType
from .handlers.registry import normalize_handler_id

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}

_MAX_SIZES: dict[str, int] = {
    "image": 2 * 1024 * 1024,
    "json": 5 * 1024,
    "text": 50 * 1024,
    "directory": 10 * 1024 * 1024,
}

_EXTENSIONS: dict[str, list[str]] = {
    "image": [".jpg", ".jpeg", ".png", ".webp"],
    "json": [".json"],
    "text": [".md", ".txt"],
    "directory": [],
}

_SUGGESTED_SCHEMAS: dict[str, dict[str, Any]] = {
    "contact": {
        "type": "object",
        "required": ["email", "phone"],
        "properties": {
            "email": {"type": "string", "format": "email"},
            "phone": {"type": "string"},
            "address": {"type": "string"},
        },
    },
    "meta": {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "description": {"type": "string"},
            "keywords": {"type": "array", "items": {"type": "string"}},
        },
    },
}


class ScaffoldError(RuntimeError):
    """Raised when scaffolding cannot continue."""


@dataclass(slots=True)
class ScaffoldResult:
    """Details about filesystem writes performed during scaffolding."""

    created: list[Path] = field(default_factory=list)
    updated: list[Path] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def record(self, path: Path, existed: bool) -> None:
        if existed:
            self.updated.append(path)
        else:
            self.created.append(path)


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("propsite", "templates"),
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        autoescape=False,
    )


def detect_file_type(path: str) -> str:
    """Guess the manifest type for ``path`` from its extension."""
    ext = file_extension(Path(path).name)
    if ext == ".json":
        return "json"
    if ext in {".md", ".txt"}:
        return "text"
    if ext in IMAGE_EXTENSIONS:
        return "image"
    return "unknown"


def default_max_size(asset_type: str) -> int:
    return _MAX_SIZES.get(asset_type, _MAX_SIZES["directory"])


def default_extensions(asset_type: str) -> list[str]:
    return list(_EXTENSIONS.get(asset_type, []))


def default_label(path: str) -> str:
    """``content/hero-description.json`` -> ``Hero Description``."""
    stem = Path(path.rstrip("/")).stem
    words = [word for word in re.split(r"[-_]", stem) if word]
    return " ".join(word[:1].upper() + word[1:] for word in words)


def suggest_schema(path: str) -> dict[str, Any] | None:
    stem = Path(path).stem.lower()
    for keyword, schema in _SUGGESTED_SCHEMAS.items():
        if keyword in stem:
            return json.loads(json.dumps(schema))
    return None


def starter_content(asset_type: str) -> str:
    if asset_type == "json":
        return '{\n  "example": "value"\n}\n'
    if asset_type == "text":
        return "# New Content\n\nAdd your content here.\n"
    return ""


def build_asset(
    path: str,
    asset_type: AssetType,
    *,
    label: str | None = None,
    description: str = "",
    max_size: int | None = None,
    allowed_extensions: list[str] | None = None,
    schema: dict[str, Any] | None = None,
    handler: str | None = None,
    requires: list[str] | None = None,
    contains: ComboContains | FlatContains | None = None,
) -> JsonAsset | TextAsset | ImageAsset | DirectoryAsset:
    """Assemble a manifest entry, filling authoring defaults for omitted fields."""
    path = path.strip()
    if not path:
        raise ScaffoldError("Asset path must not be empty.")
    fields: dict[str, Any] = {
        "path": path,
        "label": label or default_label(path),
        "description": description,
        "max_size": max_size if max_size is not None else default_max_size(asset_type),
        "allowed_extensions": (
            allowed_extensions if allowed_extensions is not None else default_extensions(asset_type)
        ),
        "handler": handler,
        "requires": requires or [],
    }
    if asset_type == "json":
        return JsonAsset(type="json", json_schema=schema, **fields)
    if asset_type == "text":
        return TextAsset(type="text", **fields)
    if asset_type == "image":
        return ImageAsset(type="image", **fields)
    if asset_type == "directory":
        return DirectoryAsset(type="directory", contains=contains, **fields)
    raise ScaffoldError(f"Unsupported asset type: {asset_type}")


def register_asset(
    config: Config,
    asset: JsonAsset | TextAsset | ImageAsset | DirectoryAsset,
    *,
    create_file: bool = True,
) -> ScaffoldResult:
    """Write ``asset`` into the manifest (overwriting by path) and create a starter file."""
    result = ScaffoldResult()
    target = config.site_dir / asset.path.lstrip("/")

    if create_file and not isinstance(asset, DirectoryAsset) and not target.exists():
        content = starter_content(asset.type)
        if content:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            result.created.append(target)

    manifest_path = config.manifest_file
    manifest_existed = manifest_path.exists()
    replaced = upsert_manifest_asset(manifest_path, asset)
    result.record(manifest_path, manifest_existed)
    if replaced:
        result.notes.append(f"Asset with path '{asset.path}' already existed; entry updated.")

    result.notes.append(f"Edit {asset.path} with your content.")
    if asset.handler is None and asset.type in {"json", "text"}:
        result.notes.append("Register a handler (see the stub below) and set 'handler' on the entry.")
    result.notes.append("Update the page template with elements for displaying this content.")
    return result


def handler_stub(asset: JsonAsset | TextAsset | ImageAsset | DirectoryAsset) -> str:
    """Render a starter handler module for ``asset``."""
    label = asset.label or default_label(asset.path)
    handler_id = normalize_handler_id(asset.handler or Path(asset.path).stem) or "custom"
    function_name = re.sub(r"[^0-9a-zA-Z]+", "_", handler_id).strip("_").lower() or "asset"
    css_name = re.sub(r"[^0-9a-zA-Z]+", "-", label).strip("-").lower() or function_name
    template = _environment().get_template("handler.py.j2")
    return template.render(
        handler_id=handler_id,
        function_name=function_name,
        label=label,
        asset_path=asset.path,
        asset_type=asset.type,
        css_name=css_name,
    )


@dataclass(slots=True)
class PropertyDetails:
    """Answers collected when initialising a new property site."""

    address: str
    location: str
    price: str
    zillow_url: str = ""
    bedrooms: str = "3"
    bathrooms: str = "2"
    square_feet: str = ""
    lot_size: str = ""
    year_built: str = ""
    price_per_sqft: str = ""
    hero_title: str = "Beautiful Property"
    hero_subtitle: str = "Your dream home awaits"
    hero_alt: str = ""

    def property_payload(self) -> dict[str, Any]:
        details = {
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "squareFeet": self.square_feet,
            "lotSize": self.lot_size,
            "yearBuilt": self.year_built,
            "pricePerSqft": self.price_per_sqft,
        }
        payload: dict[str, Any] = {
            "address": self.address,
            "location": self.location,
            "price": self.price,
        }
        if self.zillow_url:
            payload["zillowUrl"] = self.zillow_url
        payload["details"] = {key: value for key, value in details.items() if value != ""}
        return payload

    def hero_payload(self) -> dict[str, str]:
        return {
            "alt": self.hero_alt or f"{self.address} exterior",
            "title": self.hero_title,
            "subtitle": self.hero_subtitle,
        }


def init_site(config: Config, details: PropertyDetails) -> ScaffoldResult:
    """Write the property, hero, and summary content files for a new listing."""
    for name in ("address", "location", "price"):
        if not getattr(details, name).strip():
            raise ScaffoldError(f"{name.capitalize()} is required.")

    content_dir = config.site_dir / "content"
    content_dir.mkdir(parents=True, exist_ok=True)
    result = ScaffoldResult()

    _write_json(content_dir / "property.json", details.property_payload(), result)
    _write_json(content_dir / "hero-description.json", details.hero_payload(), result)

    summary_path = content_dir / "summary.md"
    summary = _environment().get_template("summary.md.j2").render(
        hero_title=details.hero_title,
        address=details.address,
        city=details.location.split(",")[0].strip(),
        bedrooms=details.bedrooms,
        bathrooms=details.bathrooms,
        square_feet=details.square_feet,
        lot_size=details.lot_size,
    )
    existed = summary_path.exists()
    summary_path.write_text(summary, encoding="utf-8")
    result.record(summary_path, existed)

    result.notes.extend(
        [
            "Replace images in the assets/ folder.",
            "Update content/image-descriptions.json with your image filenames.",
            "Edit content/summary.md to add property-specific details.",
            "Update the 'Facts & Features' content in content/facts.json.",
            "Run 'propsite render' (or 'propsite serve') to check the page.",
        ]
    )
    return result


def write_directory_indexes(config: Config) -> ScaffoldResult:
    """Write an explicit index file into every listed directory asset."""
    manifest = read_manifest(config.manifest_file)
    index_name = config.discovery.index_filename
    result = ScaffoldResult()

    for asset in manifest.assets:
        if not isinstance(asset, DirectoryAsset) or asset.contains is None:
            continue
        directory = config.site_dir / asset.path.strip("/")
        if not directory.is_dir():
            result.notes.append(f"Skipped {asset.path}: directory does not exist.")
            continue
        allowed = set(asset.contains.allowed_extensions)
        files = sorted(
            entry.name
            for entry in directory.iterdir()
            if entry.is_file() and entry.name != index_name and file_extension(entry.name) in allowed
        )
        _write_json(directory / index_name, {"files": files}, result)
    return result


def _write_json(path: Path, payload: Any, result: ScaffoldResult) -> None:
    existed = path.exists()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    result.record(path, existed)
