"""Reading, fetching, and persisting manifest files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from .models import DirectoryAsset, ImageAsset, JsonAsset, Manifest, TextAsset


class ManifestLoadError(RuntimeError):
    """Raised when the manifest cannot be obtained or does not validate."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


def parse_manifest(payload: Any, *, source: str | None = None) -> Manifest:
    """Validate decoded manifest JSON."""
    if not isinstance(payload, dict):
        raise ManifestLoadError("Manifest root must be a JSON object.", source=source)
    try:
        return Manifest.model_validate(payload)
    except ValidationError as exc:
        raise ManifestLoadError(f"Invalid manifest: {exc}", source=source) from exc


async def fetch_manifest(client: httpx.AsyncClient, path: str) -> Manifest:
    """Request the manifest through ``client``; every failure is fatal."""
    try:
        response = await client.get(path)
    except httpx.HTTPError as exc:
        raise ManifestLoadError(f"Unable to request manifest {path}: {exc}", source=path) from exc
    if not response.is_success:
        raise ManifestLoadError(
            f"Manifest {path} returned HTTP {response.status_code}.",
            source=path,
        )
    try:
        payload = response.json()
    except ValueError as exc:
        raise ManifestLoadError(f"Manifest {path} is not valid JSON: {exc}", source=path) from exc
    return parse_manifest(payload, source=path)


def read_manifest(path: Path) -> Manifest:
    """Load a manifest from disk."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError as exc:
        raise ManifestLoadError(f"Manifest not found at {path}", source=str(path)) from exc
    except json.JSONDecodeError as exc:
        raise ManifestLoadError(f"Manifest {path} is not valid JSON: {exc}", source=str(path)) from exc
    except UnicodeDecodeError as exc:
        raise ManifestLoadError(f"Manifest {path} is not UTF-8 text: {exc}", source=str(path)) from exc
    return parse_manifest(payload, source=str(path))


def write_manifest(manifest: Manifest, path: Path) -> Path:
    """Serialize ``manifest`` with two-space indentation."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(manifest.to_manifest_dict(), handle, ensure_ascii=False, indent=2)
        handle.write("\n")
    return path


def upsert_manifest_asset(
    path: Path,
    asset: JsonAsset | TextAsset | ImageAsset | DirectoryAsset,
) -> bool:
    """Add ``asset`` to the manifest file at ``path``, overwriting an entry with the same path.

    A missing manifest file is created. Returns ``True`` when an entry was replaced.
    """
    manifest = read_manifest(path) if path.exists() else Manifest()
    replaced = manifest.upsert(asset)
    write_manifest(manifest, path)
    return replaced
