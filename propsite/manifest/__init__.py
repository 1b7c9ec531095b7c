"""Manifest data structures and helpers."""

from .io import (
    ManifestLoadError,
    fetch_manifest,
    parse_manifest,
    read_manifest,
    upsert_manifest_asset,
    write_manifest,
)
from .models import (
    AssetDescriptor,
    ComboContains,
    ComboPart,
    DirectoryAsset,
    FlatContains,
    ImageAsset,
    JsonAsset,
    Manifest,
    TextAsset,
    normalize_extension,
    parse_asset,
)

__all__ = [
    "AssetDescriptor",
    "ComboContains",
    "ComboPart",
    "DirectoryAsset",
    "FlatContains",
    "ImageAsset",
    "JsonAsset",
    "Manifest",
    "ManifestLoadError",
    "TextAsset",
    "fetch_manifest",
    "normalize_extension",
    "parse_asset",
    "parse_manifest",
    "read_manifest",
    "upsert_manifest_asset",
    "write_manifest",
]
