"""Grouping of combo directories (e.g. ``photo1.jpg`` + ``photo1.json``)."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable

from .discovery import DirectoryDiscoverer, file_extension
from .manifest.models import ComboContains, DirectoryAsset, PartType

logger = logging.getLogger(__name__)

# Reads one file and returns its decoded value; raises AssetReadError on failure.
FileReader = Callable[[str, PartType], Awaitable[Any]]

ComboEntry = dict[str, dict[str, Any]]


class AssetReadError(RuntimeError):
    """Raised when a single content file cannot be read or decoded."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message)
        self.path = path


def build_extension_map(contains: ComboContains) -> dict[str, PartType]:
    """Flatten the parts into an extension -> asset type lookup.

    When an extension is listed by more than one part, the later part wins.
    """
    mapping: dict[str, PartType] = {}
    for part in contains.parts:
        for ext in part.allowed_extensions:
            previous = mapping.get(ext)
            if previous is not None and previous != part.asset_type:
                logger.warning(
                    "Combo extension %s is claimed by both '%s' and '%s' parts; using '%s'.",
                    ext,
                    previous,
                    part.asset_type,
                    part.asset_type,
                )
            mapping[ext] = part.asset_type
    return mapping


def group_by_base_name(filenames: Iterable[str]) -> dict[str, dict[str, str]]:
    """Group filenames by base name into ``{base: {extension: filename}}``."""
    groups: dict[str, dict[str, str]] = {}
    for filename in filenames:
        ext = file_extension(filename)
        if not ext:
            continue
        base = filename[: -len(ext)]
        groups.setdefault(base, {})[ext] = filename
    return groups


class ComboGrouper:
    """Discover, group, and resolve the members of a combo directory."""

    def __init__(self, discoverer: DirectoryDiscoverer, reader: FileReader) -> None:
        self._discoverer = discoverer
        self._reader = reader

    async def load(self, asset: DirectoryAsset) -> ComboEntry:
        contains = asset.contains
        if not isinstance(contains, ComboContains):
            raise TypeError(f"{asset.path} is not a combo directory")

        extension_map = build_extension_map(contains)
        filenames = await self._discoverer.discover(asset.directory, extension_map.keys())
        groups = group_by_base_name(filenames)

        combo: ComboEntry = {}
        for base, members in groups.items():
            resolved: dict[str, Any] = {}
            for ext, filename in members.items():
                asset_type = extension_map[ext]
                file_path = asset.file_path(filename)
                if asset_type == "image":
                    resolved[ext] = file_path
                    continue
                try:
                    resolved[ext] = await self._reader(file_path, asset_type)
                except AssetReadError as exc:
                    logger.warning("Failed to load %s: %s", file_path, exc)
            combo[base] = resolved
        return combo
