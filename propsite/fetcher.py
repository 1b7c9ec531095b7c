"""Produce content store entries for manifest assets."""

from __future__ import annotations

import logging
from typing import Any, Final, assert_never

import httpx

from .combo import AssetReadError, ComboGrouper
from .discovery import DirectoryDiscoverer
from .manifest.models import (
    ComboContains,
    DirectoryAsset,
    FlatContains,
    ImageAsset,
    JsonAsset,
    PartType,
    TextAsset,
)

logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()
"""Returned by ``Fetcher.fetch`` when an asset has no data."""


class Fetcher:
    """Resolve one asset descriptor into its content store value."""

    def __init__(self, client: httpx.AsyncClient, discoverer: DirectoryDiscoverer | None = None) -> None:
        self._client = client
        self._discoverer = discoverer or DirectoryDiscoverer(client)
        self._combo = ComboGrouper(self._discoverer, self.read_file)

    @property
    def discoverer(self) -> DirectoryDiscoverer:
        return self._discoverer

    async def read_file(self, path: str, asset_type: PartType) -> Any:
        """GET ``path`` and decode it as JSON or text."""
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as exc:
            raise AssetReadError(f"request failed: {exc}", path=path) from exc
        if not response.is_success:
            raise AssetReadError(f"HTTP {response.status_code}", path=path)
        if asset_type == "json":
            try:
                return response.json()
            except ValueError as exc:
                raise AssetReadError(f"invalid JSON: {exc}", path=path) from exc
        return response.text

    async def fetch(self, asset: JsonAsset | TextAsset | ImageAsset | DirectoryAsset) -> Any:
        """Return the store value for ``asset`` or ``MISSING``.

        Failures are logged and never raised.
        """
        if isinstance(asset, ImageAsset):
            return asset.path
        if isinstance(asset, DirectoryAsset):
            return await self._fetch_directory(asset)
        if isinstance(asset, (JsonAsset, TextAsset)):
            try:
                return await self.read_file(asset.path, asset.type)
            except AssetReadError as exc:
                logger.warning("Failed to load %s: %s", asset.path, exc)
                return MISSING
        assert_never(asset)

    async def _fetch_directory(self, asset: DirectoryAsset) -> Any:
        contains = asset.contains
        if contains is None:
            return asset.path
        if isinstance(contains, ComboContains):
            return await self._combo.load(asset)
        if isinstance(contains, FlatContains):
            filenames = await self._discoverer.discover(asset.directory, contains.allowed_extensions)
            return [asset.file_path(name) for name in filenames]
        assert_never(contains)
