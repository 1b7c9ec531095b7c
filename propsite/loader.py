"""Page-load pipeline: manifest -> content store -> handlers -> lightbox."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from .config import Config, DiscoveryConfig
from .discovery import DirectoryDiscoverer, build_strategies
from .fetcher import MISSING, Fetcher
from .handlers import DispatchReport, HandlerRegistry, default_registry, dispatch_handlers
from .lightbox import Lightbox
from .manifest import Manifest, fetch_manifest
from .page import Page
from .store import ContentStore
from .transport import create_client

logger = logging.getLogger(__name__)


class PageTemplateError(RuntimeError):
    """Raised when the page document handlers populate cannot be obtained."""


@dataclass(slots=True)
class LoadContext:
    """Everything one page load produced, threaded explicitly between phases."""

    manifest: Manifest
    store: ContentStore
    page: Page
    lightbox: Lightbox
    dispatch: DispatchReport


class SiteLoader:
    """Run the load pipeline against one client.

    Loads are serialised: a second ``load`` started while one is in flight waits
    for it to finish. The lightbox persists across loads and is rescanned after
    every dispatch pass.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        registry: HandlerRegistry | None = None,
        manifest_path: str = "site-assets.json",
        discovery: DiscoveryConfig | None = None,
        parallel: bool = False,
        lightbox: Lightbox | None = None,
    ) -> None:
        self._client = client
        self._registry = registry if registry is not None else default_registry()
        self._manifest_path = manifest_path
        discoverer = DirectoryDiscoverer(client, build_strategies(discovery or DiscoveryConfig()))
        self._fetcher = Fetcher(client, discoverer)
        self._parallel = parallel
        self._lock = asyncio.Lock()
        self.lightbox = lightbox or Lightbox()

    @classmethod
    def from_config(
        cls,
        config: Config,
        client: httpx.AsyncClient,
        *,
        registry: HandlerRegistry | None = None,
    ) -> "SiteLoader":
        return cls(
            client,
            registry=registry,
            manifest_path=config.manifest_path,
            discovery=config.discovery,
            parallel=config.fetch.parallel,
        )

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    async def load_manifest(self) -> Manifest:
        manifest = await fetch_manifest(self._client, self._manifest_path)
        for path in manifest.duplicate_paths():
            logger.warning("Manifest lists %s more than once; the last entry wins.", path)
        return manifest

    async def populate(self, manifest: Manifest) -> ContentStore:
        """Build a fresh content store for ``manifest``."""
        store = ContentStore()
        if self._parallel:
            results = await asyncio.gather(*(self._fetcher.fetch(asset) for asset in manifest.assets))
        else:
            results = []
            for asset in manifest.assets:
                results.append(await self._fetcher.fetch(asset))

        for asset, value in zip(manifest.assets, results):
            if value is MISSING:
                store.discard(asset.path)
                continue
            store.put(asset.path, value)
        return store

    async def load(self, page: Page) -> LoadContext:
        """Run one full load; only a manifest failure propagates."""
        async with self._lock:
            manifest = await self.load_manifest()
            store = await self.populate(manifest)
            report = dispatch_handlers(manifest, store, page, self._registry)
            self.lightbox.rescan(page)
            logger.debug(
                "Loaded %d of %d asset(s); %d handler(s) ran, %d missing, %d failed.",
                len(store),
                len(manifest.assets),
                len(report.invoked),
                len(report.missing),
                len(report.failed),
            )
            return LoadContext(
                manifest=manifest,
                store=store,
                page=page,
                lightbox=self.lightbox,
                dispatch=report,
            )


async def fetch_page(client: httpx.AsyncClient, path: str) -> Page:
    try:
        response = await client.get(path)
    except httpx.HTTPError as exc:
        raise PageTemplateError(f"Unable to request page {path}: {exc}") from exc
    if not response.is_success:
        raise PageTemplateError(f"Page {path} returned HTTP {response.status_code}.")
    return Page(response.text)


async def load_site(
    config: Config,
    *,
    base_url: str | None = None,
    registry: HandlerRegistry | None = None,
    page: Page | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LoadContext:
    """Load the configured site end to end and return the populated context."""
    async with create_client(config, base_url=base_url, transport=transport) as client:
        target = page if page is not None else await fetch_page(client, config.page_template)
        loader = SiteLoader.from_config(config, client, registry=registry)
        return await loader.load(target)
