"""Invoke registered handlers for every manifest asset that names one."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..manifest.models import Manifest
from ..page import Page
from ..store import ContentStore
from .registry import HandlerRegistry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DispatchReport:
    """Outcome of one dispatch pass, keyed by asset path."""

    invoked: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing and not self.failed


def dispatch_handlers(
    manifest: Manifest,
    store: ContentStore,
    page: Page,
    registry: HandlerRegistry,
) -> DispatchReport:
    """Run handlers in manifest order.

    A missing or failing handler is logged and skipped; the rest still run.
    Handlers receive ``None`` for assets without content.
    """
    report = DispatchReport()
    known_paths = {asset.path for asset in manifest.assets}

    for asset in manifest.assets:
        if not asset.handler:
            continue

        handler = registry.get(asset.handler)
        if handler is None:
            logger.warning("Handler '%s' for %s is not registered.", asset.handler, asset.path)
            report.missing.append(asset.path)
            continue

        related: dict[str, Any] = {}
        for required in asset.requires:
            if required not in known_paths:
                logger.warning("%s requires %s, which is not in the manifest.", asset.path, required)
            related[required] = store.get(required)

        try:
            handler(store.get(asset.path), asset.path, page, related)
        except Exception:
            logger.error("Handler '%s' failed for %s.", asset.handler, asset.path, exc_info=True)
            report.failed.append(asset.path)
            continue
        report.invoked.append(asset.path)

    return report
