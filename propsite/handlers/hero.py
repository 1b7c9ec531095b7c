"""Hero section handlers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..page import Page
from .registry import register


@register("hero-image")
def handle_hero_image(data: Any, asset_path: str, page: Page, related: Mapping[str, Any]) -> None:
    # Image assets carry no body; the path is the content.
    hero_img = page.by_id("hero-img")
    if hero_img is not None and asset_path:
        hero_img["src"] = asset_path


@register("hero-description")
def handle_hero_description(data: Any, asset_path: str, page: Page, related: Mapping[str, Any]) -> None:
    """Populate hero title, subtitle and image alt text."""
    if not isinstance(data, Mapping):
        return

    hero_img = page.by_id("hero-img")
    if hero_img is not None and data.get("alt"):
        hero_img["alt"] = str(data["alt"])

    title = page.select_one(".hero-title")
    if title is not None and data.get("title"):
        title.string = str(data["title"])

    subtitle = page.select_one(".hero-subtitle")
    if subtitle is not None and data.get("subtitle"):
        subtitle.string = str(data["subtitle"])
