"""Gallery grid handler.

Accepts a flat directory entry (list of image paths) or a combo directory
entry (``{base: {ext: value}}`` where image parts are paths and a JSON part may
carry ``alt`` text). Alt text can also come from any asset listed in the
manifest entry's ``requires``, as a mapping keyed by image filename.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from ..page import Page
from .registry import register

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".svg", ".avif"}


@register("gallery")
def handle_gallery(data: Any, asset_path: str, page: Page, related: Mapping[str, Any]) -> None:
    if data is None:
        return
    grid = page.by_id("gallery-grid")
    if grid is None:
        return

    descriptions = _collect_descriptions(related)
    grid.clear()
    for src, alt in _gallery_items(data, descriptions):
        item = page.new_tag("div", **{"class": "gallery-item"})
        item.append(page.new_tag("img", src=src, alt=alt, loading="lazy"))
        grid.append(item)


def _collect_descriptions(related: Mapping[str, Any]) -> dict[str, Any]:
    descriptions: dict[str, Any] = {}
    for value in related.values():
        if isinstance(value, Mapping):
            descriptions.update(value)
    return descriptions


def _alt_text(description: Any) -> str:
    if isinstance(description, Mapping):
        alt = description.get("alt")
        return str(alt) if alt else ""
    if isinstance(description, str):
        return description
    return ""


def _gallery_items(data: Any, descriptions: Mapping[str, Any]) -> Iterator[tuple[str, str]]:
    if isinstance(data, list):
        for path in data:
            if isinstance(path, str):
                filename = path.rsplit("/", 1)[-1]
                yield path, _alt_text(descriptions.get(filename))
        return

    if not isinstance(data, Mapping):
        return

    # Combo groups carry no order; render them by base name.
    for base in sorted(data):
        members = data[base]
        if not isinstance(members, Mapping):
            continue
        src = next(
            (
                value
                for ext, value in sorted(members.items())
                if isinstance(value, str) and ext.lower() in IMAGE_EXTENSIONS
            ),
            None,
        )
        if src is None:
            continue
        sidecar_alt = next(
            (_alt_text(value) for value in members.values() if isinstance(value, Mapping)),
            "",
        )
        filename = src.rsplit("/", 1)[-1]
        yield src, sidecar_alt or _alt_text(descriptions.get(filename))
