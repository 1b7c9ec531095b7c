from __future__ import annotations

import asyncio
import json
import logging

import httpx
import pytest

from propsite.combo import build_extension_map, group_by_base_name
from propsite.discovery import DirectoryDiscoverer, ServerListingStrategy
from propsite.fetcher import Fetcher
from propsite.manifest import ComboContains, ComboPart, DirectoryAsset

FILES = {
    "/photos/photo1.jpg": b"jpg",
    "/photos/photo1.json": json.dumps({"alt": "Living room"}).encode(),
    "/photos/photo2.png": b"png",
    "/photos/photo3.md": b"Just a caption",
    "/photos/photo4.json": b"{broken",
}


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/photos":
        anchors = "".join(f'<a href="{name.rsplit("/", 1)[-1]}">x</a>' for name in FILES)
        return httpx.Response(200, html=anchors + '<a href="../">up</a>')
    if path in FILES:
        return httpx.Response(200, content=FILES[path])
    return httpx.Response(404)


def _combo_asset() -> DirectoryAsset:
    return DirectoryAsset(
        type="directory",
        path="photos/",
        contains=ComboContains(
            type="combo",
            parts=[
                ComboPart(asset_type="image", allowed_extensions=[".jpg", ".png"]),
                ComboPart(asset_type="json", allowed_extensions=[".json"]),
                ComboPart(asset_type="text", allowed_extensions=[".md"]),
            ],
        ),
    )


def _load(asset: DirectoryAsset):
    async def run():
        async with httpx.AsyncClient(
            base_url="http://site.local/", transport=httpx.MockTransport(_handler)
        ) as client:
            discoverer = DirectoryDiscoverer(client, [ServerListingStrategy()])
            return await Fetcher(client, discoverer).fetch(asset)

    return asyncio.run(run())


def test_combo_groups_members_by_base_name() -> None:
    combo = _load(_combo_asset())

    assert combo["photo1"] == {".jpg": "photos/photo1.jpg", ".json": {"alt": "Living room"}}
    assert combo["photo2"] == {".png": "photos/photo2.png"}
    assert combo["photo3"] == {".md": "Just a caption"}


def test_broken_member_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        combo = _load(_combo_asset())

    # The group exists but its unreadable member is dropped.
    assert combo["photo4"] == {}
    assert "photos/photo4.json" in caplog.text


def test_group_by_base_name_ignores_extensionless() -> None:
    groups = group_by_base_name(["a.jpg", "a.json", "b.tar.gz", "README"])

    assert groups == {"a": {".jpg": "a.jpg", ".json": "a.json"}, "b.tar": {".gz": "b.tar.gz"}}


def test_overlapping_extensions_last_part_wins(caplog: pytest.LogCaptureFixture) -> None:
    contains = ComboContains(
        type="combo",
        parts=[
            ComboPart(asset_type="json", allowed_extensions=[".json", ".txt"]),
            ComboPart(asset_type="text", allowed_extensions=[".txt"]),
        ],
    )

    with caplog.at_level(logging.WARNING, logger="propsite.combo"):
        mapping = build_extension_map(contains)

    assert mapping == {".json": "json", ".txt": "text"}
    assert ".txt" in caplog.text
