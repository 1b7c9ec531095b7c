from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

from propsite.combo import AssetReadError
from propsite.fetcher import MISSING, Fetcher
from propsite.manifest import DirectoryAsset, FlatContains, ImageAsset, JsonAsset, TextAsset
from propsite.transport import StaticSiteTransport


def _fetcher_run(site: Path, coro_factory):
    async def run():
        async with httpx.AsyncClient(
            base_url="http://site.local/", transport=StaticSiteTransport(site)
        ) as client:
            return await coro_factory(Fetcher(client))

    return asyncio.run(run())


def test_image_asset_is_its_path_without_a_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("images must not be fetched")

    async def run():
        async with httpx.AsyncClient(
            base_url="http://site.local/", transport=httpx.MockTransport(handler)
        ) as client:
            return await Fetcher(client).fetch(ImageAsset(type="image", path="assets/hero.jpg"))

    assert asyncio.run(run()) == "assets/hero.jpg"


def test_json_and_text_assets_are_decoded(site_dir: Path) -> None:
    prop, summary = _fetcher_run(
        site_dir,
        lambda fetcher: asyncio.gather(
            fetcher.fetch(JsonAsset(type="json", path="content/property.json")),
            fetcher.fetch(TextAsset(type="text", path="content/summary.md")),
        ),
    )

    assert prop["address"] == "123 Main St"
    assert summary.startswith("# Welcome Home")


def test_missing_file_yields_missing(site_dir: Path) -> None:
    value = _fetcher_run(
        site_dir, lambda fetcher: fetcher.fetch(JsonAsset(type="json", path="content/nope.json"))
    )
    assert value is MISSING
    assert not value


def test_invalid_json_yields_missing(site_dir: Path) -> None:
    (site_dir / "content" / "bad.json").write_text("{oops", encoding="utf-8")
    value = _fetcher_run(
        site_dir, lambda fetcher: fetcher.fetch(JsonAsset(type="json", path="content/bad.json"))
    )
    assert value is MISSING


def test_read_file_raises_asset_read_error(site_dir: Path) -> None:
    with pytest.raises(AssetReadError) as excinfo:
        _fetcher_run(site_dir, lambda fetcher: fetcher.read_file("content/nope.json", "json"))
    assert excinfo.value.path == "content/nope.json"


def test_directory_without_contains_is_its_path_without_a_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("directories without contents must not be fetched")

    async def run():
        async with httpx.AsyncClient(
            base_url="http://site.local/", transport=httpx.MockTransport(handler)
        ) as client:
            return await Fetcher(client).fetch(DirectoryAsset(type="directory", path="assets/"))

    assert asyncio.run(run()) == "assets/"


def test_flat_directory_lists_allowed_files(site_dir: Path) -> None:
    asset = DirectoryAsset(
        type="directory",
        path="assets/gallery/",
        contains=FlatContains(type="image", allowed_extensions=[".jpg", ".png"]),
    )
    value = _fetcher_run(site_dir, lambda fetcher: fetcher.fetch(asset))

    assert sorted(value) == ["assets/gallery/a.jpg", "assets/gallery/b.png"]


def test_missing_directory_is_an_empty_list(site_dir: Path) -> None:
    asset = DirectoryAsset(
        type="directory",
        path="assets/none/",
        contains=FlatContains(allowed_extensions=[".jpg"]),
    )
    assert _fetcher_run(site_dir, lambda fetcher: fetcher.fetch(asset)) == []
