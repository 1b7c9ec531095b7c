"""Directory discovery for static hosts that expose no listing API.

A static file host gives the loader no way to enumerate a directory, so file
names are obtained through pluggable listing strategies:

* ``IndexFileStrategy`` reads an explicit ``directory-index.json`` written at
  authoring time by ``propsite index``.
* ``ServerListingStrategy`` requests the directory URL itself and parses
  whatever index page the server returns (HTML anchors or nginx JSON autoindex).

Known limitation: server-listing discovery only works when the host answers
a directory URL with an index page in a recognised format. A 403, a custom
error page or an unknown format discovers zero files; the loader logs a
warning and carries on with an empty directory.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any, Iterable, List, Protocol, Sequence, Tuple
from urllib.parse import unquote

import httpx

from .config import DiscoveryConfig
from .manifest.models import normalize_extension

logger = logging.getLogger(__name__)


class DiscoveryError(RuntimeError):
    """Raised by a strategy when a listing was found but could not be read."""


class ListingStrategy(Protocol):
    name: str

    async def list_entries(self, client: httpx.AsyncClient, directory: str) -> list[str] | None:
        """Return raw entry names/hrefs, or ``None`` when the strategy has no answer."""
        ...


class ListingParser(Protocol):
    def accepts(self, content_type: str) -> bool:
        ...

    def parse(self, body: str) -> list[str]:
        ...


class _AnchorCollector(HTMLParser):
    """Collect href targets of anchor tags."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.hrefs: list[str] = []

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, str | None]]) -> None:
        if tag != "a":
            return
        for name, value in attrs:
            if name == "href" and value:
                self.hrefs.append(value)


class HtmlAnchorParser:
    """Parse an HTML index page into the href of every anchor."""

    def accepts(self, content_type: str) -> bool:
        return True

    def parse(self, body: str) -> list[str]:
        collector = _AnchorCollector()
        collector.feed(body)
        collector.close()
        return collector.hrefs


class JsonAutoindexParser:
    """Parse nginx ``autoindex_format json`` output or a bare list of names."""

    def accepts(self, content_type: str) -> bool:
        return "json" in content_type.lower()

    def parse(self, body: str) -> list[str]:
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise DiscoveryError(f"invalid JSON listing: {exc}") from exc
        return _names_from_payload(payload)


def _names_from_payload(payload: Any) -> list[str]:
    if isinstance(payload, dict):
        payload = payload.get("files")
    if not isinstance(payload, list):
        raise DiscoveryError("listing must be a list of names or an object with a 'files' list")

    names: list[str] = []
    for item in payload:
        if isinstance(item, str):
            names.append(item)
        elif isinstance(item, dict) and isinstance(item.get("name"), str):
            name = item["name"]
            if item.get("type") == "directory" and not name.endswith("/"):
                name = f"{name}/"
            names.append(name)
    return names


@dataclass(slots=True)
class IndexFileStrategy:
    """Read an explicit JSON index file stored inside the directory."""

    index_filename: str = "directory-index.json"
    name: str = "index-file"

    async def list_entries(self, client: httpx.AsyncClient, directory: str) -> list[str] | None:
        url = f"{directory.rstrip('/')}/{self.index_filename}"
        response = await client.get(url)
        if response.status_code == 404:
            logger.debug("No directory index at %s", url)
            return None
        if not response.is_success:
            raise DiscoveryError(f"{url} returned HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise DiscoveryError(f"{url} is not valid JSON: {exc}") from exc
        return [name for name in _names_from_payload(payload) if name != self.index_filename]


@dataclass(slots=True)
class ServerListingStrategy:
    """Request the directory URL and parse the index page the server returns."""

    parsers: Sequence[ListingParser] = field(
        default_factory=lambda: (JsonAutoindexParser(), HtmlAnchorParser())
    )
    name: str = "server-listing"

    async def list_entries(self, client: httpx.AsyncClient, directory: str) -> list[str] | None:
        response = await client.get(directory)
        if not response.is_success:
            raise DiscoveryError(f"could not access directory {directory} (HTTP {response.status_code})")
        content_type = response.headers.get("content-type", "")
        for parser in self.parsers:
            if parser.accepts(content_type):
                return parser.parse(response.text)
        return None


def build_strategies(config: DiscoveryConfig) -> list[ListingStrategy]:
    strategies: list[ListingStrategy] = []
    for name in config.strategies:
        if name == "index-file":
            strategies.append(IndexFileStrategy(index_filename=config.index_filename))
        elif name == "server-listing":
            strategies.append(ServerListingStrategy())
    return strategies


def file_extension(filename: str) -> str:
    """Lowercased extension including the dot, or ``""`` when there is none."""
    dot = filename.rfind(".")
    if dot <= 0:
        return ""
    return filename[dot:].lower()


def filter_entries(entries: Iterable[str], allowed_extensions: Iterable[str]) -> list[str]:
    """Reduce raw listing entries to the plain filenames whose extension is allowed.

    Parent references and subdirectories (trailing ``/``) are dropped, and only
    the final path segment of each entry is kept.
    """
    allowed = {normalize_extension(ext) for ext in allowed_extensions}
    allowed.discard("")
    filenames: list[str] = []
    for entry in entries:
        href = entry.strip()
        if not href or href.startswith(("..", "?", "#")) or href.endswith("/"):
            continue
        href = href.split("#", 1)[0].split("?", 1)[0]
        filename = unquote(href.rsplit("/", 1)[-1])
        if not filename or filename in {".", ".."}:
            continue
        if file_extension(filename) not in allowed:
            continue
        if filename not in filenames:
            filenames.append(filename)
    return filenames


class DirectoryDiscoverer:
    """Return the filenames directly inside a directory URL."""

    def __init__(self, client: httpx.AsyncClient, strategies: Sequence[ListingStrategy] | None = None) -> None:
        self._client = client
        self._strategies = list(strategies) if strategies is not None else build_strategies(DiscoveryConfig())

    @property
    def strategies(self) -> list[ListingStrategy]:
        return list(self._strategies)

    async def discover(self, directory: str, allowed_extensions: Iterable[str]) -> list[str]:
        """Never raises; failures yield an empty list and a logged warning."""
        allowed = list(allowed_extensions)
        for strategy in self._strategies:
            try:
                entries = await strategy.list_entries(self._client, directory)
            except (DiscoveryError, httpx.HTTPError) as exc:
                logger.warning("Directory discovery via %s failed for %s: %s", strategy.name, directory, exc)
                continue
            if entries is None:
                continue
            files = filter_entries(entries, allowed)
            logger.debug("Discovered %d file(s) in %s via %s", len(files), directory, strategy.name)
            return files

        logger.warning("No listing strategy could enumerate %s; treating it as empty.", directory)
        return []
